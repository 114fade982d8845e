"""Roster file loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .config import ConfigError
from .models import RosterRecord

logger = logging.getLogger(__name__)


def record_from_dict(data: Any, index: int = 0) -> RosterRecord:
    """
    One roster entry: {team, members, repo, deploy_url?}.

    A repo that is not 'owner/name' is kept: the team is still listed and
    scored 0 by the audit. Entries without a team name cannot be listed
    and raise ConfigError.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Roster entry {index}: expected an object")
    team = data.get("team")
    if not team or not isinstance(team, str):
        raise ConfigError(f"Roster entry {index}: missing team")
    members = data.get("members") or []
    if not isinstance(members, list):
        raise ConfigError(f"Roster entry {index} ({team}): members must be a list")
    repo = data.get("repo")
    deploy_url = data.get("deploy_url") or None
    record = RosterRecord(
        team_name=team,
        repo_identifier=str(repo).strip() if repo is not None else "",
        members=tuple(str(m) for m in members),
        deploy_url=str(deploy_url) if deploy_url else None,
    )
    if not record.has_valid_repo:
        logger.warning("Roster entry %d (%s): repo %r is not owner/name; it will score 0", index, team, repo)
    return record


def load_roster(path: Path) -> list[RosterRecord]:
    """Read roster JSON (a list of team objects). Raises ConfigError."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Roster file not found: {path}") from None
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read roster {path}: {e}") from e
    if not isinstance(data, list):
        raise ConfigError(f"Roster {path} must be a JSON list of teams")
    return [record_from_dict(item, i) for i, item in enumerate(data)]
