"""Presence probes: pass iff a known file exists at the default branch tip."""

from __future__ import annotations

from ..models import RosterRecord, Unavailable, Verdict

DEPENDENCY_BOT_FILES = (
    ".github/dependabot.yml",
    ".github/dependabot.yaml",
    "renovate.json",
    ".github/renovate.json",
)


def _first_present(client, owner: str, repo: str, paths) -> tuple[str | None, list[Unavailable]]:
    """First path whose content is present, plus failures other than not-found."""
    failures = []
    for path in paths:
        content = client.fetch_file(owner, repo, path)
        if isinstance(content, Unavailable):
            if not content.missing:
                failures.append(content)
            continue
        if content is not None:
            return path, failures
    return None, failures


def dockerfile_exists(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Dockerfile at repository root."""
    content = client.fetch_file(owner, repo, "Dockerfile")
    if isinstance(content, Unavailable) or content is None:
        return Verdict(False, f"No Dockerfile at root ({content if content is not None else 'missing'})")
    return Verdict(True, "Dockerfile found")


def dependabot(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Dependabot or Renovate configuration checked in."""
    found, failures = _first_present(client, owner, repo, DEPENDENCY_BOT_FILES)
    if found:
        return Verdict(True, f"{found} found")
    if failures:
        return Verdict(False, f"Cannot verify dependency update config ({failures[0]})")
    return Verdict(False, "No dependency update config (dependabot.yml or renovate.json)")
