"""Structured records for one audit run: roster, verdicts, audits, leaderboard."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

_REPO_ID = re.compile(r"^[\w.-]+/[\w.-]+$")


@dataclass(frozen=True)
class Unavailable:
    """Explicit absence from the remote client. Falsy, carries the reason."""

    reason: str

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.reason

    @property
    def missing(self) -> bool:
        """True when the remote answered 404, i.e. the thing is absent."""
        return self.reason.startswith("not found")


@dataclass(frozen=True)
class TreeEntry:
    path: str
    type: str  # "blob" | "tree"


@dataclass(frozen=True)
class RunSummary:
    """One workflow run, as listed by the actions API."""

    id: int
    conclusion: Optional[str]
    status: Optional[str]
    run_number: int
    created_at: datetime
    updated_at: datetime

    @property
    def duration_seconds(self) -> float:
        return (self.updated_at - self.created_at).total_seconds()


@dataclass(frozen=True)
class JobSummary:
    name: str
    conclusion: Optional[str]


@dataclass(frozen=True)
class BranchProtection:
    pull_request_review_required: bool


@dataclass(frozen=True)
class HttpProbe:
    """Outcome of a bounded GET against a deploy URL."""

    reachable: bool
    status_code: Optional[int] = None
    error: str = ""  # timeout, DNS failure, etc.


@dataclass(frozen=True)
class RosterRecord:
    """One team entry from the roster file."""

    team_name: str
    repo_identifier: str  # "owner/name"
    members: tuple[str, ...] = ()
    deploy_url: Optional[str] = None

    @property
    def owner(self) -> str:
        return self.repo_identifier.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repo_identifier.partition("/")[2]

    @property
    def has_valid_repo(self) -> bool:
        return bool(_REPO_ID.match(self.repo_identifier))


@dataclass(frozen=True)
class Verdict:
    """Pass/fail for one probe on one repository. detail is always set."""

    passed: bool
    detail: str

    def __post_init__(self) -> None:
        if not self.detail:
            raise ValueError("Verdict.detail must explain the outcome")


@dataclass(frozen=True)
class ProbeResult:
    """Verdict plus the probe's static metadata."""

    passed: bool
    detail: str
    points: int
    label: str
    category: str

    @property
    def awarded_points(self) -> int:
        return self.points if self.passed else 0

    def to_dict(self) -> dict:
        return {
            "pass": self.passed,
            "detail": self.detail,
            "points": self.points,
            "label": self.label,
            "category": self.category,
        }


@dataclass
class RepositoryAudit:
    """All probe results for one roster record. Totals are checked on construction."""

    team_name: str
    members: tuple[str, ...]
    repo_identifier: str
    deploy_url: Optional[str]
    total_awarded: int
    total_possible: int
    results: dict[str, ProbeResult] = field(default_factory=dict)

    def __post_init__(self) -> None:
        awarded = sum(r.awarded_points for r in self.results.values())
        possible = sum(r.points for r in self.results.values())
        if awarded != self.total_awarded:
            raise ValueError(
                f"{self.repo_identifier}: total_awarded={self.total_awarded}, results sum to {awarded}"
            )
        if possible != self.total_possible:
            raise ValueError(
                f"{self.repo_identifier}: total_possible={self.total_possible}, results sum to {possible}"
            )

    @classmethod
    def assemble(cls, record: RosterRecord, results: dict[str, ProbeResult]) -> "RepositoryAudit":
        return cls(
            team_name=record.team_name,
            members=tuple(record.members),
            repo_identifier=record.repo_identifier,
            deploy_url=record.deploy_url,
            total_awarded=sum(r.awarded_points for r in results.values()),
            total_possible=sum(r.points for r in results.values()),
            results=dict(results),
        )


@dataclass(frozen=True)
class RankedAudit:
    rank: int
    audit: RepositoryAudit

    def to_dict(self) -> dict:
        a = self.audit
        return {
            "team": a.team_name,
            "members": list(a.members),
            "repo": a.repo_identifier,
            "deploy_url": a.deploy_url,
            "total": a.total_awarded,
            "maxTotal": a.total_possible,
            "rank": self.rank,
            "results": {pid: r.to_dict() for pid, r in a.results.items()},
        }


@dataclass
class LeaderboardDocument:
    """Ranked output of one full run."""

    generated_at: datetime
    total_possible: int
    entries: list[RankedAudit] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at.isoformat().replace("+00:00", "Z"),
            "total_possible": self.total_possible,
            "teams": [e.to_dict() for e in self.entries],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
