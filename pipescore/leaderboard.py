"""Aggregate audits into a ranked leaderboard document. No I/O."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from .models import LeaderboardDocument, RankedAudit, RepositoryAudit
from .probes.base import ProbeRegistry


def rank_audits(audits: Sequence[RepositoryAudit]) -> list[RankedAudit]:
    """
    Sort by total_awarded descending and number 1..N.

    The sort is stable, so equal totals keep roster order. Ties get distinct
    consecutive ranks (40, 40 -> #1, #2), never a shared rank.
    """
    ordered = sorted(audits, key=lambda a: -a.total_awarded)
    return [RankedAudit(rank=i, audit=a) for i, a in enumerate(ordered, start=1)]


def build_leaderboard(
    audits: Sequence[RepositoryAudit],
    registry: ProbeRegistry,
    generated_at: Optional[datetime] = None,
) -> LeaderboardDocument:
    """
    Rank audits; every audit must be scored against the same registry.

    generated_at should be the time the audit run started; it defaults to now.
    """
    total_possible = registry.total_possible
    for a in audits:
        if a.total_possible != total_possible:
            raise ValueError(
                f"{a.repo_identifier}: total_possible {a.total_possible} != registry {total_possible}"
            )
        if set(a.results) != set(registry.ids):
            raise ValueError(f"{a.repo_identifier}: results do not match registered probes")
    return LeaderboardDocument(
        generated_at=generated_at or datetime.now(timezone.utc),
        total_possible=total_possible,
        entries=rank_audits(audits),
    )
