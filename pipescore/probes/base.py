"""Base types for probes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator

from ..models import RosterRecord, Verdict


class Category(str, Enum):
    FUNDAMENTALS = "fundamentals"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# (client, owner, repo, record) -> Verdict
Evaluate = Callable[[object, str, str, RosterRecord], Verdict]


@dataclass(frozen=True)
class ProbeDefinition:
    """One weighted criterion. evaluate must not depend on other probes."""

    id: str
    points: int
    category: Category
    label: str
    evaluate: Evaluate
    description: str = ""  # shown by `pipescore explain`
    fix: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("probe id must be non-empty")
        if not isinstance(self.points, int) or isinstance(self.points, bool) or self.points <= 0:
            raise ValueError(f"probe {self.id}: points must be a positive integer, got {self.points!r}")
        if not isinstance(self.category, Category):
            raise ValueError(f"probe {self.id}: unknown category {self.category!r}")


class ProbeRegistry:
    """
    Ordered, immutable catalogue of probes keyed by id.

    Insertion order is display order only; scoring sums over every entry and
    does not depend on it.
    """

    def __init__(self, probes: Iterable[ProbeDefinition]) -> None:
        self._probes: dict[str, ProbeDefinition] = {}
        for p in probes:
            if p.id in self._probes:
                raise ValueError(f"duplicate probe id: {p.id}")
            self._probes[p.id] = p

    def __iter__(self) -> Iterator[ProbeDefinition]:
        return iter(self._probes.values())

    def __len__(self) -> int:
        return len(self._probes)

    def __contains__(self, probe_id: object) -> bool:
        return probe_id in self._probes

    def __getitem__(self, probe_id: str) -> ProbeDefinition:
        return self._probes[probe_id]

    def get(self, probe_id: str) -> ProbeDefinition | None:
        return self._probes.get(probe_id)

    @property
    def ids(self) -> list[str]:
        return list(self._probes)

    @property
    def total_possible(self) -> int:
        return sum(p.points for p in self._probes.values())

    def by_category(self, category: Category) -> list[ProbeDefinition]:
        return [p for p in self._probes.values() if p.category == category]
