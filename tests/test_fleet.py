"""Tests for roster-wide audits: ordering, isolation, deadline."""

import threading

from pipescore.fleet import DEADLINE_DETAIL, audit_roster
from pipescore.models import Verdict
from pipescore.probes.base import Category, ProbeDefinition, ProbeRegistry

from fakes import FakeClient, make_record


def _registry(evaluate):
    return ProbeRegistry([
        ProbeDefinition("only", 10, Category.FUNDAMENTALS, "Only", evaluate),
        ProbeDefinition("always", 5, Category.ADVANCED, "Always", lambda *a: Verdict(True, "ok")),
    ])


def _passes_for(*repos):
    def evaluate(client, owner, repo, record):
        return Verdict(repo in repos, f"checked {owner}/{repo}")
    return evaluate


def test_empty_roster():
    assert audit_roster(FakeClient(), _registry(_passes_for()), []) == []


def test_output_follows_roster_order():
    """Parallel workers, results still in roster order, one per record."""
    roster = [make_record(team=f"T{i}", repo=f"org/r{i}") for i in range(8)]
    audits = audit_roster(FakeClient(), _registry(_passes_for("r3", "r5")), roster, concurrency=4)
    assert [a.team_name for a in audits] == [r.team_name for r in roster]
    assert [a.total_awarded for a in audits] == [5, 5, 5, 15, 5, 15, 5, 5]
    assert all(a.total_possible == 15 for a in audits)


def test_progress_callback_sees_every_audit():
    roster = [make_record(team=f"T{i}", repo=f"org/r{i}") for i in range(3)]
    seen = []
    audit_roster(FakeClient(), _registry(_passes_for()), roster, concurrency=2, on_audit=seen.append)
    assert sorted(a.team_name for a in seen) == ["T0", "T1", "T2"]


def test_deadline_keeps_completed_and_reports_the_rest():
    """Slow repository is abandoned at the deadline but still listed."""
    release = threading.Event()

    def evaluate(client, owner, repo, record):
        if repo == "slow":
            release.wait(timeout=5)
        return Verdict(True, "done")

    roster = [make_record(team="Fast", repo="org/fast"), make_record(team="Slow", repo="org/slow")]
    try:
        audits = audit_roster(FakeClient(), _registry(evaluate), roster, concurrency=2, deadline=0.3)
    finally:
        release.set()

    assert [a.team_name for a in audits] == ["Fast", "Slow"]
    fast, slow = audits
    assert fast.total_awarded == 15
    assert slow.total_awarded == 0
    assert slow.total_possible == 15
    assert all(r.detail == DEADLINE_DETAIL for r in slow.results.values())
