"""Audit executor: runs every registered probe against one repository."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from .models import ProbeResult, RepositoryAudit, RosterRecord, Verdict
from .probes.base import ProbeDefinition, ProbeRegistry

logger = logging.getLogger(__name__)


def _result(probe: ProbeDefinition, verdict: Verdict) -> ProbeResult:
    return ProbeResult(
        passed=verdict.passed,
        detail=verdict.detail,
        points=probe.points,
        label=probe.label,
        category=probe.category.value,
    )


def evaluate_probe(probe: ProbeDefinition, client, record: RosterRecord) -> ProbeResult:
    """Run one probe. Any exception becomes a failed result, never propagates."""
    try:
        verdict = probe.evaluate(client, record.owner, record.repo, record)
        if not isinstance(verdict, Verdict):
            raise TypeError(f"probe returned {type(verdict).__name__}, expected Verdict")
    except Exception as e:
        logger.exception("Probe %s failed on %s", probe.id, record.repo_identifier)
        verdict = Verdict(False, f"internal error: {str(e) or e.__class__.__name__}")
    return _result(probe, verdict)


def failed_audit(record: RosterRecord, registry: ProbeRegistry, detail: str) -> RepositoryAudit:
    """Audit with every probe failed for the same reason (e.g. deadline exceeded)."""
    results = {p.id: _result(p, Verdict(False, detail)) for p in registry}
    return RepositoryAudit.assemble(record, results)


def run_audit(client, record: RosterRecord, registry: ProbeRegistry, probe_workers: int = 1) -> RepositoryAudit:
    """
    Evaluate every probe in registry against record's repository.

    Probes are independent, so with probe_workers > 1 they run on a thread
    pool; results are always keyed in registry order and every id appears
    exactly once.
    """
    if not record.has_valid_repo:
        return failed_audit(
            record, registry, f"invalid repository identifier {record.repo_identifier!r} (expected owner/name)",
        )

    probes = list(registry)
    if probe_workers > 1 and len(probes) > 1:
        with ThreadPoolExecutor(max_workers=probe_workers) as pool:
            computed = list(pool.map(lambda p: evaluate_probe(p, client, record), probes))
    else:
        computed = [evaluate_probe(p, client, record) for p in probes]

    results = {p.id: r for p, r in zip(probes, computed)}
    if list(results) != registry.ids:
        raise ValueError(f"{record.repo_identifier}: results do not cover the registry")
    audit = RepositoryAudit.assemble(record, results)
    if audit.total_possible != registry.total_possible:
        raise ValueError(
            f"{record.repo_identifier}: total_possible {audit.total_possible} != registry {registry.total_possible}"
        )
    return audit
