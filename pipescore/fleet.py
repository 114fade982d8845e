"""Roster-wide audit with bounded parallelism and an overall deadline."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout, as_completed
from typing import Callable, Optional, Sequence

from .engine import failed_audit, run_audit
from .models import RepositoryAudit, RosterRecord
from .probes.base import ProbeRegistry

logger = logging.getLogger(__name__)

DEADLINE_DETAIL = "not audited: run deadline exceeded"


def audit_roster(
    client,
    registry: ProbeRegistry,
    roster: Sequence[RosterRecord],
    concurrency: int = 4,
    deadline: Optional[float] = None,
    probe_workers: int = 1,
    on_audit: Optional[Callable[[RepositoryAudit], None]] = None,
) -> list[RepositoryAudit]:
    """
    Audit every roster record; return audits in roster order.

    The client is read-only and shared by all workers. When deadline (seconds)
    expires, records not yet finished are abandoned and still reported, with
    every probe failed as "not audited", so no roster entry goes missing.
    on_audit is called from the calling thread as each audit completes.
    """
    if not roster:
        return []
    audits: list[Optional[RepositoryAudit]] = [None] * len(roster)
    pool = ThreadPoolExecutor(max_workers=max(1, concurrency), thread_name_prefix="pipescore")
    futures = {
        pool.submit(run_audit, client, record, registry, probe_workers): i
        for i, record in enumerate(roster)
    }
    try:
        for fut in as_completed(futures, timeout=deadline):
            i = futures[fut]
            try:
                audits[i] = fut.result()
            except Exception as e:
                logger.exception("Audit of %s failed", roster[i].repo_identifier)
                audits[i] = failed_audit(roster[i], registry, f"internal error: {str(e) or e.__class__.__name__}")
            if on_audit:
                on_audit(audits[i])
    except FuturesTimeout:
        pending = sum(1 for a in audits if a is None)
        logger.warning("Deadline of %ss exceeded; %d of %d repositories not audited", deadline, pending, len(roster))
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    for i, audit in enumerate(audits):
        if audit is None:
            audits[i] = failed_audit(roster[i], registry, DEADLINE_DETAIL)
            if on_audit:
                on_audit(audits[i])
    return audits  # type: ignore[return-value]
