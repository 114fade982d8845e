"""Verdicts from recent workflow runs on the default branch."""

from __future__ import annotations

from ..models import RosterRecord, Unavailable, Verdict

TEST_JOB_MARKERS = ("test", "ci", "build")
FAST_THRESHOLD_MINUTES = 3.0
FAST_SAMPLE = 3


def latest_run(client, owner: str, repo: str):
    """Newest run on the default branch -> RunSummary | Verdict explaining absence."""
    runs = client.fetch_latest_runs(owner, repo, limit=1)
    if isinstance(runs, Unavailable):
        return Verdict(False, f"Cannot read workflow runs ({runs})")
    if not runs:
        return Verdict(False, "No runs found")
    return runs[0]


def pipeline_green(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Latest run concluded with success."""
    run = latest_run(client, owner, repo)
    if isinstance(run, Verdict):
        return run
    return Verdict(
        run.conclusion == "success",
        f"Last run: {run.conclusion or run.status or 'unknown'} (#{run.run_number})",
    )


def tests_pass(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Latest run green and its test/ci/build job succeeded."""
    run = latest_run(client, owner, repo)
    if isinstance(run, Verdict):
        return run
    if run.conclusion != "success":
        return Verdict(False, f"Pipeline not green (#{run.run_number}: {run.conclusion or run.status})")
    jobs = client.fetch_run_jobs(owner, repo, run.id)
    if isinstance(jobs, Unavailable):
        return Verdict(False, f"Cannot read jobs of run #{run.run_number} ({jobs})")
    test_job = next(
        (j for j in jobs if any(m in j.name.lower() for m in TEST_JOB_MARKERS)),
        None,
    )
    if test_job is None:
        return Verdict(False, f"No test job found in run #{run.run_number}")
    return Verdict(test_job.conclusion == "success", f'Job "{test_job.name}": {test_job.conclusion}')


def pipeline_fast(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Mean wall-clock time of the last successful runs under the threshold."""
    runs = client.fetch_latest_runs(owner, repo, limit=FAST_SAMPLE, status="success")
    if isinstance(runs, Unavailable):
        return Verdict(False, f"Cannot read workflow runs ({runs})")
    if not runs:
        return Verdict(False, "No successful runs found")
    avg_min = sum(r.duration_seconds for r in runs) / len(runs) / 60
    return Verdict(
        avg_min < FAST_THRESHOLD_MINUTES,
        f"Average: {avg_min:.1f} min (last {len(runs)} successful runs)",
    )
