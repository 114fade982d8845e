"""Probe: deployed app answers an HTTP GET with 2xx."""

from ..models import RosterRecord, Verdict

DEPLOY_TIMEOUT_MS = 10_000


def check(client, owner: str, repo: str, record: RosterRecord, timeout_ms: int = DEPLOY_TIMEOUT_MS) -> Verdict:
    """Needs deploy_url on the roster record; no URL is an immediate fail."""
    url = record.deploy_url
    if not url:
        return Verdict(False, "no deploy URL provided")
    probe = client.probe_http(url, timeout_ms)
    if not probe.reachable:
        return Verdict(False, f"{url} → unreachable ({probe.error or 'no response'})")
    ok = probe.status_code is not None and 200 <= probe.status_code < 300
    return Verdict(ok, f"{url} → HTTP {probe.status_code}")
