"""Probes that read configuration held by the host, not the tree."""

from ..models import RosterRecord, Unavailable, Verdict


def branch_protection(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Default branch requires a pull request review before merge."""
    prot = client.fetch_branch_protection(owner, repo)
    if isinstance(prot, Unavailable):
        return Verdict(False, f"No branch protection ({prot})")
    if prot.pull_request_review_required:
        return Verdict(True, "PR required before merge")
    return Verdict(False, "Protection exists but PR not required")
