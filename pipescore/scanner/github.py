"""GitHub REST client — typed, failure-tolerant reads for one audit run."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import __version__
from ..models import (
    BranchProtection,
    HttpProbe,
    JobSummary,
    RunSummary,
    TreeEntry,
    Unavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
FALLBACK_BRANCH = "main"

# Raw file bodies instead of base64 JSON envelopes
RAW_ACCEPT = "application/vnd.github.raw"


def _requests_session(token: str, retries: int) -> requests.Session:
    """Session with auth headers and bounded retry on 429/5xx."""
    retry = Retry(
        total=retries,
        backoff_factor=1.0,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    sess = requests.Session()
    sess.headers.update({
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": f"pipescore/{__version__}",
    })
    adapter = HTTPAdapter(max_retries=retry)
    sess.mount("https://", adapter)
    sess.mount("http://", adapter)
    return sess


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _run_from_json(data: dict) -> Optional[RunSummary]:
    created = _parse_ts(data.get("created_at"))
    updated = _parse_ts(data.get("updated_at"))
    if created is None or updated is None or "id" not in data:
        return None
    return RunSummary(
        id=data["id"],
        conclusion=data.get("conclusion"),
        status=data.get("status"),
        run_number=data.get("run_number", 0),
        created_at=created,
        updated_at=updated,
    )


class GitHubClient:
    """
    Read-only view of repositories on a GitHub-compatible API.

    No method raises on expected failures: not found, forbidden, rate limited
    and timeouts all come back as Unavailable(reason). Responses are memoised
    for the lifetime of the instance, so one client should serve one run.
    The instance is safe to share between threads.
    """

    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 15.0,
        retries: int = 3,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or _requests_session(token, retries)
        self._cache: dict[tuple, Any] = {}
        self._lock = threading.Lock()

    # -- transport ---------------------------------------------------------

    def _get(self, path: str, params: Optional[dict] = None, accept: Optional[str] = None):
        """GET relative to api_base. Returns Response or Unavailable."""
        url = f"{self.api_base}{path}"
        headers = {"Accept": accept} if accept else None
        try:
            r = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            return self._unavailable(path, f"timeout after {self.timeout:g}s")
        except requests.RequestException as e:
            return self._unavailable(path, f"request failed ({e.__class__.__name__})")
        if r.status_code == 429 or (
            r.status_code == 403 and r.headers.get("X-RateLimit-Remaining") == "0"
        ):
            return self._unavailable(path, "rate limited")
        if r.status_code == 404:
            return self._unavailable(path, "not found (HTTP 404)")
        if not r.ok:
            return self._unavailable(path, f"HTTP {r.status_code}")
        return r

    @staticmethod
    def _unavailable(path: str, reason: str) -> Unavailable:
        logger.debug("GET %s unavailable: %s", path, reason)
        return Unavailable(reason)

    def _cached(self, key: tuple, fetch):
        with self._lock:
            if key in self._cache:
                return self._cache[key]
        value = fetch()
        with self._lock:
            self._cache.setdefault(key, value)
            return self._cache[key]

    def _json(self, path: str, params: Optional[dict] = None):
        def fetch():
            r = self._get(path, params)
            if isinstance(r, Unavailable):
                return r
            try:
                return r.json()
            except ValueError:
                return self._unavailable(path, "invalid JSON response")

        return self._cached(("json", path, tuple(sorted((params or {}).items()))), fetch)

    def _text(self, path: str, params: Optional[dict] = None):
        def fetch():
            r = self._get(path, params, accept=RAW_ACCEPT)
            if isinstance(r, Unavailable):
                return r
            return r.text

        return self._cached(("text", path, tuple(sorted((params or {}).items()))), fetch)

    # -- repository reads --------------------------------------------------

    def default_branch(self, owner: str, repo: str) -> str:
        """Repository default branch; 'main' when metadata is unreadable."""
        data = self._json(f"/repos/{owner}/{repo}")
        if isinstance(data, dict) and data.get("default_branch"):
            return data["default_branch"]
        return FALLBACK_BRANCH

    def fetch_tree(self, owner: str, repo: str):
        """Recursive file listing of the default branch -> list[TreeEntry] | Unavailable."""
        branch = self.default_branch(owner, repo)
        data = self._json(f"/repos/{owner}/{repo}/git/trees/{quote(branch, safe='')}", {"recursive": "1"})
        if isinstance(data, Unavailable):
            return data
        if not isinstance(data, dict) or not isinstance(data.get("tree"), list):
            return Unavailable("malformed tree response")
        return [
            TreeEntry(path=item["path"], type=item.get("type", "blob"))
            for item in data["tree"]
            if isinstance(item, dict) and "path" in item
        ]

    def fetch_file(self, owner: str, repo: str, path: str):
        """Raw text of one file at the default branch tip -> str | Unavailable."""
        branch = self.default_branch(owner, repo)
        return self._text(f"/repos/{owner}/{repo}/contents/{quote(path)}", {"ref": branch})

    def fetch_latest_runs(
        self,
        owner: str,
        repo: str,
        branch: Optional[str] = None,
        limit: int = 1,
        status: Optional[str] = None,
    ):
        """Newest-first workflow runs on branch -> list[RunSummary] | Unavailable."""
        branch = branch or self.default_branch(owner, repo)
        params: dict[str, Any] = {"branch": branch, "per_page": limit}
        if status:
            params["status"] = status
        data = self._json(f"/repos/{owner}/{repo}/actions/runs", params)
        if isinstance(data, Unavailable):
            return data
        runs = []
        for item in (data or {}).get("workflow_runs", [])[:limit]:
            run = _run_from_json(item)
            if run is not None:
                runs.append(run)
        return runs

    def fetch_run_jobs(self, owner: str, repo: str, run_id: int):
        """Jobs of one run -> list[JobSummary] | Unavailable."""
        data = self._json(f"/repos/{owner}/{repo}/actions/runs/{run_id}/jobs")
        if isinstance(data, Unavailable):
            return data
        if not isinstance(data, dict) or not isinstance(data.get("jobs"), list):
            return Unavailable("malformed jobs response")
        return [JobSummary(name=j.get("name", ""), conclusion=j.get("conclusion")) for j in data["jobs"]]

    def fetch_run_artifacts(self, owner: str, repo: str, run_id: int):
        """Artifact names uploaded by one run -> list[str] | Unavailable."""
        data = self._json(f"/repos/{owner}/{repo}/actions/runs/{run_id}/artifacts")
        if isinstance(data, Unavailable):
            return data
        return [a.get("name", "") for a in (data or {}).get("artifacts", [])]

    def fetch_branch_protection(self, owner: str, repo: str, branch: Optional[str] = None):
        """Protection rules -> BranchProtection | Unavailable (404 = unprotected)."""
        branch = branch or self.default_branch(owner, repo)
        data = self._json(f"/repos/{owner}/{repo}/branches/{quote(branch, safe='')}/protection")
        if isinstance(data, Unavailable):
            return data
        return BranchProtection(
            pull_request_review_required=bool((data or {}).get("required_pull_request_reviews")),
        )

    def fetch_container_packages(self, owner: str, repo: str):
        """Container packages linked to owner/repo -> list[str] | Unavailable."""
        params = {"package_type": "container"}
        data = self._json(f"/users/{owner}/packages", params)
        if isinstance(data, Unavailable):
            # Organisation-owned repositories list packages under /orgs
            data = self._json(f"/orgs/{owner}/packages", params)
        if isinstance(data, Unavailable):
            return data
        if not isinstance(data, list):
            return Unavailable("malformed packages response")
        full_name = f"{owner}/{repo}".lower()
        return [
            p.get("name", "")
            for p in data
            if isinstance(p, dict)
            and ((p.get("repository") or {}).get("full_name") or "").lower() == full_name
        ]

    # -- deployment --------------------------------------------------------

    def probe_http(self, url: str, timeout_ms: int = 10_000) -> HttpProbe:
        """Bounded unauthenticated GET. Never raises."""
        try:
            r = requests.get(url, timeout=timeout_ms / 1000, allow_redirects=True)
        except requests.Timeout:
            return HttpProbe(reachable=False, error=f"timeout after {timeout_ms} ms")
        except requests.RequestException as e:
            return HttpProbe(reachable=False, error=e.__class__.__name__)
        return HttpProbe(reachable=True, status_code=r.status_code)
