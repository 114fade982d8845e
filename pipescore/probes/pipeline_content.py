"""Pipeline-content probes — keyword heuristics over workflow definitions.

Detection is a case-insensitive substring test against a finite keyword set
per probe. The first workflow that matches decides; a repository with no
workflow files fails every probe here, each with its own detail.
"""

from __future__ import annotations

import re
from typing import Callable, Sequence

from ..models import RosterRecord, Unavailable, Verdict
from ..scanner.workflows import WORKFLOW_DIR, find_keywords, iter_workflow_bodies, list_workflows

LINT_KEYWORDS = ("lint", "ruff", "flake8", "pylint", "eslint", "prettier")
SECURITY_KEYWORDS = (
    "trivy", "bandit", "snyk", "codeql", "npm audit", "pip-audit",
    "safety", "gitleaks", "semgrep", "grype",
)
QUALITY_KEYWORDS = ("sonar", "codeclimate", "codecov", "quality")
DEPLOY_KEYWORDS = ("deploy", "render", "fly.io", "railway")
ENVIRONMENT_NAMES = ("staging", "production", "prod", "dev")
SONAR_CONFIG_MARKERS = ("sonar-project.properties", "sonarcloud")

# `environment: staging` or `environment:\n  name: staging`
_ENV_DECL = re.compile(r"environment:[ \t]*(?:\n[ \t]+name:[ \t]*)?['\"]?([a-z][\w-]*)")

Matcher = Callable[[str], Sequence[str]]


def scan_workflows(client, owner: str, repo: str, match: Matcher, subject: str) -> Verdict:
    """
    Shared template: pass iff match() returns hits for any workflow body.
    subject names what is being looked for, e.g. "lint step".
    """
    paths = list_workflows(client, owner, repo)
    if isinstance(paths, Unavailable):
        return Verdict(False, f"Cannot read repo tree ({paths}); {subject} unverifiable")
    if not paths:
        return Verdict(False, f"No {subject}: no workflow files in {WORKFLOW_DIR}")
    read = 0
    for path, text in iter_workflow_bodies(client, owner, repo, paths):
        read += 1
        hits = match(text)
        if hits:
            return Verdict(True, f"{subject[0].upper()}{subject[1:]} in {path} ({', '.join(hits)})")
    unread = len(paths) - read
    suffix = f", {unread} unreadable" if unread else ""
    return Verdict(False, f"No {subject} found in {len(paths)} workflow(s){suffix}")


def keyword_probe(keywords: Sequence[str], subject: str):
    """Build an evaluate function that passes on any keyword in any workflow."""

    def evaluate(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
        return scan_workflows(client, owner, repo, lambda text: find_keywords(text, keywords), subject)

    evaluate.__doc__ = f"Any of {', '.join(keywords)} in a workflow."
    return evaluate


def pipeline_exists(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """At least one workflow definition file."""
    paths = list_workflows(client, owner, repo)
    if isinstance(paths, Unavailable):
        return Verdict(False, f"Cannot read repo tree ({paths})")
    return Verdict(bool(paths), f"{len(paths)} workflow(s) found in {WORKFLOW_DIR}")


lint_pass = keyword_probe(LINT_KEYWORDS, "lint step")
security_scan = keyword_probe(SECURITY_KEYWORDS, "security scan")


def _docker_build(text: str) -> list[str]:
    lower = text.lower()
    if "docker" in lower and ("build" in lower or "build-push" in lower):
        return ["docker build"]
    return []


def docker_builds(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Workflow mentions docker together with a build step."""
    return scan_workflows(client, owner, repo, _docker_build, "docker build step")


def _ghcr_push(text: str) -> list[str]:
    lower = text.lower()
    if "ghcr.io" in lower and "push" in lower:
        return ["ghcr.io push"]
    return []


def ghcr_published(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Container package published, or a workflow pushing to ghcr.io."""
    packages = client.fetch_container_packages(owner, repo)
    if not isinstance(packages, Unavailable) and packages:
        return Verdict(True, f"{len(packages)} package(s) published")
    fallback = scan_workflows(client, owner, repo, _ghcr_push, "GHCR push")
    if fallback.passed:
        return fallback
    why = packages.reason if isinstance(packages, Unavailable) else "none linked to repo"
    return Verdict(False, f"No container packages found ({why}); {fallback.detail}")


def quality_gate(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Quality tooling in a workflow, else Sonar configuration in the tree."""
    verdict = scan_workflows(
        client, owner, repo, lambda text: find_keywords(text, QUALITY_KEYWORDS), "quality gate",
    )
    if verdict.passed:
        return verdict
    tree = client.fetch_tree(owner, repo)
    if not isinstance(tree, Unavailable):
        sonar = [e.path for e in tree if any(m in e.path for m in SONAR_CONFIG_MARKERS)]
        if sonar:
            return Verdict(True, f"Sonar config found ({sonar[0]})")
    return verdict


def _auto_deploy(text: str) -> list[str]:
    lower = text.lower()
    deploy = find_keywords(lower, DEPLOY_KEYWORDS)
    if deploy and "push" in lower and "main" in lower:
        return deploy
    return []


def auto_deploy(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Deploy step triggered on push to main."""
    return scan_workflows(client, owner, repo, _auto_deploy, "auto-deploy on push to main")


def _environments(text: str) -> list[str]:
    lower = text.lower()
    declared = sorted({m.group(1) for m in _ENV_DECL.finditer(lower)} & set(ENVIRONMENT_NAMES))
    if len(declared) >= 2:
        return declared
    if "staging" in lower and "prod" in lower:
        return ["staging", "prod"]
    return []


def multi_env(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Two or more deployment environments declared in one workflow."""
    return scan_workflows(client, owner, repo, _environments, "multiple environments")
