"""Composite probes: static content combined with run history."""

from __future__ import annotations

import re

from ..models import RosterRecord, Unavailable, Verdict
from ..scanner.workflows import (
    find_keywords,
    find_test_files,
    iter_workflow_bodies,
    workflow_paths,
)
from .run_history import latest_run

TEST_RUNNER_KEYWORDS = ("pytest", "jest", "vitest", "npm test", "npm run test", "unittest", "mocha")
COVERAGE_KEYWORDS = ("--cov", "coverage", "--coverage")

# Entry points and settings modules most likely to hold a pasted credential
SECRET_SCAN_FILES = (
    "main.py",
    "app.py",
    "config.py",
    "settings.py",
    "app.js",
    "server.js",
    "index.js",
    "database/database.py",
    "database/database.js",
)

SECRET_PATTERNS = (
    ("credential assignment", re.compile(
        r"(?:SECRET_KEY|API_KEY|DB_PASSWORD|PASSWORD)\s*=\s*[\"'][^\"']{6,}[\"']", re.I,
    )),
    ("OpenAI key", re.compile(r"sk-proj-[a-zA-Z0-9]+")),
    ("AWS access key", re.compile(r"AKIA[0-9A-Z]{16}")),
    ("GitHub token", re.compile(r"gh[pousr]_[A-Za-z0-9]{36}")),
    ("known default secret", re.compile(r"super_secret", re.I)),
    ("known default password", re.compile(r"admin123")),
)


def tests_exist(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """Test files in the tree and a workflow invoking a test runner."""
    tree = client.fetch_tree(owner, repo)
    if isinstance(tree, Unavailable):
        return Verdict(False, f"Cannot read repo tree ({tree}); tests unverifiable")
    test_files = find_test_files(tree)
    if not test_files:
        return Verdict(False, "No test files found")
    for path, text in iter_workflow_bodies(client, owner, repo, workflow_paths(tree)):
        runners = find_keywords(text, TEST_RUNNER_KEYWORDS)
        if runners:
            return Verdict(
                True, f"{len(test_files)} test file(s), tests run in CI ({runners[0]} in {path})",
            )
    return Verdict(False, f"{len(test_files)} test file(s) but not run in CI")


def coverage_70(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """
    Coverage tooling in CI and a green latest run.

    The percentage itself is never parsed: a coverage step plus a passing
    pipeline is taken as evidence the threshold holds.
    """
    tree = client.fetch_tree(owner, repo)
    if isinstance(tree, Unavailable):
        return Verdict(False, f"Cannot read repo tree ({tree}); coverage unverifiable")
    paths = workflow_paths(tree)
    if not paths:
        return Verdict(False, "No coverage step: no workflow files")
    source = next(
        (path for path, text in iter_workflow_bodies(client, owner, repo, paths)
         if find_keywords(text, COVERAGE_KEYWORDS)),
        None,
    )
    if source is None:
        return Verdict(False, "No coverage step found in CI")
    run = latest_run(client, owner, repo)
    if isinstance(run, Verdict):
        return Verdict(False, f"Coverage in {source}, but {run.detail[0].lower()}{run.detail[1:]}")
    green = run.conclusion == "success"
    artifacts = client.fetch_run_artifacts(owner, repo, run.id)
    has_artifact = not isinstance(artifacts, Unavailable) and any("cov" in a.lower() for a in artifacts)
    detail = f"Coverage in {source}, pipeline {'green' if green else 'red'}"
    if has_artifact:
        detail += ", artifact found"
    return Verdict(green, detail)


def no_secrets_in_code(client, owner: str, repo: str, record: RosterRecord) -> Verdict:
    """
    None of the well-known source files contains a secret-shaped literal.

    Fails open: files that are absent have nothing to flag.
    """
    scanned = 0
    for path in SECRET_SCAN_FILES:
        content = client.fetch_file(owner, repo, path)
        if isinstance(content, Unavailable) or content is None:
            continue
        scanned += 1
        for kind, pattern in SECRET_PATTERNS:
            if pattern.search(content):
                return Verdict(False, f"Secret found in {path} ({kind})")
    if not scanned:
        return Verdict(True, "No hardcoded secrets detected (no well-known source files to scan)")
    return Verdict(True, f"No hardcoded secrets detected ({scanned} file(s) scanned)")
