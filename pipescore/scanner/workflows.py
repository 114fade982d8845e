"""Workflow discovery and keyword matching over a remote repository."""

from __future__ import annotations

import re
from typing import Iterable, Iterator

from ..models import TreeEntry, Unavailable

WORKFLOW_DIR = ".github/workflows/"
WORKFLOW_SUFFIXES = (".yml", ".yaml")

# Paths that look like test files (py / js / ts ecosystems)
TEST_FILE_PATTERNS = [
    re.compile(r"(^|/)tests?/[^/]+\.(py|js|ts|jsx|tsx)$", re.I),
    re.compile(r"(^|/)test[_s]?[^/]*\.(py|js|ts)$", re.I),
    re.compile(r"_test\.py$", re.I),
    re.compile(r"\.(test|spec)\.(js|ts|jsx|tsx)$", re.I),
]


def workflow_paths(tree: Iterable[TreeEntry]) -> list[str]:
    """Workflow definition files, sorted."""
    return sorted(
        e.path
        for e in tree
        if e.type == "blob" and e.path.startswith(WORKFLOW_DIR) and e.path.endswith(WORKFLOW_SUFFIXES)
    )


def find_test_files(tree: Iterable[TreeEntry]) -> list[str]:
    return [
        e.path
        for e in tree
        if e.type == "blob" and any(p.search(e.path) for p in TEST_FILE_PATTERNS)
    ]


def list_workflows(client, owner: str, repo: str):
    """Workflow paths on the default branch -> list[str] | Unavailable."""
    tree = client.fetch_tree(owner, repo)
    if isinstance(tree, Unavailable):
        return tree
    return workflow_paths(tree)


def iter_workflow_bodies(client, owner: str, repo: str, paths: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Yield (path, text) lazily; unreadable files are skipped."""
    for path in paths:
        text = client.fetch_file(owner, repo, path)
        if isinstance(text, Unavailable) or text is None:
            continue
        yield path, text


def find_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    """Case-insensitive substring hits, in keyword order."""
    lower = text.lower()
    return [k for k in keywords if k.lower() in lower]
