"""Remote inspection: GitHub client and workflow helpers."""

from .github import GitHubClient
from .workflows import find_keywords, iter_workflow_bodies, list_workflows

__all__ = ["GitHubClient", "find_keywords", "iter_workflow_bodies", "list_workflows"]
