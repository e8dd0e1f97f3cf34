"""GitHub API access for workflow runs."""

from purge_runs.github.client import DEFAULT_API_URL, GitHubClient
from purge_runs.github.models import Repository, WorkflowRun

__all__ = [
    "DEFAULT_API_URL",
    "GitHubClient",
    "Repository",
    "WorkflowRun",
]
