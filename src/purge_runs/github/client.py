"""Minimal GitHub REST client for the workflow-run endpoints."""

import logging
from types import TracebackType
from typing import Any, Self

import requests

from purge_runs.errors import GitHubAPIError
from purge_runs.github.models import Repository, WorkflowRun

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


def _error_message(response: requests.Response) -> str:
    """Extract the ``message`` field of an error body, falling back to text."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return response.text


class GitHubClient:
    """Workflow-run endpoints of one repository.

    Nothing is retried: a non-success status raises GitHubAPIError and
    transport failures propagate as ``requests`` exceptions.
    """

    def __init__(
        self,
        token: str,
        repository: Repository,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.repository = repository
        self._api_url = api_url.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": API_VERSION,
            }
        )

    @property
    def runs_url(self) -> str:
        """URL of the repository's workflow-run collection."""
        return (
            f"{self._api_url}/repos/{self.repository.owner}"
            f"/{self.repository.repo}/actions/runs"
        )

    def _request(
        self, method: str, url: str, params: dict[str, Any] | None = None
    ) -> requests.Response:
        logger.debug("%s %s %s", method, url, params or "")
        response = self._session.request(method, url, params=params)
        if not response.ok:
            raise GitHubAPIError(response.status_code, _error_message(response), url)
        return response

    def total_count(self) -> int:
        """Return the number of workflow runs the repository reports."""
        data = self._request("GET", self.runs_url, params={"page": 0}).json()
        return int(data["total_count"])

    def list_workflow_runs(self, page: int, per_page: int) -> list[WorkflowRun]:
        """Return one page of runs, newest first as the API orders them."""
        data = self._request(
            "GET", self.runs_url, params={"page": page, "per_page": per_page}
        ).json()
        return [WorkflowRun.from_api(run) for run in data.get("workflow_runs", [])]

    def delete_workflow_run(self, run_id: int) -> None:
        """Delete a single workflow run."""
        self._request("DELETE", f"{self.runs_url}/{run_id}")

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
