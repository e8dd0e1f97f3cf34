"""GitHub Actions data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from purge_runs.errors import InvalidRepositoryError


@dataclass(frozen=True)
class Repository:
    """Owner and name of a GitHub repository."""

    owner: str
    repo: str

    @classmethod
    def parse(cls, value: str) -> Repository:
        """Parse an ``owner/repo`` string.

        Raises:
            InvalidRepositoryError: If the value is not exactly two
                non-empty slash-separated parts.
        """
        parts = value.strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise InvalidRepositoryError(value)
        return cls(owner=parts[0], repo=parts[1])

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO8601 timestamp such as ``2023-01-07T12:34:56Z``."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class WorkflowRun:
    """Read-only view of a workflow run as listed by the API."""

    id: int
    created_at: datetime  # timezone-aware
    conclusion: str | None = None  # None while the run is in progress
    pull_requests: tuple[dict[str, Any], ...] = ()

    @property
    def has_pull_requests(self) -> bool:
        """Whether the run is associated with at least one pull request."""
        return len(self.pull_requests) > 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> WorkflowRun:
        """Build a run from an item of the ``workflow_runs`` array."""
        return cls(
            id=int(data["id"]),
            created_at=parse_timestamp(data["created_at"]),
            conclusion=data.get("conclusion"),
            pull_requests=tuple(data.get("pull_requests") or ()),
        )
