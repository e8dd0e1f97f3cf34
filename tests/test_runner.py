"""Tests for the page-by-page purge loop."""

import logging
import threading
from dataclasses import replace
from datetime import UTC, datetime
from unittest.mock import MagicMock, call

import pytest
import requests

from purge_runs.config.schema import Policy, resolve_policy
from purge_runs.errors import GitHubAPIError
from purge_runs.github.models import WorkflowRun, parse_timestamp
from purge_runs.purge.runner import (
    delete_workflow_runs,
    last_page,
    purge_workflow_runs,
)

NOW = datetime(2023, 6, 1, tzinfo=UTC)
OLD = parse_timestamp("2023-01-07T12:34:56Z")


@pytest.fixture
def policy() -> Policy:
    """Thirty-day policy at a fixed point in time."""
    return resolve_policy("30", "false", "dummy/project", now=NOW)


@pytest.fixture
def client() -> MagicMock:
    """Client mock with no runs."""
    mock = MagicMock()
    mock.total_count.return_value = 0
    mock.list_workflow_runs.return_value = []
    return mock


def old_run(run_id: int, conclusion: str | None = "success") -> WorkflowRun:
    """Create a run old enough to be deleted."""
    return WorkflowRun(id=run_id, created_at=OLD, conclusion=conclusion)


def fail_for(*failing_ids: int):
    """Build a delete side effect that fails for the given run ids."""

    def delete(run_id: int) -> None:
        if run_id in failing_ids:
            raise GitHubAPIError(500, "Something went wrong", f"runs/{run_id}")

    return delete


class TestLastPage:
    """Tests for the last page calculation."""

    @pytest.mark.parametrize(
        ("total_count", "expected"),
        [(0, 0), (1, 1), (9, 1), (10, 1), (11, 2), (20, 2), (95, 10)],
    )
    def test_last_page(self, total_count: int, expected: int) -> None:
        """Pages hold ten runs; a partial page still counts."""
        assert last_page(total_count, 10) == expected


class TestDeleteWorkflowRuns:
    """Tests for concurrent batch deletion."""

    def test_deletes_every_run(self, client: MagicMock) -> None:
        """One delete call is issued per run id."""
        delete_workflow_runs(client, [1, 2, 3])

        assert sorted(c.args[0] for c in client.delete_workflow_run.call_args_list) == [
            1,
            2,
            3,
        ]

    def test_empty_batch_is_noop(self, client: MagicMock) -> None:
        """No ids means no requests."""
        delete_workflow_runs(client, [])

        client.delete_workflow_run.assert_not_called()

    def test_failure_raises_after_all_settle(self, client: MagicMock) -> None:
        """A failing delete is raised, but the others still ran."""
        client.delete_workflow_run.side_effect = fail_for(1)

        with pytest.raises(GitHubAPIError, match="Something went wrong"):
            delete_workflow_runs(client, [1, 2, 3])

        assert client.delete_workflow_run.call_count == 3

    def test_deletes_are_dispatched_concurrently(self, client: MagicMock) -> None:
        """All deletes of a batch are in flight at the same time."""
        barrier = threading.Barrier(3, timeout=5)
        client.delete_workflow_run.side_effect = lambda _run_id: barrier.wait()

        delete_workflow_runs(client, [1, 2, 3])

        assert client.delete_workflow_run.call_count == 3


class TestPurgeWorkflowRuns:
    """Tests for the purge driver."""

    def test_deletes_single_old_run(
        self,
        client: MagicMock,
        policy: Policy,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """One old successful run on one page is deleted and reported."""
        caplog.set_level(logging.INFO, logger="purge_runs")
        client.total_count.return_value = 1
        client.list_workflow_runs.return_value = [old_run(12345678)]

        result = purge_workflow_runs(client, policy)

        assert result.deleted == 1
        assert result.total_count == 1
        assert result.failed_pages == []
        client.list_workflow_runs.assert_called_once_with(1, 10)
        client.delete_workflow_run.assert_called_once_with(12345678)
        assert "Deleted 1 runs" in caplog.text

    def test_logs_search_banner(
        self,
        client: MagicMock,
        policy: Policy,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """The threshold and cutoff are logged before searching."""
        caplog.set_level(logging.INFO, logger="purge_runs")

        purge_workflow_runs(client, policy)

        assert (
            "Searching for runs older than 30 days "
            "(before Tue, 02 May 2023 00:00:00 GMT)" in caplog.text
        )

    def test_no_runs_means_no_pages(self, client: MagicMock, policy: Policy) -> None:
        """An empty history lists nothing and deletes nothing."""
        result = purge_workflow_runs(client, policy)

        assert result.deleted == 0
        client.list_workflow_runs.assert_not_called()
        client.delete_workflow_run.assert_not_called()

    def test_walks_pages_from_last_to_first(
        self, client: MagicMock, policy: Policy
    ) -> None:
        """Pages are fetched oldest first."""
        client.total_count.return_value = 25

        purge_workflow_runs(client, policy)

        assert client.list_workflow_runs.call_args_list == [
            call(3, 10),
            call(2, 10),
            call(1, 10),
        ]

    def test_page_without_candidates_is_skipped(
        self,
        client: MagicMock,
        policy: Policy,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A page with only active runs issues no deletes."""
        caplog.set_level(logging.INFO, logger="purge_runs")
        client.total_count.return_value = 2
        client.list_workflow_runs.return_value = [
            old_run(1, conclusion=None),
            old_run(2, conclusion="queued"),
        ]

        result = purge_workflow_runs(client, policy)

        assert result.deleted == 0
        client.delete_workflow_run.assert_not_called()
        assert "No runs to delete on page 1" in caplog.text

    def test_failed_page_is_not_counted_and_loop_continues(
        self,
        client: MagicMock,
        policy: Policy,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A failing batch is logged; later pages are still processed."""
        caplog.set_level(logging.INFO, logger="purge_runs")
        client.total_count.return_value = 11
        pages = {2: [old_run(1), old_run(2)], 1: [old_run(3)]}
        client.list_workflow_runs.side_effect = lambda page, _per_page: pages[page]
        client.delete_workflow_run.side_effect = fail_for(2)

        result = purge_workflow_runs(client, policy)

        assert result.deleted == 1
        assert result.candidates == 3
        assert result.failed_pages == [2]
        assert client.delete_workflow_run.call_count == 3
        assert "Failed to delete runs: GitHub API returned 500" in caplog.text
        assert "Deleted 1 runs" in caplog.text

    def test_transport_error_on_delete_is_swallowed(
        self, client: MagicMock, policy: Policy
    ) -> None:
        """Connection errors during deletes only fail the page."""
        client.total_count.return_value = 1
        client.list_workflow_runs.return_value = [old_run(1)]
        client.delete_workflow_run.side_effect = requests.ConnectionError("reset")

        result = purge_workflow_runs(client, policy)

        assert result.deleted == 0
        assert result.failed_pages == [1]

    def test_total_count_failure_propagates(
        self, client: MagicMock, policy: Policy
    ) -> None:
        """Failing to count runs fails the whole invocation."""
        client.total_count.side_effect = GitHubAPIError(500, "boom", "runs")

        with pytest.raises(GitHubAPIError):
            purge_workflow_runs(client, policy)

    def test_list_failure_propagates(self, client: MagicMock, policy: Policy) -> None:
        """Failing to fetch a page fails the whole invocation."""
        client.total_count.return_value = 1
        client.list_workflow_runs.side_effect = GitHubAPIError(404, "Not Found", "runs")

        with pytest.raises(GitHubAPIError):
            purge_workflow_runs(client, policy)

    def test_dry_run_deletes_nothing(
        self,
        client: MagicMock,
        policy: Policy,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A dry run reports candidates without deleting them."""
        caplog.set_level(logging.INFO, logger="purge_runs")
        client.total_count.return_value = 2
        client.list_workflow_runs.return_value = [old_run(1), old_run(2)]

        result = purge_workflow_runs(client, replace(policy, dry_run=True))

        client.delete_workflow_run.assert_not_called()
        assert result.deleted == 0
        assert result.candidates == 2
        assert "Would delete 2 runs on page 1" in caplog.text
        assert "Would delete 2 runs" in caplog.text
