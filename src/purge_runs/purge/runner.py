"""Page-by-page purge of workflow runs."""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import requests

from purge_runs.config.schema import Policy
from purge_runs.errors import GitHubAPIError
from purge_runs.github.client import GitHubClient
from purge_runs.purge.policy import should_be_deleted

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    """Outcome of one purge invocation."""

    total_count: int
    deleted: int = 0
    candidates: int = 0  # eligible runs, deleted or not
    failed_pages: list[int] = field(default_factory=list)


def last_page(total_count: int, per_page: int) -> int:
    """Index of the last (oldest) 1-based page holding `total_count` runs."""
    remainder_page = 1 if total_count % per_page else 0
    return total_count // per_page + remainder_page


def delete_workflow_runs(client: GitHubClient, run_ids: Sequence[int]) -> None:
    """Delete runs concurrently and wait for every request to settle.

    If any delete failed, the first failure in submission order is raised
    once all of them have finished.
    """
    if not run_ids:
        return
    with ThreadPoolExecutor(max_workers=len(run_ids)) as pool:
        futures = [pool.submit(client.delete_workflow_run, run_id) for run_id in run_ids]
    for future in futures:
        future.result()


def purge_workflow_runs(client: GitHubClient, policy: Policy) -> PurgeResult:
    """Walk the run history from the oldest page back to the newest.

    Errors while counting or listing runs propagate. A failed delete batch
    is logged and the page's deletions are not counted; the walk goes on.
    """
    logger.info(
        "Searching for runs older than %d days (before %s)",
        policy.older_than_days,
        policy.cutoff_text,
    )

    total_count = client.total_count()
    result = PurgeResult(total_count=total_count)

    for page in range(last_page(total_count, policy.per_page), 0, -1):
        runs = client.list_workflow_runs(page, policy.per_page)
        run_ids = [run.id for run in runs if should_be_deleted(policy, run)]

        if not run_ids:
            logger.info("No runs to delete on page %d", page)
            continue

        result.candidates += len(run_ids)

        if policy.dry_run:
            logger.info("Would delete %d runs on page %d", len(run_ids), page)
            continue

        logger.info("Deleting %d runs on page %d", len(run_ids), page)
        try:
            delete_workflow_runs(client, run_ids)
        except (GitHubAPIError, requests.RequestException) as e:
            logger.error("Failed to delete runs: %s", e)
            result.failed_pages.append(page)
            continue
        result.deleted += len(run_ids)

    if policy.dry_run:
        logger.info("Would delete %d runs", result.candidates)
    else:
        logger.info("Deleted %d runs", result.deleted)
    return result
