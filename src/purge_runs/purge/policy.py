"""Deletion eligibility for workflow runs."""

import logging

from purge_runs.config.schema import Policy
from purge_runs.github.models import WorkflowRun

logger = logging.getLogger(__name__)


def should_be_deleted(policy: Policy, run: WorkflowRun) -> bool:
    """Decide whether a run may be deleted under the policy.

    Rules are checked in order and the first match keeps the run:
    an open pull request (when ignored), creation after the last keep
    date, and a missing or still-active conclusion.
    """
    if policy.ignore_open_pull_requests and run.has_pull_requests:
        logger.debug("Ignoring run %s because it has open pull requests", run.id)
        return False
    if run.created_at > policy.last_keep_date:
        logger.debug(
            "Ignoring run %s because it is newer than %s",
            run.id,
            policy.cutoff_text,
        )
        return False
    if run.conclusion is None or run.conclusion in policy.ignored_conclusion_states:
        logger.debug(
            "Ignoring run %s because it is in state %s",
            run.id,
            run.conclusion or "null (in progress)",
        )
        return False
    return True
