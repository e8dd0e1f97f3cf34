"""Run eligibility and the purge loop."""

from purge_runs.purge.policy import should_be_deleted
from purge_runs.purge.runner import (
    PurgeResult,
    delete_workflow_runs,
    purge_workflow_runs,
)

__all__ = [
    "PurgeResult",
    "delete_workflow_runs",
    "purge_workflow_runs",
    "should_be_deleted",
]
