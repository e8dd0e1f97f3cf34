"""Configuration schema and policy resolution for purge-runs."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime
from typing import Any

from purge_runs.github.client import DEFAULT_API_URL
from purge_runs.github.models import Repository

DEFAULT_OLDER_THAN_DAYS = 30
PER_PAGE = 10

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
EARLIEST = datetime.min.replace(tzinfo=UTC)

# Conclusions reported for runs that are still active; such runs are kept.
IGNORED_CONCLUSION_STATES = frozenset(
    {
        "action_required",
        "in_progress",
        "queued",
        "requested",
        "waiting",
        "pending",
    }
)


@dataclass(frozen=True)
class Policy:
    """Resolved purge policy for one invocation."""

    repository: Repository
    older_than_days: int
    ignore_open_pull_requests: bool
    last_keep_date: datetime  # runs created after this are kept
    per_page: int = PER_PAGE
    ignored_conclusion_states: frozenset[str] = IGNORED_CONCLUSION_STATES
    dry_run: bool = False

    @property
    def cutoff_text(self) -> str:
        """Last keep date as an HTTP date: ``Fri, 06 Jan 2023 12:34:56 GMT``."""
        return format_datetime(self.last_keep_date.astimezone(UTC), usegmt=True)


def _as_raw(value: Any) -> str | None:
    """Coerce a YAML scalar back to the raw string form the resolver expects."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class PurgeConfig:
    """Unresolved purge-runs settings.

    Values stay raw strings, exactly as an action input would deliver them.
    None means "not set" so that layers can be merged.
    """

    older_than_days: str | None = None
    ignore_open_pull_requests: str | None = None
    repository: str | None = None
    api_url: str | None = None

    def merge(self, other: PurgeConfig) -> PurgeConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new PurgeConfig instance.
        """
        return PurgeConfig(
            **{
                f.name: (
                    getattr(other, f.name)
                    if getattr(other, f.name) is not None
                    else getattr(self, f.name)
                )
                for f in fields(self)
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PurgeConfig:
        """Create a PurgeConfig from a dictionary. Unknown keys are ignored."""
        valid_fields = {f.name for f in fields(cls)}
        return cls(
            **{key: _as_raw(value) for key, value in data.items() if key in valid_fields}
        )


def parse_older_than_days(raw: str | None) -> int:
    """Parse the age threshold, falling back to 30 on bad or negative input.

    Only the leading integer counts: ``"10days"`` is 10 and ``"1.5"`` is 1.
    """
    match = _LEADING_INT.match(raw or "")
    if match is None:
        return DEFAULT_OLDER_THAN_DAYS
    days = int(match.group(1))
    if days < 0:
        return DEFAULT_OLDER_THAN_DAYS
    return days


def cutoff_before(now: datetime, days: int) -> datetime:
    """Return ``now`` minus ``days``, clamped to the earliest datetime."""
    try:
        return now - timedelta(days=days)
    except OverflowError:
        return EARLIEST


def parse_flag(raw: str | None) -> bool:
    """Action-input boolean: only the exact string ``true`` is true."""
    return raw == "true"


def resolve_policy(
    older_than_days: str | None,
    ignore_open_pull_requests: str | None,
    repository: Repository | str,
    *,
    dry_run: bool = False,
    now: datetime | None = None,
) -> Policy:
    """Turn raw inputs into a Policy.

    The two policy inputs never fail; they fall back to their defaults.
    Only an unparsable repository identity raises InvalidRepositoryError.
    """
    if isinstance(repository, str):
        repository = Repository.parse(repository)
    days = parse_older_than_days(older_than_days)
    if now is None:
        now = datetime.now(UTC)
    return Policy(
        repository=repository,
        older_than_days=days,
        ignore_open_pull_requests=parse_flag(ignore_open_pull_requests),
        last_keep_date=cutoff_before(now, days),
        dry_run=dry_run,
    )


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = PurgeConfig(
    older_than_days=str(DEFAULT_OLDER_THAN_DAYS),
    ignore_open_pull_requests="false",
    api_url=DEFAULT_API_URL,
)
