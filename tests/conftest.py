"""Shared test fixtures."""

import logging
from collections.abc import Iterator

import pytest

from purge_runs.log import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def restore_package_logger() -> Iterator[None]:
    """Undo handler and level changes made by setup_logging."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
