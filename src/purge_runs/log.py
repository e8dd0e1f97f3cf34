"""Logging setup for terminal sessions and GitHub Actions jobs."""

import logging
import os
from collections.abc import Mapping

import click
from rich.logging import RichHandler

from purge_runs.console import console

PACKAGE_LOGGER = "purge_runs"


def in_github_actions(environ: Mapping[str, str] | None = None) -> bool:
    """Whether we are running inside a GitHub Actions job."""
    if environ is None:
        environ = os.environ
    return environ.get("GITHUB_ACTIONS") == "true"


def escape_data(message: str) -> str:
    """Escape a message for use in a workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def workflow_command(levelno: int) -> str | None:
    """Map a log level to a workflow command name; None for plain output."""
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warning"
    if levelno < logging.INFO:
        return "debug"
    return None


class ActionsLogHandler(logging.Handler):
    """Write log records as GitHub Actions workflow commands.

    Info records are printed as-is; debug, warning and error records become
    ``::debug::``, ``::warning::`` and ``::error::`` annotations.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            command = workflow_command(record.levelno)
            if command is None:
                click.echo(message)
            else:
                click.echo(f"::{command}::{escape_data(message)}")
        except Exception:
            self.handleError(record)


def setup_logging(
    verbose: bool = False, environ: Mapping[str, str] | None = None
) -> logging.Handler:
    """Route package logs to the terminal or to the Actions runner.

    Debug output is enabled by ``verbose`` or by the runner's debug mode
    (``RUNNER_DEBUG=1``). Calling this again replaces the previous handler.
    """
    if environ is None:
        environ = os.environ

    handler: logging.Handler
    if in_github_actions(environ):
        handler = ActionsLogHandler()
    else:
        handler = RichHandler(console=console, show_path=False)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)

    debug = verbose or environ.get("RUNNER_DEBUG") == "1"
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return handler
