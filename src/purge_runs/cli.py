"""Command-line interface for purge-runs."""

import logging

import click

from purge_runs import __version__
from purge_runs.config.loader import (
    config_locations,
    get_home_config_path,
    get_local_config_path,
    load_config,
    load_yaml_config,
    resolve_token,
    save_config,
)
from purge_runs.config.schema import PurgeConfig, resolve_policy
from purge_runs.console import console
from purge_runs.errors import MissingRepositoryError
from purge_runs.github import DEFAULT_API_URL, GitHubClient
from purge_runs.log import setup_logging
from purge_runs.purge import purge_workflow_runs

logger = logging.getLogger(__name__)


def _flag_to_raw(value: bool | None) -> str | None:
    """Render a CLI boolean as an action-input string."""
    if value is None:
        return None
    return "true" if value else "false"


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"purge-runs [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.pass_context
def main(ctx: click.Context) -> None:
    """purge-runs - delete old GitHub Actions workflow runs."""
    if ctx.invoked_subcommand is None:
        console.print("[bold]purge-runs[/bold] - delete old GitHub Actions workflow runs")
        console.print("\nRun [cyan]purge-runs --help[/cyan] for available commands.")


@main.command()
@click.argument("repository", required=False)
@click.option(
    "--older-than-days",
    "-d",
    help="Delete runs older than this many days (default: 30).",
)
@click.option(
    "--ignore-open-pull-requests/--include-open-pull-requests",
    default=None,
    help="Keep runs that belong to open pull requests (default: include).",
)
@click.option("--token", help="GitHub token (default: $GITHUB_TOKEN or $GH_TOKEN).")
@click.option(
    "--api-url",
    help="GitHub API base URL (default: $GITHUB_API_URL or api.github.com).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be deleted without actually deleting.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log why each run is kept.")
def purge(
    repository: str | None,
    older_than_days: str | None,
    ignore_open_pull_requests: bool | None,
    token: str | None,
    api_url: str | None,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Delete workflow runs older than a number of days.

    REPOSITORY is OWNER/REPO and defaults to $GITHUB_REPOSITORY. Inside a
    GitHub Actions job the action inputs are read from INPUT_* variables.
    """
    setup_logging(verbose=verbose)
    overrides = PurgeConfig(
        older_than_days=older_than_days,
        ignore_open_pull_requests=_flag_to_raw(ignore_open_pull_requests),
        repository=repository,
        api_url=api_url,
    )

    try:
        config = load_config(overrides)
        if not config.repository:
            raise MissingRepositoryError()
        policy = resolve_policy(
            config.older_than_days,
            config.ignore_open_pull_requests,
            config.repository,
            dry_run=dry_run,
        )
        with GitHubClient(
            resolve_token(token),
            policy.repository,
            api_url=config.api_url or DEFAULT_API_URL,
        ) as client:
            result = purge_workflow_runs(client, policy)
    except Exception as e:
        logger.error("Action failed with error: %s", e)
        raise SystemExit(1) from e

    if result.failed_pages:
        logger.warning(
            "Deletes failed on %d page(s): %s",
            len(result.failed_pages),
            ", ".join(str(page) for page in result.failed_pages),
        )


def _show_config() -> None:
    config = load_config()
    console.print("[bold]Effective configuration:[/bold]")
    for key, value in config.to_dict().items():
        console.print(f"  [cyan]{key}[/cyan]: {value}")

    console.print()
    for label, path in config_locations():
        state = "found" if path.exists() else "not found"
        console.print(f"[dim]{label} config: {path} ({state})[/dim]")


@main.command("config")
@click.option(
    "--global",
    "global_config",
    is_flag=True,
    help="Save to the global config (~/.purge-runs/config.yaml).",
)
@click.option("--older-than-days", "-d", help="Default age threshold in days.")
@click.option(
    "--ignore-open-pull-requests/--include-open-pull-requests",
    default=None,
    help="Default for keeping runs with open pull requests.",
)
@click.option("--repository", "-r", help="Default repository (OWNER/REPO).")
@click.option("--api-url", help="GitHub API base URL.")
def config_command(
    global_config: bool,
    older_than_days: str | None,
    ignore_open_pull_requests: bool | None,
    repository: str | None,
    api_url: str | None,
) -> None:
    """Show the effective configuration, or save settings.

    Without setting options, prints the merged configuration. With them,
    saves to ./.purge-runs/config.yaml, or the global file with --global.
    """
    updates = PurgeConfig(
        older_than_days=older_than_days,
        ignore_open_pull_requests=_flag_to_raw(ignore_open_pull_requests),
        repository=repository,
        api_url=api_url,
    )
    if not updates.to_dict():
        _show_config()
        return

    path = get_home_config_path() if global_config else get_local_config_path()
    existing = PurgeConfig.from_dict(load_yaml_config(path) or {})
    save_config(existing.merge(updates), path)
    console.print(f"[green]Saved configuration to {path}[/green]")
