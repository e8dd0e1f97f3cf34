"""Configuration file loading and merging."""

import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from purge_runs.config.schema import DEFAULT_CONFIG, PurgeConfig
from purge_runs.errors import MissingTokenError

CONFIG_DIRNAME = ".purge-runs"
CONFIG_FILENAME = "config.yaml"

# Action inputs keep their hyphens in the variable name; underscores are
# accepted too for shells that cannot export hyphenated names.
ENV_INPUTS = {
    "older_than_days": ("INPUT_OLDER-THAN-DAYS", "INPUT_OLDER_THAN_DAYS"),
    "ignore_open_pull_requests": (
        "INPUT_IGNORE-OPEN-PULL-REQUESTS",
        "INPUT_IGNORE_OPEN_PULL_REQUESTS",
    ),
    "repository": ("GITHUB_REPOSITORY",),
    "api_url": ("GITHUB_API_URL",),
}


def get_home_config_path() -> Path:
    """Get path to global config: ~/.purge-runs/config.yaml."""
    return Path.home() / CONFIG_DIRNAME / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to local config: ./.purge-runs/config.yaml."""
    return Path.cwd() / CONFIG_DIRNAME / CONFIG_FILENAME


def config_locations() -> list[tuple[str, Path]]:
    """Config files in the order they are layered, labelled for display."""
    return [("Global", get_home_config_path()), ("Local", get_local_config_path())]


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Read a YAML mapping from ``path``.

    Unreadable, malformed, empty and non-mapping files all yield None so a
    broken layer is skipped rather than aborting the run.
    """
    try:
        text = path.read_text()
    except OSError:
        return None
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        return None
    return data if isinstance(data, dict) and data else None


def config_from_env(environ: Mapping[str, str] | None = None) -> PurgeConfig:
    """Read action inputs and the runner's repository context.

    Empty variables count as unset, the runner exports unset inputs as "".
    """
    if environ is None:
        environ = os.environ
    values: dict[str, str] = {}
    for field_name, names in ENV_INPUTS.items():
        for name in names:
            value = environ.get(name)
            if value:
                values[field_name] = value
                break
    return PurgeConfig.from_dict(values)


def load_config(
    overrides: PurgeConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> PurgeConfig:
    """Load merged configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global config (~/.purge-runs/config.yaml)
    3. Local config (./.purge-runs/config.yaml)
    4. Environment (action inputs, GITHUB_REPOSITORY, GITHUB_API_URL)
    5. Explicit overrides (command-line options)
    """
    config = DEFAULT_CONFIG

    home_data = load_yaml_config(get_home_config_path())
    if home_data:
        config = config.merge(PurgeConfig.from_dict(home_data))

    local_data = load_yaml_config(get_local_config_path())
    if local_data:
        config = config.merge(PurgeConfig.from_dict(local_data))

    config = config.merge(config_from_env(environ))

    if overrides is not None:
        config = config.merge(overrides)

    return config


def save_config(config: PurgeConfig, path: Path) -> None:
    """Save config to a YAML file.

    Creates parent directories if needed.
    Only saves non-None values.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def resolve_token(
    explicit: str | None = None, environ: Mapping[str, str] | None = None
) -> str:
    """Resolve the GitHub token.

    Precedence: explicit value, GITHUB_TOKEN, GH_TOKEN.
    The token is never written to config files.
    """
    if explicit:
        return explicit
    if environ is None:
        environ = os.environ
    token = environ.get("GITHUB_TOKEN") or environ.get("GH_TOKEN")
    if not token:
        raise MissingTokenError()
    return token
