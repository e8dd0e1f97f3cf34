"""Configuration loading and policy resolution."""

from purge_runs.config.loader import (
    config_from_env,
    config_locations,
    load_config,
    resolve_token,
    save_config,
)
from purge_runs.config.schema import (
    DEFAULT_CONFIG,
    Policy,
    PurgeConfig,
    resolve_policy,
)

__all__ = [
    "DEFAULT_CONFIG",
    "Policy",
    "PurgeConfig",
    "config_from_env",
    "config_locations",
    "load_config",
    "resolve_policy",
    "resolve_token",
    "save_config",
]
