"""Configuration loading and pre-run validation."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from gitfleet.config.exceptions import (
    ConfigError,
    MissingTokenError,
    NoBranchNameError,
    NoCommandError,
    NoRepoSelectionError,
)
from gitfleet.config.models import RunConfig

TOKEN_ENV_VAR = "GITHUB_OAUTH_TOKEN"
HOSTNAME_ENV_VAR = "GITHUB_HOSTNAME"


def load_config(config_path: Path | str) -> RunConfig:
    """Load a run configuration from a YAML file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return RunConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return RunConfig.from_dict(data)


def validate_config(config: RunConfig, environ: Mapping[str, str] | None = None) -> None:
    """Run the checks that must pass before any repository is touched.

    Args:
        config: The run configuration.
        environ: Environment to read the token from. Defaults to os.environ.

    Raises:
        NoBranchNameError: If no branch name was given.
        NoRepoSelectionError: If no way of selecting repositories was given.
        NoCommandError: If no command was given.
        MissingTokenError: If GITHUB_OAUTH_TOKEN is not set.
    """
    if environ is None:
        environ = os.environ

    if not config.branch_name.strip():
        raise NoBranchNameError()
    if not config.has_repo_selection:
        raise NoRepoSelectionError()
    if not config.command:
        raise NoCommandError()
    if not environ.get(TOKEN_ENV_VAR, "").strip():
        raise MissingTokenError()
