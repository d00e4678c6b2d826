"""Config - Run configuration, YAML loading and pre-run validation."""

from gitfleet.config.exceptions import (
    ConfigError,
    MissingTokenError,
    NoBranchNameError,
    NoCommandError,
    NoRepoSelectionError,
    ValidationError,
)
from gitfleet.config.loader import (
    HOSTNAME_ENV_VAR,
    TOKEN_ENV_VAR,
    load_config,
    validate_config,
)
from gitfleet.config.models import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_MAX_CONCURRENT_CLONES,
    DEFAULT_MAX_PR_RETRIES,
    DEFAULT_PULL_REQUEST_DESCRIPTION,
    DEFAULT_PULL_REQUEST_TITLE,
    DEFAULT_SECONDS_BETWEEN_PRS,
    DEFAULT_SECONDS_TO_WAIT_WHEN_RATE_LIMITED,
    DEFAULT_WRITE_DELAY_SECONDS,
    RunConfig,
    split_csv,
)

__all__ = [
    "DEFAULT_COMMIT_MESSAGE",
    "DEFAULT_MAX_CONCURRENT_CLONES",
    "DEFAULT_MAX_PR_RETRIES",
    "DEFAULT_PULL_REQUEST_DESCRIPTION",
    "DEFAULT_PULL_REQUEST_TITLE",
    "DEFAULT_SECONDS_BETWEEN_PRS",
    "DEFAULT_SECONDS_TO_WAIT_WHEN_RATE_LIMITED",
    "DEFAULT_WRITE_DELAY_SECONDS",
    "HOSTNAME_ENV_VAR",
    "TOKEN_ENV_VAR",
    "ConfigError",
    "MissingTokenError",
    "NoBranchNameError",
    "NoCommandError",
    "NoRepoSelectionError",
    "RunConfig",
    "ValidationError",
    "load_config",
    "split_csv",
    "validate_config",
]
