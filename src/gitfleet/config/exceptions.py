"""Custom exceptions for run configuration."""


class ConfigError(Exception):
    """Raised when a configuration file is missing or invalid."""


class ValidationError(ConfigError):
    """Base exception for pre-run validation failures."""


class MissingTokenError(ValidationError):
    """GITHUB_OAUTH_TOKEN is not set."""

    def __init__(self) -> None:
        super().__init__(
            "You must export a valid Github personal access token as GITHUB_OAUTH_TOKEN"
        )


class NoCommandError(ValidationError):
    """No command or script was given to run against the repositories."""

    def __init__(self) -> None:
        super().__init__("You must supply a valid command or script to execute")


class NoRepoSelectionError(ValidationError):
    """None of the repository selection inputs was provided."""

    def __init__(self) -> None:
        super().__init__(
            "You must target some repos for processing either via stdin or by providing "
            "one of the --github-org, --github-search, --repos, or --repo flags"
        )


class NoBranchNameError(ValidationError):
    """No branch name was given."""

    def __init__(self) -> None:
        super().__init__("You must pass a branch name to use via the --branch-name flag")
