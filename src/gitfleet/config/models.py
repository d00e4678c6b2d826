"""Run configuration for a gitfleet run."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field, fields
from typing import Any

from gitfleet.config.exceptions import ConfigError

DEFAULT_COMMIT_MESSAGE = "gitfleet programmatic commit"
DEFAULT_PULL_REQUEST_TITLE = "gitfleet programmatic pull request"
DEFAULT_PULL_REQUEST_DESCRIPTION = "gitfleet programmatic pull request"
DEFAULT_SECONDS_BETWEEN_PRS = 1
DEFAULT_MAX_PR_RETRIES = 3
DEFAULT_SECONDS_TO_WAIT_WHEN_RATE_LIMITED = 60
DEFAULT_WRITE_DELAY_SECONDS = 2.0
DEFAULT_MAX_CONCURRENT_CLONES = 4

_LIST_FIELDS = ("reviewers", "team_reviewers", "assignees", "repos")


def split_csv(value: str | list[str] | None) -> list[str]:
    """Split a comma separated string (or list of them) into trimmed entries."""
    if value is None:
        return []
    items = [value] if isinstance(value, str) else list(value)
    result = []
    for item in items:
        result.extend(part.strip() for part in str(item).split(",") if part.strip())
    return result


@dataclass
class RunConfig:
    """Everything one run needs to know. Treated as read-only once the run starts.

    Attributes:
        branch_name: Branch to create and commit to in every repository.
        base_branch_name: PR target branch; empty means the repository default.
        commit_message: Commit message for the changes made by the command.
        pull_request_title: Title of opened pull requests.
        pull_request_description: Body of opened pull requests.
        dry_run: Run the command and commit locally but never push or open PRs.
        skip_pull_requests: Push straight to the branch without opening PRs.
        skip_archived_repos: Drop archived repositories from org/search selection.
        draft: Open pull requests as drafts.
        max_concurrent_repos: Repository worker limit (0 = one per repository).
        max_concurrent_clones: Simultaneous clones allowed (0 = unbounded).
        max_pr_retries: Rate-limited PR attempts allowed before giving up.
        seconds_between_prs: Minimum spacing between PR attempts fleet-wide.
        seconds_to_wait_when_rate_limited: Fallback wait when a rate limit has no reset.
        write_delay_seconds: Transport pause after any write request.
        reviewers: Users asked to review opened pull requests.
        team_reviewers: Teams asked to review opened pull requests.
        assignees: Users assigned to opened pull requests.
        command: Command and arguments run inside each repository.
        github_org: Organization whose repositories are selected.
        repos_file: Allow-list file of ``owner/name`` lines.
        repos: Explicit ``owner/name`` entries.
        repos_from_stdin: ``owner/name`` entries read from standard input.
        github_search_query: Repository search query.
        github_hostname: GitHub Enterprise hostname, empty for github.com.
        workspace_dir: Parent directory for clones; empty for the system temp dir.
    """

    branch_name: str = ""
    base_branch_name: str = ""
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    pull_request_title: str = DEFAULT_PULL_REQUEST_TITLE
    pull_request_description: str = DEFAULT_PULL_REQUEST_DESCRIPTION
    dry_run: bool = False
    skip_pull_requests: bool = False
    skip_archived_repos: bool = False
    draft: bool = False
    max_concurrent_repos: int = 0
    max_concurrent_clones: int = DEFAULT_MAX_CONCURRENT_CLONES
    max_pr_retries: int = DEFAULT_MAX_PR_RETRIES
    seconds_between_prs: float = DEFAULT_SECONDS_BETWEEN_PRS
    seconds_to_wait_when_rate_limited: float = DEFAULT_SECONDS_TO_WAIT_WHEN_RATE_LIMITED
    write_delay_seconds: float = DEFAULT_WRITE_DELAY_SECONDS
    reviewers: list[str] = field(default_factory=list)
    team_reviewers: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    github_org: str = ""
    repos_file: str = ""
    repos: list[str] = field(default_factory=list)
    repos_from_stdin: list[str] = field(default_factory=list)
    github_search_query: str = ""
    github_hostname: str = ""
    workspace_dir: str = ""

    @property
    def resolved_pull_request_title(self) -> str:
        """PR title, falling back to a custom commit message when left at its default."""
        if (
            self.pull_request_title == DEFAULT_PULL_REQUEST_TITLE
            and self.commit_message != DEFAULT_COMMIT_MESSAGE
        ):
            return self.commit_message
        return self.pull_request_title

    @property
    def resolved_pull_request_description(self) -> str:
        """PR body, falling back to a custom commit message when left at its default."""
        if (
            self.pull_request_description == DEFAULT_PULL_REQUEST_DESCRIPTION
            and self.commit_message != DEFAULT_COMMIT_MESSAGE
        ):
            return self.commit_message
        return self.pull_request_description

    @property
    def has_repo_selection(self) -> bool:
        return bool(
            self.github_org
            or self.repos_file
            or self.repos
            or self.repos_from_stdin
            or self.github_search_query
        )

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunConfig:
        """Create config from dictionary.

        Keys use the field names; dashes are accepted in place of underscores.
        List fields accept either a YAML list or a comma separated string, and
        ``command`` accepts a list of arguments or a single shell-style string.

        Args:
            data: Configuration dictionary from YAML.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If unknown keys are present or a value has the wrong type.
        """
        normalized = {str(key).replace("-", "_"): value for key, value in data.items()}
        unknown = sorted(set(normalized) - cls.field_names())
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in normalized.items():
            if value is None:
                continue
            if key in _LIST_FIELDS:
                values[key] = split_csv(value)
            elif key == "command":
                values[key] = _parse_command(value)
            else:
                values[key] = value

        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def merged(self, overrides: dict[str, Any]) -> RunConfig:
        """Return a copy with the non-None overrides applied (CLI flags over file values)."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update({key: value for key, value in overrides.items() if value is not None})
        return RunConfig(**current)


def _parse_command(value: Any) -> list[str]:
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, list):
        return [str(part) for part in value]
    raise ConfigError(f"command must be a string or a list, got {type(value).__name__}")
