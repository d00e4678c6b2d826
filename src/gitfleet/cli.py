"""CLI entry point for gitfleet.

Runs a command or script against many GitHub repositories, then commits,
pushes and opens pull requests with the changes it made.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click
import httpx

from gitfleet import __version__
from gitfleet.config import ConfigError, RunConfig, load_config, split_csv
from gitfleet.github import GitHubError
from gitfleet.logging import setup_logging
from gitfleet.report import render_report
from gitfleet.runner import run_fleet
from gitfleet.selection import SelectionError, parse_repos_from_text

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def read_stdin_repos() -> list[str]:
    """Entries piped on stdin, or nothing when stdin is a terminal."""
    stream = click.get_text_stream("stdin")
    if stream.isatty():
        return []
    return parse_repos_from_text(stream.read())


def build_config(config_path: Path | None, overrides: dict[str, Any]) -> RunConfig:
    """Load the optional YAML config and apply the flags given on the command line."""
    base = load_config(config_path) if config_path else RunConfig()
    return base.merged(overrides)


@click.command(context_settings={"allow_interspersed_args": False})
@click.version_option(__version__, prog_name="gitfleet")
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--loglevel",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: INFO, or GITFLEET_LOG_LEVEL)",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write a rotating log file to this directory",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file of run settings; flags override its values",
)
@click.option("--github-org", default=None, help="Select every repository of this organization")
@click.option(
    "--github-search",
    "github_search_query",
    default=None,
    help=(
        "Select repositories matching this search query (scoped by --github-org if given). "
        "Queries with file qualifiers such as filename: or path:, or with no repository "
        "qualifier at all, use code search"
    ),
)
@click.option(
    "--repos",
    "repos_file",
    default=None,
    help="Path to a file of <org>/<name> lines to select",
)
@click.option(
    "--repo",
    "repos",
    multiple=True,
    help="A repository to select as <org>/<name> (may be repeated)",
)
@click.option("-b", "--branch-name", default=None, help="Branch to create and commit to")
@click.option(
    "--base-branch-name",
    default=None,
    help="Branch pull requests target (default: the repository's default branch)",
)
@click.option("-m", "--commit-message", default=None, help="Commit message for the changes")
@click.option("--pull-request-title", default=None, help="Title of opened pull requests")
@click.option(
    "--pull-request-description", default=None, help="Description of opened pull requests"
)
@click.option("--draft", is_flag=True, help="Open pull requests as drafts")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Run the command and commit locally, but do not push or open pull requests",
)
@click.option(
    "--skip-pull-requests",
    is_flag=True,
    help="Push commits straight to the branch without opening pull requests",
)
@click.option(
    "--skip-archived-repos",
    is_flag=True,
    help="Leave archived repositories out of organization and search selections",
)
@click.option(
    "--max-concurrent-repos",
    type=click.IntRange(min=0),
    default=None,
    help="Repositories processed at once (default: 0, all of them)",
)
@click.option(
    "--max-concurrent-clones",
    type=click.IntRange(min=0),
    default=None,
    help="Clones allowed at once, 0 for no limit (default: 4)",
)
@click.option(
    "--seconds-between-prs",
    type=float,
    default=None,
    help="Minimum seconds between pull request attempts (default: 1)",
)
@click.option(
    "--max-pr-retries",
    type=click.IntRange(min=0),
    default=None,
    help="Rate limited pull request retries before giving up (default: 3)",
)
@click.option(
    "--seconds-to-wait-when-rate-limited",
    type=float,
    default=None,
    help="Seconds to wait when a rate limit gives no reset time (default: 60)",
)
@click.option("--reviewers", default=None, help="Comma separated users to request reviews from")
@click.option(
    "--team-reviewers", default=None, help="Comma separated teams to request reviews from"
)
@click.option("--assignees", default=None, help="Comma separated users to assign")
@click.option("--no-progress", is_flag=True, help="Do not show a progress bar")
def main(
    command: tuple[str, ...],
    loglevel: str | None,
    log_dir: Path | None,
    config_path: Path | None,
    github_org: str | None,
    github_search_query: str | None,
    repos_file: str | None,
    repos: tuple[str, ...],
    branch_name: str | None,
    base_branch_name: str | None,
    commit_message: str | None,
    pull_request_title: str | None,
    pull_request_description: str | None,
    draft: bool,
    dry_run: bool,
    skip_pull_requests: bool,
    skip_archived_repos: bool,
    max_concurrent_repos: int | None,
    max_concurrent_clones: int | None,
    seconds_between_prs: float | None,
    max_pr_retries: int | None,
    seconds_to_wait_when_rate_limited: float | None,
    reviewers: str | None,
    team_reviewers: str | None,
    assignees: str | None,
    no_progress: bool,
) -> None:
    """Run COMMAND in every selected repository and open pull requests with the result.

    COMMAND runs from the root of each clone with these variables set in its
    environment:

    \b
      GITFLEET_REPO_OWNER  owner (organization or user) of the repository
      GITFLEET_REPO_NAME   name of the repository
      GITFLEET_DRY_RUN     "true" when --dry-run is set, otherwise "false"

    \b
    Examples:
      gitfleet --github-org acme -b bump-go -m "Bump Go" ./bump-go.sh
      echo "acme/api acme/web" | gitfleet -b fix-readme -- sed -i s/foo/bar/ README.md
    """
    setup_logging(log_dir=log_dir, level=loglevel)

    overrides: dict[str, Any] = {
        "github_org": github_org,
        "github_search_query": github_search_query,
        "repos_file": repos_file,
        "repos": list(repos) or None,
        "branch_name": branch_name,
        "base_branch_name": base_branch_name,
        "commit_message": commit_message,
        "pull_request_title": pull_request_title,
        "pull_request_description": pull_request_description,
        # Flags can switch a setting on, never off
        "draft": draft or None,
        "dry_run": dry_run or None,
        "skip_pull_requests": skip_pull_requests or None,
        "skip_archived_repos": skip_archived_repos or None,
        "max_concurrent_repos": max_concurrent_repos,
        "max_concurrent_clones": max_concurrent_clones,
        "seconds_between_prs": seconds_between_prs,
        "max_pr_retries": max_pr_retries,
        "seconds_to_wait_when_rate_limited": seconds_to_wait_when_rate_limited,
        "reviewers": split_csv(reviewers) if reviewers is not None else None,
        "team_reviewers": split_csv(team_reviewers) if team_reviewers is not None else None,
        "assignees": split_csv(assignees) if assignees is not None else None,
        "command": list(command) or None,
    }

    try:
        config = build_config(config_path, overrides)
        if not config.has_repo_selection:
            config.repos_from_stdin = read_stdin_repos()
        report = run_fleet(config, show_progress=not no_progress)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except SelectionError as e:
        click.echo(f"Repository selection error: {e}", err=True)
        sys.exit(1)
    except GitHubError as e:
        click.echo(f"GitHub API error: {e}", err=True)
        sys.exit(1)
    except httpx.HTTPError as e:
        click.echo(f"Could not reach the GitHub API: {e}", err=True)
        sys.exit(1)

    render_report(report)


if __name__ == "__main__":
    main()
