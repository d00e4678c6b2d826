"""Runner - Wires one gitfleet run together."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from gitfleet.config import HOSTNAME_ENV_VAR, TOKEN_ENV_VAR, RunConfig, validate_config
from gitfleet.dispatch import PacingTicker, PullRequestDispatcher
from gitfleet.github import GitHubClient, base_url_for_hostname
from gitfleet.orchestrator import FleetOrchestrator
from gitfleet.selection import fetch_repos
from gitfleet.tracker import OutcomeTracker, RunReport

if TYPE_CHECKING:
    from gitfleet.git_manager import GitManager
    from gitfleet.github.client import GitHubAPI
    from gitfleet.pipeline import CommandRunner

logger = logging.getLogger("gitfleet.runner")


def run_fleet(
    config: RunConfig,
    client: GitHubAPI | None = None,
    environ: Mapping[str, str] | None = None,
    git_manager: GitManager | None = None,
    command_runner: CommandRunner | None = None,
    show_progress: bool = True,
    sleep: Callable[[float], None] = time.sleep,
) -> RunReport:
    """Run the command across every selected repository.

    Args:
        config: Run configuration.
        client: GitHub API client. Built from the environment when omitted.
        environ: Environment holding the token and hostname. Defaults to os.environ.
        git_manager: Clones repositories (injectable for tests).
        command_runner: Runs the command (injectable for tests).
        show_progress: Whether to show a progress bar.
        sleep: Sleep function for PR pacing and rate limit backoff.

    Returns:
        The report of the finished run.

    Raises:
        ValidationError: If the configuration fails the pre-run checks.
        SelectionError: If no usable repositories were selected.
        GitHubError: If selecting repositories failed at the API.
    """
    if environ is None:
        environ = os.environ
    validate_config(config, environ)
    token = environ.get(TOKEN_ENV_VAR, "")

    owns_client = client is None
    if client is None:
        hostname = config.github_hostname or environ.get(HOSTNAME_ENV_VAR, "")
        client = GitHubClient(
            token=token,
            base_url=base_url_for_hostname(hostname),
            write_delay=config.write_delay_seconds,
        )

    tracker = OutcomeTracker()
    tracker.set_command(config.command)
    tracker.set_skip_pull_requests(config.skip_pull_requests)

    try:
        repos = fetch_repos(client, config, tracker)
        logger.info("Selected %d repositories", len(repos))

        dispatcher = PullRequestDispatcher(
            client=client,
            config=config,
            tracker=tracker,
            ticker=PacingTicker(config.seconds_between_prs, sleep=sleep),
            logger=logging.getLogger("gitfleet.dispatch"),
            sleep=sleep,
        )
        orchestrator = FleetOrchestrator(
            config=config,
            tracker=tracker,
            dispatcher=dispatcher,
            token=token,
            git_manager=git_manager,
            command_runner=command_runner,
            show_progress=show_progress,
        )
        orchestrator.process_repos(repos)
    finally:
        if owns_client and isinstance(client, GitHubClient):
            client.close()

    return tracker.generate_run_report()
