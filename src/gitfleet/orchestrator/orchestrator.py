"""FleetOrchestrator - Runs the repository pipeline across the whole fleet."""

from __future__ import annotations

import contextlib
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Any

from tqdm import tqdm

from gitfleet.github.models import Repository
from gitfleet.pipeline import PipelineResult, RepoPipeline
from gitfleet.tracker import OutcomeEvent

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from gitfleet.config import RunConfig
    from gitfleet.dispatch import PullRequestDispatcher
    from gitfleet.git_manager import GitManager
    from gitfleet.pipeline import CommandRunner
    from gitfleet.tracker import OutcomeTracker

logger = logging.getLogger("gitfleet.orchestrator")


def clone_limiter(max_concurrent_clones: int) -> AbstractContextManager[Any]:
    """A semaphore admitting ``max_concurrent_clones`` clones at once (0 = unbounded)."""
    if max_concurrent_clones > 0:
        return threading.BoundedSemaphore(max_concurrent_clones)
    return contextlib.nullcontext()


class FleetOrchestrator:
    """Fans the repository pipeline out over a thread pool.

    One task is submitted per repository. Tasks are independent: an error in
    one repository, even an unexpected exception, is converted into a failed
    PipelineResult for that repository only. ``process_repos`` returns once
    every task has finished, so the tracker is complete when it returns.
    """

    def __init__(
        self,
        config: RunConfig,
        tracker: OutcomeTracker,
        dispatcher: PullRequestDispatcher,
        token: str = "",
        git_manager: GitManager | None = None,
        command_runner: CommandRunner | None = None,
        show_progress: bool = True,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Run configuration.
            tracker: Outcome tracker shared by the run.
            dispatcher: Pull request dispatcher shared by the run.
            token: GitHub token for authenticated clones and pushes.
            git_manager: Clones repositories (injectable for tests).
            command_runner: Runs the user's command (injectable for tests).
            show_progress: Whether to show a tqdm progress bar.
        """
        self.config = config
        self.tracker = tracker
        self.show_progress = show_progress
        self.clone_permits = clone_limiter(config.max_concurrent_clones)
        self.pipeline = RepoPipeline(
            config=config,
            tracker=tracker,
            dispatcher=dispatcher,
            git_manager=git_manager,
            command_runner=command_runner,
            clone_limiter=self.clone_permits,
            token=token,
            logger=logging.getLogger("gitfleet.pipeline"),
        )

    def process_repos(self, repos: list[Repository]) -> list[PipelineResult]:
        """Process every repository and wait for all of them.

        Args:
            repos: Repositories to process.

        Returns:
            One PipelineResult per repository, in completion order.
        """
        if not repos:
            return []

        num_workers = self.config.max_concurrent_repos or len(repos)
        logger.info(
            "Processing %d repositories with %d workers", len(repos), min(num_workers, len(repos))
        )

        results: list[PipelineResult] = []
        with ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix="gitfleet") as executor:
            future_to_repo: dict[Future[PipelineResult], Repository] = {
                executor.submit(self.pipeline.process, repo): repo for repo in repos
            }

            with tqdm(
                total=len(repos),
                desc="Repos",
                unit="repo",
                disable=not self.show_progress or len(repos) <= 1,
            ) as pbar:
                for future in as_completed(future_to_repo):
                    repo = future_to_repo[future]
                    try:
                        results.append(future.result())
                    except Exception as e:
                        logger.exception("Unexpected error processing %s: %s", repo.full_name, e)
                        self.tracker.track_single(OutcomeEvent.REPO_PROCESSING_CRASHED, repo)
                        results.append(PipelineResult(repo=repo, error=str(e)))
                    finally:
                        pbar.update(1)
                        pbar.set_postfix(last=repo.name[:20])

        return results
