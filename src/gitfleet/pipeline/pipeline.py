"""RepoPipeline - Clone, branch, run, commit, push and open a pull request for one repository."""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from typing import TYPE_CHECKING, Any

from gitfleet.dispatch import PendingReviewRequest, PullRequestDispatcher
from gitfleet.git_manager import (
    BranchAlreadyExistsError,
    GitManager,
    GitManagerError,
    LocalRepository,
    PullOutcome,
    RemoteBranchNotFoundError,
)
from gitfleet.github.models import Repository
from gitfleet.logging import sanitize_for_log, truncate_output
from gitfleet.pipeline.command import CommandRunner, command_environment
from gitfleet.pipeline.exceptions import (
    BranchStageError,
    CloneStageError,
    CommandError,
    CommandStageError,
    CommitStageError,
    HeadRefStageError,
    PushStageError,
    StageError,
    WorktreeStageError,
)
from gitfleet.pipeline.models import PipelineResult, PipelineStage
from gitfleet.tracker import OutcomeEvent, OutcomeTracker

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from gitfleet.config import RunConfig


class RepoPipeline:
    """Drives one repository through the mutation stages.

    Stages run strictly in order. Each records its outcome event with the
    tracker; the first failing stage stops the repository and is reported in
    the returned PipelineResult instead of being raised. Pull request creation
    is handed to the dispatcher so pacing and retries stay in one place.
    """

    def __init__(
        self,
        config: RunConfig,
        tracker: OutcomeTracker,
        dispatcher: PullRequestDispatcher,
        git_manager: GitManager | None = None,
        command_runner: CommandRunner | None = None,
        clone_limiter: AbstractContextManager[Any] | None = None,
        token: str = "",
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Run configuration.
            tracker: Outcome tracker shared by the run.
            dispatcher: Pull request dispatcher shared by the run.
            git_manager: Clones repositories. Defaults to a new GitManager.
            command_runner: Runs the user's command. Defaults to a new CommandRunner.
            clone_limiter: Context manager held around each clone (a semaphore
                           bounding concurrent clones). Defaults to no limit.
            token: GitHub token used to authenticate https clones and pushes.
            logger: Logger to report to. Defaults to ``gitfleet.pipeline``.
        """
        self.config = config
        self.tracker = tracker
        self.dispatcher = dispatcher
        self.git_manager = git_manager or GitManager()
        self.command_runner = command_runner or CommandRunner()
        self.clone_limiter = clone_limiter or contextlib.nullcontext()
        self.token = token
        self.logger = logger or logging.getLogger("gitfleet.pipeline")

    def process(self, repo: Repository) -> PipelineResult:
        """Run every stage for ``repo``.

        Args:
            repo: The repository to process.

        Returns:
            PipelineResult describing where the repository ended up.
        """
        result = PipelineResult(repo=repo)
        try:
            self._run_stages(repo, result)
        except StageError as e:
            self.tracker.track_single(e.event, repo)
            result.failed_stage = e.stage
            result.error = str(e)
            self.logger.debug(
                "Stopped processing %s at stage %s: %s", repo.full_name, e.stage.value, e
            )
            return result

        result.stage = PipelineStage.DONE
        self.logger.info("Repository %s successfully processed", repo.full_name)
        return result

    def _run_stages(self, repo: Repository, result: PipelineResult) -> None:
        result.stage = PipelineStage.CLONE
        local = self._clone(repo)
        result.workdir = str(local.path)

        result.stage = PipelineStage.HEAD_REF
        head = self._head(repo, local)

        result.stage = PipelineStage.BRANCH
        self._checkout_branch(repo, local, head)

        result.stage = PipelineStage.COMMAND
        self._run_command(repo, local)

        result.stage = PipelineStage.WORKTREE
        untracked = self._check_worktree(repo, local)
        if untracked is None:
            return

        result.stage = PipelineStage.COMMIT
        self._commit(repo, local, untracked)

        result.stage = PipelineStage.PUSH
        if not self._push(repo, local):
            return

        result.stage = PipelineStage.PULL_REQUEST
        result.dispatch_outcome = self.dispatcher.dispatch(
            PendingReviewRequest(repo=repo, branch=self.config.branch_name)
        )

    def _clone(self, repo: Repository) -> LocalRepository:
        url = repo.clone_url or (f"{repo.html_url}.git" if repo.html_url else "")
        if not url:
            raise CloneStageError(
                f"No clone URL for {repo.full_name}", OutcomeEvent.REPO_CLONE_FAILED
            )

        try:
            if self.config.workspace_dir:
                os.makedirs(self.config.workspace_dir, exist_ok=True)
            workdir = tempfile.mkdtemp(
                prefix=f"gitfleet-{repo.name}-", dir=self.config.workspace_dir or None
            )
        except OSError as e:
            raise CloneStageError(
                f"Failed to create a directory for {repo.full_name}: {e}",
                OutcomeEvent.REPO_CLONE_FAILED,
            ) from e

        self.logger.debug("Cloning %s into %s", repo.full_name, workdir)
        try:
            with self.clone_limiter:
                local = self.git_manager.clone(url, workdir, username=repo.owner, token=self.token)
        except GitManagerError as e:
            raise CloneStageError(str(e), OutcomeEvent.REPO_CLONE_FAILED) from e

        self.tracker.track_single(OutcomeEvent.REPO_CLONED, repo)
        return local

    def _head(self, repo: Repository, local: LocalRepository) -> str:
        try:
            return local.head()
        except GitManagerError as e:
            raise HeadRefStageError(str(e), OutcomeEvent.GET_HEAD_REF_FAILED) from e

    def _checkout_branch(self, repo: Repository, local: LocalRepository, head: str) -> None:
        branch = self.config.branch_name
        try:
            local.checkout_branch(branch, head)
        except BranchAlreadyExistsError as e:
            # Direct commits to the default branch reuse the branch the clone checked out
            if not (self.config.skip_pull_requests and branch == repo.default_branch):
                raise BranchStageError(str(e), OutcomeEvent.BRANCH_CHECKOUT_FAILED) from e
        except GitManagerError as e:
            raise BranchStageError(str(e), OutcomeEvent.BRANCH_CHECKOUT_FAILED) from e

        try:
            outcome = local.pull(branch)
        except RemoteBranchNotFoundError:
            self.logger.debug("Branch %s does not exist on %s yet", branch, repo.full_name)
            self.tracker.track_single(OutcomeEvent.BRANCH_REMOTE_DIDNT_EXIST_YET, repo)
            return
        except GitManagerError as e:
            raise BranchStageError(str(e), OutcomeEvent.BRANCH_REMOTE_PULL_FAILED) from e

        if outcome is PullOutcome.ALREADY_UP_TO_DATE:
            self.logger.debug("Branch %s of %s already up to date", branch, repo.full_name)

    def _run_command(self, repo: Repository, local: LocalRepository) -> None:
        env = command_environment(repo, self.config.dry_run)
        self.logger.debug("Running %s in %s", self.config.command, local.path)
        try:
            result = self.command_runner.run(self.config.command, local.path, env)
        except CommandError as e:
            self.logger.debug(
                "Command failed for %s: %s\n%s",
                repo.full_name,
                e,
                sanitize_for_log(truncate_output(e.output)),
            )
            raise CommandStageError(str(e), OutcomeEvent.COMMAND_ERROR) from e

        self.logger.debug(
            "Command output for %s:\n%s",
            repo.full_name,
            sanitize_for_log(truncate_output(result.output)),
        )

    def _check_worktree(self, repo: Repository, local: LocalRepository) -> list[str] | None:
        """Record the worktree state. Returns the untracked paths, or None when clean."""
        try:
            status = local.status()
        except GitManagerError as e:
            raise WorktreeStageError(str(e), OutcomeEvent.WORKTREE_STATUS_CHECK_FAILED) from e

        if status.is_clean:
            self.logger.debug("Worktree of %s is clean, nothing to commit", repo.full_name)
            self.tracker.track_single(OutcomeEvent.WORKTREE_STATUS_CLEAN, repo)
            return None

        self.logger.debug("Worktree of %s changed:\n%s", repo.full_name, status)
        self.tracker.track_single(OutcomeEvent.WORKTREE_STATUS_DIRTY, repo)
        return status.untracked_paths

    def _commit(self, repo: Repository, local: LocalRepository, untracked: list[str]) -> None:
        for path in untracked:
            try:
                local.add(path)
            except GitManagerError as e:
                raise CommitStageError(str(e), OutcomeEvent.WORKTREE_ADD_FILE_FAILED) from e

        try:
            sha = local.commit(self.config.commit_message)
        except GitManagerError as e:
            raise CommitStageError(str(e), OutcomeEvent.COMMIT_CHANGES_FAILED) from e

        self.logger.debug("Committed %s to %s", sha, repo.full_name)
        if self.config.skip_pull_requests:
            self.tracker.track_single(OutcomeEvent.COMMITS_MADE_DIRECTLY_TO_BRANCH, repo)

    def _push(self, repo: Repository, local: LocalRepository) -> bool:
        """Push the branch. Returns whether a pull request should follow."""
        if self.config.dry_run:
            self.logger.debug("Dry run set, not pushing %s", repo.full_name)
            self.tracker.track_single(OutcomeEvent.PUSH_BRANCH_SKIPPED, repo)
            return False

        try:
            local.push(self.config.branch_name)
        except GitManagerError as e:
            raise PushStageError(str(e), OutcomeEvent.PUSH_BRANCH_FAILED) from e

        self.logger.debug("Pushed %s to %s", self.config.branch_name, repo.full_name)
        if self.config.skip_pull_requests:
            self.tracker.track_single(OutcomeEvent.DIRECT_COMMITS_PUSHED, repo)
            return False
        return True
