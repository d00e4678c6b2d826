"""Data models for the repository pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from gitfleet.dispatch.models import DispatchOutcome
from gitfleet.github.models import Repository


class PipelineStage(str, Enum):
    """Stages of the per-repository pipeline, in order."""

    CLONE = "clone"
    HEAD_REF = "head-ref"
    BRANCH = "branch"
    COMMAND = "command"
    WORKTREE = "worktree"
    COMMIT = "commit"
    PUSH = "push"
    PULL_REQUEST = "pull-request"
    DONE = "done"


@dataclass
class CommandResult:
    """Result of running the user's command in a repository.

    Attributes:
        returncode: Exit status of the command.
        output: Combined stdout and stderr.
    """

    returncode: int
    output: str


@dataclass
class PipelineResult:
    """Where one repository's pipeline ended.

    Attributes:
        repo: The repository processed.
        stage: The last stage entered (DONE when the pipeline ran to its end).
        failed_stage: The stage that failed, if any.
        error: Description of the failure, if any.
        dispatch_outcome: Outcome of the pull request dispatch, if one ran.
        workdir: Local clone directory, if the clone stage got that far.
    """

    repo: Repository
    stage: PipelineStage = PipelineStage.CLONE
    failed_stage: PipelineStage | None = None
    error: str | None = None
    dispatch_outcome: DispatchOutcome | None = None
    workdir: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failed_stage is None and self.error is None
