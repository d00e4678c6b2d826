"""Exceptions for the repository pipeline."""

from __future__ import annotations

from gitfleet.pipeline.models import PipelineStage
from gitfleet.tracker import OutcomeEvent


class PipelineError(Exception):
    """Base exception for pipeline errors."""


class CommandError(PipelineError):
    """The user's command could not be started or exited non-zero.

    Attributes:
        returncode: Exit status, or None if the command never started.
        output: Combined stdout and stderr captured so far.
    """

    def __init__(self, message: str, returncode: int | None = None, output: str = "") -> None:
        self.returncode = returncode
        self.output = output
        super().__init__(message)


class StageError(PipelineError):
    """A pipeline stage failed; the repository is not processed further.

    Attributes:
        stage: The failing stage.
        event: Outcome event recorded for the repository.
    """

    stage: PipelineStage = PipelineStage.CLONE

    def __init__(self, message: str, event: OutcomeEvent) -> None:
        self.event = event
        super().__init__(message)


class CloneStageError(StageError):
    stage = PipelineStage.CLONE


class HeadRefStageError(StageError):
    stage = PipelineStage.HEAD_REF


class BranchStageError(StageError):
    stage = PipelineStage.BRANCH


class CommandStageError(StageError):
    stage = PipelineStage.COMMAND


class WorktreeStageError(StageError):
    stage = PipelineStage.WORKTREE


class CommitStageError(StageError):
    stage = PipelineStage.COMMIT


class PushStageError(StageError):
    stage = PipelineStage.PUSH
