"""Pipeline - Per-repository mutation stages."""

from gitfleet.pipeline.command import CommandRunner, command_environment
from gitfleet.pipeline.exceptions import (
    BranchStageError,
    CloneStageError,
    CommandError,
    CommandStageError,
    CommitStageError,
    HeadRefStageError,
    PipelineError,
    PushStageError,
    StageError,
    WorktreeStageError,
)
from gitfleet.pipeline.models import CommandResult, PipelineResult, PipelineStage
from gitfleet.pipeline.pipeline import RepoPipeline

__all__ = [
    "BranchStageError",
    "CloneStageError",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "CommandStageError",
    "CommitStageError",
    "HeadRefStageError",
    "PipelineError",
    "PipelineResult",
    "PipelineStage",
    "PushStageError",
    "RepoPipeline",
    "StageError",
    "WorktreeStageError",
    "command_environment",
]
