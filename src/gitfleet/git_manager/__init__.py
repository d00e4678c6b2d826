"""Git Manager - Local git operations on cloned repositories."""

from gitfleet.git_manager.exceptions import (
    BranchAlreadyExistsError,
    CheckoutError,
    CloneError,
    CommitError,
    GitManagerError,
    HeadRefError,
    PullError,
    PushError,
    RemoteBranchNotFoundError,
    StageError,
    StatusError,
)
from gitfleet.git_manager.manager import (
    GitManager,
    LocalRepository,
    authenticated_url,
    parse_porcelain_status,
)
from gitfleet.git_manager.models import PullOutcome, StatusEntry, WorktreeStatus

__all__ = [
    "BranchAlreadyExistsError",
    "CheckoutError",
    "CloneError",
    "CommitError",
    "GitManager",
    "GitManagerError",
    "HeadRefError",
    "LocalRepository",
    "PullError",
    "PullOutcome",
    "PushError",
    "RemoteBranchNotFoundError",
    "StageError",
    "StatusEntry",
    "StatusError",
    "WorktreeStatus",
    "authenticated_url",
    "parse_porcelain_status",
]
