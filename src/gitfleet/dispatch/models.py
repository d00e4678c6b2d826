"""Data models for pull request dispatch."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from gitfleet.github.models import Repository


class DispatchOutcome(str, Enum):
    """How a pull request dispatch ended for one repository."""

    OPENED = "opened"
    ALREADY_EXISTS = "already-exists"
    SKIPPED = "skipped"
    FAILED = "failed"
    RETRIES_EXHAUSTED = "retries-exhausted"


@dataclass(frozen=True)
class PendingReviewRequest:
    """One attempt to open a pull request.

    Attributes:
        repo: Repository the branch was pushed to.
        branch: Source branch of the pull request.
        retries: Rate-limited attempts made so far.
        delay: Seconds to sleep before this attempt, after the pacing wait.
    """

    repo: Repository
    branch: str
    retries: int = 0
    delay: float = 0.0

    def next_attempt(self, delay: float) -> PendingReviewRequest:
        """The follow-up attempt after a rate limit, with one more retry counted."""
        return replace(self, retries=self.retries + 1, delay=delay)
