"""Dispatch - Paced, rate-limit aware pull request creation."""

from gitfleet.dispatch.dispatcher import PullRequestDispatcher
from gitfleet.dispatch.models import DispatchOutcome, PendingReviewRequest
from gitfleet.dispatch.ticker import PacingTicker

__all__ = [
    "DispatchOutcome",
    "PacingTicker",
    "PendingReviewRequest",
    "PullRequestDispatcher",
]
