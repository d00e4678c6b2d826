"""Tracker - Outcome events recorded per repository and the run report."""

from gitfleet.tracker.models import EVENT_DESCRIPTIONS, OutcomeEvent, RunReport
from gitfleet.tracker.tracker import OutcomeTracker

__all__ = [
    "EVENT_DESCRIPTIONS",
    "OutcomeEvent",
    "OutcomeTracker",
    "RunReport",
]
