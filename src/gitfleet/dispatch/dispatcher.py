"""PullRequestDispatcher - Paces and retries pull request creation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx

from gitfleet.dispatch.models import DispatchOutcome, PendingReviewRequest
from gitfleet.dispatch.ticker import PacingTicker
from gitfleet.github.exceptions import AbuseRateLimitError, GitHubError, RateLimitError
from gitfleet.github.models import NewPullRequest, PullRequest
from gitfleet.tracker import OutcomeEvent, OutcomeTracker

if TYPE_CHECKING:
    from gitfleet.config import RunConfig
    from gitfleet.github.client import GitHubAPI

DRAFT_UNSUPPORTED_MARKER = "Draft pull requests are not supported"


class PullRequestDispatcher:
    """Opens pull requests for pushed branches.

    Every attempt first waits on the shared pacing ticker, then sleeps the
    attempt's own delay. Rate limited attempts are retried with a fresh
    PendingReviewRequest until the retry counter exceeds ``max_pr_retries``.
    Any other API failure is terminal for the repository, and so is a
    transport error such as a dropped connection.
    """

    def __init__(
        self,
        client: GitHubAPI,
        config: RunConfig,
        tracker: OutcomeTracker,
        ticker: PacingTicker,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        """Initialize the dispatcher.

        Args:
            client: GitHub API client (real or fake).
            config: Run configuration.
            tracker: Outcome tracker shared by the run.
            ticker: Pacing ticker shared by the run.
            logger: Logger to report to. Defaults to ``gitfleet.dispatch``.
            sleep: Sleep function (injectable for tests).
            now: Current-time function returning an aware datetime.
        """
        self.client = client
        self.config = config
        self.tracker = tracker
        self.ticker = ticker
        self.logger = logger or logging.getLogger("gitfleet.dispatch")
        self._sleep = sleep
        self._now = now

    def dispatch(self, request: PendingReviewRequest) -> DispatchOutcome:
        """Drive one pull request to a final outcome.

        Args:
            request: The first attempt (normally ``retries=0, delay=0``).

        Returns:
            The final DispatchOutcome for the repository.
        """
        while True:
            repo = request.repo
            if request.retries > self.config.max_pr_retries:
                self.logger.debug(
                    "Pull request for %s failed after %d retries, giving up",
                    repo.full_name,
                    self.config.max_pr_retries,
                )
                self.tracker.track_single(OutcomeEvent.PR_FAILED_AFTER_MAXIMUM_RETRIES, repo)
                return DispatchOutcome.RETRIES_EXHAUSTED

            if self.config.dry_run or self.config.skip_pull_requests:
                self.logger.debug(
                    "Dry run or skip pull requests set, not opening a pull request for %s",
                    repo.full_name,
                )
                return DispatchOutcome.SKIPPED

            self.ticker.wait()
            if request.delay > 0:
                self.logger.debug(
                    "Sleeping %.1fs before pull request attempt %d for %s",
                    request.delay,
                    request.retries + 1,
                    repo.full_name,
                )
                self._sleep(request.delay)

            outcome, retry_delay = self._attempt(request)
            if outcome is not None:
                return outcome
            request = request.next_attempt(retry_delay)

    def _attempt(self, request: PendingReviewRequest) -> tuple[DispatchOutcome | None, float]:
        """Make one attempt. Returns (outcome, 0) when done or (None, delay) to retry."""
        repo = request.repo
        base = self.config.base_branch_name or repo.default_branch
        head = f"{repo.owner}:{request.branch}"

        try:
            existing = self.client.pull_requests.list(repo.owner, repo.name, head=head, base=base)
        except (GitHubError, httpx.HTTPError) as e:
            self.logger.debug("Error listing pull requests for %s: %s", repo.full_name, e)
            self.tracker.track_single(OutcomeEvent.PULL_REQUEST_OPEN_ERROR, repo)
            return DispatchOutcome.FAILED, 0.0

        if existing:
            self.logger.debug(
                "Pull request already exists for %s (%s), skipping", repo.full_name, head
            )
            self.tracker.track_single(OutcomeEvent.PULL_REQUEST_ALREADY_EXISTS, repo)
            return DispatchOutcome.ALREADY_EXISTS, 0.0

        new_pull = NewPullRequest(
            title=self.config.resolved_pull_request_title,
            head=request.branch,
            base=base,
            body=self.config.resolved_pull_request_description,
            draft=self.config.draft,
            maintainer_can_modify=True,
        )

        try:
            pull = self.client.pull_requests.create(repo.owner, repo.name, new_pull)
        except (RateLimitError, AbuseRateLimitError) as e:
            delay = self._rate_limit_delay(e)
            self.logger.debug(
                "Pull request for %s was rate limited, retrying in %.1fs: %s",
                repo.full_name,
                delay,
                e,
            )
            self.tracker.track_single(OutcomeEvent.PR_FAILED_DUE_TO_RATE_LIMITS, repo)
            return None, delay
        except GitHubError as e:
            self._track_open_error(request, e)
            return DispatchOutcome.FAILED, 0.0
        except httpx.HTTPError as e:
            self.logger.debug("Error reaching GitHub for %s: %s", repo.full_name, e)
            self.tracker.track_single(OutcomeEvent.PULL_REQUEST_OPEN_ERROR, repo)
            return DispatchOutcome.FAILED, 0.0

        self._request_reviewers(request, pull)
        self._add_assignees(request, pull)

        if self.config.draft:
            self.tracker.track_draft_pull_request(repo.name, pull.html_url)
        else:
            self.tracker.track_pull_request(repo.name, pull.html_url)
        self.tracker.track_single(OutcomeEvent.PULL_REQUEST_OPENED, repo)
        self.logger.debug("Opened pull request for %s: %s", repo.full_name, pull.html_url)
        return DispatchOutcome.OPENED, 0.0

    def _rate_limit_delay(self, error: RateLimitError | AbuseRateLimitError) -> float:
        delay = 0.0
        if isinstance(error, RateLimitError):
            delay = max(0.0, (error.rate.reset - self._now()).total_seconds())
        elif error.retry_after and error.retry_after > 0:
            delay = error.retry_after
        if delay <= 0:
            delay = float(self.config.seconds_to_wait_when_rate_limited)
        return delay

    def _track_open_error(self, request: PendingReviewRequest, error: GitHubError) -> None:
        repo = request.repo
        if error.status_code == 422:
            if DRAFT_UNSUPPORTED_MARKER in str(error):
                self.logger.debug("%s does not support draft pull requests", repo.full_name)
                self.tracker.track_single(OutcomeEvent.DRAFT_PULL_REQUESTS_UNSUPPORTED, repo)
            if error.has_field_error("base", "invalid"):
                self.logger.debug(
                    "Base branch %s is invalid for %s",
                    self.config.base_branch_name or repo.default_branch,
                    repo.full_name,
                )
                self.tracker.track_single(OutcomeEvent.BASE_BRANCH_TARGET_INVALID, repo)
        self.logger.debug("Error opening pull request for %s: %s", repo.full_name, error)
        self.tracker.track_single(OutcomeEvent.PULL_REQUEST_OPEN_ERROR, repo)

    def _request_reviewers(self, request: PendingReviewRequest, pull: PullRequest) -> None:
        if not (self.config.reviewers or self.config.team_reviewers):
            return
        repo = request.repo
        try:
            self.client.pull_requests.request_reviewers(
                repo.owner,
                repo.name,
                pull.number,
                list(self.config.reviewers),
                list(self.config.team_reviewers),
            )
        except (GitHubError, httpx.HTTPError) as e:
            self.logger.debug("Error requesting reviewers for %s: %s", pull.html_url, e)
            self.tracker.track_single(OutcomeEvent.REQUEST_REVIEWERS_ERROR, repo)

    def _add_assignees(self, request: PendingReviewRequest, pull: PullRequest) -> None:
        if not self.config.assignees:
            return
        repo = request.repo
        try:
            self.client.issues.add_assignees(
                repo.owner, repo.name, pull.number, list(self.config.assignees)
            )
        except (GitHubError, httpx.HTTPError) as e:
            self.logger.debug("Error adding assignees to %s: %s", pull.html_url, e)
            self.tracker.track_single(OutcomeEvent.ADD_ASSIGNEES_ERROR, repo)
