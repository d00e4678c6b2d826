"""RateLimitTransport - a well-behaved httpx transport for the GitHub API.

Every request made through the client passes through here. Requests are made
one at a time, writes are spaced out, and responses that signal an abuse,
primary or secondary rate limit are waited out and retried, so callers only
ever see a response that was not rate limited.
"""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime

import httpx

from gitfleet.github.exceptions import AbuseRateLimitError, RateLimitError
from gitfleet.github.responses import (
    SECONDARY_RATE_LIMIT_MARKER,
    check_response,
    parse_retry_after,
)
from gitfleet.logging import get_logger

logger = get_logger("github.transport")

DEFAULT_WRITE_DELAY = 2.0
MIN_SECONDARY_SLEEP_SECONDS = 3
MAX_SECONDARY_SLEEP_SECONDS = 10

WRITE_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})


def is_write_method(method: str) -> bool:
    """Whether the HTTP method creates, updates or deletes a resource."""
    return method.upper() in WRITE_METHODS


class RateLimitTransport(httpx.BaseTransport):
    """Serializing, rate-limit absorbing wrapper around another transport.

    A single lock is held for the full request/response/retry cycle, so the
    "previous request was a write" flag is shared by the whole process and the
    response body can be drained and read twice without racing other threads.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        write_delay: float = DEFAULT_WRITE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            transport: Transport that actually performs requests.
                       Defaults to a new httpx.HTTPTransport.
            write_delay: Seconds to wait before any request that follows a write.
            sleep: Sleep function (injectable for tests).
            now: Current-time function returning an aware datetime.
            rng: Random source for secondary rate limit backoff.
        """
        self._transport = transport or httpx.HTTPTransport()
        self.write_delay = write_delay
        self._sleep = sleep
        self._now = now
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._delay_next_request = False

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        logger.debug("Acquiring lock for GitHub API request %s %s", request.method, request.url)
        with self._lock:
            attempt = 0
            while True:
                attempt += 1
                if self._delay_next_request:
                    logger.debug("Sleeping %.1fs between write operations", self.write_delay)
                    self._sleep(self.write_delay)

                self._delay_next_request = is_write_method(request.method)

                response = self._transport.handle_request(request)
                inspected, returned = _drain(response, request)

                wait = self._rate_limit_wait(inspected)
                if wait is None:
                    logger.debug(
                        "GitHub API request %s %s -> %d (attempt %d)",
                        request.method,
                        request.url,
                        returned.status_code,
                        attempt,
                    )
                    return returned

                self._sleep(wait)

    def _rate_limit_wait(self, response: httpx.Response) -> float | None:
        """Seconds to wait before retrying, or None when not rate limited."""
        error = check_response(response)
        if error is None:
            return None

        if isinstance(error, AbuseRateLimitError) and error.retry_after is not None:
            self._delay_next_request = False
            logger.debug(
                "Abuse detection mechanism triggered, sleeping for %.1fs before retrying",
                error.retry_after,
            )
            return error.retry_after

        if isinstance(error, RateLimitError):
            self._delay_next_request = False
            wait = max(0.0, (error.rate.reset - self._now()).total_seconds())
            logger.debug(
                "Rate limit %d reached, sleeping for %.1fs (until %s) before retrying",
                error.rate.limit,
                wait,
                error.rate.reset.isoformat(),
            )
            return wait

        if SECONDARY_RATE_LIMIT_MARKER in error.documentation_url:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is not None:
                logger.debug(
                    "Secondary rate limit hit, sleeping %.1fs from Retry-After", retry_after
                )
                return retry_after
            # GitHub often omits Retry-After for secondary limits
            duration = self._rng.randrange(MIN_SECONDARY_SLEEP_SECONDS, MAX_SECONDARY_SLEEP_SECONDS)
            logger.debug("Secondary rate limit hit, sleeping %ds before retrying", duration)
            return float(duration)

        return None

    def close(self) -> None:
        self._transport.close()


_BODY_HEADERS = frozenset({"content-encoding", "content-length", "transfer-encoding"})


def _drain(
    response: httpx.Response, request: httpx.Request
) -> tuple[httpx.Response, httpx.Response]:
    """Read a response body once and return two equivalent, fully loaded responses."""
    try:
        body = response.read()
    finally:
        response.close()

    # The body is already decoded, so encoding/length headers no longer describe it
    headers = [
        (key, value)
        for key, value in response.headers.multi_items()
        if key.lower() not in _BODY_HEADERS
    ]

    def _copy() -> httpx.Response:
        return httpx.Response(
            status_code=response.status_code,
            headers=headers,
            content=body,
            request=request,
            extensions=response.extensions,
        )

    return _copy(), _copy()
