"""Classification of GitHub API responses into typed errors."""

from __future__ import annotations

import httpx

from gitfleet.github.exceptions import (
    AbuseRateLimitError,
    GitHubError,
    NotFoundError,
    RateLimitError,
)
from gitfleet.github.models import Rate

ABUSE_DOC_SUFFIXES = ("#abuse-rate-limits", "#secondary-rate-limits")
SECONDARY_RATE_LIMIT_MARKER = "secondary-rate-limits"


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header holding a number of seconds."""
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return max(0.0, seconds)


def check_response(response: httpx.Response) -> GitHubError | None:
    """Return the error described by a GitHub response, or None for success.

    Mirrors how GitHub reports its limits: a 403/429 with no remaining quota is a
    primary rate limit, a 403 pointing at the abuse or secondary rate limit docs
    is an abuse limit, anything else >= 400 is a plain API error.
    """
    if response.status_code < 400:
        return None

    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = str(body.get("message") or response.reason_phrase or "")
    errors = body.get("errors") if isinstance(body.get("errors"), list) else None
    documentation_url = str(body.get("documentation_url") or "")
    status = response.status_code

    if status in (403, 429) and response.headers.get("X-RateLimit-Remaining") == "0":
        return RateLimitError(
            status,
            message,
            Rate.from_headers(response.headers),
            errors=errors,
            documentation_url=documentation_url,
        )

    if status == 403 and documentation_url.endswith(ABUSE_DOC_SUFFIXES):
        return AbuseRateLimitError(
            status,
            message,
            retry_after=parse_retry_after(response.headers.get("Retry-After")),
            errors=errors,
            documentation_url=documentation_url,
        )

    if status == 404:
        return NotFoundError(status, message, errors=errors, documentation_url=documentation_url)

    return GitHubError(status, message, errors=errors, documentation_url=documentation_url)


def raise_for_github_error(response: httpx.Response) -> httpx.Response:
    """Raise the typed error for a failed response, return it otherwise."""
    error = check_response(response)
    if error is not None:
        raise error
    return response
