"""Exceptions raised by the GitHub API client."""

from __future__ import annotations

from typing import Any

from gitfleet.github.models import Rate


class GitHubError(Exception):
    """An error response from the GitHub API.

    Attributes:
        status_code: HTTP status code of the response.
        message: The ``message`` field of the error body.
        errors: The ``errors`` list of the error body (field level details).
        documentation_url: The ``documentation_url`` field of the error body.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        documentation_url: str = "",
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        self.documentation_url = documentation_url
        super().__init__(self._describe())

    def _describe(self) -> str:
        text = f"{self.status_code} {self.message}"
        details = []
        for error in self.errors:
            if isinstance(error, dict):
                parts = [f"{key}:{value}" for key, value in error.items() if key != "message"]
                if error.get("message"):
                    parts.append(f"message:{error['message']}")
                details.append(" ".join(parts))
            else:
                details.append(str(error))
        if details:
            text += " [" + "; ".join(details) + "]"
        return text

    def has_field_error(self, field: str, code: str) -> bool:
        """Whether the response carried a field level error with the given code."""
        return any(
            isinstance(error, dict) and error.get("field") == field and error.get("code") == code
            for error in self.errors
        )


class NotFoundError(GitHubError):
    """The requested resource does not exist (HTTP 404)."""


class RateLimitError(GitHubError):
    """The primary (hourly) rate limit is exhausted."""

    def __init__(self, status_code: int, message: str, rate: Rate, **kwargs: Any) -> None:
        self.rate = rate
        super().__init__(status_code, message, **kwargs)


class AbuseRateLimitError(GitHubError):
    """An abuse detection or secondary rate limit was triggered.

    Attributes:
        retry_after: Seconds GitHub asked us to wait, when it said so.
    """

    def __init__(
        self, status_code: int, message: str, retry_after: float | None = None, **kwargs: Any
    ) -> None:
        self.retry_after = retry_after
        super().__init__(status_code, message, **kwargs)
