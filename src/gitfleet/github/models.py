"""Data models for the GitHub API client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class Repository:
    """A remote repository as returned by the GitHub API.

    Attributes:
        owner: Login of the owning organization or user.
        name: Repository name without the owner prefix.
        default_branch: Name of the repository's default branch.
        archived: Whether the repository is archived (read-only).
        clone_url: HTTPS clone URL.
        html_url: Browser URL of the repository.
    """

    owner: str
    name: str
    default_branch: str = "main"
    archived: bool = False
    clone_url: str = ""
    html_url: str = ""

    @property
    def full_name(self) -> str:
        """The ``owner/name`` form of the repository."""
        if not self.owner:
            return self.name
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Repository:
        """Build a Repository from a GitHub API repository object."""
        owner = data.get("owner") or {}
        return cls(
            owner=owner.get("login", ""),
            name=data["name"],
            default_branch=data.get("default_branch") or "main",
            archived=bool(data.get("archived", False)),
            clone_url=data.get("clone_url", ""),
            html_url=data.get("html_url", ""),
        )


@dataclass(frozen=True)
class PullRequest:
    """Pull request data."""

    number: int
    html_url: str
    node_id: str = ""
    draft: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PullRequest:
        """Build a PullRequest from a GitHub API pull request object."""
        return cls(
            number=data["number"],
            html_url=data.get("html_url", ""),
            node_id=data.get("node_id", ""),
            draft=bool(data.get("draft", False)),
        )


@dataclass(frozen=True)
class NewPullRequest:
    """Payload for opening a pull request."""

    title: str
    head: str
    base: str
    body: str = ""
    draft: bool = False
    maintainer_can_modify: bool = True

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "head": self.head,
            "base": self.base,
            "body": self.body,
            "draft": self.draft,
            "maintainer_can_modify": self.maintainer_can_modify,
        }


@dataclass(frozen=True)
class Rate:
    """Primary rate limit state reported in GitHub response headers."""

    limit: int = 0
    remaining: int = 0
    reset: datetime = field(default_factory=lambda: datetime.fromtimestamp(0, UTC))

    @classmethod
    def from_headers(cls, headers: Any) -> Rate:
        """Parse the X-RateLimit-* headers, tolerating missing values."""

        def _int(key: str) -> int:
            value = headers.get(key)
            if value is None or not str(value).strip().isdigit():
                return 0
            return int(value)

        return cls(
            limit=_int("X-RateLimit-Limit"),
            remaining=_int("X-RateLimit-Remaining"),
            reset=datetime.fromtimestamp(_int("X-RateLimit-Reset"), UTC),
        )
