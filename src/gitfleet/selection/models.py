"""Data models for repository selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class SelectionMode(StrEnum):
    """How the repositories of a run were chosen."""

    GITHUB_SEARCH = "github-search"
    GITHUB_ORG = "github-org"
    REPOS_FILE = "repos-file"
    REPO_FLAG = "repo-flag"
    REPO_STDIN = "repo-stdin"


@dataclass(frozen=True)
class AllowedRepo:
    """A user supplied ``organization/name`` pair, not yet looked up."""

    organization: str
    name: str

    def __str__(self) -> str:
        return f"{self.organization}/{self.name}"


@dataclass
class RepoSelection:
    """The parsed selection input.

    Attributes:
        mode: The selection method in effect.
        allowed_repos: Well-formed entries (file, explicit and stdin modes).
        malformed: Raw entries that could not be parsed.
        github_org: Organization to list (org mode) or to scope a search to.
        search_query: Repository search query (search mode).
    """

    mode: SelectionMode
    allowed_repos: list[AllowedRepo] = field(default_factory=list)
    malformed: list[str] = field(default_factory=list)
    github_org: str = ""
    search_query: str = ""
