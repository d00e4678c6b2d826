"""GitHubClient - the remote API operations gitfleet needs.

The client is split into small per-resource sub-clients (repositories, pull
requests, issues, search). Each one is described by a Protocol so the rest of
gitfleet can be driven by :mod:`gitfleet.github.fake` in tests.
"""

from __future__ import annotations

import os
from typing import Any, Protocol

import httpx

from gitfleet.github.models import NewPullRequest, PullRequest, Repository
from gitfleet.github.responses import raise_for_github_error
from gitfleet.github.transport import DEFAULT_WRITE_DELAY, RateLimitTransport
from gitfleet.logging import get_logger

logger = get_logger("github.client")

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_PER_PAGE = 100
API_VERSION = "2022-11-28"


class RepositoriesService(Protocol):
    def get(self, owner: str, name: str) -> Repository: ...

    def list_by_org(
        self, org: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> tuple[list[Repository], int | None]: ...


class PullRequestsService(Protocol):
    def create(self, owner: str, name: str, pull: NewPullRequest) -> PullRequest: ...

    def list(
        self, owner: str, name: str, head: str, base: str, state: str = "open"
    ) -> list[PullRequest]: ...

    def request_reviewers(
        self,
        owner: str,
        name: str,
        number: int,
        reviewers: list[str],
        team_reviewers: list[str],
    ) -> PullRequest: ...


class IssuesService(Protocol):
    def add_assignees(self, owner: str, name: str, number: int, assignees: list[str]) -> None: ...


class SearchService(Protocol):
    def repositories(
        self, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> tuple[list[Repository], int | None]: ...

    def code(
        self, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> tuple[list[Repository], int | None]: ...


class GitHubAPI(Protocol):
    """The capability surface the pipeline, dispatcher and selection rely on."""

    repositories: RepositoriesService
    pull_requests: PullRequestsService
    issues: IssuesService
    search: SearchService


def base_url_for_hostname(hostname: str | None) -> str:
    """API base URL for github.com or a GitHub Enterprise hostname."""
    if not hostname:
        return DEFAULT_BASE_URL
    return f"https://{hostname}/api/v3"


def next_page(response: httpx.Response) -> int | None:
    """Page number of the ``next`` link in a paginated response, if any."""
    url = response.links.get("next", {}).get("url")
    if not url:
        return None
    page = httpx.URL(url).params.get("page")
    if page is None or not page.isdigit():
        return None
    return int(page)


class _Service:
    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = self._client.http.request(method, path, **kwargs)
        return raise_for_github_error(response)


class RepositoriesClient(_Service):
    def get(self, owner: str, name: str) -> Repository:
        response = self._request("GET", f"/repos/{owner}/{name}")
        return Repository.from_api(response.json())

    def list_by_org(
        self, org: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> tuple[list[Repository], int | None]:
        response = self._request(
            "GET", f"/orgs/{org}/repos", params={"page": page, "per_page": per_page}
        )
        repos = [Repository.from_api(item) for item in response.json()]
        return repos, next_page(response)


class PullRequestsClient(_Service):
    def create(self, owner: str, name: str, pull: NewPullRequest) -> PullRequest:
        response = self._request("POST", f"/repos/{owner}/{name}/pulls", json=pull.to_payload())
        return PullRequest.from_api(response.json())

    def list(
        self, owner: str, name: str, head: str, base: str, state: str = "open"
    ) -> list[PullRequest]:
        response = self._request(
            "GET",
            f"/repos/{owner}/{name}/pulls",
            params={"head": head, "base": base, "state": state},
        )
        return [PullRequest.from_api(item) for item in response.json()]

    def request_reviewers(
        self,
        owner: str,
        name: str,
        number: int,
        reviewers: list[str],
        team_reviewers: list[str],
    ) -> PullRequest:
        response = self._request(
            "POST",
            f"/repos/{owner}/{name}/pulls/{number}/requested_reviewers",
            json={"reviewers": reviewers, "team_reviewers": team_reviewers},
        )
        return PullRequest.from_api(response.json())


class IssuesClient(_Service):
    def add_assignees(self, owner: str, name: str, number: int, assignees: list[str]) -> None:
        self._request(
            "POST",
            f"/repos/{owner}/{name}/issues/{number}/assignees",
            json={"assignees": assignees},
        )


class SearchClient(_Service):
    def repositories(
        self, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> tuple[list[Repository], int | None]:
        response = self._request(
            "GET",
            "/search/repositories",
            params={"q": query, "page": page, "per_page": per_page},
        )
        items = response.json().get("items", [])
        return [Repository.from_api(item) for item in items], next_page(response)

    def code(
        self, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> tuple[list[Repository], int | None]:
        """Search code and return the repository of each matching file.

        A repository appears once per matching file, so callers dedupe.
        """
        response = self._request(
            "GET",
            "/search/code",
            params={"q": query, "page": page, "per_page": per_page},
        )
        items = response.json().get("items", [])
        repos = [
            Repository.from_api(item["repository"]) for item in items if item.get("repository")
        ]
        return repos, next_page(response)


class GitHubClient:
    """GitHub REST API client routed through :class:`RateLimitTransport`."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        write_delay: float = DEFAULT_WRITE_DELAY,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            token: GitHub personal access token.
            base_url: API base URL (GitHub Enterprise or tests).
            write_delay: Seconds the transport waits after a write request.
            transport: Transport to wrap with rate limiting (tests pass a mock).
            timeout: Request timeout in seconds.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.http = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
            timeout=timeout,
            transport=RateLimitTransport(transport, write_delay=write_delay),
        )
        self.repositories = RepositoriesClient(self)
        self.pull_requests = PullRequestsClient(self)
        self.issues = IssuesClient(self)
        self.search = SearchClient(self)

    @classmethod
    def from_env(cls, write_delay: float = DEFAULT_WRITE_DELAY) -> GitHubClient:
        """Build a client from GITHUB_OAUTH_TOKEN and GITHUB_HOSTNAME."""
        base_url = base_url_for_hostname(os.environ.get("GITHUB_HOSTNAME"))
        logger.debug("Using GitHub API at %s", base_url)
        return cls(
            token=os.environ.get("GITHUB_OAUTH_TOKEN", ""),
            base_url=base_url,
            write_delay=write_delay,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.http.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
