"""Fake GitHub client for testing.

Provides a FakeGitHubClient that mimics the GitHubClient interface without
making any network calls. Repositories and open pull requests are seeded up
front, every call is recorded, and errors can be queued per method.

Example:
    fake = FakeGitHubClient(repos=[Repository(owner="acme", name="api")])
    fake.fail("pull_requests.create", RateLimitError(403, "limited", Rate()))
"""

from __future__ import annotations

import threading
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any

from gitfleet.github.exceptions import NotFoundError
from gitfleet.github.models import NewPullRequest, PullRequest, Repository


@dataclass
class FakeCall:
    """Record of a method call."""

    method: str
    args: tuple[Any, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)


@dataclass
class _OpenPull:
    owner: str
    name: str
    head: str
    base: str
    pull: PullRequest


class _FakeService:
    def __init__(self, fake: FakeGitHubClient) -> None:
        self._fake = fake


class FakeRepositoriesClient(_FakeService):
    def get(self, owner: str, name: str) -> Repository:
        self._fake._record("repositories.get", owner, name)
        for repo in self._fake.repos:
            if repo.owner == owner and repo.name == name:
                return repo
        raise NotFoundError(404, "Not Found")

    def list_by_org(
        self, org: str, page: int = 1, per_page: int = 100
    ) -> tuple[list[Repository], int | None]:
        self._fake._record("repositories.list_by_org", org, page=page, per_page=per_page)
        matching = [repo for repo in self._fake.repos if repo.owner == org]
        return _paginate(matching, page, per_page)


class FakePullRequestsClient(_FakeService):
    def create(self, owner: str, name: str, pull: NewPullRequest) -> PullRequest:
        self._fake._record("pull_requests.create", owner, name, pull)
        created = self._fake._new_pull(owner, name, draft=pull.draft)
        head = pull.head if ":" in pull.head else f"{owner}:{pull.head}"
        with self._fake._lock:
            self._fake.open_pulls.append(_OpenPull(owner, name, head, pull.base, created))
        return created

    def list(
        self, owner: str, name: str, head: str, base: str, state: str = "open"
    ) -> list[PullRequest]:
        self._fake._record("pull_requests.list", owner, name, head=head, base=base, state=state)
        with self._fake._lock:
            return [
                entry.pull
                for entry in self._fake.open_pulls
                if (entry.owner, entry.name, entry.head, entry.base) == (owner, name, head, base)
            ]

    def request_reviewers(
        self,
        owner: str,
        name: str,
        number: int,
        reviewers: list[str],
        team_reviewers: list[str],
    ) -> PullRequest:
        self._fake._record(
            "pull_requests.request_reviewers",
            owner,
            name,
            number,
            reviewers=reviewers,
            team_reviewers=team_reviewers,
        )
        return PullRequest(number=number, html_url=_pull_url(owner, name, number))


class FakeIssuesClient(_FakeService):
    def add_assignees(self, owner: str, name: str, number: int, assignees: list[str]) -> None:
        self._fake._record("issues.add_assignees", owner, name, number, assignees=assignees)


class FakeSearchClient(_FakeService):
    def repositories(
        self, query: str, page: int = 1, per_page: int = 100
    ) -> tuple[list[Repository], int | None]:
        self._fake._record("search.repositories", query, page=page, per_page=per_page)
        return _paginate(self._fake.search_results.get(query, []), page, per_page)

    def code(
        self, query: str, page: int = 1, per_page: int = 100
    ) -> tuple[list[Repository], int | None]:
        self._fake._record("search.code", query, page=page, per_page=per_page)
        return _paginate(self._fake.code_search_results.get(query, []), page, per_page)


class FakeGitHubClient:
    """In-memory stand-in for :class:`gitfleet.github.client.GitHubClient`.

    Attributes:
        repos: Repositories known to the fake (looked up by owner and name).
        search_results: Canned repository search results keyed by query string.
        code_search_results: Canned code search results keyed by query string, one
            repository per matching file (so repeats are expected).
        open_pulls: Open pull requests, including ones created through the fake.
        calls: Every call made, in order, as ``FakeCall`` records.
    """

    def __init__(
        self,
        repos: list[Repository] | None = None,
        search_results: dict[str, list[Repository]] | None = None,
        code_search_results: dict[str, list[Repository]] | None = None,
    ) -> None:
        self.repos = list(repos or [])
        self.search_results = dict(search_results or {})
        self.code_search_results = dict(code_search_results or {})
        self.open_pulls: list[_OpenPull] = []
        self.calls: list[FakeCall] = []
        self._errors: dict[str, deque[Exception]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._next_number = 1

        self.repositories = FakeRepositoriesClient(self)
        self.pull_requests = FakePullRequestsClient(self)
        self.issues = FakeIssuesClient(self)
        self.search = FakeSearchClient(self)

    def fail(self, method: str, *errors: Exception) -> None:
        """Queue errors for the next calls to ``method`` (e.g. ``"pull_requests.create"``).

        Each queued error is raised once, in order; later calls succeed.
        """
        with self._lock:
            self._errors[method].extend(errors)

    def add_open_pull_request(
        self, owner: str, name: str, branch: str, base: str, draft: bool = False
    ) -> PullRequest:
        """Seed an already-open pull request from ``owner:branch`` into ``base``."""
        pull = self._new_pull(owner, name, draft=draft)
        with self._lock:
            self.open_pulls.append(_OpenPull(owner, name, f"{owner}:{branch}", base, pull))
        return pull

    def calls_to(self, method: str) -> list[FakeCall]:
        """All recorded calls to the given method."""
        with self._lock:
            return [call for call in self.calls if call.method == method]

    def close(self) -> None:
        pass

    def _record(self, method: str, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self.calls.append(FakeCall(method, args, kwargs))
            queued = self._errors.get(method)
            error = queued.popleft() if queued else None
        if error is not None:
            raise error

    def _new_pull(self, owner: str, name: str, draft: bool = False) -> PullRequest:
        with self._lock:
            number = self._next_number
            self._next_number += 1
        return PullRequest(
            number=number,
            html_url=_pull_url(owner, name, number),
            node_id=f"PR_{number}",
            draft=draft,
        )


def _pull_url(owner: str, name: str, number: int) -> str:
    return f"https://github.com/{owner}/{name}/pull/{number}"


def _paginate(
    items: list[Repository], page: int, per_page: int
) -> tuple[list[Repository], int | None]:
    start = (page - 1) * per_page
    chunk = items[start : start + per_page]
    has_more = start + per_page < len(items)
    return chunk, page + 1 if has_more else None
