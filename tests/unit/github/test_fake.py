"""Unit tests for FakeGitHubClient."""

import pytest

from gitfleet.github import NewPullRequest, NotFoundError, RateLimitError, Repository
from gitfleet.github.fake import FakeGitHubClient
from gitfleet.github.models import Rate


@pytest.fixture
def fake() -> FakeGitHubClient:
    return FakeGitHubClient(
        repos=[Repository(owner="acme", name=f"repo-{i}") for i in range(5)]
        + [Repository(owner="other", name="lib")],
        search_results={"topic:go": [Repository(owner="acme", name="repo-1")]},
        code_search_results={
            "filename:go.mod": [
                Repository(owner="acme", name="repo-2"),
                Repository(owner="acme", name="repo-2"),
            ]
        },
    )


@pytest.mark.unit
class TestFakeRepositories:
    """Tests for the fake repositories sub-client."""

    def test_get_known_and_unknown(self, fake: FakeGitHubClient) -> None:
        assert fake.repositories.get("acme", "repo-0").name == "repo-0"

        with pytest.raises(NotFoundError):
            fake.repositories.get("acme", "missing")

    def test_list_by_org_pages(self, fake: FakeGitHubClient) -> None:
        first, page = fake.repositories.list_by_org("acme", page=1, per_page=3)
        second, last = fake.repositories.list_by_org("acme", page=page, per_page=3)

        assert [r.name for r in first] == ["repo-0", "repo-1", "repo-2"]
        assert [r.name for r in second] == ["repo-3", "repo-4"]
        assert page == 2
        assert last is None

    def test_search(self, fake: FakeGitHubClient) -> None:
        repos, page = fake.search.repositories("topic:go")

        assert [r.name for r in repos] == ["repo-1"]
        assert page is None
        assert fake.search.repositories("nothing")[0] == []

    def test_code_search(self, fake: FakeGitHubClient) -> None:
        repos, page = fake.search.code("filename:go.mod")

        assert [r.name for r in repos] == ["repo-2", "repo-2"]
        assert page is None
        assert fake.search.code("topic:go")[0] == []
        assert [call.args for call in fake.calls_to("search.code")] == [
            ("filename:go.mod",),
            ("topic:go",),
        ]


@pytest.mark.unit
class TestFakePullRequests:
    """Tests for the fake pull requests sub-client."""

    def test_created_pull_is_listed(self, fake: FakeGitHubClient) -> None:
        pull = fake.pull_requests.create("acme", "repo-0", NewPullRequest("t", "bump", "main"))

        assert pull.html_url == "https://github.com/acme/repo-0/pull/1"
        assert fake.pull_requests.list("acme", "repo-0", head="acme:bump", base="main") == [pull]
        assert fake.pull_requests.list("acme", "repo-0", head="acme:bump", base="dev") == []

    def test_seeded_pull_is_listed(self, fake: FakeGitHubClient) -> None:
        seeded = fake.add_open_pull_request("acme", "repo-2", "bump", "main")

        assert fake.pull_requests.list("acme", "repo-2", head="acme:bump", base="main") == [seeded]

    def test_numbers_increase(self, fake: FakeGitHubClient) -> None:
        first = fake.pull_requests.create("acme", "repo-0", NewPullRequest("t", "a", "main"))
        second = fake.pull_requests.create("acme", "repo-1", NewPullRequest("t", "a", "main"))

        assert (first.number, second.number) == (1, 2)


@pytest.mark.unit
class TestFakeFailures:
    """Queued errors and call recording."""

    def test_queued_errors_raise_once_each(self, fake: FakeGitHubClient) -> None:
        limited = RateLimitError(403, "limited", Rate())
        fake.fail("pull_requests.create", limited)

        with pytest.raises(RateLimitError):
            fake.pull_requests.create("acme", "repo-0", NewPullRequest("t", "b", "main"))
        fake.pull_requests.create("acme", "repo-0", NewPullRequest("t", "b", "main"))

        assert len(fake.calls_to("pull_requests.create")) == 2
        assert len(fake.open_pulls) == 1

    def test_calls_are_recorded(self, fake: FakeGitHubClient) -> None:
        fake.issues.add_assignees("acme", "repo-0", 7, ["bob"])

        (call,) = fake.calls_to("issues.add_assignees")
        assert call.args == ("acme", "repo-0", 7)
        assert call.kwargs == {"assignees": ["bob"]}
