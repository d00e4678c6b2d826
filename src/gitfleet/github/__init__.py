"""GitHub - Rate-limited REST API client for repositories and pull requests."""

from gitfleet.github.client import (
    GitHubAPI,
    GitHubClient,
    IssuesService,
    PullRequestsService,
    RepositoriesService,
    SearchService,
    base_url_for_hostname,
)
from gitfleet.github.exceptions import (
    AbuseRateLimitError,
    GitHubError,
    NotFoundError,
    RateLimitError,
)
from gitfleet.github.models import NewPullRequest, PullRequest, Rate, Repository
from gitfleet.github.transport import RateLimitTransport

__all__ = [
    "AbuseRateLimitError",
    "GitHubAPI",
    "GitHubClient",
    "GitHubError",
    "IssuesService",
    "NewPullRequest",
    "NotFoundError",
    "PullRequest",
    "PullRequestsService",
    "Rate",
    "RateLimitError",
    "RateLimitTransport",
    "RepositoriesService",
    "Repository",
    "SearchService",
    "base_url_for_hostname",
]
