"""Repository selection - turns user input into the list of repositories to process."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from gitfleet.github.exceptions import NotFoundError
from gitfleet.github.models import Repository
from gitfleet.selection.exceptions import NoReposFoundError, NoValidReposError, ReposFileError
from gitfleet.selection.models import AllowedRepo, RepoSelection, SelectionMode
from gitfleet.tracker import OutcomeEvent, OutcomeTracker

if TYPE_CHECKING:
    from gitfleet.config import RunConfig
    from gitfleet.github.client import GitHubAPI

logger = logging.getLogger("gitfleet.selection")

PER_PAGE = 100

_STRAY_CHARS = re.compile(r"['\",!]")

CODE_SEARCH_QUALIFIERS = ("path:", "filename:", "extension:", "in:file", "in:path")
REPO_SEARCH_QUALIFIERS = (
    "language:",
    "topic:",
    "is:public",
    "is:private",
    "is:internal",
    "archived:",
    "fork:",
    "mirror:",
    "template:",
    "stars:",
    "forks:",
    "size:",
    "pushed:",
    "created:",
    "updated:",
)


def parse_allowed_repo(line: str) -> AllowedRepo | None:
    """Parse an ``organization/name`` entry.

    Surrounding whitespace and stray quotes, commas and exclamation marks are
    ignored. Returns None unless both parts are present.
    """
    cleaned = _STRAY_CHARS.sub("", line.strip())
    parts = cleaned.split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        logger.debug("Malformed repo input detected: %r", line)
        return None
    return AllowedRepo(organization=parts[0], name=parts[1])


def parse_repo_inputs(entries: Iterable[str]) -> tuple[list[AllowedRepo], list[str]]:
    """Split raw entries into well-formed repos and malformed inputs (blank entries are ignored)."""
    allowed: list[AllowedRepo] = []
    malformed: list[str] = []
    for entry in entries:
        if not entry.strip():
            continue
        repo = parse_allowed_repo(entry)
        if repo is None:
            malformed.append(entry.strip())
        else:
            allowed.append(repo)
    return allowed, malformed


def parse_repos_from_text(text: str) -> list[str]:
    """Split piped input into entries on any whitespace."""
    return text.split()


def read_repos_file(path: str | Path) -> tuple[list[AllowedRepo], list[str]]:
    """Read an allow-list file with one ``organization/name`` per line.

    Raises:
        ReposFileError: If the file cannot be read.
    """
    path = Path(str(path).strip())
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReposFileError(f"Could not read repos file {path}: {e}") from e
    return parse_repo_inputs(text.splitlines())


def is_code_search_query(query: str) -> bool:
    """Whether a search query should go to code search rather than repository search.

    File qualifiers such as ``path:`` or ``filename:`` always mean code search.
    Otherwise any repository qualifier such as ``topic:`` or ``stars:`` means
    repository search, and a query with neither is searched as code.
    """
    if any(qualifier in query for qualifier in CODE_SEARCH_QUALIFIERS):
        return True
    return not any(qualifier in query for qualifier in REPO_SEARCH_QUALIFIERS)


def select_repos(config: RunConfig) -> RepoSelection:
    """Decide which selection input is in effect and parse it.

    Precedence: search query, organization, repos file, explicit repos, stdin.

    Raises:
        ReposFileError: If the repos file cannot be read.
        NoValidReposError: If explicit or stdin input has no valid entry.
    """
    if config.github_search_query:
        return RepoSelection(
            mode=SelectionMode.GITHUB_SEARCH,
            github_org=config.github_org,
            search_query=config.github_search_query,
        )

    if config.github_org:
        return RepoSelection(mode=SelectionMode.GITHUB_ORG, github_org=config.github_org)

    if config.repos_file:
        allowed, malformed = read_repos_file(config.repos_file)
        return RepoSelection(
            mode=SelectionMode.REPOS_FILE, allowed_repos=allowed, malformed=malformed
        )

    if config.repos:
        mode, entries = SelectionMode.REPO_FLAG, config.repos
    else:
        mode, entries = SelectionMode.REPO_STDIN, config.repos_from_stdin

    allowed, malformed = parse_repo_inputs(entries)
    if not allowed:
        raise NoValidReposError()
    return RepoSelection(mode=mode, allowed_repos=allowed, malformed=malformed)


def _collect_pages(
    fetch_page: Callable[[int], tuple[list[Repository], int | None]],
    skip_archived: bool,
    tracker: OutcomeTracker,
    resolve: Callable[[Repository], Repository] | None = None,
) -> list[Repository]:
    """Page through a listing, dropping archived repositories into the tracker when asked.

    A repository listed more than once (code search returns one entry per
    matching file) is kept at its first position only. ``resolve``, when
    given, replaces each distinct repository before the archived check.
    """
    collected: list[Repository] = []
    seen: set[str] = set()
    page: int | None = 1
    while page is not None:
        repos, page = fetch_page(page)
        for repo in repos:
            if repo.full_name in seen:
                continue
            seen.add(repo.full_name)
            if resolve is not None:
                repo = resolve(repo)
            if skip_archived and repo.archived:
                logger.debug("Skipping archived repository %s", repo.full_name)
                tracker.track_single(OutcomeEvent.REPOS_ARCHIVED_SKIPPED, repo)
                continue
            collected.append(repo)
    return collected


def fetch_org_repos(
    client: GitHubAPI, org: str, skip_archived: bool, tracker: OutcomeTracker
) -> list[Repository]:
    """List every repository of ``org``.

    Raises:
        NoReposFoundError: If the organization has no (unarchived) repositories.
        GitHubError: If the listing fails.
    """
    repos = _collect_pages(
        lambda page: client.repositories.list_by_org(org, page=page, per_page=PER_PAGE),
        skip_archived,
        tracker,
    )
    if not repos:
        raise NoReposFoundError(f"Github organization {org}")
    logger.debug("Fetched %d repos from Github organization %s", len(repos), org)
    tracker.track_multiple(OutcomeEvent.FETCHED_VIA_GITHUB_API, repos)
    return repos


def search_repos(
    client: GitHubAPI, query: str, org: str, skip_archived: bool, tracker: OutcomeTracker
) -> list[Repository]:
    """Find repositories matching a search query, scoped to ``org`` when given.

    Queries that look like code searches (see :func:`is_code_search_query`)
    go to the code search API and select every repository holding a matching
    file. Code search only returns a trimmed repository object (no default
    branch, no archived flag), so each distinct repository is fetched in full.
    All other queries go to repository search.

    Raises:
        NoReposFoundError: If the search matches no (unarchived) repositories.
        GitHubError: If the search or a repository lookup fails.
    """
    code_search = is_code_search_query(query)
    if org:
        query = f"{query} org:{org}"

    if code_search:
        logger.debug("Searching code with query %r", query)
        repos = _collect_pages(
            lambda page: client.search.code(query, page=page, per_page=PER_PAGE),
            skip_archived,
            tracker,
            resolve=lambda repo: client.repositories.get(repo.owner, repo.name),
        )
    else:
        logger.debug("Searching repositories with query %r", query)
        repos = _collect_pages(
            lambda page: client.search.repositories(query, page=page, per_page=PER_PAGE),
            skip_archived,
            tracker,
        )
    if not repos:
        raise NoReposFoundError(f"search query {query!r}")
    tracker.track_multiple(OutcomeEvent.FETCHED_VIA_GITHUB_API, repos)
    return repos


def lookup_allowed_repos(
    client: GitHubAPI, allowed: Iterable[AllowedRepo], tracker: OutcomeTracker
) -> list[Repository]:
    """Look up each allow-listed repository; ones that 404 are recorded and skipped.

    Raises:
        GitHubError: If a lookup fails for any reason other than not found.
    """
    repos: list[Repository] = []
    for entry in allowed:
        logger.debug("Looking up repo %s", entry)
        try:
            repos.append(client.repositories.get(entry.organization, entry.name))
        except NotFoundError:
            logger.debug("Repo %s does not exist", entry)
            tracker.track_single(
                OutcomeEvent.REPO_NOT_EXISTS, Repository(owner=entry.organization, name=entry.name)
            )
    return repos


def fetch_repos(
    client: GitHubAPI, config: RunConfig, tracker: OutcomeTracker
) -> list[Repository]:
    """Resolve the configured selection into repositories and record it with the tracker.

    Args:
        client: GitHub API client.
        config: Run configuration holding the selection inputs.
        tracker: Outcome tracker for the run.

    Returns:
        The repositories to process.

    Raises:
        SelectionError: If the selection input is unusable or selects nothing.
        GitHubError: If a GitHub API call fails.
    """
    selection = select_repos(config)
    tracker.set_selection_mode(selection.mode)

    for raw in selection.malformed:
        tracker.track_single(OutcomeEvent.REPO_MALFORMED, Repository(owner="", name=raw))

    match selection.mode:
        case SelectionMode.GITHUB_SEARCH:
            repos = search_repos(
                client,
                selection.search_query,
                selection.github_org,
                config.skip_archived_repos,
                tracker,
            )
        case SelectionMode.GITHUB_ORG:
            repos = fetch_org_repos(
                client, selection.github_org, config.skip_archived_repos, tracker
            )
        case SelectionMode.REPOS_FILE:
            repos = lookup_allowed_repos(client, selection.allowed_repos, tracker)
            tracker.set_file_provided_repos(selection.allowed_repos)
        case _:
            repos = lookup_allowed_repos(client, selection.allowed_repos, tracker)
            tracker.set_repo_flag_provided_repos(selection.allowed_repos)

    tracker.track_multiple(OutcomeEvent.REPOS_SELECTED, repos)
    for repo in repos:
        logger.debug("Repo %s will have the command run against it", repo.full_name)
    return repos
