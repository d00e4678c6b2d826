"""Selection - Choosing the repositories a run operates on."""

from gitfleet.selection.exceptions import (
    NoReposFoundError,
    NoValidReposError,
    ReposFileError,
    SelectionError,
)
from gitfleet.selection.models import AllowedRepo, RepoSelection, SelectionMode
from gitfleet.selection.selector import (
    fetch_org_repos,
    fetch_repos,
    is_code_search_query,
    lookup_allowed_repos,
    parse_allowed_repo,
    parse_repo_inputs,
    parse_repos_from_text,
    read_repos_file,
    search_repos,
    select_repos,
)

__all__ = [
    "AllowedRepo",
    "NoReposFoundError",
    "NoValidReposError",
    "RepoSelection",
    "ReposFileError",
    "SelectionError",
    "SelectionMode",
    "fetch_org_repos",
    "fetch_repos",
    "is_code_search_query",
    "lookup_allowed_repos",
    "parse_allowed_repo",
    "parse_repo_inputs",
    "parse_repos_from_text",
    "read_repos_file",
    "search_repos",
    "select_repos",
]
