"""Outcome events and the end-of-run report."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from gitfleet.github.models import Repository

if TYPE_CHECKING:
    from gitfleet.selection.models import AllowedRepo, SelectionMode


class OutcomeEvent(StrEnum):
    """What happened to a repository during a run."""

    FETCHED_VIA_GITHUB_API = "fetched-via-github-api"
    REPOS_SELECTED = "repos-selected"
    REPOS_ARCHIVED_SKIPPED = "repos-archived-skipped"
    REPO_NOT_EXISTS = "repo-not-exists"
    REPO_MALFORMED = "repo-flag-supplied-repo-malformed"
    REPO_CLONED = "repo-successfully-cloned"
    REPO_CLONE_FAILED = "repo-failed-to-clone"
    GET_HEAD_REF_FAILED = "get-head-ref-failed"
    BRANCH_CHECKOUT_FAILED = "branch-checkout-failed"
    BRANCH_REMOTE_PULL_FAILED = "branch-remote-pull-failed"
    BRANCH_REMOTE_DIDNT_EXIST_YET = "branch-remote-didnt-exist-yet"
    COMMAND_ERROR = "command-error-during-execution"
    WORKTREE_STATUS_CHECK_FAILED = "worktree-status-check-failed"
    WORKTREE_STATUS_DIRTY = "worktree-status-dirty"
    WORKTREE_STATUS_CLEAN = "worktree-status-clean"
    WORKTREE_ADD_FILE_FAILED = "worktree-add-file-failed"
    COMMIT_CHANGES_FAILED = "commit-changes-failed"
    COMMITS_MADE_DIRECTLY_TO_BRANCH = "commits-made-directly-to-branch"
    PUSH_BRANCH_FAILED = "push-branch-failed"
    PUSH_BRANCH_SKIPPED = "push-branch-skipped"
    DIRECT_COMMITS_PUSHED = "direct-commits-pushed-to-remote"
    PULL_REQUEST_OPENED = "pull-request-opened"
    PULL_REQUEST_ALREADY_EXISTS = "pull-request-already-exists"
    PULL_REQUEST_OPEN_ERROR = "pull-request-open-error"
    DRAFT_PULL_REQUESTS_UNSUPPORTED = "repo-not-compatible-with-pull-config"
    BASE_BRANCH_TARGET_INVALID = "base-branch-target-invalid"
    PR_FAILED_DUE_TO_RATE_LIMITS = "pr-failed-due-to-rate-limits"
    PR_FAILED_AFTER_MAXIMUM_RETRIES = "pr-failed-after-maximum-retries"
    REQUEST_REVIEWERS_ERROR = "request-reviewers-error"
    ADD_ASSIGNEES_ERROR = "add-assignees-error"
    REPO_PROCESSING_CRASHED = "repo-processing-crashed"


# Report order follows definition order
EVENT_DESCRIPTIONS: dict[OutcomeEvent, str] = {
    OutcomeEvent.FETCHED_VIA_GITHUB_API: "Repos successfully fetched via Github API",
    OutcomeEvent.REPOS_SELECTED: (
        "All repos that were targeted for processing AFTER filtering missing / malformed repos"
    ),
    OutcomeEvent.REPOS_ARCHIVED_SKIPPED: (
        "All repos that were filtered out with the --skip-archived-repos flag"
    ),
    OutcomeEvent.REPO_NOT_EXISTS: (
        "Repos that were supplied by user but don't exist (404'd) via Github API"
    ),
    OutcomeEvent.REPO_MALFORMED: (
        "Repos that were supplied by user but were malformed (missing their Github org prefix?) "
        "and therefore unprocessable"
    ),
    OutcomeEvent.REPO_CLONED: "Repos that were successfully cloned to the local filesystem",
    OutcomeEvent.REPO_CLONE_FAILED: "Repos that were unable to be cloned to the local filesystem",
    OutcomeEvent.GET_HEAD_REF_FAILED: (
        "Repos for which the HEAD git reference could not be obtained"
    ),
    OutcomeEvent.BRANCH_CHECKOUT_FAILED: "Repos for which checking out a new branch failed",
    OutcomeEvent.BRANCH_REMOTE_PULL_FAILED: (
        "Repos whose remote branches could not be successfully pulled"
    ),
    OutcomeEvent.BRANCH_REMOTE_DIDNT_EXIST_YET: (
        "Repos whose specified branches did not exist on the remote, "
        "and so were first created locally"
    ),
    OutcomeEvent.COMMAND_ERROR: (
        "Repos for which the supplied command raised an error during execution"
    ),
    OutcomeEvent.WORKTREE_STATUS_CHECK_FAILED: (
        "Repos for which the git status command failed following command execution"
    ),
    OutcomeEvent.WORKTREE_STATUS_DIRTY: (
        "Repos that showed file changes to their working directory following command execution"
    ),
    OutcomeEvent.WORKTREE_STATUS_CLEAN: (
        "Repos that showed NO file changes to their working directory following command execution"
    ),
    OutcomeEvent.WORKTREE_ADD_FILE_FAILED: (
        "Repos for which at least one file could not be added to the index"
    ),
    OutcomeEvent.COMMIT_CHANGES_FAILED: (
        "Repos whose file changes failed to be committed for some reason"
    ),
    OutcomeEvent.COMMITS_MADE_DIRECTLY_TO_BRANCH: (
        "Repos whose local changes were committed directly to the specified branch "
        "because --skip-pull-requests was passed"
    ),
    OutcomeEvent.PUSH_BRANCH_FAILED: (
        "Repos whose branch containing changes failed to push to remote origin"
    ),
    OutcomeEvent.PUSH_BRANCH_SKIPPED: (
        "Repos whose local branch was not pushed because the --dry-run flag was set"
    ),
    OutcomeEvent.DIRECT_COMMITS_PUSHED: (
        "Repos whose changes were pushed directly to the remote branch "
        "because --skip-pull-requests was passed"
    ),
    OutcomeEvent.PULL_REQUEST_OPENED: "Repos against which pull requests were opened",
    OutcomeEvent.PULL_REQUEST_ALREADY_EXISTS: (
        "Repos where opening a pull request was skipped because a pull request was already open"
    ),
    OutcomeEvent.PULL_REQUEST_OPEN_ERROR: "Repos against which pull requests failed to be opened",
    OutcomeEvent.DRAFT_PULL_REQUESTS_UNSUPPORTED: (
        "Repos that do not support Draft PRs (--draft flag was passed)"
    ),
    OutcomeEvent.BASE_BRANCH_TARGET_INVALID: (
        "Repos that did not have the branch specified by --base-branch-name"
    ),
    OutcomeEvent.PR_FAILED_DUE_TO_RATE_LIMITS: (
        "Repos whose initial Pull Request failed to be created due to GitHub rate limits"
    ),
    OutcomeEvent.PR_FAILED_AFTER_MAXIMUM_RETRIES: (
        "Repos whose Pull Request failed to be created after the maximum number of retries"
    ),
    OutcomeEvent.REQUEST_REVIEWERS_ERROR: (
        "Repos whose pull request reviewers could not be requested"
    ),
    OutcomeEvent.ADD_ASSIGNEES_ERROR: "Repos whose pull request assignees could not be added",
    OutcomeEvent.REPO_PROCESSING_CRASHED: (
        "Repos whose processing stopped on an unexpected error (see the log for details)"
    ),
}


@dataclass(frozen=True)
class RunReport:
    """Snapshot of a finished run, handed to the report renderer.

    Attributes:
        repos: Repositories recorded under each event (events with none are absent).
        pull_requests: Repository name -> URL of each opened pull request.
        draft_pull_requests: Repository name -> URL of each opened draft pull request.
        selection_mode: How repositories were selected.
        command: The command run against every repository.
        runtime_seconds: Wall-clock seconds from tracker creation to the report.
        file_provided_repos: Entries read from the allow-list file.
        repo_flag_provided_repos: Entries passed explicitly or on stdin.
        skip_pull_requests: Whether pull requests were skipped.
    """

    repos: dict[OutcomeEvent, list[Repository]] = field(default_factory=dict)
    pull_requests: dict[str, str] = field(default_factory=dict)
    draft_pull_requests: dict[str, str] = field(default_factory=dict)
    selection_mode: SelectionMode | None = None
    command: list[str] = field(default_factory=list)
    runtime_seconds: int = 0
    file_provided_repos: list[AllowedRepo] = field(default_factory=list)
    repo_flag_provided_repos: list[AllowedRepo] = field(default_factory=list)
    skip_pull_requests: bool = False
