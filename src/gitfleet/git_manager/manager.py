"""GitManager - Local git operations on cloned repositories."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from gitfleet.git_manager.exceptions import (
    BranchAlreadyExistsError,
    CheckoutError,
    CloneError,
    CommitError,
    GitManagerError,
    HeadRefError,
    PullError,
    PushError,
    RemoteBranchNotFoundError,
    StageError,
    StatusError,
)
from gitfleet.git_manager.models import PullOutcome, StatusEntry, WorktreeStatus
from gitfleet.logging import sanitize_for_log

logger = logging.getLogger("gitfleet.git_manager")


def authenticated_url(url: str, username: str, token: str) -> str:
    """Embed basic-auth credentials in an http(s) clone URL.

    Other URLs (ssh, file, local paths) are returned unchanged.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not token:
        return url
    host = parts.netloc.rsplit("@", 1)[-1]
    user = quote(username or "x-access-token", safe="")
    netloc = f"{user}:{quote(token, safe='')}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def _git_error_text(error: subprocess.CalledProcessError) -> str:
    text = (error.stderr or "").strip() or (error.stdout or "").strip()
    return sanitize_for_log(text)


def _run_git(*args: str, cwd: str | Path | None = None, strip: bool = True) -> str:
    """Run a git command.

    Args:
        *args: Git command arguments
        cwd: Working directory
        strip: Strip surrounding whitespace from the output

    Returns:
        Command stdout

    Raises:
        subprocess.CalledProcessError: If command fails
        GitManagerError: If git is not installed
    """
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            env=env,
        )
    except FileNotFoundError as e:
        raise GitManagerError("git CLI not found on PATH") from e
    return result.stdout.strip() if strip else result.stdout


def parse_porcelain_status(data: str) -> WorktreeStatus:
    """Parse ``git status --porcelain -z`` output."""
    if not data:
        return WorktreeStatus()

    parts = data.split("\0")
    entries: list[StatusEntry] = []
    idx = 0
    while idx < len(parts):
        raw = parts[idx]
        if not raw:
            break
        if len(raw) < 4:
            raise StatusError(f"Unexpected git status entry: {raw!r}")

        xy = raw[:2]
        path = raw[3:]
        orig_path: str | None = None
        # Renames and copies carry the source path as the next NUL-separated field
        if xy[0] in {"R", "C"}:
            if idx + 1 >= len(parts):
                raise StatusError(f"Unexpected git status rename entry: {raw!r}")
            orig_path = parts[idx + 1]
            idx += 2
        else:
            idx += 1

        entries.append(StatusEntry(xy=xy, path=path, orig_path=orig_path))

    return WorktreeStatus(entries=tuple(entries))


class LocalRepository:
    """A repository cloned to the local filesystem.

    All operations run the git CLI inside ``path`` and translate failures
    into GitManagerError subclasses.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _git(self, *args: str) -> str:
        return _run_git(*args, cwd=self.path)

    def head(self) -> str:
        """Get the commit hash HEAD points at.

        Raises:
            HeadRefError: If HEAD cannot be resolved (e.g. an empty repository)
        """
        try:
            return self._git("rev-parse", "HEAD")
        except subprocess.CalledProcessError as e:
            raise HeadRefError(
                f"Failed to resolve HEAD: {_git_error_text(e)}", output=_git_error_text(e)
            ) from e

    def checkout_branch(self, branch: str, start_point: str) -> None:
        """Create and check out a new branch at ``start_point``.

        Raises:
            BranchAlreadyExistsError: If a local branch with that name exists
            CheckoutError: If the checkout fails for any other reason
        """
        logger.debug("Creating branch %s at %s in %s", branch, start_point, self.path)
        try:
            self._git("checkout", "-b", branch, start_point)
        except subprocess.CalledProcessError as e:
            text = _git_error_text(e)
            if "already exists" in text:
                raise BranchAlreadyExistsError(
                    f"Branch '{branch}' already exists", output=text
                ) from e
            raise CheckoutError(f"Failed to create branch '{branch}': {text}", output=text) from e

    def pull(self, branch: str, remote: str = "origin") -> PullOutcome:
        """Fast-forward the current branch from ``remote/branch``.

        Returns:
            Whether anything was pulled

        Raises:
            RemoteBranchNotFoundError: If the branch does not exist on the remote
            PullError: If the pull fails for any other reason
        """
        try:
            output = self._git("pull", "--ff-only", remote, branch)
        except subprocess.CalledProcessError as e:
            text = _git_error_text(e)
            if "couldn't find remote ref" in text:
                raise RemoteBranchNotFoundError(
                    f"Branch '{branch}' does not exist on {remote}", output=text
                ) from e
            raise PullError(f"Failed to pull '{branch}' from {remote}: {text}", output=text) from e

        if "Already up to date" in output or "Already up-to-date" in output:
            return PullOutcome.ALREADY_UP_TO_DATE
        return PullOutcome.UPDATED

    def status(self) -> WorktreeStatus:
        """Get the worktree status, including untracked files.

        Raises:
            StatusError: If status cannot be read
        """
        try:
            # -z output must not be stripped, paths may end in whitespace
            output = _run_git(
                "status", "--porcelain", "-z", "--untracked-files=all", cwd=self.path, strip=False
            )
        except subprocess.CalledProcessError as e:
            text = _git_error_text(e)
            raise StatusError(f"Failed to read worktree status: {text}", output=text) from e
        return parse_porcelain_status(output)

    def add(self, path: str) -> None:
        """Add a single path to the index.

        Raises:
            StageError: If the path cannot be added
        """
        try:
            self._git("add", "--", path)
        except subprocess.CalledProcessError as e:
            text = _git_error_text(e)
            raise StageError(f"Failed to add '{path}': {text}", output=text) from e

    def commit(self, message: str) -> str:
        """Commit all tracked changes (``commit --all``).

        Returns:
            The new commit hash

        Raises:
            CommitError: If the commit fails
        """
        try:
            self._git("commit", "--all", "-m", message)
            return self._git("rev-parse", "HEAD")
        except subprocess.CalledProcessError as e:
            text = _git_error_text(e)
            raise CommitError(f"Failed to commit: {text}", output=text) from e

    def push(self, branch: str, remote: str = "origin") -> None:
        """Push a branch and set its upstream.

        Raises:
            PushError: If push fails
        """
        logger.debug("Pushing branch %s from %s", branch, self.path)
        try:
            self._git("push", "-u", remote, branch)
        except subprocess.CalledProcessError as e:
            text = _git_error_text(e)
            raise PushError(f"Failed to push branch '{branch}': {text}", output=text) from e


class GitManager:
    """Clones remote repositories into local working copies."""

    def clone(
        self, url: str, path: str | Path, username: str = "", token: str = ""
    ) -> LocalRepository:
        """Clone ``url`` into ``path``.

        For http(s) URLs the credentials are embedded so later pulls and pushes
        to ``origin`` authenticate the same way.

        Args:
            url: Clone URL (https, ssh, file or a local path)
            path: Destination directory (must be empty or not exist)
            username: Basic-auth user, usually the repository owner's login
            token: GitHub personal access token

        Returns:
            The cloned repository

        Raises:
            CloneError: If the clone fails
        """
        clone_url = authenticated_url(url, username, token)
        logger.debug("Cloning %s into %s", sanitize_for_log(clone_url), path)
        try:
            _run_git("clone", clone_url, str(path))
        except subprocess.CalledProcessError as e:
            text = _git_error_text(e)
            raise CloneError(
                f"Failed to clone {sanitize_for_log(clone_url)}: {text}", output=text
            ) from e
        return LocalRepository(path)
