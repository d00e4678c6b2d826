"""Custom exceptions for Git Manager."""


class GitManagerError(Exception):
    """Base exception for Git Manager errors.

    Attributes:
        output: Combined output of the failed git command, if any.
    """

    def __init__(self, message: str, output: str = "") -> None:
        self.output = output
        super().__init__(message)


class CloneError(GitManagerError):
    """Error cloning a repository."""


class HeadRefError(GitManagerError):
    """Error resolving the HEAD reference."""


class CheckoutError(GitManagerError):
    """Error creating or checking out a branch."""


class BranchAlreadyExistsError(CheckoutError):
    """The branch to create already exists locally."""


class PullError(GitManagerError):
    """Error pulling from the remote branch."""


class RemoteBranchNotFoundError(PullError):
    """The branch does not exist on the remote yet."""


class StatusError(GitManagerError):
    """Error reading the worktree status."""


class StageError(GitManagerError):
    """Error adding a file to the index."""


class CommitError(GitManagerError):
    """Error creating a commit."""


class PushError(GitManagerError):
    """Error pushing to remote."""
