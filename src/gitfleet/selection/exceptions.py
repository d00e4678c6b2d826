"""Exceptions for repository selection."""


class SelectionError(Exception):
    """Base exception for repository selection errors."""


class ReposFileError(SelectionError):
    """The allow-list file could not be read."""


class NoValidReposError(SelectionError):
    """None of the explicitly supplied repositories was well-formed."""

    def __init__(self) -> None:
        super().__init__(
            "None of the repos supplied via --repo or stdin were valid. "
            "Repos must be in the format <org>/<name>"
        )


class NoReposFoundError(SelectionError):
    """An organization listing or search returned no repositories."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"No repos found for {source}")
