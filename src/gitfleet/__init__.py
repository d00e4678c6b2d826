"""gitfleet - run a command across a fleet of GitHub repositories and open pull requests."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed gitfleet version."""
    return __version__
