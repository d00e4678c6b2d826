"""Shared pytest fixtures and configuration."""

import subprocess
from pathlib import Path

import pytest

from gitfleet.config import RunConfig
from gitfleet.github import Repository
from gitfleet.github.fake import FakeGitHubClient
from gitfleet.tracker import OutcomeTracker


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")
    config.addinivalue_line("markers", "real: tests that talk to the real GitHub API (local only)")


# Shared fixtures


@pytest.fixture
def repo() -> Repository:
    """A repository as the GitHub API would describe it."""
    return Repository(
        owner="acme",
        name="api",
        default_branch="main",
        clone_url="https://github.com/acme/api.git",
        html_url="https://github.com/acme/api",
    )


@pytest.fixture
def run_config(tmp_path: Path) -> RunConfig:
    """A valid run configuration that selects one repository."""
    return RunConfig(
        branch_name="gitfleet-test",
        command=["touch", "gitfleet.txt"],
        repos=["acme/api"],
        seconds_between_prs=1,
        workspace_dir=str(tmp_path / "work"),
    )


@pytest.fixture
def tracker() -> OutcomeTracker:
    """A fresh outcome tracker."""
    return OutcomeTracker()


@pytest.fixture
def fake_client(repo: Repository) -> FakeGitHubClient:
    """A fake GitHub client that knows about ``acme/api``."""
    return FakeGitHubClient(repos=[repo])


@pytest.fixture
def git_identity(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate git from the user's configuration and give commits an author."""
    global_config = tmp_path / "gitconfig"
    global_config.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


def git(*args: str, cwd: Path | None = None) -> str:
    """Run git and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


@pytest.fixture
def bare_remote(tmp_path: Path, git_identity: None) -> Path:
    """A bare repository with one commit on ``main``, standing in for a GitHub remote."""
    remote = tmp_path / "remote" / "api.git"
    remote.mkdir(parents=True)
    git("init", "--bare", str(remote))
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=remote)

    seed = tmp_path / "seed"
    git("clone", str(remote), str(seed))
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=seed)
    (seed / "README.md").write_text("# api\n")
    git("add", "README.md", cwd=seed)
    git("commit", "-m", "Initial commit", cwd=seed)
    git("push", "origin", "main", cwd=seed)
    return remote
