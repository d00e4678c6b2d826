"""Unit tests for run_fleet."""

from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from gitfleet.config import MissingTokenError, RunConfig
from gitfleet.git_manager import LocalRepository, PullOutcome, StatusEntry, WorktreeStatus
from gitfleet.github import Repository
from gitfleet.github.fake import FakeGitHubClient
from gitfleet.pipeline import CommandError, CommandResult
from gitfleet.runner import run_fleet
from gitfleet.selection import NoValidReposError, SelectionMode
from gitfleet.tracker import OutcomeEvent

ENV = {"GITHUB_OAUTH_TOKEN": "ghp_test"}


def make_local(path: Path) -> MagicMock:
    local = MagicMock(spec=LocalRepository)
    local.path = path
    local.head.return_value = "abc123"
    local.pull.return_value = PullOutcome.ALREADY_UP_TO_DATE
    local.status.return_value = WorktreeStatus(entries=(StatusEntry(" M", "go.mod"),))
    local.commit.return_value = "def456"
    return local


@pytest.fixture
def fleet_client() -> FakeGitHubClient:
    return FakeGitHubClient(
        repos=[
            Repository(owner="acme", name=name, clone_url=f"https://github.com/acme/{name}.git")
            for name in ("api", "web", "cli")
        ]
    )


@pytest.fixture
def mock_git_manager(tmp_path: Path) -> MagicMock:
    manager = MagicMock()
    manager.clone.side_effect = lambda url, path, **kwargs: make_local(Path(path))
    return manager


@pytest.fixture
def mock_command_runner() -> MagicMock:
    runner = MagicMock()
    runner.run.return_value = CommandResult(returncode=0, output="")
    return runner


@pytest.fixture
def fleet_config(tmp_path: Path) -> RunConfig:
    return RunConfig(
        branch_name="bump-go",
        command=["./bump-go.sh"],
        repos=["acme/api", "acme/web", "acme/cli", "acme/gone", "malformed"],
        workspace_dir=str(tmp_path / "work"),
    )


@pytest.mark.unit
class TestRunFleet:
    """End to end over fakes."""

    def test_opens_one_pull_request_per_changed_repo(
        self,
        fleet_config: RunConfig,
        fleet_client: FakeGitHubClient,
        mock_git_manager: MagicMock,
        mock_command_runner: MagicMock,
    ) -> None:
        sleeps: list[float] = []

        report = run_fleet(
            fleet_config,
            client=fleet_client,
            environ=ENV,
            git_manager=mock_git_manager,
            command_runner=mock_command_runner,
            show_progress=False,
            sleep=sleeps.append,
        )

        assert sorted(report.pull_requests) == ["api", "cli", "web"]
        assert report.draft_pull_requests == {}
        assert report.selection_mode is SelectionMode.REPO_FLAG
        assert report.command == ["./bump-go.sh"]
        assert [r.name for r in report.repos[OutcomeEvent.REPO_NOT_EXISTS]] == ["gone"]
        assert [r.name for r in report.repos[OutcomeEvent.REPO_MALFORMED]] == ["malformed"]
        assert len(report.repos[OutcomeEvent.PULL_REQUEST_OPENED]) == 3
        assert len(sleeps) <= 3
        for call in mock_git_manager.clone.call_args_list:
            assert call.kwargs["token"] == "ghp_test"

    def test_command_failure_is_isolated(
        self,
        fleet_config: RunConfig,
        fleet_client: FakeGitHubClient,
        mock_git_manager: MagicMock,
        mock_command_runner: MagicMock,
    ) -> None:
        def run(command, cwd, env):
            if env["GITFLEET_REPO_NAME"] == "web":
                raise CommandError("./bump-go.sh exited with status 2", returncode=2)
            return CommandResult(returncode=0, output="")

        mock_command_runner.run.side_effect = run

        report = run_fleet(
            fleet_config,
            client=fleet_client,
            environ=ENV,
            git_manager=mock_git_manager,
            command_runner=mock_command_runner,
            show_progress=False,
            sleep=lambda seconds: None,
        )

        assert sorted(report.pull_requests) == ["api", "cli"]
        assert [r.name for r in report.repos[OutcomeEvent.COMMAND_ERROR]] == ["web"]

    def test_connection_error_opening_pull_request_is_reported(
        self,
        fleet_config: RunConfig,
        fleet_client: FakeGitHubClient,
        mock_git_manager: MagicMock,
        mock_command_runner: MagicMock,
    ) -> None:
        fleet_client.fail("pull_requests.create", httpx.ConnectError("connection reset"))

        report = run_fleet(
            fleet_config,
            client=fleet_client,
            environ=ENV,
            git_manager=mock_git_manager,
            command_runner=mock_command_runner,
            show_progress=False,
            sleep=lambda seconds: None,
        )

        open_errors = [r.name for r in report.repos[OutcomeEvent.PULL_REQUEST_OPEN_ERROR]]
        assert len(open_errors) == 1
        assert len(report.pull_requests) == 2
        assert sorted([*report.pull_requests, *open_errors]) == ["api", "cli", "web"]
        assert OutcomeEvent.REPO_PROCESSING_CRASHED not in report.repos

    def test_unexpected_error_is_reported(
        self,
        fleet_config: RunConfig,
        fleet_client: FakeGitHubClient,
        mock_git_manager: MagicMock,
        mock_command_runner: MagicMock,
    ) -> None:
        def clone(url, path, **kwargs):
            if url.endswith("/cli.git"):
                raise RuntimeError("unexpected clone failure")
            return make_local(Path(path))

        mock_git_manager.clone.side_effect = clone

        report = run_fleet(
            fleet_config,
            client=fleet_client,
            environ=ENV,
            git_manager=mock_git_manager,
            command_runner=mock_command_runner,
            show_progress=False,
            sleep=lambda seconds: None,
        )

        assert sorted(report.pull_requests) == ["api", "web"]
        assert [r.name for r in report.repos[OutcomeEvent.REPO_PROCESSING_CRASHED]] == ["cli"]

    def test_dry_run_makes_no_api_writes(
        self,
        fleet_config: RunConfig,
        fleet_client: FakeGitHubClient,
        mock_git_manager: MagicMock,
        mock_command_runner: MagicMock,
    ) -> None:
        fleet_config.dry_run = True

        report = run_fleet(
            fleet_config,
            client=fleet_client,
            environ=ENV,
            git_manager=mock_git_manager,
            command_runner=mock_command_runner,
            show_progress=False,
            sleep=lambda seconds: None,
        )

        assert report.pull_requests == {}
        assert {call.method for call in fleet_client.calls} == {"repositories.get"}
        assert len(report.repos[OutcomeEvent.PUSH_BRANCH_SKIPPED]) == 3

    def test_validation_happens_before_any_api_call(
        self, fleet_config: RunConfig, fleet_client: FakeGitHubClient
    ) -> None:
        with pytest.raises(MissingTokenError):
            run_fleet(fleet_config, client=fleet_client, environ={}, show_progress=False)

        assert fleet_client.calls == []

    def test_selection_errors_propagate(self, fleet_client: FakeGitHubClient) -> None:
        config = RunConfig(branch_name="b", command=["true"], repos=["no-slash"])

        with pytest.raises(NoValidReposError):
            run_fleet(config, client=fleet_client, environ=ENV, show_progress=False)
