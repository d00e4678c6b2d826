"""Unit tests for the gitfleet CLI."""

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest
from click.testing import CliRunner

from gitfleet import __version__
from gitfleet.cli import main
from gitfleet.github import GitHubError
from gitfleet.selection import NoValidReposError
from gitfleet.tracker import RunReport

NO_TOKEN = {"GITHUB_OAUTH_TOKEN": None, "GITFLEET_LOG_DIR": None}


@pytest.fixture(autouse=True)
def reset_gitfleet_logger() -> Iterator[None]:
    """The CLI installs handlers bound to the runner's streams; drop them afterwards."""
    yield
    logger = logging.getLogger("gitfleet")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def cli() -> CliRunner:
    return CliRunner()


@pytest.fixture
def mock_run_fleet() -> Iterator[MagicMock]:
    with patch("gitfleet.cli.run_fleet") as run_fleet:
        run_fleet.return_value = RunReport(command=["true"])
        yield run_fleet


def config_passed(run_fleet: MagicMock):
    return run_fleet.call_args.args[0]


@pytest.mark.unit
class TestArguments:
    """Flags and the command are turned into a RunConfig."""

    def test_command_after_first_positional_is_not_parsed(
        self, cli: CliRunner, mock_run_fleet: MagicMock
    ) -> None:
        result = cli.invoke(
            main, ["-b", "bump-go", "--github-org", "acme", "./bump.sh", "--to", "1.22"]
        )

        assert result.exit_code == 0, result.output
        config = config_passed(mock_run_fleet)
        assert config.command == ["./bump.sh", "--to", "1.22"]
        assert config.branch_name == "bump-go"
        assert config.github_org == "acme"

    def test_double_dash_separates_command(
        self, cli: CliRunner, mock_run_fleet: MagicMock
    ) -> None:
        result = cli.invoke(
            main, ["-b", "fix", "--repo", "acme/api", "--", "sed", "-i", "s/a/b/", "README.md"]
        )

        assert result.exit_code == 0, result.output
        assert config_passed(mock_run_fleet).command == ["sed", "-i", "s/a/b/", "README.md"]

    def test_options(self, cli: CliRunner, mock_run_fleet: MagicMock) -> None:
        result = cli.invoke(
            main,
            [
                "-b",
                "bump",
                "--repo",
                "acme/api",
                "--repo",
                "acme/web",
                "--draft",
                "--dry-run",
                "--reviewers",
                "alice, bob",
                "--team-reviewers",
                "platform",
                "--assignees",
                "carol",
                "--max-concurrent-repos",
                "4",
                "--max-pr-retries",
                "5",
                "--seconds-between-prs",
                "2.5",
                "--no-progress",
                "true",
            ],
        )

        assert result.exit_code == 0, result.output
        config = config_passed(mock_run_fleet)
        assert config.repos == ["acme/api", "acme/web"]
        assert config.draft
        assert config.dry_run
        assert not config.skip_pull_requests
        assert config.reviewers == ["alice", "bob"]
        assert config.team_reviewers == ["platform"]
        assert config.assignees == ["carol"]
        assert config.max_concurrent_repos == 4
        assert config.max_pr_retries == 5
        assert config.seconds_between_prs == 2.5
        assert mock_run_fleet.call_args.kwargs == {"show_progress": False}

    def test_repos_from_stdin(self, cli: CliRunner, mock_run_fleet: MagicMock) -> None:
        result = cli.invoke(main, ["-b", "bump", "true"], input="acme/api\nacme/web acme/cli\n")

        assert result.exit_code == 0, result.output
        assert config_passed(mock_run_fleet).repos_from_stdin == [
            "acme/api",
            "acme/web",
            "acme/cli",
        ]

    def test_stdin_ignored_when_selection_given(
        self, cli: CliRunner, mock_run_fleet: MagicMock
    ) -> None:
        result = cli.invoke(main, ["-b", "bump", "--github-org", "acme", "true"], input="acme/x\n")

        assert result.exit_code == 0, result.output
        assert config_passed(mock_run_fleet).repos_from_stdin == []

    def test_config_file_with_flag_override(
        self, cli: CliRunner, mock_run_fleet: MagicMock, tmp_path: Path
    ) -> None:
        path = tmp_path / "gitfleet.yaml"
        path.write_text(
            "branch-name: from-file\n"
            "github-org: acme\n"
            "draft: true\n"
            "command: ./bump.sh\n"
            "pull-request-title: Bump things\n"
        )

        result = cli.invoke(main, ["-c", str(path), "-b", "from-flag"])

        assert result.exit_code == 0, result.output
        config = config_passed(mock_run_fleet)
        assert config.branch_name == "from-flag"
        assert config.github_org == "acme"
        assert config.draft
        assert config.command == ["./bump.sh"]
        assert config.pull_request_title == "Bump things"

    def test_prints_report(self, cli: CliRunner, mock_run_fleet: MagicMock) -> None:
        result = cli.invoke(main, ["-b", "bump", "--github-org", "acme", "true"])

        assert "GITFLEET RUN SUMMARY" in result.output

    def test_help_names_command_environment(self, cli: CliRunner) -> None:
        result = cli.invoke(main, ["--help"])

        assert result.exit_code == 0
        for variable in ("GITFLEET_REPO_OWNER", "GITFLEET_REPO_NAME", "GITFLEET_DRY_RUN"):
            assert variable in result.output

    def test_version(self, cli: CliRunner) -> None:
        result = cli.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


@pytest.mark.unit
class TestErrors:
    """Errors end the run with exit status 1."""

    def test_missing_token(self, cli: CliRunner) -> None:
        result = cli.invoke(main, ["-b", "bump", "--github-org", "acme", "true"], env=NO_TOKEN)

        assert result.exit_code == 1
        assert "GITHUB_OAUTH_TOKEN" in result.output

    def test_missing_branch(self, cli: CliRunner) -> None:
        result = cli.invoke(main, ["--github-org", "acme", "true"], env=NO_TOKEN)

        assert result.exit_code == 1
        assert "--branch-name" in result.output

    def test_missing_selection(self, cli: CliRunner) -> None:
        result = cli.invoke(main, ["-b", "bump", "true"], input="", env=NO_TOKEN)

        assert result.exit_code == 1
        assert "--github-org" in result.output

    def test_missing_command(self, cli: CliRunner) -> None:
        result = cli.invoke(main, ["-b", "bump", "--github-org", "acme"], env=NO_TOKEN)

        assert result.exit_code == 1
        assert "command or script" in result.output

    def test_invalid_config_file(self, cli: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("surprise: true\n")

        result = cli.invoke(main, ["-c", str(path)])

        assert result.exit_code == 1
        assert "Configuration error: Unknown configuration keys: surprise" in result.output

    def test_selection_error(self, cli: CliRunner, mock_run_fleet: MagicMock) -> None:
        mock_run_fleet.side_effect = NoValidReposError()

        result = cli.invoke(main, ["-b", "bump", "--repo", "nope", "true"])

        assert result.exit_code == 1
        assert "Repository selection error" in result.output

    def test_github_error(self, cli: CliRunner, mock_run_fleet: MagicMock) -> None:
        mock_run_fleet.side_effect = GitHubError(401, "Bad credentials")

        result = cli.invoke(main, ["-b", "bump", "--github-org", "acme", "true"])

        assert result.exit_code == 1
        assert "GitHub API error: 401 Bad credentials" in result.output

    def test_connection_error(self, cli: CliRunner, mock_run_fleet: MagicMock) -> None:
        mock_run_fleet.side_effect = httpx.ConnectError("[Errno -2] Name or service not known")

        result = cli.invoke(main, ["-b", "bump", "--github-org", "acme", "true"])

        assert result.exit_code == 1
        assert "Could not reach the GitHub API: [Errno -2]" in result.output
        assert "Traceback" not in result.output
