"""Unit tests for CommandRunner and the command environment."""

from pathlib import Path

import pytest

from gitfleet.github import Repository
from gitfleet.pipeline import CommandError, CommandRunner, command_environment


@pytest.fixture
def runner() -> CommandRunner:
    return CommandRunner()


@pytest.mark.unit
class TestCommandEnvironment:
    """Tests for command_environment."""

    def test_adds_repo_variables_to_base(self) -> None:
        env = command_environment(
            Repository(owner="acme", name="api"), dry_run=False, base={"PATH": "/usr/bin"}
        )

        assert env == {
            "PATH": "/usr/bin",
            "GITFLEET_DRY_RUN": "false",
            "GITFLEET_REPO_NAME": "api",
            "GITFLEET_REPO_OWNER": "acme",
        }

    def test_inherits_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITFLEET_TEST_MARKER", "1")

        env = command_environment(Repository(owner="acme", name="api"), dry_run=True)

        assert env["GITFLEET_TEST_MARKER"] == "1"
        assert env["GITFLEET_DRY_RUN"] == "true"


@pytest.mark.unit
class TestCommandRunner:
    """Tests for CommandRunner.run."""

    def test_captures_combined_output(self, runner: CommandRunner, tmp_path: Path) -> None:
        env = {"PATH": "/usr/bin:/bin"}

        result = runner.run(["sh", "-c", "echo out; echo err >&2"], tmp_path, env)

        assert result.returncode == 0
        assert "out" in result.output
        assert "err" in result.output

    def test_runs_in_working_directory(self, runner: CommandRunner, tmp_path: Path) -> None:
        runner.run(["touch", "created.txt"], tmp_path, {"PATH": "/usr/bin:/bin"})

        assert (tmp_path / "created.txt").exists()

    def test_sees_environment(self, runner: CommandRunner, tmp_path: Path) -> None:
        env = {"PATH": "/usr/bin:/bin", "GITFLEET_REPO_NAME": "api"}

        result = runner.run(["sh", "-c", 'echo "name=$GITFLEET_REPO_NAME"'], tmp_path, env)

        assert result.output.strip() == "name=api"

    def test_non_zero_exit(self, runner: CommandRunner, tmp_path: Path) -> None:
        with pytest.raises(CommandError) as exc_info:
            runner.run(["sh", "-c", "echo broken; exit 3"], tmp_path, {"PATH": "/usr/bin:/bin"})

        assert exc_info.value.returncode == 3
        assert "broken" in exc_info.value.output
        assert "status 3" in str(exc_info.value)

    def test_missing_program(self, runner: CommandRunner, tmp_path: Path) -> None:
        with pytest.raises(CommandError) as exc_info:
            runner.run(["gitfleet-no-such-program"], tmp_path, {"PATH": "/usr/bin:/bin"})

        assert exc_info.value.returncode is None

    def test_empty_command(self, runner: CommandRunner, tmp_path: Path) -> None:
        with pytest.raises(CommandError):
            runner.run([], tmp_path, {})
