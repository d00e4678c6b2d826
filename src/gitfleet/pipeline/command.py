"""CommandRunner - Runs the user's command inside a cloned repository.

The command inherits gitfleet's environment plus three variables describing
the repository it runs against:

    GITFLEET_REPO_OWNER: Owner (organization or user) of the repository.
    GITFLEET_REPO_NAME: Name of the repository.
    GITFLEET_DRY_RUN: ``"true"`` when the run is a dry run, otherwise ``"false"``.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from gitfleet.github.models import Repository
from gitfleet.pipeline.exceptions import CommandError
from gitfleet.pipeline.models import CommandResult


def command_environment(
    repo: Repository, dry_run: bool, base: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Environment for the command: the parent environment plus GITFLEET_* variables."""
    env = dict(os.environ if base is None else base)
    env["GITFLEET_DRY_RUN"] = "true" if dry_run else "false"
    env["GITFLEET_REPO_NAME"] = repo.name
    env["GITFLEET_REPO_OWNER"] = repo.owner
    return env


class CommandRunner:
    """Runs a command synchronously and captures its combined output."""

    def run(
        self, command: Sequence[str], cwd: str | Path, env: Mapping[str, str]
    ) -> CommandResult:
        """Run ``command`` in ``cwd``.

        Args:
            command: Program and arguments.
            cwd: Working directory (the repository clone).
            env: Full environment for the process.

        Returns:
            CommandResult for a zero exit status.

        Raises:
            CommandError: If the command cannot be started or exits non-zero.
        """
        if not command:
            raise CommandError("No command to run")
        try:
            completed = subprocess.run(
                list(command),
                cwd=cwd,
                env=dict(env),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise CommandError(f"Failed to start {command[0]}: {e}") from e

        if completed.returncode != 0:
            raise CommandError(
                f"{command[0]} exited with status {completed.returncode}",
                returncode=completed.returncode,
                output=completed.stdout or "",
            )
        return CommandResult(returncode=completed.returncode, output=completed.stdout or "")
