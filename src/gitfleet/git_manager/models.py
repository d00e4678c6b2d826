"""Data models for Git Manager."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PullOutcome(str, Enum):
    """Result of a successful pull."""

    UPDATED = "updated"
    ALREADY_UP_TO_DATE = "already-up-to-date"


@dataclass(frozen=True)
class StatusEntry:
    """One line of ``git status --porcelain``.

    Attributes:
        xy: Two-letter status code (index, worktree), ``??`` for untracked.
        path: Path relative to the repository root.
        orig_path: Source path of a rename or copy.
    """

    xy: str
    path: str
    orig_path: str | None = None

    @property
    def untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True)
class WorktreeStatus:
    """Worktree status as a list of changed paths."""

    entries: tuple[StatusEntry, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.entries

    @property
    def untracked_paths(self) -> list[str]:
        return [entry.path for entry in self.entries if entry.untracked]

    def __str__(self) -> str:
        return "\n".join(f"{entry.xy} {entry.path}" for entry in self.entries)
