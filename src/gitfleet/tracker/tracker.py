"""OutcomeTracker - Concurrency-safe record of what happened to each repository."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from gitfleet.github.models import Repository
from gitfleet.tracker.models import OutcomeEvent, RunReport

if TYPE_CHECKING:
    from gitfleet.selection.models import AllowedRepo, SelectionMode


class OutcomeTracker:
    """Collects outcome events, pull request URLs and run metadata.

    Every mutating method may be called from concurrently running pipeline
    tasks; they are serialized by a single lock. A repository is recorded at
    most once per event, compared by repository name. The report is generated
    after all tasks have finished.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the tracker.

        Args:
            clock: Monotonic clock used to measure the run time.
        """
        self._clock = clock
        self._start = clock()
        self._lock = threading.Lock()
        self._repos: dict[OutcomeEvent, list[Repository]] = {}
        self._pulls: dict[str, str] = {}
        self._draft_pulls: dict[str, str] = {}
        self._selection_mode: SelectionMode | None = None
        self._command: list[str] = []
        self._file_provided_repos: list[AllowedRepo] = []
        self._repo_flag_provided_repos: list[AllowedRepo] = []
        self._skip_pull_requests = False

    def track_single(self, event: OutcomeEvent, repo: Repository) -> None:
        """Record ``event`` for ``repo`` unless it is already recorded."""
        with self._lock:
            self._track_if_missing(event, repo)

    def track_multiple(self, event: OutcomeEvent, repos: Iterable[Repository]) -> None:
        """Record ``event`` for every repository in ``repos``."""
        with self._lock:
            for repo in repos:
                self._track_if_missing(event, repo)

    def _track_if_missing(self, event: OutcomeEvent, repo: Repository) -> None:
        tracked = self._repos.setdefault(event, [])
        if any(existing.name == repo.name for existing in tracked):
            return
        tracked.append(repo)

    def track_pull_request(self, repo_name: str, url: str) -> None:
        with self._lock:
            self._pulls[repo_name] = url

    def track_draft_pull_request(self, repo_name: str, url: str) -> None:
        with self._lock:
            self._draft_pulls[repo_name] = url

    def set_selection_mode(self, mode: SelectionMode) -> None:
        self._selection_mode = mode

    def set_command(self, command: list[str]) -> None:
        self._command = list(command)

    def set_file_provided_repos(self, repos: Iterable[AllowedRepo]) -> None:
        with self._lock:
            self._file_provided_repos.extend(repos)

    def set_repo_flag_provided_repos(self, repos: Iterable[AllowedRepo]) -> None:
        with self._lock:
            self._repo_flag_provided_repos.extend(repos)

    def set_skip_pull_requests(self, skip: bool) -> None:
        self._skip_pull_requests = skip

    def get_multiple(self, event: OutcomeEvent) -> list[Repository]:
        """Repositories recorded under ``event`` (a copy)."""
        with self._lock:
            return list(self._repos.get(event, []))

    @property
    def pull_requests(self) -> dict[str, str]:
        with self._lock:
            return dict(self._pulls)

    @property
    def draft_pull_requests(self) -> dict[str, str]:
        with self._lock:
            return dict(self._draft_pulls)

    def runtime_seconds(self) -> int:
        """Whole seconds elapsed since the tracker was created."""
        return int(self._clock() - self._start)

    def generate_run_report(self) -> RunReport:
        """Snapshot everything recorded so far."""
        with self._lock:
            return RunReport(
                repos={event: list(repos) for event, repos in self._repos.items() if repos},
                pull_requests=dict(self._pulls),
                draft_pull_requests=dict(self._draft_pulls),
                selection_mode=self._selection_mode,
                command=list(self._command),
                runtime_seconds=self.runtime_seconds(),
                file_provided_repos=list(self._file_provided_repos),
                repo_flag_provided_repos=list(self._repo_flag_provided_repos),
                skip_pull_requests=self._skip_pull_requests,
            )
