"""Report rendering - the end-of-run summary printed to the terminal."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime

import click

from gitfleet.tracker import EVENT_DESCRIPTIONS, RunReport

BANNER = "*" * 65


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    """Lay out rows as a bordered, left aligned text table."""
    widths = [len(header) for header in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: Sequence[str]) -> str:
        return "│ " + " │ ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)) + " │"

    rule = "─" * (sum(widths) + 3 * len(widths) + 1)
    lines = [rule, line([header.upper() for header in headers]), rule]
    lines.extend(line(row) for row in rows)
    lines.append(rule)
    return lines


def render_report(
    report: RunReport,
    echo: Callable[[str], None] = click.echo,
    now: datetime | None = None,
) -> None:
    """Print the run summary.

    Args:
        report: The finished run's report.
        echo: Output function. Defaults to click.echo.
        now: Timestamp for the header. Defaults to the current UTC time.
    """
    now = now or datetime.now(UTC)

    echo("")
    echo(BANNER)
    echo(f"  GITFLEET RUN SUMMARY @ {now.isoformat(sep=' ', timespec='seconds')}")
    echo(f"  Runtime in seconds: {report.runtime_seconds}")
    echo(BANNER)
    echo("")
    echo("COMMAND SUPPLIED")
    echo("")
    echo(" ".join(report.command))
    echo("")
    echo("REPO SELECTION METHOD USED FOR THIS RUN")
    echo("")
    echo(str(report.selection_mode or ""))

    if report.file_provided_repos:
        echo("")
        echo(" REPOS SUPPLIED VIA --repos FILE FLAG")
        for text in format_table(
            ["Organization", "Name"],
            [[repo.organization, repo.name] for repo in report.file_provided_repos],
        ):
            echo(text)

    for event, description in EVENT_DESCRIPTIONS.items():
        repos = report.repos.get(event)
        if not repos:
            continue
        echo("")
        echo(f" {description.upper()}")
        for text in format_table(["Name", "URL"], [[repo.name, repo.html_url] for repo in repos]):
            echo(text)

    _render_pulls(echo, "PULL REQUESTS OPENED", report.pull_requests)
    _render_pulls(echo, "DRAFT PULL REQUESTS OPENED", report.draft_pull_requests)


def _render_pulls(echo: Callable[[str], None], title: str, pulls: dict[str, str]) -> None:
    if not pulls:
        return
    echo("")
    echo("*" * 53)
    echo(f"  {title}")
    echo("*" * 53)
    for text in format_table(["Repo", "URL"], [[name, url] for name, url in sorted(pulls.items())]):
        echo(text)
