"""Helpers for formatting CLI output safely across terminals."""

from __future__ import annotations

import sys

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from .backend import PERCENTAGE_INDETERMINATE, Status
from .text import Messages

_STATUS_LABELS = {
    Status.SCAN_APPLICATIONS: Messages.PROGRESS_SCAN_APPLICATIONS,
    Status.GENERATE_PACKAGE_LIST: Messages.PROGRESS_GENERATE_PACKAGE_LIST,
    Status.FINISHED: Messages.PROGRESS_FINISHED,
}


def _encoding_supports(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def supports_unicode_output(console: Console | None = None) -> bool:
    sample = "✓✗"
    if console is not None and _encoding_supports(sample, console.encoding):
        return True
    return _encoding_supports(sample, sys.stdout.encoding)


def format_visibility_icon(visible: bool, console: Console | None = None) -> str:
    if supports_unicode_output(console):
        return "[green]✓[/green]" if visible else "[dim]✗[/dim]"
    return "[green]yes[/green]" if visible else "[dim]no[/dim]"


class ConsoleProgress:
    """Progress reporter drawing a rich progress bar.

    A percentage of 101 switches the bar to indeterminate mode.
    """

    def __init__(self, console: Console) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=console,
            transient=True,
        )
        self._description = Messages.PROGRESS_STARTING
        self._task = self._progress.add_task(self._description, total=None)

    def __enter__(self) -> "ConsoleProgress":
        self._progress.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self._progress.stop()

    def set_status(self, status: Status) -> None:
        self._description = _STATUS_LABELS.get(status, status.value)
        self._progress.update(self._task, description=self._description)

    def set_percentage(self, percentage: int) -> None:
        if percentage >= PERCENTAGE_INDETERMINATE:
            # update() treats total=None as "unchanged"
            if self._progress.tasks and self._progress.tasks[0].total is not None:
                self._progress.remove_task(self._task)
                self._task = self._progress.add_task(self._description, total=None)
            return
        self._progress.update(self._task, total=100, completed=max(percentage, 0))
