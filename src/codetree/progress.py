"""Progress indicators driven by the reporter's content pass."""
from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)


class ScanProgress(Protocol):
    def start(self, total: int) -> None:
        ...

    def advance(self, step: int = 1) -> None:
        ...

    def finish(self, message: str) -> None:
        ...


class NullProgress:
    """Progress sink that records counts but renders nothing."""

    def __init__(self) -> None:
        self.total = 0
        self.completed = 0
        self.message: str | None = None

    def start(self, total: int) -> None:
        self.total = total
        self.completed = 0

    def advance(self, step: int = 1) -> None:
        self.completed += step

    def finish(self, message: str) -> None:
        self.message = message


class RichScanProgress:
    """Terminal progress bar keyed to the total file count.

    Renders to stderr so stdout stays free for the operator messages.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def start(self, total: int) -> None:
        self._progress = Progress(
            SpinnerColumn(style="green"),
            TimeElapsedColumn(),
            BarColumn(bar_width=40, complete_style="cyan", finished_style="blue"),
            MofNCompleteColumn(),
            TextColumn("files"),
            TimeRemainingColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=False,
        )
        self._progress.start()
        self._task = self._progress.add_task("", total=total)

    def advance(self, step: int = 1) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, advance=step)

    def finish(self, message: str) -> None:
        if self._progress is None:
            return
        if self._task is not None:
            self._progress.update(self._task, description=message)
        self._progress.stop()
        self._progress = None
        self._task = None
