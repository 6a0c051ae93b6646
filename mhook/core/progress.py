"""Byte-level progress reporting for transfers.

Transfers report through ``ProgressReporter``; each object gets its own
``ProgressTask``.  ``RichProgressReporter`` draws bars with ``rich.progress``
and is only worth using on a terminal.  ``NullProgressReporter`` discards
everything.
"""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class ProgressTask(Protocol):
    def advance(self, amount: int) -> None: ...

    def finish(self) -> None: ...


class ProgressReporter(Protocol):
    def start(self, description: str, total: int) -> ProgressTask: ...


class _NullTask:
    def advance(self, amount: int) -> None:
        pass

    def finish(self) -> None:
        pass


class NullProgressReporter:
    """Reporter used when nobody is watching (non-TTY, tests)."""

    def __enter__(self) -> NullProgressReporter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        pass

    def start(self, description: str, total: int) -> ProgressTask:
        return _NullTask()


class _RichTask:
    def __init__(self, progress: Progress, task_id: TaskID, total: int) -> None:
        self._progress = progress
        self._task_id = task_id
        self._total = total

    def advance(self, amount: int) -> None:
        self._progress.advance(self._task_id, amount)

    def finish(self) -> None:
        self._progress.update(self._task_id, completed=self._total, visible=False)


class RichProgressReporter:
    """One Rich progress bar per object, shared live display.

    Use as a context manager so the live display is started and stopped
    around a whole (possibly multi-object) operation.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._progress = Progress(
            TextColumn("[bold cyan]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
        )

    def __enter__(self) -> RichProgressReporter:
        self._progress.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._progress.stop()

    def start(self, description: str, total: int) -> ProgressTask:
        task_id = self._progress.add_task(description, total=total or None)
        return _RichTask(self._progress, task_id, total)


def default_reporter(console: Console | None = None) -> RichProgressReporter | NullProgressReporter:
    """Rich bars on a terminal, nothing otherwise."""
    console = console or Console(stderr=True)
    if console.is_terminal:
        return RichProgressReporter(console)
    return NullProgressReporter()
