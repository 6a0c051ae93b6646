"""Tests for progress reporters."""

from __future__ import annotations

import io

from rich.console import Console

from mhook.core.progress import (
    NullProgressReporter,
    RichProgressReporter,
    default_reporter,
)


class TestReporters:
    def test_null_reporter_accepts_everything(self):
        with NullProgressReporter() as reporter:
            task = reporter.start("file", 10)
            task.advance(5)
            task.finish()

    def test_rich_reporter_tracks_bytes(self):
        console = Console(file=io.StringIO(), force_terminal=False)
        with RichProgressReporter(console) as reporter:
            task = reporter.start("server", 100)
            task.advance(40)
            task.finish()
            (state,) = reporter._progress.tasks
            assert state.completed == 100
            assert state.visible is False

    def test_default_is_null_off_terminal(self):
        console = Console(file=io.StringIO(), force_terminal=False)
        assert isinstance(default_reporter(console), NullProgressReporter)

    def test_default_is_rich_on_terminal(self):
        console = Console(file=io.StringIO(), force_terminal=True)
        assert isinstance(default_reporter(console), RichProgressReporter)
