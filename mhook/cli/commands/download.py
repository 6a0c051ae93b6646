"""``mhook download TARGET [DESTINATION]`` — fetch an artifact or a tree.

If no destination is given, the base name of the target is used.  Files
that already match the stored object are left alone.
"""

from __future__ import annotations

import posixpath

import typer
from rich.console import Console

from mhook.cli.options import (
    BranchOption,
    BucketOption,
    CommitOption,
    DebugOption,
    ProjectOption,
    RegionOption,
    WorkersOption,
    build_config,
)
from mhook.core.client import Mhook
from mhook.core.errors import MhookError, PartialTreeFailure
from mhook.core.progress import NullProgressReporter, default_reporter

console = Console()


def default_destination(target: str) -> str:
    """The destination used when none is given: the target's base name."""
    return posixpath.basename(target.rstrip("/")) or "."


def download_cmd(
    target: str = typer.Argument(..., help="Target path under the commit."),
    destination: str = typer.Argument(
        None, help="Local path [default: base name of the target]."
    ),
    wait: bool = typer.Option(
        False, "--wait", help="Wait for the key to exist before proceeding."
    ),
    commit: str = CommitOption,
    bucket: str = BucketOption,
    project: str = ProjectOption,
    branch: str = BranchOption,
    region: str = RegionOption,
    workers: int = WorkersOption,
    debug: bool = DebugOption,
) -> None:
    """Download an mhook artifact."""
    destination = destination or default_destination(target)
    try:
        config = build_config(
            bucket=bucket,
            project=project,
            branch=branch,
            region=region,
            commit=commit,
            workers=workers,
            debug=debug,
        )
        coord = config.coordinate(target)
        reporter = default_reporter() if config.show_progress else NullProgressReporter()
        mhook = Mhook.from_config(config, reporter=reporter)

        if wait:
            mhook.wait(coord)

        console.print(f"Downloading from [cyan]{mhook.describe(coord)}[/cyan]")
        with reporter:
            report = mhook.download(coord, destination)
    except PartialTreeFailure as exc:
        console.print(f"[bold red]Download failed at {exc.key}:[/bold red] {exc}")
        if exc.completed:
            console.print(
                f"[dim]{len(exc.completed)} object(s) completed before the failure "
                f"remain in {destination}.[/dim]"
            )
        raise typer.Exit(code=1)
    except MhookError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if not report.results:
        console.print(f"[bold yellow]Nothing found under {mhook.describe(coord)}[/bold yellow]")
        raise typer.Exit(code=1)

    console.print(
        f"[bold green]{report.transferred_count} downloaded[/bold green], "
        f"{report.not_modified_count} up to date "
        f"({report.bytes_transferred} bytes)"
    )
