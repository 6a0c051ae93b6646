"""``mhook upload SOURCE [PREFIX]`` — publish artifacts for a commit.

Directories are uploaded recursively.  With ``--latest`` the commit is
also recorded in HEAD and the same files are copied to ``latest/``.
"""

from __future__ import annotations

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


def upload_cmd(
    source: str = typer.Argument(..., help="File or directory to upload."),
    prefix: str = typer.Argument("", help="Prefix under the commit directory."),
    latest: bool = typer.Option(
        False,
        "--latest",
        help="Tag this upload as latest, copying it to the `latest` folder "
        "and creating a HEAD file.",
    ),
    commit: str = CommitOption,
    bucket: str = BucketOption,
    project: str = ProjectOption,
    branch: str = BranchOption,
    region: str = RegionOption,
    workers: int = WorkersOption,
    debug: bool = DebugOption,
) -> None:
    """Upload an mhook artifact."""
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
        coord = config.coordinate(prefix)
        reporter = default_reporter() if config.show_progress else NullProgressReporter()
        mhook = Mhook.from_config(config, reporter=reporter)

        with reporter:
            report = mhook.upload(coord, source)
            for result in report.results:
                console.print(f"/{result.job.key}")
            if latest:
                published = mhook.publish_latest(coord, source)
    except PartialTreeFailure as exc:
        console.print(f"[bold red]Upload failed at {exc.key}:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except MhookError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(f"[bold green]{report.transferred_count} uploaded[/bold green]")
    if latest:
        console.print(
            f"[bold green]HEAD -> {coord.commit}[/bold green], "
            f"{published.transferred_count} copied to latest"
        )
