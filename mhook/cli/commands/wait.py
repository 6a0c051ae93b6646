"""``mhook wait TARGET`` — block until a key exists."""

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
    build_config,
)
from mhook.core.client import Mhook
from mhook.core.errors import MhookError

console = Console(stderr=True)


def wait_cmd(
    target: str = typer.Argument(..., help="Target path under the commit."),
    timeout: float = typer.Option(
        None, "--timeout", "-t", help="Seconds to wait [default: 900]."
    ),
    commit: str = CommitOption,
    bucket: str = BucketOption,
    project: str = ProjectOption,
    branch: str = BranchOption,
    region: str = RegionOption,
    debug: bool = DebugOption,
) -> None:
    """Wait until a target key exists."""
    try:
        config = build_config(
            bucket=bucket,
            project=project,
            branch=branch,
            region=region,
            commit=commit,
            debug=debug,
        )
        coord = config.coordinate(target)
        Mhook.from_config(config).wait(coord, timeout)
    except MhookError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)
