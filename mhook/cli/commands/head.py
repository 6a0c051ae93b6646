"""``mhook head`` — print the commit id recorded in HEAD."""

from __future__ import annotations

import typer
from rich.console import Console

from mhook.cli.options import (
    BranchOption,
    BucketOption,
    DebugOption,
    ProjectOption,
    RegionOption,
    build_config,
)
from mhook.core.client import Mhook
from mhook.core.errors import MhookError

console = Console(stderr=True)


def head_cmd(
    bucket: str = BucketOption,
    project: str = ProjectOption,
    branch: str = BranchOption,
    region: str = RegionOption,
    debug: bool = DebugOption,
) -> None:
    """Print the latest published commit for a branch."""
    try:
        config = build_config(
            bucket=bucket, project=project, branch=branch, region=region, debug=debug
        )
        mhook = Mhook.from_config(config)
        commit = mhook.head(config.coordinate())
    except MhookError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    # Plain, without newline, for $(mhook head ...)
    typer.echo(commit, nl=False)
