"""Main Typer application — imports and registers all CLI commands.

Entry point: ``mhook`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from mhook import __version__
from mhook.cli.commands.download import download_cmd
from mhook.cli.commands.head import head_cmd
from mhook.cli.commands.upload import upload_cmd
from mhook.cli.commands.wait import wait_cmd

app = typer.Typer(
    name="mhook",
    help="Manage the MUFL: fetch and publish versioned build artifacts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="head", help="Print latest commit.")(head_cmd)
app.command(name="wait", help="Wait until key exists.")(wait_cmd)
app.command(
    name="download",
    help="Download mhook artifact. If no destination is supplied, "
    "use the base path of the target.",
)(download_cmd)
app.command(name="upload", help="Upload mhook artifact.")(upload_cmd)


@app.command(name="version", help="Show the mhook version.")
def version_cmd() -> None:
    typer.echo(__version__)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
