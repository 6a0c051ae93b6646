"""Options shared by every subcommand, and turning them into a config.

Flags override ``MHOOK_*`` environment variables, which override the
defaults in ``MhookConfig``.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from mhook.config import MhookConfig

BucketOption = typer.Option(None, "--bucket", "-b", help="S3 bucket.")
ProjectOption = typer.Option(None, "--project", "-p", help="Project name.")
BranchOption = typer.Option(None, "--branch", "-r", help="Git branch [default: master].")
RegionOption = typer.Option(None, "--region", help="AWS region [default: us-east-1].")
CommitOption = typer.Option(
    None, "--commit", "-c", help="Git commit (or 'latest') [default: latest]."
)
WorkersOption = typer.Option(
    None, "--workers", "-w", min=1, help="Concurrent object transfers [default: 1]."
)
DebugOption = typer.Option(False, "--debug", help="Enable debug logging.")


def build_config(
    *,
    bucket: str | None = None,
    project: str | None = None,
    branch: str | None = None,
    region: str | None = None,
    commit: str | None = None,
    workers: int | None = None,
    debug: bool = False,
) -> MhookConfig:
    """Merge CLI flags over the environment and set up logging."""
    overrides = {
        "bucket": bucket,
        "project": project,
        "branch": branch,
        "region": region,
        "commit": commit,
        "max_workers": workers,
    }
    config = MhookConfig(**{k: v for k, v in overrides.items() if v is not None})
    if debug:
        config = config.model_copy(update={"debug": True, "log_level": "DEBUG"})
    setup_logging(config)
    return config


def setup_logging(config: MhookConfig) -> None:
    """Route log records through Rich on stderr.

    In debug mode botocore's own logger is opened up too, so transport
    retries show up.
    """
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    logging.getLogger("botocore").setLevel(
        logging.DEBUG if config.debug else logging.WARNING
    )
    logging.getLogger("boto3").setLevel(
        logging.DEBUG if config.debug else logging.WARNING
    )
