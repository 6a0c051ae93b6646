"""Runtime configuration — env-driven.

Uses pydantic-settings: every field can be set through an ``MHOOK_*``
environment variable or a ``.env`` file, and CLI flags override both.

Examples
--------
::

    export MHOOK_BUCKET=build-artifacts
    export MHOOK_PROJECT=app
    export MHOOK_BRANCH=main
    export MHOOK_MAX_WORKERS=4

AWS credentials are not configured here; boto3's default credential chain
(environment, shared profile, instance metadata) applies.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from mhook.core.errors import InvalidCoordinate
from mhook.core.s3_store import DEFAULT_MULTIPART_THRESHOLD
from mhook.models.coordinates import LATEST, ArtifactCoordinate


class MhookConfig(BaseSettings):
    """Fully-resolved settings for one mhook invocation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MHOOK_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MUFL location
    bucket: str = ""
    project: str = ""
    branch: str = "master"
    commit: str = LATEST

    # Store access
    region: str = "us-east-1"
    endpoint_url: str | None = None
    max_retries: int = 10
    multipart_threshold: int = DEFAULT_MULTIPART_THRESHOLD

    # Transfers
    max_workers: int = 1
    wait_timeout_seconds: float = 900.0
    wait_delay_seconds: float = 5.0
    show_progress: bool = True

    # Logging
    log_level: str = "INFO"
    debug: bool = False

    def validate_location(self) -> None:
        """Raise ``InvalidCoordinate`` unless bucket and project are set."""
        if not self.bucket:
            raise InvalidCoordinate("bucket cannot be empty.")
        if not self.project:
            raise InvalidCoordinate("project cannot be empty.")
        if not self.branch:
            raise InvalidCoordinate("branch cannot be empty.")

    def coordinate(self, target: str = "") -> ArtifactCoordinate:
        """The coordinate of ``target`` at the configured commit."""
        self.validate_location()
        return ArtifactCoordinate.create(
            project=self.project,
            branch=self.branch,
            commit=self.commit,
            target=target,
        )
