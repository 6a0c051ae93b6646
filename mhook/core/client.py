"""``Mhook`` — the operations exposed to the CLI and other callers.

Wires key resolution, tree transfers, publishing and waiting together for
one configured (bucket, project, branch, commit).  Nothing here exits the
process or prints; errors propagate to the caller.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from mhook.config import MhookConfig
from mhook.core.keys import object_key, store_key
from mhook.core.progress import NullProgressReporter, ProgressReporter
from mhook.core.publisher import VersionPublisher
from mhook.core.s3_store import S3ObjectStore
from mhook.core.store import ObjectStore
from mhook.core.tree import TreeTransfer
from mhook.core.waiter import wait_for
from mhook.models.coordinates import ArtifactCoordinate
from mhook.models.transfer import TreeTransferReport

logger = logging.getLogger(__name__)


class Mhook:
    """Artifact operations against one MUFL tree.

    Parameters
    ----------
    store:
        Object store backend holding the tree.
    max_workers:
        Concurrency of tree transfers (``1`` = sequential).
    reporter:
        Progress reporter for byte-level progress.
    wait_timeout:
        Default timeout, in seconds, for ``wait``.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        max_workers: int = 1,
        reporter: ProgressReporter | None = None,
        wait_timeout: float = 900.0,
    ) -> None:
        self.store = store
        self.wait_timeout = wait_timeout
        self.tree = TreeTransfer(
            store, max_workers=max_workers, reporter=reporter or NullProgressReporter()
        )
        self.publisher = VersionPublisher(store, self.tree)

    @classmethod
    def from_config(
        cls, config: MhookConfig, reporter: ProgressReporter | None = None
    ) -> Mhook:
        """Build an ``Mhook`` on an S3 bucket described by ``config``."""
        config.validate_location()
        store = S3ObjectStore(
            config.bucket,
            region=config.region,
            endpoint_url=config.endpoint_url,
            max_retries=config.max_retries,
            multipart_threshold=config.multipart_threshold,
            wait_delay=config.wait_delay_seconds,
        )
        return cls(
            store,
            max_workers=config.max_workers,
            reporter=reporter,
            wait_timeout=config.wait_timeout_seconds,
        )

    def download(
        self, coord: ArtifactCoordinate, destination: Path | str
    ) -> TreeTransferReport:
        """Download ``coord.target`` (a file or a whole prefix) to ``destination``."""
        prefix = store_key(object_key(coord))
        return self.tree.download(prefix, destination)

    def upload(self, coord: ArtifactCoordinate, source: Path | str) -> TreeTransferReport:
        """Upload ``source`` under ``coord.target`` at ``coord.commit``."""
        prefix = store_key(object_key(coord))
        return self.tree.upload(source, prefix)

    def publish_latest(
        self, coord: ArtifactCoordinate, source: Path | str
    ) -> TreeTransferReport:
        """Record ``coord.commit`` in HEAD and copy ``source`` into ``latest``."""
        return self.publisher.publish(coord, source)

    def head(self, coord: ArtifactCoordinate) -> str:
        """Return the commit id recorded in HEAD for the coordinate's branch."""
        return self.publisher.read_head(coord)

    def wait(
        self,
        coord: ArtifactCoordinate,
        timeout: float | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Block until ``coord.target`` exists or the timeout expires."""
        key = store_key(object_key(coord))
        timeout = self.wait_timeout if timeout is None else timeout
        logger.info("Waiting up to %gs for %s", timeout, key)
        wait_for(self.store, key, timeout, cancel=cancel)

    def describe(self, coord: ArtifactCoordinate) -> str:
        """Human-readable logical key of a coordinate, for messages."""
        return object_key(coord)
