"""HEAD marker and ``latest`` alias management.

Publishing writes the commit id to ``/{project}/{branch}/HEAD`` *first* and
then copies the artifact tree to ``/{project}/{branch}/latest/``.  A reader
racing a publish can therefore see a HEAD whose ``latest`` tree is still
being copied; ``latest`` is only eventually consistent with HEAD.  Concurrent
publishers are not arbitrated: the last write wins.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from mhook.core.errors import InvalidCoordinate
from mhook.core.keys import head_key, object_key, store_key
from mhook.core.store import ObjectStore
from mhook.core.tree import TreeTransfer
from mhook.models.coordinates import ArtifactCoordinate
from mhook.models.transfer import TreeTransferReport

logger = logging.getLogger(__name__)


class VersionPublisher:
    """Promotes a commit's artifacts to the ``latest`` alias."""

    def __init__(self, store: ObjectStore, tree: TreeTransfer | None = None) -> None:
        self._store = store
        self._tree = tree or TreeTransfer(store)

    def write_head(self, coord: ArtifactCoordinate) -> None:
        """Overwrite the HEAD marker with ``coord.commit``."""
        if coord.is_latest or not coord.commit:
            raise InvalidCoordinate(
                f"Cannot record {coord.commit!r} in HEAD; a commit id is required."
            )
        key = store_key(head_key(coord))
        self._store.put(key, coord.commit.encode("utf-8"))
        logger.info("HEAD of %s/%s -> %s", coord.project, coord.branch, coord.commit)

    def read_head(self, coord: ArtifactCoordinate) -> str:
        """Return the commit id currently recorded in the HEAD marker."""
        buffer = io.BytesIO()
        self._store.get(store_key(head_key(coord)), buffer)
        return buffer.getvalue().decode("utf-8")

    def publish(self, coord: ArtifactCoordinate, source: Path | str) -> TreeTransferReport:
        """Record ``coord.commit`` as HEAD, then copy ``source`` into ``latest``.

        ``coord.target`` is the prefix under ``latest/`` that ``source`` is
        uploaded to.
        """
        self.write_head(coord)
        latest_prefix = store_key(object_key(coord.to_latest()))
        logger.info("Publishing %s to %s", source, latest_prefix)
        return self._tree.upload(source, latest_prefix)
