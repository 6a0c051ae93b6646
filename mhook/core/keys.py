"""Key resolution for the MUFL layout.

Layout (logical keys, leading slash included)::

    /{project}/{branch}/HEAD                 <- id of the latest published commit
    /{project}/{branch}/latest/{target...}   <- latest published artifacts
    /{project}/{branch}/{commit}/{target...} <- artifacts at a commit

All functions here are pure.  The store adapter strips the leading slash
(``store_key``) before a key goes over the wire.
"""

from __future__ import annotations

from mhook.core.errors import InvalidCoordinate
from mhook.models.coordinates import ArtifactCoordinate

HEAD_MARKER = "HEAD"


def _check(coord: ArtifactCoordinate) -> None:
    if not coord.project:
        raise InvalidCoordinate("project cannot be empty.")
    if not coord.branch:
        raise InvalidCoordinate("branch cannot be empty.")


def head_key(coord: ArtifactCoordinate) -> str:
    """Key of the HEAD marker for the coordinate's project and branch."""
    _check(coord)
    return f"/{coord.project}/{coord.branch}/{HEAD_MARKER}"


def object_key(coord: ArtifactCoordinate) -> str:
    """Key of ``coord.target`` at ``coord.commit``.

    An empty target yields the commit prefix, ending in ``/``.
    """
    _check(coord)
    if not coord.commit:
        raise InvalidCoordinate("commit cannot be empty.")
    return f"/{coord.project}/{coord.branch}/{coord.commit}/{coord.target}"


def store_key(key: str) -> str:
    """Convert a logical key to the key actually stored in the bucket."""
    return key.lstrip("/")


def join_key(prefix: str, relative: str) -> str:
    """Join a key prefix and a relative path with exactly one ``/``."""
    relative = relative.replace("\\", "/").lstrip("/")
    if not prefix:
        return relative
    if not relative:
        return prefix
    return f"{prefix.rstrip('/')}/{relative}"


def relative_key(key: str, prefix: str) -> str | None:
    """Return ``key`` relative to ``prefix``, or ``None`` if it is outside.

    ``""`` means the key *is* the prefix (a single-object download).  A key
    that only shares the string prefix (``bin/server2`` under ``bin/server``)
    is outside.
    """
    if key == prefix:
        return ""
    if prefix.endswith("/") or not prefix:
        return key[len(prefix):] if key.startswith(prefix) else None
    if key.startswith(prefix + "/"):
        return key[len(prefix) + 1:]
    return None
