"""Freshness checks — decide whether a download has anything to do.

The local fingerprint is the MD5 hex digest of the file, which is what S3
reports as the ETag of a single-part upload.  The comparison itself is
normally pushed to the store: the digest travels as an ``If-None-Match``
precondition and a "not modified" answer means the local copy is current.

Any doubt resolves towards transferring.  A missing or unreadable local
file, a multipart ETag (``"<md5>-<parts>"``) or an ETag in an unknown
format all mean "transfer needed"; nothing is ever skipped on a guess.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path

from mhook.models.transfer import RemoteObject

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_MD5_HEX = re.compile(r"^[0-9a-f]{32}$")


def local_fingerprint(path: Path | str) -> str | None:
    """Return the MD5 hex digest of ``path``, or ``None`` if it can't be read."""
    hasher = hashlib.md5(usedforsecurity=False)
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                hasher.update(chunk)
    except OSError:
        return None
    return hasher.hexdigest()


def normalize_etag(etag: str | None) -> str | None:
    """Strip quotes and weak-validator markers from a store ETag."""
    if not etag:
        return None
    value = etag.strip()
    if value.startswith("W/"):
        value = value[2:]
    return value.strip('"').lower() or None


def is_comparable(etag: str | None) -> bool:
    """Whether ``etag`` was produced by the same algorithm as the fingerprint."""
    return etag is not None and bool(_MD5_HEX.match(etag))


def should_transfer(fingerprint: str | None, remote: RemoteObject | None) -> bool:
    """Decide from known metadata whether ``remote`` must be fetched.

    Returns ``False`` only when the local fingerprint and the remote ETag
    are both present, comparable, and equal.
    """
    if fingerprint is None or remote is None:
        return True
    etag = normalize_etag(remote.etag)
    if not is_comparable(etag):
        logger.debug(
            "ETag %r for %s is not an MD5 digest; treating as changed.",
            remote.etag,
            remote.key,
        )
        return True
    return etag != fingerprint
