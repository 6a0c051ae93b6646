"""Single-object transfer — one key, one local file.

Downloads land in a temporary file created next to the destination (same
directory, hence same filesystem) and are moved into place with
``os.replace``.  Readers of the destination see either the old bytes or
the new bytes, never a partial file.  The temporary file is removed on
every path except the final successful rename.
"""

from __future__ import annotations

import contextlib
import errno
import logging
import os
import secrets
import shutil
from pathlib import Path

from mhook.core.errors import DestinationNotWritable, NotModified, TransferFailed
from mhook.core.freshness import local_fingerprint, should_transfer
from mhook.core.progress import NullProgressReporter, ProgressReporter
from mhook.core.store import ObjectStore
from mhook.models.transfer import (
    RemoteObject,
    TransferDirection,
    TransferJob,
    TransferOutcome,
    TransferResult,
)

logger = logging.getLogger(__name__)

TEMP_PREFIX = "mhook-"
_TEMP_ATTEMPTS = 100


def ensure_writable_dir(directory: Path, key: str | None = None) -> None:
    """Raise ``DestinationNotWritable`` unless ``directory`` accepts new files."""
    if not directory.is_dir():
        raise DestinationNotWritable(
            f"Destination directory does not exist: {directory}", key=key
        )
    if not os.access(directory, os.W_OK | os.X_OK):
        raise DestinationNotWritable(
            f"Destination directory is not writable: {directory}", key=key
        )


def _create_temp(directory: Path) -> tuple[int, str]:
    """Create a uniquely named temporary file in ``directory``.

    Unlike ``tempfile.mkstemp`` the file is opened with mode 0666, so the
    kernel applies the process umask and a new download ends up with the
    same permissions as any other freshly created file.
    """
    flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
    for _ in range(_TEMP_ATTEMPTS):
        path = os.path.join(directory, TEMP_PREFIX + secrets.token_hex(8))
        try:
            return os.open(path, flags, 0o666), path
        except FileExistsError:
            continue
    raise FileExistsError(errno.EEXIST, "No usable temporary name", str(directory))


def download_object(
    store: ObjectStore,
    key: str,
    destination: Path | str,
    *,
    remote: RemoteObject | None = None,
    reporter: ProgressReporter | None = None,
) -> TransferResult:
    """Download ``key`` onto ``destination``, skipping it if already current.

    ``remote`` is the listing entry for ``key`` when the caller has one; its
    ETag lets an unchanged file be recognised without a request.
    """
    destination = Path(destination)
    parent = destination.parent
    ensure_writable_dir(parent, key)

    job = TransferJob(
        key=key,
        local_path=destination,
        expected_size=remote.size if remote else 0,
        direction=TransferDirection.DOWNLOAD,
    )

    fingerprint = local_fingerprint(destination)
    if remote is not None and not should_transfer(fingerprint, remote):
        logger.info("Using local copy for %s", destination)
        return TransferResult(job=job, outcome=TransferOutcome.NOT_MODIFIED)

    task = (reporter or NullProgressReporter()).start(destination.name, job.expected_size)
    temp_name: str | None = None
    committed = False
    try:
        fd, temp_name = _create_temp(parent)
        with os.fdopen(fd, "wb") as temp:
            try:
                written = store.get(
                    key, temp, if_none_match=fingerprint, callback=task.advance
                )
            except NotModified:
                logger.info("Using local copy for %s", destination)
                return TransferResult(job=job, outcome=TransferOutcome.NOT_MODIFIED)
            temp.flush()
            os.fsync(temp.fileno())

        if destination.exists():
            shutil.copymode(destination, temp_name)
        os.replace(temp_name, destination)
        committed = True
    except OSError as e:
        raise TransferFailed(f"Could not write {destination}: {e}", key=key) from e
    finally:
        task.finish()
        if not committed and temp_name is not None:
            with contextlib.suppress(FileNotFoundError):
                os.remove(temp_name)

    logger.info("Downloaded %s", destination)
    return TransferResult(
        job=job, outcome=TransferOutcome.TRANSFERRED, bytes_transferred=written
    )


def upload_object(
    store: ObjectStore,
    source: Path | str,
    key: str,
    *,
    reporter: ProgressReporter | None = None,
) -> TransferResult:
    """Stream ``source`` to ``key`` without reading it into memory."""
    source = Path(source)
    try:
        size = source.stat().st_size
    except OSError as e:
        raise TransferFailed(f"Could not read {source}: {e}", key=key) from e

    job = TransferJob(
        key=key,
        local_path=source,
        expected_size=size,
        direction=TransferDirection.UPLOAD,
    )
    logger.info("Uploading %s -> %s", source, key)
    task = (reporter or NullProgressReporter()).start(key, size)
    try:
        with open(source, "rb") as fh:
            store.put(key, fh, callback=task.advance)
    except OSError as e:
        raise TransferFailed(f"Could not read {source}: {e}", key=key) from e
    finally:
        task.finish()

    return TransferResult(
        job=job, outcome=TransferOutcome.TRANSFERRED, bytes_transferred=size
    )
