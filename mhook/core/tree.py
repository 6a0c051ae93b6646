"""Tree transfer — a key prefix or a local directory, one object at a time.

Work is discovered lazily (listing pages are consumed as they arrive, the
directory walk yields as it goes) and fed to single-object transfers.  With
``max_workers == 1`` objects are processed strictly in order and the first
failure stops everything after it.  With more workers a bounded window of
jobs is in flight; the first failure cancels whatever has not started and
the jobs already running are allowed to finish.

Either way a failure surfaces as ``PartialTreeFailure`` naming the failed
key, or the prefix when discovery itself fails (a listing page, the
directory walk).  Files committed before the failure stay where they are.
"""

from __future__ import annotations

import functools
import itertools
import logging
import os
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path

from mhook.core.errors import (
    DestinationNotWritable,
    MhookError,
    PartialTreeFailure,
    TransferFailed,
)
from mhook.core.keys import join_key, relative_key
from mhook.core.progress import NullProgressReporter, ProgressReporter
from mhook.core.store import ObjectStore
from mhook.core.transfer import download_object, upload_object
from mhook.models.transfer import (
    RemoteObject,
    TransferDirection,
    TransferResult,
    TreeTransferReport,
)

logger = logging.getLogger(__name__)

# (key, thunk performing the transfer)
_Work = tuple[str, Callable[[], TransferResult]]


class TreeTransfer:
    """Fan a prefix or directory out into single-object transfers.

    Parameters
    ----------
    store:
        The object store backend.
    max_workers:
        Number of concurrent single-object transfers.  ``1`` (the default)
        processes objects sequentially.
    reporter:
        Progress reporter shared by all objects of one operation.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        max_workers: int = 1,
        reporter: ProgressReporter | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._store = store
        self._max_workers = max_workers
        self._reporter = reporter or NullProgressReporter()

    @property
    def max_workers(self) -> int:
        return self._max_workers

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download(self, prefix: str, directory: Path | str) -> TreeTransferReport:
        """Download every object under ``prefix`` into ``directory``.

        A key equal to ``prefix`` is written to ``directory`` itself, which
        is how a single file is downloaded.
        """
        directory = Path(directory)
        logger.info("Downloading %s -> %s", prefix, directory)
        results = self._run(self._download_work(prefix, directory), prefix)
        return TreeTransferReport(
            prefix=prefix,
            directory=directory,
            direction=TransferDirection.DOWNLOAD,
            results=results,
        )

    def _download_work(self, prefix: str, directory: Path) -> Iterator[_Work]:
        for remote in self._store.list(prefix):
            if remote.key.endswith("/"):
                # Zero-byte "folder" placeholder.
                continue
            relative = relative_key(remote.key, prefix)
            if relative is None:
                logger.debug("Skipping %s: not under %s", remote.key, prefix)
                continue
            parts = [p for p in relative.split("/") if p]
            if ".." in parts:
                raise TransferFailed(
                    f"Refusing to write {remote.key} outside {directory}",
                    key=remote.key,
                )
            local_path = directory.joinpath(*parts) if parts else directory
            yield remote.key, functools.partial(self._download_one, remote, local_path)

    def _download_one(self, remote: RemoteObject, local_path: Path) -> TransferResult:
        try:
            local_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationNotWritable(
                f"Cannot create {local_path.parent}: {e}", key=remote.key
            ) from e
        return download_object(
            self._store, remote.key, local_path, remote=remote, reporter=self._reporter
        )

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, source: Path | str, prefix: str) -> TreeTransferReport:
        """Upload ``source`` (a file or a directory tree) under ``prefix``."""
        source = Path(source)
        logger.info("Uploading %s -> %s", source, prefix)
        results = self._run(self._upload_work(source, prefix), prefix)
        return TreeTransferReport(
            prefix=prefix,
            directory=source,
            direction=TransferDirection.UPLOAD,
            results=results,
        )

    def _upload_work(self, source: Path, prefix: str) -> Iterator[_Work]:
        for path in walk_files(source):
            relative = path.name if path == source else path.relative_to(source).as_posix()
            key = join_key(prefix, relative)
            yield key, functools.partial(
                upload_object, self._store, path, key, reporter=self._reporter
            )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _run(self, work: Iterable[_Work], origin: str) -> list[TransferResult]:
        if self._max_workers == 1:
            return self._run_sequential(iter(work), origin)
        return self._run_pooled(iter(work), origin)

    def _run_sequential(self, items: Iterator[_Work], origin: str) -> list[TransferResult]:
        completed: list[TransferResult] = []
        while True:
            batch, error = _take(items, 1)
            if error is not None:
                raise _tree_failure(error.key or origin, error, completed) from error
            if not batch:
                return completed
            key, job = batch[0]
            try:
                completed.append(job())
            except MhookError as e:
                raise _tree_failure(key, e, completed) from e

    def _run_pooled(self, items: Iterator[_Work], origin: str) -> list[TransferResult]:
        completed: list[TransferResult] = []
        failure: tuple[str, MhookError] | None = None
        window = self._max_workers * 2

        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="mhook"
        ) as executor:
            batch, error = _take(items, window)
            if error is not None:
                failure = (error.key or origin, error)
            in_flight: dict[Future[TransferResult], str] = {
                executor.submit(job): key for key, job in batch
            }
            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    key = in_flight.pop(future)
                    if future.cancelled():
                        continue
                    try:
                        completed.append(future.result())
                    except MhookError as e:
                        if failure is None:
                            failure = (key, e)

                if failure is None:
                    batch, error = _take(items, len(done))
                    if error is not None:
                        failure = (error.key or origin, error)
                    for key, job in batch:
                        in_flight[executor.submit(job)] = key

                if failure is not None:
                    for future in in_flight:
                        future.cancel()

        if failure is not None:
            key, error = failure
            raise _tree_failure(key, error, completed) from error
        return completed


def walk_files(source: Path) -> Iterator[Path]:
    """Yield regular files under ``source`` in a stable order.

    ``source`` may itself be a file.  Walk errors (unreadable directories,
    a missing source) are raised, not skipped.
    """
    if source.is_file():
        yield source
        return
    if not source.is_dir():
        raise TransferFailed(f"Source does not exist: {source}")

    def _raise(error: OSError) -> None:
        raise TransferFailed(f"Cannot walk {error.filename}: {error}") from error

    for root, dirs, files in os.walk(source, onerror=_raise):
        dirs.sort()
        for name in sorted(files):
            path = Path(root, name)
            if path.is_file():
                yield path


def _take(
    items: Iterator[_Work], count: int
) -> tuple[list[_Work], MhookError | None]:
    """Pull up to ``count`` work items.

    Discovery errors (a listing page or a directory walk failing) are
    returned rather than raised so the caller can report them with the
    results completed so far.
    """
    batch: list[_Work] = []
    try:
        for item in itertools.islice(items, count):
            batch.append(item)
    except MhookError as e:
        return batch, e
    return batch, None


def _tree_failure(
    key: str, error: MhookError, completed: list[TransferResult]
) -> PartialTreeFailure:
    logger.error("Transfer of %s failed: %s", key, error)
    return PartialTreeFailure(
        f"Transfer of {key} failed after {len(completed)} object(s) completed: {error}",
        key=key,
        completed=completed,
    )
