"""Shared test fixtures for mhook."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

import pytest

from mhook.core.errors import NotModified, ObjectNotFound, TransferFailed
from mhook.core.store import ProgressCallback
from mhook.models.coordinates import ArtifactCoordinate
from mhook.models.transfer import RemoteObject


class InMemoryObjectStore:
    """Dict-backed ``ObjectStore`` double with failure injection.

    ``fail_keys`` maps a key to an exception raised by ``get``/``put``.
    ``partial_keys`` makes ``get`` write half of the object and then fail,
    like a connection dropping mid-body.  ``page_size`` splits ``list``
    results into pages, the way S3 paginates.
    """

    def __init__(self, page_size: int = 1000) -> None:
        self.objects: dict[str, bytes] = {}
        self.etags: dict[str, str] = {}
        self.fail_keys: dict[str, Exception] = {}
        self.partial_keys: set[str] = set()
        self.page_size = page_size
        self.get_calls: list[tuple[str, str | None]] = []
        self.put_calls: list[str] = []
        self.head_calls: list[str] = []
        self.bytes_sent = 0
        self.pages_served = 0

    # Test helpers -----------------------------------------------------

    def seed(self, key: str, data: bytes, *, etag: str | None = None) -> None:
        self.objects[key] = data
        self.etags[key] = etag or hashlib.md5(data).hexdigest()

    # ObjectStore ------------------------------------------------------

    def get(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        if_none_match: str | None = None,
        callback: ProgressCallback | None = None,
    ) -> int:
        self.get_calls.append((key, if_none_match))
        if key in self.fail_keys:
            raise self.fail_keys[key]
        if key not in self.objects:
            raise ObjectNotFound(f"NoSuchKey: {key}", key=key)
        if if_none_match is not None and if_none_match == self.etags[key]:
            raise NotModified(key)
        data = self.objects[key]
        if key in self.partial_keys:
            fileobj.write(data[: len(data) // 2])
            raise TransferFailed(f"Connection reset while reading {key}", key=key)
        fileobj.write(data)
        self.bytes_sent += len(data)
        if callback is not None:
            callback(len(data))
        return len(data)

    def put(
        self,
        key: str,
        body: bytes | BinaryIO,
        *,
        callback: ProgressCallback | None = None,
    ) -> None:
        self.put_calls.append(key)
        if key in self.fail_keys:
            raise self.fail_keys[key]
        data = body if isinstance(body, bytes) else body.read()
        self.seed(key, data)
        if callback is not None:
            callback(len(data))

    def head(self, key: str) -> RemoteObject:
        self.head_calls.append(key)
        if key not in self.objects:
            raise ObjectNotFound(f"404: {key}", key=key)
        return RemoteObject(key=key, size=len(self.objects[key]), etag=self.etags[key])

    def list(self, prefix: str) -> Iterator[RemoteObject]:
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        for start in range(0, len(keys), self.page_size):
            self.pages_served += 1
            for key in keys[start : start + self.page_size]:
                yield RemoteObject(
                    key=key, size=len(self.objects[key]), etag=self.etags[key]
                )


class WaitableObjectStore(InMemoryObjectStore):
    """Adds a native ``wait_exists`` that records how it was called."""

    def __init__(self) -> None:
        super().__init__()
        self.wait_calls: list[tuple[str, float]] = []

    def wait_exists(self, key: str, timeout: float) -> None:
        self.wait_calls.append((key, timeout))


@pytest.fixture
def store() -> InMemoryObjectStore:
    """Provide an empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def coord() -> ArtifactCoordinate:
    """Provide the canonical test coordinate (app/main@abc123)."""
    return ArtifactCoordinate(project="app", branch="main", commit="abc123")


@pytest.fixture
def artifact_dir(tmp_path: Path) -> Path:
    """A small build output tree::

        build/bin/server
        build/bin/client
        build/README
    """
    root = tmp_path / "build"
    (root / "bin").mkdir(parents=True)
    (root / "bin" / "server").write_bytes(b"server-binary")
    (root / "bin" / "client").write_bytes(b"client-binary")
    (root / "README").write_bytes(b"readme")
    return root


@pytest.fixture
def waitable_store() -> WaitableObjectStore:
    """Provide a store with a native existence waiter."""
    return WaitableObjectStore()


@pytest.fixture
def paged_store() -> InMemoryObjectStore:
    """Provide a store that serves ``list`` two objects per page."""
    return InMemoryObjectStore(page_size=2)
