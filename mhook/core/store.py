"""Object store collaborator interface.

The transfer engine never talks to S3 directly; it is handed an object that
satisfies ``ObjectStore``.  ``S3ObjectStore`` (``mhook.core.s3_store``) is the
production implementation; tests use an in-memory double.

Keys at this boundary are *store* keys, i.e. without the leading slash that
logical MUFL keys carry (see ``mhook.core.keys.store_key``).
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import BinaryIO, Protocol, runtime_checkable

from mhook.models.transfer import RemoteObject

ProgressCallback = Callable[[int], None]


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for object store backends.

    Error contract
    --------------
    - ``get`` raises ``NotModified`` when ``if_none_match`` matches.
    - ``get`` and ``head`` raise ``ObjectNotFound`` for a missing key.
    - Any other store failure is raised as ``TransferFailed``.

    Retries, if any, happen inside the backend and must be visible in its
    own logging; callers do not retry.
    """

    def get(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        if_none_match: str | None = None,
        callback: ProgressCallback | None = None,
    ) -> int:
        """Stream the object's bytes into ``fileobj``; return bytes written."""
        ...

    def put(
        self,
        key: str,
        body: bytes | BinaryIO,
        *,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Write ``body`` under ``key``, streaming file objects."""
        ...

    def head(self, key: str) -> RemoteObject:
        """Return size and freshness token of ``key``."""
        ...

    def list(self, prefix: str) -> Iterator[RemoteObject]:
        """Yield every object under ``prefix``, across all result pages."""
        ...


@runtime_checkable
class SupportsWaitExists(Protocol):
    """Optional capability: a native "block until the key exists" primitive."""

    def wait_exists(self, key: str, timeout: float) -> None:
        """Return once ``key`` exists; raise ``WaitTimeout`` otherwise."""
        ...
