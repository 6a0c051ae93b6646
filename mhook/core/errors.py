"""Error taxonomy for artifact resolution and transfer.

Every error carries the object key it concerns (when there is one) so the
caller can resume or inspect.  ``NotModified`` is not a failure: it is the
signal a store raises when a conditional retrieval matched, and the
single-object transfer turns it into a no-op outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mhook.models.transfer import TransferResult


class MhookError(RuntimeError):
    """Base class for all mhook errors."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)


class InvalidCoordinate(MhookError, ValueError):
    """Raised for malformed input such as an empty project or branch."""


class DestinationNotWritable(MhookError):
    """Raised before a download starts when the target directory is unusable."""


class TransferFailed(MhookError):
    """Wraps an underlying store error for a single object."""


class ObjectNotFound(MhookError):
    """Raised when the store has no object under the requested key."""


class WaitTimeout(MhookError):
    """Raised when a key did not become visible within the timeout."""


class WaitCancelled(MhookError):
    """Raised when a wait was cancelled through its cancel event."""


class PartialTreeFailure(MhookError):
    """One object of a tree transfer failed after zero or more succeeded.

    ``key`` names the object that failed, ``completed`` lists the results
    that were committed before the failure and remain on disk (or in the
    store, for uploads).
    """

    def __init__(
        self,
        message: str,
        *,
        key: str,
        completed: list[TransferResult] | None = None,
    ) -> None:
        super().__init__(message, key=key)
        self.completed = list(completed or [])


class NotModified(Exception):
    """Signal: the remote object matches the local fingerprint."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Not modified: {key}")
