"""Transfer bookkeeping models — jobs, per-object results, tree reports."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class TransferDirection(str, Enum):
    UPLOAD = "upload"
    DOWNLOAD = "download"


class TransferOutcome(str, Enum):
    """How a single-object transfer ended.

    ``NOT_MODIFIED`` is a successful no-op: the local copy already matched.
    """

    TRANSFERRED = "transferred"
    NOT_MODIFIED = "not_modified"


class RemoteObject(BaseModel):
    """An object as reported by the store's ``head`` or ``list``.

    ``etag`` is the store's freshness token with surrounding quotes removed;
    ``None`` when the store did not report one.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    size: int = 0
    etag: str | None = None


class TransferJob(BaseModel):
    """One object to move between the store and the local filesystem."""

    model_config = ConfigDict(frozen=True)

    key: str
    local_path: Path
    expected_size: int = 0
    direction: TransferDirection


class TransferResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    job: TransferJob
    outcome: TransferOutcome
    bytes_transferred: int = 0


class TreeTransferReport(BaseModel):
    """Aggregated outcome of a successful tree transfer."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    directory: Path
    direction: TransferDirection
    results: list[TransferResult] = Field(default_factory=list)

    @property
    def transferred_count(self) -> int:
        return sum(1 for r in self.results if r.outcome == TransferOutcome.TRANSFERRED)

    @property
    def not_modified_count(self) -> int:
        return sum(1 for r in self.results if r.outcome == TransferOutcome.NOT_MODIFIED)

    @property
    def bytes_transferred(self) -> int:
        return sum(r.bytes_transferred for r in self.results)
