"""mhook data models — all Pydantic v2, all frozen (immutable)."""

from mhook.models.coordinates import LATEST, ArtifactCoordinate
from mhook.models.transfer import (
    RemoteObject,
    TransferDirection,
    TransferJob,
    TransferOutcome,
    TransferResult,
    TreeTransferReport,
)

__all__ = [
    # coordinates
    "LATEST",
    "ArtifactCoordinate",
    # transfer
    "RemoteObject",
    "TransferDirection",
    "TransferJob",
    "TransferOutcome",
    "TransferResult",
    "TreeTransferReport",
]
