"""Deletion domain models.

This module defines the deletion mode, the failure taxonomy, and the
progress and result structures reported by the deletion engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DeletionMode(str, Enum):
    """How an item is removed.

    Attributes:
        RECOVERABLE: Move to the platform trash / recycle bin.
        PERMANENT: Remove from disk.
    """

    RECOVERABLE = "recoverable"
    PERMANENT = "permanent"


class DeletionErrorKind(str, Enum):
    """Classification of a per-item deletion failure.

    Attributes:
        ACCESS_DENIED: Insufficient permissions.
        NOT_FOUND: The entry was already gone.
        LOCKED: The entry is in use by another process.
        UNSAFE_PATH: The path was refused by the safety validator.
        UNKNOWN_IO: Any other I/O failure.
    """

    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    LOCKED = "locked"
    UNSAFE_PATH = "unsafe_path"
    UNKNOWN_IO = "unknown_io"


@dataclass(frozen=True, slots=True)
class DeletionError:
    """A single item that could not be deleted.

    Attributes:
        item_path: Path of the item.
        error_message: Human-readable failure message.
        kind: Failure classification.
        cause: Underlying exception, if any.
    """

    item_path: str
    error_message: str
    kind: DeletionErrorKind
    cause: BaseException | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class DeleteProgress:
    """Progress snapshot emitted after each processed item.

    Attributes:
        processed_count: Items processed so far (including failures).
        total_count: Items in the batch.
        current_path: Path of the item just processed.
        percent_complete: processed_count / total_count * 100.
    """

    processed_count: int
    total_count: int
    current_path: str
    percent_complete: float


@dataclass(slots=True)
class DeleteResult:
    """Outcome of a deletion batch.

    Attributes:
        success: True when no item failed.
        deleted_count: Items removed successfully.
        failed_count: Items that could not be removed.
        total_bytes_freed: Sum of sizes of successfully removed items.
        errors: One entry per failed item, in processing order.
        cancelled: True if the batch stopped early on a cancellation request.
    """

    success: bool = True
    deleted_count: int = 0
    failed_count: int = 0
    total_bytes_freed: int = 0
    errors: list[DeletionError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def processed_count(self) -> int:
        """Items that were attempted."""
        return self.deleted_count + self.failed_count
