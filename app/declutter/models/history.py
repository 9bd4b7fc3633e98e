"""Deletion history entry model.

This module defines the audit record written once for every item the
deletion engine removes. Entries are immutable and serialized as JSON
lines by the history store.
"""

from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from declutter.models.deletion import DeletionMode


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of one deleted file or directory.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        name: Base name of the deleted entry.
        path: Absolute path of the deleted entry.
        size_bytes: Size at deletion time (recursive for directories).
        deletion_datetime: When the deletion happened (timezone-aware).
        deletion_type: Whether the entry went to the trash or was removed.
        is_directory: Whether the entry was a directory.
        parent_path: Directory that contained the entry.
    """

    id: str
    name: str
    path: str
    size_bytes: int
    deletion_datetime: datetime
    deletion_type: DeletionMode
    is_directory: bool
    parent_path: str | None = None

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.path:
            msg = "History entry path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)
        if self.deletion_datetime.tzinfo is None:
            msg = "Deletion datetime must be timezone-aware"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the history entry.
        """
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "size_bytes": self.size_bytes,
            "deletion_datetime": self.deletion_datetime.isoformat(),
            "deletion_type": self.deletion_type.value,
            "is_directory": self.is_directory,
        }
        if self.parent_path is not None:
            result["parent_path"] = self.parent_path
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing entry data.

        Returns:
            HistoryEntry instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If the datetime or deletion type is invalid.
        """
        return cls(
            id=data["id"],
            name=data["name"],
            path=data["path"],
            size_bytes=int(data["size_bytes"]),
            deletion_datetime=datetime.fromisoformat(data["deletion_datetime"]),
            deletion_type=DeletionMode(data["deletion_type"]),
            is_directory=bool(data.get("is_directory", False)),
            parent_path=data.get("parent_path"),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage.

        Returns:
            Single JSON line (no trailing newline).
        """
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> HistoryEntry:
        """Deserialize from JSON line.

        Args:
            line: Single JSON line (with or without trailing whitespace).

        Returns:
            HistoryEntry instance.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        data = json.loads(line.strip())
        return cls.from_dict(data)


def create_history_entry(
    *,
    name: str,
    path: str,
    size_bytes: int,
    deletion_type: DeletionMode,
    is_directory: bool,
) -> HistoryEntry:
    """Factory function to create a new HistoryEntry.

    Automatically generates a unique ID, the current timestamp, and the
    parent path.

    Args:
        name: Base name of the deleted entry.
        path: Absolute path of the deleted entry.
        size_bytes: Size at deletion time.
        deletion_type: Deletion mode used.
        is_directory: Whether the entry was a directory.

    Returns:
        New HistoryEntry with auto-generated ID and timestamp.
    """
    parent = os.path.dirname(path.rstrip(os.sep)) or None
    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        name=name,
        path=path,
        size_bytes=size_bytes,
        deletion_datetime=datetime.now(UTC),
        deletion_type=deletion_type,
        is_directory=is_directory,
        parent_path=parent,
    )
