"""Deletion history persistence.

This module provides the HistoryRepository protocol consumed by the
deletion engine and StateManager, its JSONL file implementation.
"""

import fnmatch
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Protocol

from declutter.core.paths import ensure_state_dir, get_state_dir
from declutter.models.history import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryRepository(Protocol):
    """Append-only store of deletion history entries."""

    def append(self, entry: HistoryEntry) -> None:
        """Persist one entry."""
        ...

    def list_entries(self, limit: int | None = None) -> list[HistoryEntry]:
        """Return stored entries, newest first."""
        ...


class StateManager:
    """Manages deletion history in a JSONL file.

    Storage location: ~/.local/state/declutter/history.jsonl

    Each line is a complete JSON object representing a HistoryEntry.
    Entries are only ever appended; a written entry is never rewritten.

    Attributes:
        state_dir: Directory containing the history file.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize StateManager.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/declutter
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()
        self._lock = threading.Lock()

    @property
    def history_path(self) -> Path:
        """Path to the history.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    def append(self, entry: HistoryEntry) -> None:
        """Append an entry to the history file.

        Creates the file and parent directories if they don't exist.

        Args:
            entry: The history entry to record.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        line = entry.to_json_line()
        with self._lock, self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(line + "\n")
            f.flush()

        logger.debug(
            "Recorded deletion of %s (%d bytes, %s)",
            entry.path,
            entry.size_bytes,
            entry.deletion_type.value,
        )

    def list_entries(self, limit: int | None = None) -> list[HistoryEntry]:
        """Read history entries, newest first.

        Corrupt lines are skipped with a warning.

        Args:
            limit: Maximum number of entries to return.
                  If None, returns all entries.

        Returns:
            List of HistoryEntry sorted by deletion time, newest first.
            Returns empty list if file doesn't exist.
        """
        entries = self._read_all()
        entries.sort(key=lambda e: e.deletion_datetime, reverse=True)
        if limit is not None:
            return entries[:limit]
        return entries

    def list_between(self, start: datetime, end: datetime) -> list[HistoryEntry]:
        """Entries deleted within ``[start, end]``, newest first."""
        return [e for e in self.list_entries() if start <= e.deletion_datetime <= end]

    def list_by_pattern(self, pattern: str) -> list[HistoryEntry]:
        """Entries whose path matches a glob pattern (case-insensitive), newest first."""
        lowered = pattern.lower()
        return [e for e in self.list_entries() if fnmatch.fnmatchcase(e.path.lower(), lowered)]

    def count(self) -> int:
        """Number of readable entries in the history file."""
        return len(self._read_all())

    def total_bytes(self) -> int:
        """Sum of sizes over all recorded deletions."""
        return sum(e.size_bytes for e in self._read_all())

    def clear(self) -> None:
        """Remove the history file."""
        with self._lock:
            self.history_path.unlink(missing_ok=True)
        logger.info("Cleared deletion history at %s", self.history_path)

    def _read_all(self) -> list[HistoryEntry]:
        if not self.history_path.exists():
            return []

        entries: list[HistoryEntry] = []
        with self._lock, self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(HistoryEntry.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, str(e))
        return entries
