"""Unit tests for History models.

Tests for HistoryEntry serialization and the create_history_entry factory.
"""

import json
from datetime import UTC, datetime
from typing import Any

import pytest
from declutter.models.deletion import DeletionMode
from declutter.models.history import HistoryEntry, create_history_entry


@pytest.fixture
def entry() -> HistoryEntry:
    """A fixed history entry."""
    return HistoryEntry(
        id="abc123def456",
        name="cache",
        path="/home/user/.cache/thumbs",
        size_bytes=4096,
        deletion_datetime=datetime(2026, 5, 1, 10, 30, tzinfo=UTC),
        deletion_type=DeletionMode.RECOVERABLE,
        is_directory=True,
        parent_path="/home/user/.cache",
    )


class TestHistoryEntryValidation:
    """Tests for HistoryEntry validation."""

    def test_empty_id_raises(self) -> None:
        """An entry needs an ID."""
        with pytest.raises(ValueError, match="ID cannot be empty"):
            HistoryEntry(
                id="",
                name="x",
                path="/x",
                size_bytes=0,
                deletion_datetime=datetime.now(UTC),
                deletion_type=DeletionMode.PERMANENT,
                is_directory=False,
            )

    def test_empty_path_raises(self) -> None:
        """An entry needs a path."""
        with pytest.raises(ValueError, match="path cannot be empty"):
            HistoryEntry(
                id="abc",
                name="x",
                path="",
                size_bytes=0,
                deletion_datetime=datetime.now(UTC),
                deletion_type=DeletionMode.PERMANENT,
                is_directory=False,
            )

    def test_negative_size_raises(self) -> None:
        """Sizes cannot be negative."""
        with pytest.raises(ValueError, match="cannot be negative"):
            HistoryEntry(
                id="abc",
                name="x",
                path="/x",
                size_bytes=-1,
                deletion_datetime=datetime.now(UTC),
                deletion_type=DeletionMode.PERMANENT,
                is_directory=False,
            )

    def test_naive_datetime_raises(self) -> None:
        """Timestamps must be timezone-aware."""
        with pytest.raises(ValueError, match="timezone-aware"):
            HistoryEntry(
                id="abc",
                name="x",
                path="/x",
                size_bytes=0,
                deletion_datetime=datetime(2026, 1, 1),
                deletion_type=DeletionMode.PERMANENT,
                is_directory=False,
            )

    def test_entry_is_frozen(self, entry: HistoryEntry) -> None:
        """HistoryEntry is immutable."""
        with pytest.raises(AttributeError):
            entry.name = "other"  # type: ignore[misc]


class TestHistoryEntrySerialization:
    """Tests for dict and JSON line conversion."""

    def test_to_dict(self, entry: HistoryEntry) -> None:
        """to_dict uses plain JSON types."""
        data = entry.to_dict()

        assert data == {
            "id": "abc123def456",
            "name": "cache",
            "path": "/home/user/.cache/thumbs",
            "size_bytes": 4096,
            "deletion_datetime": "2026-05-01T10:30:00+00:00",
            "deletion_type": "recoverable",
            "is_directory": True,
            "parent_path": "/home/user/.cache",
        }

    def test_to_dict_omits_missing_parent(self) -> None:
        """parent_path is left out when unknown."""
        entry = HistoryEntry(
            id="abc",
            name="x",
            path="/x",
            size_bytes=1,
            deletion_datetime=datetime(2026, 1, 1, tzinfo=UTC),
            deletion_type=DeletionMode.PERMANENT,
            is_directory=False,
        )
        assert "parent_path" not in entry.to_dict()

    def test_json_line_is_single_line(self, entry: HistoryEntry) -> None:
        """JSON lines contain no newline and parse back to the dict."""
        line = entry.to_json_line()

        assert "\n" not in line
        assert json.loads(line) == entry.to_dict()

    def test_from_json_line(self, entry: HistoryEntry) -> None:
        """A JSON line parses back into an equal entry."""
        assert HistoryEntry.from_json_line(entry.to_json_line() + "\n") == entry

    def test_from_dict_missing_field(self) -> None:
        """Missing required fields raise KeyError."""
        data: dict[str, Any] = {"id": "abc", "name": "x"}
        with pytest.raises(KeyError):
            HistoryEntry.from_dict(data)

    def test_from_dict_invalid_type(self, entry: HistoryEntry) -> None:
        """Unknown deletion types raise ValueError."""
        data = entry.to_dict()
        data["deletion_type"] = "shredded"
        with pytest.raises(ValueError):
            HistoryEntry.from_dict(data)


class TestCreateHistoryEntry:
    """Tests for create_history_entry factory."""

    def test_generates_id_and_timestamp(self) -> None:
        """The factory fills in ID, timestamp and parent path."""
        before = datetime.now(UTC)
        entry = create_history_entry(
            name="old.iso",
            path="/data/downloads/old.iso",
            size_bytes=700,
            deletion_type=DeletionMode.PERMANENT,
            is_directory=False,
        )

        assert len(entry.id) == 12
        assert entry.deletion_datetime >= before
        assert entry.parent_path == "/data/downloads"
        assert entry.deletion_type is DeletionMode.PERMANENT

    def test_ids_are_unique(self) -> None:
        """Every entry gets its own ID."""
        ids = {
            create_history_entry(
                name="x",
                path="/data/x",
                size_bytes=0,
                deletion_type=DeletionMode.RECOVERABLE,
                is_directory=False,
            ).id
            for _ in range(20)
        }
        assert len(ids) == 20
