"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from declutter.models.node import LoadState, Node

# Fixed reference time so age-based tests do not depend on the clock
NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolated_xdg_dirs(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch):
    """Point config and state directories at a throwaway location.

    No test may read the user's configuration or append to their history.
    """
    base = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    return base


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used by age-based tests."""
    return NOW


@pytest.fixture
def set_mtime() -> Callable[[Path, datetime], None]:
    """Set both access and modification time of a path."""

    def apply(path: Path, moment: datetime) -> None:
        timestamp = moment.timestamp()
        os.utime(path, (timestamp, timestamp))

    return apply


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a small directory tree with known sizes.

    Layout (file sizes in bytes)::

        root/
            big/
                a.bin        3000
                nested/
                    b.bin    2000
            small/
                c.txt         100
            empty/
            top.txt           500
    """
    root = tmp_path / "root"
    (root / "big" / "nested").mkdir(parents=True)
    (root / "small").mkdir()
    (root / "empty").mkdir()

    (root / "big" / "a.bin").write_bytes(b"a" * 3000)
    (root / "big" / "nested" / "b.bin").write_bytes(b"b" * 2000)
    (root / "small" / "c.txt").write_bytes(b"c" * 100)
    (root / "top.txt").write_bytes(b"t" * 500)
    return root


@pytest.fixture
def make_node() -> Callable[..., Node]:
    """Factory for in-memory nodes that never touch the filesystem.

    Pass ``parent`` to attach the new node; its depth follows the parent's.
    """

    def factory(
        name: str,
        size: int = 0,
        *,
        parent: Node | None = None,
        is_directory: bool = True,
        age_days: float | None = None,
    ) -> Node:
        base = parent.full_path if parent is not None else "/data"
        modified = NOW - timedelta(days=age_days) if age_days is not None else None
        node = Node(
            name=name,
            full_path=f"{base}/{name}",
            is_directory=is_directory,
            size=size,
            last_modified=modified,
            last_accessed=modified,
            load_state=LoadState.UNLOADED if is_directory else LoadState.LOADED,
        )
        if parent is not None:
            parent.attach_child(node)
            parent.load_state = LoadState.LOADED
            parent.has_children = True
        return node

    return factory
