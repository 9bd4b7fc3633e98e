"""Unit tests for path and tree helpers."""

from collections.abc import Callable

import pytest
from declutter.models.node import Node
from declutter.utils.tree import (
    is_nested_path,
    middle_ellipsis,
    normalize_path,
    top_level_items,
)


class TestNormalizePath:
    """Tests for normalize_path."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("/data/", "/data"), ("/data//", "/data"), ("/", "/"), ("/data", "/data")],
    )
    def test_trailing_separators(self, path: str, expected: str) -> None:
        """Trailing separators are stripped but the root survives."""
        assert normalize_path(path) == expected


class TestIsNestedPath:
    """Tests for is_nested_path."""

    def test_descendant(self) -> None:
        """Paths below the ancestor are nested."""
        assert is_nested_path("/data/app/cache", "/data/app") is True

    def test_sibling_with_common_prefix(self) -> None:
        """Directory boundaries are respected."""
        assert is_nested_path("/data/app2", "/data/app") is False

    def test_same_path(self) -> None:
        """A path is not nested in itself."""
        assert is_nested_path("/data/app/", "/data/app") is False

    def test_root_ancestor(self) -> None:
        """Everything is nested in the filesystem root."""
        assert is_nested_path("/data", "/") is True


class TestTopLevelItems:
    """Tests for top_level_items."""

    def test_drops_descendants(self, make_node: Callable[..., Node]) -> None:
        """Selected descendants of a selected directory are dropped."""
        app = make_node("app")
        cache = make_node("cache", parent=app)
        deep = make_node("deep.bin", parent=cache, is_directory=False)
        other = make_node("other")

        assert top_level_items([deep, app, other, cache]) == [app, other]

    def test_keeps_prefix_siblings(self, make_node: Callable[..., Node]) -> None:
        """/data/app2 survives next to /data/app."""
        app = make_node("app")
        app2 = make_node("app2")

        assert top_level_items([app, app2]) == [app, app2]

    def test_duplicate_paths(self, make_node: Callable[..., Node]) -> None:
        """Two nodes for the same path collapse to the first one."""
        first = make_node("x")
        second = make_node("x")

        assert top_level_items([first, second]) == [first]

    def test_trivial_inputs(self, make_node: Callable[..., Node]) -> None:
        """Empty and single-item inputs pass through."""
        only = make_node("only")

        assert top_level_items([]) == []
        assert top_level_items(iter([only])) == [only]


class TestMiddleEllipsis:
    """Tests for middle_ellipsis."""

    def test_short_path_unchanged(self) -> None:
        """Paths within the limit are returned as is."""
        assert middle_ellipsis("/data/a", 20) == "/data/a"

    def test_long_path_shortened(self) -> None:
        """Long paths keep their head and tail."""
        result = middle_ellipsis("/data/projects/very/long/path/file.txt", 20)

        assert len(result) == 20
        assert result.startswith("/data/pr")
        assert result.endswith("file.txt")
        assert "..." in result

    def test_tiny_limit(self) -> None:
        """Limits below five truncate."""
        assert middle_ellipsis("/data/abc", 3) == "/da"
