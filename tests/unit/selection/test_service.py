"""Unit tests for SelectionService."""

from collections.abc import Callable

import pytest
from declutter.models.node import Node
from declutter.models.options import (
    BYTES_PER_MB,
    EntrySizeFilter,
    ScanOptions,
    ScorerOptions,
)
from declutter.selection.service import SelectionService

MB = BYTES_PER_MB


@pytest.fixture
def size_options() -> ScanOptions:
    """Size-only scoring with a 50 MB threshold."""
    return ScanOptions(
        file_size_filter=EntrySizeFilter(size_threshold_mb=50, use_size_filter=True),
    )


@pytest.fixture
def service() -> SelectionService:
    """Service with the default scorer."""
    return SelectionService()


class TestRank:
    """Tests for SelectionService.rank."""

    def test_ranks_direct_children_only(
        self,
        service: SelectionService,
        make_node: Callable[..., Node],
        size_options: ScanOptions,
    ) -> None:
        """Grandchildren and the root itself are never candidates."""
        root = make_node("R", 300 * MB)
        big = make_node("big", 200 * MB, parent=root)
        make_node("inner", 200 * MB, parent=big)
        small = make_node("small", 100 * MB, parent=root)

        ranked = service.rank(root, size_options, ScorerOptions())

        assert [s.node for s in ranked] == [big, small]

    def test_ties_keep_tree_order(
        self, service: SelectionService, make_node: Callable[..., Node]
    ) -> None:
        """Equal scores preserve the children's order."""
        root = make_node("R", 0)
        children = [make_node(name, 0, parent=root) for name in ["c", "a", "b"]]

        ranked = service.rank(root, ScanOptions(), ScorerOptions())

        assert [s.node for s in ranked] == children


class TestSelect:
    """Tests for SelectionService.select."""

    def test_selects_top_fraction(
        self,
        service: SelectionService,
        make_node: Callable[..., Node],
        size_options: ScanOptions,
    ) -> None:
        """Half of two candidates is the stronger one."""
        root = make_node("R", 100 * MB)
        a = make_node("A", 100 * MB, parent=root, age_days=40)
        make_node("B", 1 * MB, parent=root, age_days=1)

        selected = service.select(root, size_options, ScorerOptions(top_percentage=0.5))

        assert selected == [a]

    def test_at_least_one(
        self,
        service: SelectionService,
        make_node: Callable[..., Node],
        size_options: ScanOptions,
    ) -> None:
        """A tiny fraction still selects one candidate."""
        root = make_node("R", 100 * MB)
        make_node("A", 60 * MB, parent=root)
        make_node("B", 40 * MB, parent=root)

        selected = service.select(root, size_options, ScorerOptions(top_percentage=0.01))

        assert len(selected) == 1

    def test_floor_of_fraction(
        self, service: SelectionService, make_node: Callable[..., Node]
    ) -> None:
        """The selected count is rounded down."""
        root = make_node("R", 0)
        for name in "abcde":
            make_node(name, 0, parent=root)

        selected = service.select(root, ScanOptions(), ScorerOptions(top_percentage=0.5))

        assert [n.name for n in selected] == ["a", "b"]

    def test_never_selects_root(
        self, service: SelectionService, make_node: Callable[..., Node]
    ) -> None:
        """The root is not a candidate even when everything is selected."""
        root = make_node("R", 10)
        make_node("only", 10, parent=root)

        selected = service.select(root, ScanOptions(), ScorerOptions(top_percentage=1.0))

        assert root not in selected
        assert [n.name for n in selected] == ["only"]

    def test_no_children(self, service: SelectionService, make_node: Callable[..., Node]) -> None:
        """An unexpanded root yields an empty selection."""
        root = make_node("R", 10)
        assert service.select(root, ScanOptions(), ScorerOptions()) == []
