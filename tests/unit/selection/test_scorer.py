"""Unit tests for SelectionScorer and its normalization statistics."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from declutter.models.node import Node
from declutter.models.options import (
    BYTES_PER_MB,
    AgeFilter,
    EntrySizeFilter,
    ScanOptions,
    ScorerOptions,
)
from declutter.selection.scorer import (
    FALLBACK_AGE_SPAN_DAYS,
    NEUTRAL_SCORE,
    SelectionScorer,
    TreeStats,
    clamp01,
    gather_stats,
)

MB = BYTES_PER_MB


@pytest.fixture
def scored_tree(make_node: Callable[..., Node]) -> Node:
    """Root R (100 MB) with A (100 MB, 40 days old) and B (1 MB, 1 day old)."""
    root = make_node("R", 100 * MB)
    make_node("A", 100 * MB, parent=root, age_days=40)
    make_node("B", 1 * MB, parent=root, age_days=1)
    return root


@pytest.fixture
def filtered_options() -> ScanOptions:
    """Age cutoff of one month and a 50 MB file threshold."""
    return ScanOptions(
        age_filter=AgeFilter(use_modified_date=True, months_modified_value=1),
        file_size_filter=EntrySizeFilter(size_threshold_mb=50, use_size_filter=True),
    )


def _by_name(scores) -> dict:
    return {s.node.name: s for s in scores}


class TestHelpers:
    """Tests for clamp01, TreeStats and gather_stats."""

    @pytest.mark.parametrize(("value", "expected"), [(-1.0, 0.0), (0.3, 0.3), (7.0, 1.0)])
    def test_clamp01(self, value: float, expected: float) -> None:
        """Values are clamped into [0, 1]."""
        assert clamp01(value) == expected

    def test_age_span_fallback(self) -> None:
        """Unknown dates fall back to one year."""
        assert TreeStats().age_span_days == FALLBACK_AGE_SPAN_DAYS

    def test_age_span_minimum(self) -> None:
        """The span never drops below one day."""
        moment = datetime(2026, 1, 1, tzinfo=UTC)
        assert TreeStats(oldest=moment, newest=moment).age_span_days == 1.0

    def test_gather_stats(self, scored_tree: Node, now: datetime) -> None:
        """Stats cover the root and every loaded descendant."""
        stats = gather_stats(scored_tree)

        assert stats.max_size == 100 * MB
        assert stats.oldest == now - timedelta(days=40)
        assert stats.newest == now - timedelta(days=1)
        assert stats.age_span_days == pytest.approx(39.0)


class TestComputeScores:
    """Tests for SelectionScorer.compute_scores."""

    def test_filters_disabled_gives_neutral_scores(self, scored_tree: Node) -> None:
        """With both sub-filters off every score is 0.5."""
        scores = SelectionScorer().compute_scores(scored_tree, ScanOptions(), ScorerOptions())

        assert len(scores) == 3
        for score in scores:
            assert score.age_score == NEUTRAL_SCORE
            assert score.size_score == NEUTRAL_SCORE
            assert score.combined_score == NEUTRAL_SCORE

    def test_preorder_includes_root(self, scored_tree: Node) -> None:
        """The root is scored first, then its children in order."""
        scores = SelectionScorer().compute_scores(scored_tree, ScanOptions(), ScorerOptions())
        assert [s.node.name for s in scores] == ["R", "A", "B"]

    def test_size_scores(
        self, scored_tree: Node, filtered_options: ScanOptions, now: datetime
    ) -> None:
        """Sizes map linearly between the threshold and the largest size."""
        scores = _by_name(
            SelectionScorer().compute_scores(
                scored_tree, filtered_options, ScorerOptions(), now=now
            )
        )

        assert scores["A"].size_score == 1.0
        assert scores["B"].size_score == 0.0

    def test_size_score_interpolates_and_handles_small_trees(
        self, make_node: Callable[..., Node], filtered_options: ScanOptions
    ) -> None:
        """Midway sizes score proportionally; a tree under the threshold scores zero."""
        root = make_node("R", 100 * MB)
        make_node("mid", 75 * MB, parent=root)
        small = make_node("S", 40 * MB)
        make_node("leaf", 40 * MB, parent=small)

        scores = _by_name(
            SelectionScorer().compute_scores(root, filtered_options, ScorerOptions())
        )
        small_scores = SelectionScorer().compute_scores(small, filtered_options, ScorerOptions())

        assert scores["mid"].size_score == pytest.approx(0.5)
        assert scores["R"].size_score == 1.0
        assert [s.size_score for s in small_scores] == [0.0, 0.0]

    def test_age_scores(
        self, scored_tree: Node, filtered_options: ScanOptions, now: datetime
    ) -> None:
        """Entries older than the cutoff score above zero; newer ones score zero."""
        scores = _by_name(
            SelectionScorer().compute_scores(
                scored_tree, filtered_options, ScorerOptions(), now=now
            )
        )

        # Cutoff is 31 days back (May 15), A is 9 days beyond it, span is 39 days
        assert scores["A"].age_score == pytest.approx(9 / 39)
        assert scores["B"].age_score == 0.0
        # R has no modification time
        assert scores["R"].age_score == NEUTRAL_SCORE

    def test_combined_score_is_weighted_average(
        self, scored_tree: Node, filtered_options: ScanOptions, now: datetime
    ) -> None:
        """Weights are normalized by their sum."""
        options = ScorerOptions(weight_age=1.0, weight_size=3.0)
        scores = _by_name(
            SelectionScorer().compute_scores(scored_tree, filtered_options, options, now=now)
        )

        a = scores["A"]
        assert a.combined_score == pytest.approx((a.age_score + 3 * a.size_score) / 4)
        assert scores["A"].combined_score > scores["B"].combined_score

    def test_zero_weights(
        self, scored_tree: Node, filtered_options: ScanOptions, now: datetime
    ) -> None:
        """Zero weights give a combined score of zero instead of failing."""
        options = ScorerOptions(weight_age=0.0, weight_size=0.0)
        scores = SelectionScorer().compute_scores(scored_tree, filtered_options, options, now=now)

        assert all(s.combined_score == 0.0 for s in scores)

    def test_scores_within_bounds(
        self, make_node: Callable[..., Node], filtered_options: ScanOptions, now: datetime
    ) -> None:
        """Every score stays within [0, 1] for extreme inputs."""
        root = make_node("R", 500 * MB, age_days=5000)
        make_node("huge", 500 * MB, parent=root, age_days=5000)
        make_node("future", 0, parent=root, age_days=-30)
        make_node("tiny", 1, parent=root, age_days=0)

        scores = SelectionScorer().compute_scores(root, filtered_options, ScorerOptions(), now=now)

        for score in scores:
            assert 0.0 <= score.age_score <= 1.0
            assert 0.0 <= score.size_score <= 1.0
            assert 0.0 <= score.combined_score <= 1.0

    def test_error_nodes_not_scored(self, make_node: Callable[..., Node]) -> None:
        """Synthetic error children are skipped."""
        root = make_node("R", 10)
        locked = make_node("locked", 0, parent=root)
        locked.attach_child(Node.error_node(locked, "Permission denied"))

        scores = SelectionScorer().compute_scores(root, ScanOptions(), ScorerOptions())

        assert [s.node.name for s in scores] == ["R", "locked"]

    def test_size_score_neutral_for_empty_tree(self, make_node: Callable[..., Node]) -> None:
        """A tree without any bytes keeps the neutral size score."""
        root = make_node("R", 0)
        make_node("empty", 0, parent=root)
        options = ScanOptions(
            file_size_filter=EntrySizeFilter(size_threshold_mb=1, use_size_filter=True),
        )

        scores = SelectionScorer().compute_scores(root, options, ScorerOptions())

        assert all(s.size_score == NEUTRAL_SCORE for s in scores)
