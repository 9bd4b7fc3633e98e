"""Two-pass heuristic scoring of a scanned subtree.

The first pass collects normalization data over the whole subtree (the
largest size and the oldest/newest modification times). The second pass
scores every node independently against those statistics:

- age score: how far a node lies beyond the age cutoff, relative to the
  age span observed in the tree;
- size score: where a node's size falls between the file size threshold
  and the largest size observed;
- combined score: weighted average of both.

A score of 0.5 is neutral and is used whenever the corresponding
sub-filter is switched off.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from declutter.models.node import Node
from declutter.models.options import ScanOptions, ScorerOptions
from declutter.models.score import NodeScore

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5
FALLBACK_AGE_SPAN_DAYS = 365.0
SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True, slots=True)
class TreeStats:
    """Normalization data gathered from a subtree.

    Attributes:
        max_size: Largest size of any node (the root included).
        oldest: Earliest last-modified time observed, None if no node has one.
        newest: Latest last-modified time observed, None if no node has one.
    """

    max_size: int = 0
    oldest: datetime | None = None
    newest: datetime | None = None

    @property
    def age_span_days(self) -> float:
        """Observed age span in days, at least one day; 365 when unknown."""
        if self.oldest is None or self.newest is None:
            return FALLBACK_AGE_SPAN_DAYS
        span = (self.newest - self.oldest).total_seconds() / SECONDS_PER_DAY
        return max(span, 1.0)


def clamp01(value: float) -> float:
    """Clamp a value into the [0, 1] range."""
    return max(0.0, min(1.0, value))


def gather_stats(root: Node) -> TreeStats:
    """Collect normalization data in one depth-first traversal.

    Args:
        root: Subtree root.

    Returns:
        Statistics over every loaded node below and including ``root``.
    """
    max_size = 0
    oldest: datetime | None = None
    newest: datetime | None = None

    for node in root.iter_subtree():
        max_size = max(max_size, node.size)
        modified = node.last_modified
        if modified is None:
            continue
        if oldest is None or modified < oldest:
            oldest = modified
        if newest is None or modified > newest:
            newest = modified

    return TreeStats(max_size=max_size, oldest=oldest, newest=newest)


class SelectionScorer:
    """Computes deletion-candidate scores for every node of a subtree."""

    def compute_scores(
        self,
        root: Node,
        scan_options: ScanOptions,
        scorer_options: ScorerOptions,
        *,
        now: datetime | None = None,
    ) -> list[NodeScore]:
        """Score every loaded node below and including ``root``.

        Synthetic error nodes are not scored.

        Args:
            root: Subtree root.
            scan_options: Filter settings providing the age cutoff and size threshold.
            scorer_options: Weights for the combined score.
            now: Reference time for relative age cutoffs (defaults to now, UTC).

        Returns:
            One NodeScore per node, in depth-first pre-order.
        """
        stats = gather_stats(root)
        cutoff = scan_options.age_filter.modified_cutoff(now or datetime.now(UTC))

        scores = [
            self._score_node(node, scan_options, scorer_options, stats, cutoff)
            for node in root.iter_subtree()
            if not node.is_error
        ]
        logger.debug("Scored %d nodes below %s", len(scores), root.full_path)
        return scores

    def _score_node(
        self,
        node: Node,
        scan_options: ScanOptions,
        scorer_options: ScorerOptions,
        stats: TreeStats,
        cutoff: datetime | None,
    ) -> NodeScore:
        age_score = clamp01(self._age_score(node, cutoff, stats))
        size_score = clamp01(self._size_score(node, scan_options, stats))

        total_weight = scorer_options.weight_age + scorer_options.weight_size
        if total_weight <= 0:
            total_weight = 1.0
        combined = (
            age_score * scorer_options.weight_age + size_score * scorer_options.weight_size
        ) / total_weight

        return NodeScore(
            node=node,
            age_score=age_score,
            size_score=size_score,
            combined_score=clamp01(combined),
        )

    @staticmethod
    def _age_score(node: Node, cutoff: datetime | None, stats: TreeStats) -> float:
        # cutoff is None when the modified-date filter is off or has no usable cutoff
        if cutoff is None or node.last_modified is None:
            return NEUTRAL_SCORE
        delta_days = (cutoff - node.last_modified).total_seconds() / SECONDS_PER_DAY
        return delta_days / stats.age_span_days

    @staticmethod
    def _size_score(node: Node, scan_options: ScanOptions, stats: TreeStats) -> float:
        size_filter = scan_options.file_size_filter
        if not size_filter.is_active or stats.max_size <= 0:
            return NEUTRAL_SCORE

        threshold = size_filter.threshold_bytes
        if node.size <= threshold:
            return 0.0
        # node is part of the gathered subtree, so threshold < node.size <= max_size
        return (node.size - threshold) / (stats.max_size - threshold)
