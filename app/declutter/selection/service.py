"""Ranked, deduplicated candidate selection."""

import logging
import math

from declutter.models.node import Node
from declutter.models.options import ScanOptions, ScorerOptions
from declutter.models.score import NodeScore
from declutter.selection.scorer import SelectionScorer
from declutter.utils.tree import top_level_items

logger = logging.getLogger(__name__)


class SelectionService:
    """Selects the strongest deletion candidates among a root's children.

    Attributes:
        scorer: Scorer used to rank candidates.
    """

    def __init__(self, scorer: SelectionScorer | None = None) -> None:
        """Initialize the service.

        Args:
            scorer: Scorer to use. A new SelectionScorer if omitted.
        """
        self.scorer = scorer or SelectionScorer()

    def rank(
        self,
        root: Node,
        scan_options: ScanOptions,
        scorer_options: ScorerOptions,
    ) -> list[NodeScore]:
        """Score the direct children of ``root``, strongest first.

        The sort is stable: children with equal combined scores keep
        their order in the tree.

        Args:
            root: Scanned root whose children are ranked.
            scan_options: Filter settings used for scoring.
            scorer_options: Scorer weights.

        Returns:
            Scores of the direct children of ``root``, highest combined score first.
        """
        scores = self.scorer.compute_scores(root, scan_options, scorer_options)
        candidates = [s for s in scores if s.node is not root and s.node.parent is root]
        return sorted(candidates, key=lambda s: s.combined_score, reverse=True)

    def select(
        self,
        root: Node,
        scan_options: ScanOptions,
        scorer_options: ScorerOptions,
    ) -> list[Node]:
        """Pick the top fraction of ``root``'s children for deletion.

        Takes ``max(1, floor(count * top_percentage))`` of the ranked
        children and removes any node whose ancestor is also selected.

        Args:
            root: Scanned root whose children are considered.
            scan_options: Filter settings used for scoring.
            scorer_options: Scorer weights and the selected fraction.

        Returns:
            Selected nodes, strongest first. Empty if ``root`` has no loaded children.
        """
        ranked = self.rank(root, scan_options, scorer_options)
        if not ranked:
            return []

        take = max(1, math.floor(len(ranked) * scorer_options.top_percentage))
        selected = top_level_items([s.node for s in ranked[:take]])
        logger.info(
            "Selected %d of %d candidates below %s", len(selected), len(ranked), root.full_path
        )
        return selected
