"""Deletion candidate scoring and selection."""

from declutter.selection.scorer import SelectionScorer, TreeStats, gather_stats
from declutter.selection.service import SelectionService

__all__ = [
    "SelectionScorer",
    "SelectionService",
    "TreeStats",
    "gather_stats",
]
