"""Data models for declutter.

This module exports the tree, configuration, scoring, deletion, and
history models used across the application.
"""

from declutter.models.deletion import (
    DeleteProgress,
    DeleteResult,
    DeletionError,
    DeletionErrorKind,
    DeletionMode,
)
from declutter.models.history import HistoryEntry, create_history_entry
from declutter.models.node import LoadState, Node
from declutter.models.options import (
    AgeFilter,
    EntrySizeFilter,
    ScanOptions,
    ScorerOptions,
)
from declutter.models.score import NodeScore

__all__ = [
    "AgeFilter",
    "DeleteProgress",
    "DeleteResult",
    "DeletionError",
    "DeletionErrorKind",
    "DeletionMode",
    "EntrySizeFilter",
    "HistoryEntry",
    "LoadState",
    "Node",
    "NodeScore",
    "ScanOptions",
    "ScorerOptions",
    "create_history_entry",
]
