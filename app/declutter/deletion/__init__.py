"""Deletion module.

This module provides the batch deletion engine, path safety validation,
and a queue-backed progress sink.
"""

from declutter.deletion.engine import DeletionEngine, ProgressCallback, classify_error
from declutter.deletion.progress import QueueProgressSink
from declutter.deletion.safety import (
    PROTECTED_PATH_PATTERNS,
    UnsafePathError,
    is_protected_path,
    validate_path,
)

__all__ = [
    "PROTECTED_PATH_PATTERNS",
    "DeletionEngine",
    "ProgressCallback",
    "QueueProgressSink",
    "UnsafePathError",
    "classify_error",
    "is_protected_path",
    "validate_path",
]
