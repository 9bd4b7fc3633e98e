"""Batch deletion with per-item failure isolation.

Removes selected nodes one at a time, either into the platform trash
(via send2trash) or permanently. A failing item is recorded and the
batch moves on; only caller errors escape ``delete()``.
"""

import errno
import logging
import os
import shutil
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from send2trash import send2trash

from declutter.core.state import HistoryRepository
from declutter.deletion.safety import UnsafePathError, validate_path
from declutter.models.deletion import (
    DeleteProgress,
    DeleteResult,
    DeletionError,
    DeletionErrorKind,
    DeletionMode,
)
from declutter.models.history import create_history_entry
from declutter.models.node import Node
from declutter.utils.tree import top_level_items

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[DeleteProgress], None]

# Windows sharing and lock violations
_LOCKED_WINERRORS = frozenset({32, 33})
_LOCKED_ERRNOS = frozenset({errno.EBUSY, errno.ETXTBSY})


def classify_error(error: BaseException) -> DeletionErrorKind:
    """Map an exception raised while deleting to a failure kind.

    Args:
        error: Exception raised for one item.

    Returns:
        Failure classification.
    """
    if isinstance(error, UnsafePathError):
        return DeletionErrorKind.UNSAFE_PATH
    if not isinstance(error, OSError):
        return DeletionErrorKind.UNKNOWN_IO
    if getattr(error, "winerror", None) in _LOCKED_WINERRORS or error.errno in _LOCKED_ERRNOS:
        return DeletionErrorKind.LOCKED
    if isinstance(error, FileNotFoundError):
        return DeletionErrorKind.NOT_FOUND
    if isinstance(error, PermissionError):
        return DeletionErrorKind.ACCESS_DENIED
    return DeletionErrorKind.UNKNOWN_IO


class DeletionEngine:
    """Deletes nodes sequentially and records every success in the history.

    Attributes:
        history: Repository receiving one entry per deleted item, or None.
    """

    def __init__(self, history: HistoryRepository | None = None) -> None:
        """Initialize the engine.

        Args:
            history: Where to record deletions. Nothing is recorded if None.
        """
        self.history = history

    def delete(
        self,
        nodes: Iterable[Node],
        mode: DeletionMode = DeletionMode.RECOVERABLE,
        on_progress: ProgressCallback | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> DeleteResult:
        """Delete a batch of nodes.

        Nested selections are reduced to their outermost nodes first, so a
        directory and its contents are never deleted (or counted) twice.
        Items are processed in order; a failure is recorded in the result
        and the batch continues. ``on_progress`` is called after every
        item, and any exception it raises is logged and ignored.

        Args:
            nodes: Nodes to delete.
            mode: Move to trash or remove permanently.
            on_progress: Progress callback invoked after each item.
            cancel: Event checked before each item; when set, the batch
                stops and the partial result is returned.

        Returns:
            Batch result. ``success`` is True only if no item failed.

        Raises:
            ValueError: If ``nodes`` is None.
        """
        if nodes is None:
            msg = "nodes cannot be None"
            raise ValueError(msg)

        items = top_level_items(nodes)
        total = len(items)
        result = DeleteResult()
        logger.info("Deleting %d items (%s)", total, mode.value)

        for node in items:
            if cancel is not None and cancel.is_set():
                logger.info("Deletion cancelled after %d of %d items", result.processed_count, total)
                result.cancelled = True
                break

            try:
                self._delete_single(node, mode)
            except (OSError, UnsafePathError) as e:
                kind = classify_error(e)
                message = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
                result.failed_count += 1
                result.errors.append(
                    DeletionError(item_path=node.full_path, error_message=message, kind=kind, cause=e)
                )
                logger.error("Failed to delete %s (%s): %s", node.full_path, kind.value, message)
            else:
                result.deleted_count += 1
                result.total_bytes_freed += node.size
                logger.info("Deleted %s (%d bytes)", node.full_path, node.size)
                self._record(node, mode)

            self._notify(
                on_progress,
                DeleteProgress(
                    processed_count=result.processed_count,
                    total_count=total,
                    current_path=node.full_path,
                    percent_complete=result.processed_count / total * 100,
                ),
            )

        result.success = result.failed_count == 0
        return result

    def _delete_single(self, node: Node, mode: DeletionMode) -> None:
        """Remove one node from disk.

        Raises:
            UnsafePathError: If the path is protected.
            OSError: If removal fails.
        """
        if node.is_error:
            raise FileNotFoundError(errno.ENOENT, "Not a filesystem entry", node.full_path)

        path = validate_path(node.full_path)
        if not os.path.lexists(path):
            raise FileNotFoundError(errno.ENOENT, "Path does not exist", path)

        if mode is DeletionMode.RECOVERABLE:
            send2trash(path)
            return

        target = Path(path)
        # Directories (but not symlinks to directories)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(path)
        else:
            target.unlink()

    def _record(self, node: Node, mode: DeletionMode) -> None:
        if self.history is None:
            return
        entry = create_history_entry(
            name=node.name,
            path=node.full_path,
            size_bytes=node.size,
            deletion_type=mode,
            is_directory=node.is_directory,
        )
        try:
            self.history.append(entry)
        except (OSError, RuntimeError) as e:
            logger.warning("Failed to record deletion of %s in history: %s", node.full_path, e)

    @staticmethod
    def _notify(callback: ProgressCallback | None, progress: DeleteProgress) -> None:
        if callback is None:
            return
        try:
            callback(progress)
        except Exception:
            logger.warning("Progress callback failed for %s", progress.current_path, exc_info=True)
