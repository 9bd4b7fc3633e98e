"""Non-blocking progress delivery for deletion batches."""

import logging
import queue

from declutter.models.deletion import DeleteProgress

logger = logging.getLogger(__name__)


class QueueProgressSink:
    """Progress callback that hands updates to another thread through a queue.

    The deletion loop never waits on the consumer: when a bounded queue
    is full, the update is dropped. Only the latest update matters for a
    progress display, and the next one supersedes it.

    Args:
        maxsize: Queue capacity; 0 means unbounded.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue[DeleteProgress] = queue.Queue(maxsize=maxsize)

    def __call__(self, progress: DeleteProgress) -> None:
        try:
            self._queue.put_nowait(progress)
        except queue.Full:
            logger.debug("Progress queue full, dropping update for %s", progress.current_path)

    def drain(self) -> list[DeleteProgress]:
        """Take every pending update without blocking, oldest first."""
        updates: list[DeleteProgress] = []
        while True:
            try:
                updates.append(self._queue.get_nowait())
            except queue.Empty:
                return updates

    def latest(self) -> DeleteProgress | None:
        """Take every pending update and return the newest one, if any."""
        updates = self.drain()
        return updates[-1] if updates else None
