"""
UI update queue
===============

Worker and timer threads never touch widgets or the parameter model
directly. They post callables here and the interaction thread runs them
from ``drain()``.
"""

import logging
import queue
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class UpdateQueue:
    """Multi-producer, single-consumer queue of UI updates."""

    def __init__(self):
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._owner: Optional[int] = None

    def bind_to_current_thread(self):
        """Mark the calling thread as the interaction thread."""
        self._owner = threading.get_ident()

    @property
    def on_owner_thread(self) -> bool:
        return self._owner is None or self._owner == threading.get_ident()

    def post(self, update: Callable[[], None]):
        """Schedule update to run on the interaction thread."""
        self._queue.put(update)

    def drain(self, limit: int = 100) -> int:
        """
        Run pending updates. Must be called from the interaction thread.

        Args:
            limit: Maximum number of updates to run in one call

        Returns:
            Number of updates run
        """
        if not self.on_owner_thread:
            raise RuntimeError("UpdateQueue.drain() called off the interaction thread")

        count = 0
        while count < limit:
            try:
                update = self._queue.get_nowait()
            except queue.Empty:
                break
            count += 1
            try:
                update()
            except Exception as e:
                logger.error(f"UI update failed: {e}", exc_info=True)
        return count

    def pending(self) -> int:
        return self._queue.qsize()
