"""
Periodic checkpointing of the journal cursor.
"""

import threading
from typing import Optional

from journaltail.position.store import CursorStore, CursorStoreError
from journaltail.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_WRITE_INTERVAL = 15.0


class CheckpointScheduler:
    """
    Persists the cursor in a background thread.

    Every ``interval`` seconds the store is asked to flush if the cursor
    moved. Stopping halts further ticks but does not flush; the final
    write belongs to the shutdown path, after the scheduler has stopped.
    """

    def __init__(
        self,
        store: CursorStore,
        interval: float = DEFAULT_WRITE_INTERVAL,
    ):
        """
        Initialize checkpoint scheduler.

        Args:
            store: Cursor store to flush
            interval: Seconds between flush attempts
        """
        self.store = store
        self.interval = interval

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.flushes = 0
        self.failures = 0

        logger.info("Initialized checkpoint scheduler", interval=interval)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the checkpoint thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._checkpoint_loop,
            name="journaltail-sincedb-writer",
            daemon=True,
        )
        self._thread.start()

        logger.info("Started checkpoint thread")

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop the checkpoint thread.

        Waits for an in-progress flush to finish, so no background write
        can land after this returns.

        Args:
            timeout: Seconds to wait for the thread to exit
        """
        if self._thread is None:
            return

        self._stop_event.set()
        self._thread.join(timeout=timeout)

        if self._thread.is_alive():
            logger.warning("Checkpoint thread did not stop in time", timeout=timeout)
        else:
            self._thread = None
            logger.info("Stopped checkpoint thread")

    def tick(self) -> bool:
        """
        Run one checkpoint.

        Returns:
            True if the cursor was written
        """
        try:
            written = self.store.flush_if_changed()
        except CursorStoreError as e:
            self.failures += 1
            logger.error(
                "Checkpoint failed, retrying next interval",
                error=str(e),
                failures=self.failures,
            )
            return False

        if written:
            self.flushes += 1

        return written

    def _checkpoint_loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.tick()
