"""
Blocking tail loop over a positioned journal source.
"""

import threading
from typing import Any, Callable, Dict, Mapping

from journaltail.position.store import CursorStore
from journaltail.reader.fieldmap import PRETTY_FIELD_MAP
from journaltail.reader.record import build_record
from journaltail.source.base import JournalSource
from journaltail.utils.logging import get_logger

logger = get_logger(__name__)

Record = Dict[str, Any]
RecordSink = Callable[[Record], None]


class TailLoop:
    """
    Streams journal entries to a sink as they are appended.

    For every entry the record is handed to the sink first and the
    cursor store is advanced second, so a persisted cursor never points
    past a record that was not delivered.

    Example:
        loop = TailLoop(source, store, records.append, hostname="web-1")
        thread = threading.Thread(target=loop.run)
        thread.start()
        ...
        loop.stop()
        thread.join()
    """

    def __init__(
        self,
        source: JournalSource,
        store: CursorStore,
        sink: RecordSink,
        hostname: str,
        pretty_keys: bool = False,
        wait_timeout: float = 1.0,
        field_map: Mapping[str, str] = PRETTY_FIELD_MAP,
    ):
        """
        Initialize tail loop.

        Args:
            source: Journal source, already positioned
            store: Cursor store to advance after each record
            sink: Downstream consumer of records
            hostname: Host used for entries without _HOSTNAME
            pretty_keys: Rename reserved fields to readable names
            wait_timeout: Seconds per blocking wait before rechecking stop
            field_map: Pretty-name table
        """
        self.source = source
        self.store = store
        self.sink = sink
        self.hostname = hostname
        self.pretty_keys = pretty_keys
        self.wait_timeout = wait_timeout
        self.field_map = field_map

        self._stop_event = threading.Event()
        self._records_emitted = 0

    @property
    def records_emitted(self) -> int:
        return self._records_emitted

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Ask the loop to return after the current wait or record."""
        self._stop_event.set()

    def run(self) -> int:
        """
        Tail until stopped.

        Returns:
            Number of records emitted by this call

        Raises:
            JournalSourceError: If the source fails; the loop stops and
                the error is left to the caller to report
        """
        emitted_before = self._records_emitted

        logger.info("Tailing journal", pretty_keys=self.pretty_keys)

        while not self._stop_event.is_set():
            if not self.poll_once():
                self.source.wait(self.wait_timeout)

        emitted = self._records_emitted - emitted_before

        logger.info("Stopped tailing journal", records=emitted)

        return emitted

    def poll_once(self) -> bool:
        """
        Deliver the next entry if one is available.

        Returns:
            True if a record was delivered
        """
        if not self.source.move_next():
            return False

        cursor = self.source.cursor()
        record = build_record(
            self.source.current_entry(),
            cursor=cursor,
            default_host=self.hostname,
            pretty_keys=self.pretty_keys,
            field_map=self.field_map,
        )

        self.sink(record)
        self.store.advance(cursor)
        self._records_emitted += 1

        return True
