"""
Journal input: wiring and lifecycle for the tailer.

Ties together the cursor store, checkpoint scheduler, resumption planner
and tail loop:
- start(): open the journal, load the sincedb, position the reader,
  start checkpointing
- run(sink): tail until stopped
- close(): stop checkpointing, write the final cursor, release the journal
"""

import socket
import threading
from typing import Any, Callable, Dict, Optional

from journaltail.config import JournalInputConfig
from journaltail.position.checkpoint import CheckpointScheduler
from journaltail.position.store import CursorStore, CursorStoreError
from journaltail.reader.planner import ResumptionPlan, ResumptionPlanner
from journaltail.reader.tail import RecordSink, TailLoop
from journaltail.source.base import JournalSource
from journaltail.utils.logging import get_logger

logger = get_logger(__name__)

SourceFactory = Callable[[JournalInputConfig], JournalSource]


def open_systemd_source(config: JournalInputConfig) -> JournalSource:
    """Open the local systemd journal per the input configuration."""
    from journaltail.source.systemd import SystemdJournalSource

    return SystemdJournalSource(flags=config.flags, path=config.path or None)


class JournalInput:
    """
    Resumable journal input.

    Example:
        config = JournalInputConfig(seekto="head", pretty_keys=True)

        with JournalInput(config) as journal_input:
            journal_input.run(print)

    Delivery is at-least-once: records handed to the sink after the last
    checkpoint are delivered again if the process dies before close().
    """

    # Seconds close() waits for the tail loop beyond one wait_timeout
    shutdown_grace = 5.0

    def __init__(
        self,
        config: Optional[JournalInputConfig] = None,
        source_factory: SourceFactory = open_systemd_source,
        hostname: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize journal input.

        Args:
            config: Input configuration
            source_factory: Opens the journal source (systemd by default)
            hostname: Host for entries without _HOSTNAME (resolved if None)
            environ: Environment used to derive the sincedb path
        """
        self.config = config or JournalInputConfig()
        self._source_factory = source_factory
        self._hostname = hostname
        self._environ = environ

        self._source: Optional[JournalSource] = None
        self._store: Optional[CursorStore] = None
        self._scheduler: Optional[CheckpointScheduler] = None
        self._loop: Optional[TailLoop] = None
        self._plan: Optional[ResumptionPlan] = None

        self._started = False
        self._closed = False
        self._lifecycle_lock = threading.Lock()
        self._loop_idle = threading.Event()
        self._loop_idle.set()
        self._stop_requested = False
        self._release_deferred = False

    @property
    def store(self) -> Optional[CursorStore]:
        return self._store

    @property
    def plan(self) -> Optional[ResumptionPlan]:
        return self._plan

    @property
    def hostname(self) -> Optional[str]:
        return self._hostname

    def start(self) -> ResumptionPlan:
        """
        Open the journal and position it.

        Returns:
            The resumption plan carried out

        Raises:
            ConfigurationError: If no sincedb location can be derived
            JournalSourceError: If the journal cannot be opened or sought
            CursorStoreError: If the sincedb cannot be read
        """
        with self._lifecycle_lock:
            if self._closed:
                raise RuntimeError("Journal input is closed")

            if self._started:
                return self._plan

            sincedb_path = self.config.resolve_sincedb_path(self._environ)

            if self._hostname is None:
                self._hostname = socket.gethostname()

            store = CursorStore(sincedb_path)
            saved_cursor = store.load()

            source = self._source_factory(self.config)

            try:
                planner = ResumptionPlanner(
                    seekto=self.config.seekto,
                    filter=self.config.filter,
                    thisboot=self.config.thisboot,
                    on_stale_cursor=self.config.on_stale_cursor,
                )
                plan = planner.apply(source, saved_cursor)
            except Exception:
                source.close()
                raise

            self._source = source
            self._store = store
            self._plan = plan

            self._scheduler = CheckpointScheduler(
                store,
                interval=self.config.sincedb_write_interval,
            )
            self._scheduler.start()

            self._started = True

        logger.info(
            "Journal input started",
            sincedb_path=str(sincedb_path),
            state=plan.state.value,
            hostname=self._hostname,
        )

        return plan

    def run(self, sink: RecordSink) -> int:
        """
        Tail the journal, handing each record to ``sink``.

        Blocks until stop() or close() is called from another thread or a
        signal handler.

        Args:
            sink: Callable receiving each record

        Returns:
            Number of records emitted
        """
        self.start()

        with self._lifecycle_lock:
            if self._closed:
                return 0
            if self._loop is None:
                self._loop = TailLoop(
                    self._source,
                    self._store,
                    sink,
                    hostname=self._hostname,
                    pretty_keys=self.config.pretty_keys,
                    wait_timeout=self.config.wait_timeout,
                )
            loop = self._loop
            if self._stop_requested:
                loop.stop()
            self._loop_idle.clear()

        try:
            return loop.run()
        finally:
            with self._lifecycle_lock:
                self._loop_idle.set()
                if self._release_deferred:
                    self._release_deferred = False
                    self._source.close()
                    logger.info("Released journal after tail loop stopped")

    def stop(self) -> None:
        """Signal the tail loop to return."""
        self._stop_requested = True
        if self._loop is not None:
            self._loop.stop()

    def close(self) -> None:
        """
        Shut down in order: stop checkpointing, persist the final cursor,
        release the journal. Safe to call repeatedly or before start().

        Raises:
            CursorStoreError: If the final cursor cannot be written
        """
        with self._lifecycle_lock:
            if self._closed or not self._started:
                return
            self._closed = True

        logger.debug("Journal input shutting down")

        self.stop()
        self._loop_idle.wait(timeout=self.config.wait_timeout + self.shutdown_grace)
        self._scheduler.stop()

        try:
            self._store.flush()
        except CursorStoreError as e:
            logger.error("Failed to write final cursor", error=str(e))
            raise
        finally:
            self._release_source()

        logger.info(
            "Journal input closed",
            cursor=self._store.persisted_value() or None,
        )

    def _release_source(self) -> None:
        with self._lifecycle_lock:
            if self._loop_idle.is_set():
                self._source.close()
                return

            # The sink is still blocked inside the loop; run() closes the
            # journal once the loop returns.
            self._release_deferred = True

        logger.warning(
            "Tail loop still running at shutdown, journal stays open until it stops"
        )

    def metrics(self) -> Dict[str, Any]:
        """
        Get input metrics.

        Returns:
            Dictionary with metrics
        """
        return {
            "state": self._plan.state.value if self._plan else None,
            "records_emitted": self._loop.records_emitted if self._loop else 0,
            "cursor": self._store.current() if self._store else None,
            "persisted_cursor": self._store.persisted_value() if self._store else None,
            "checkpoint_failures": self._scheduler.failures if self._scheduler else 0,
            "closed": self._closed,
        }

    def __enter__(self) -> "JournalInput":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
