"""
Persistent cursor storage (the "sincedb").

Keeps the read position of the journal in memory and on disk. The tail
loop advances the in-memory cursor after each delivered record; the
checkpoint scheduler and the shutdown path persist it.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Union

from journaltail.utils.logging import get_logger

logger = get_logger(__name__)


class CursorStoreError(Exception):
    """Raised when the sincedb file cannot be read or written."""
    pass


class CursorStore:
    """
    Thread-safe cursor holder backed by a single-token file.

    Tracks:
    - The current cursor (last entry handed downstream)
    - The persisted cursor (last value written to disk)

    The file holds exactly one cursor and is replaced wholesale on every
    write. All access to both values goes through one lock, which is also
    held across the file write so there is at most one writer.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize cursor store.

        Args:
            path: Location of the sincedb file
        """
        self.path = Path(path)

        self._current = ""
        self._persisted = ""
        self._write_count = 0

        self._lock = threading.RLock()

    def load(self) -> str:
        """
        Read the saved cursor, creating an empty sincedb if none exists.

        Returns:
            Saved cursor, or "" if there is no prior position

        Raises:
            CursorStoreError: If the file cannot be created or read
        """
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.touch(exist_ok=True)
                cursor = self.path.read_text(encoding="utf-8").strip()
            except (OSError, UnicodeDecodeError) as e:
                raise CursorStoreError(
                    f"Failed to read sincedb {self.path}: {e}"
                ) from e

            self._current = cursor
            self._persisted = cursor

        logger.info(
            "Loaded cursor",
            sincedb_path=str(self.path),
            cursor=cursor or None,
        )

        return cursor

    def current(self) -> str:
        """Get the cursor of the last delivered entry."""
        with self._lock:
            return self._current

    def advance(self, cursor: str) -> None:
        """
        Record that everything up to ``cursor`` has been delivered.

        Args:
            cursor: Cursor of the entry just handed downstream
        """
        with self._lock:
            self._current = cursor

    def persisted_value(self) -> str:
        """Get the cursor most recently written to disk."""
        with self._lock:
            return self._persisted

    @property
    def write_count(self) -> int:
        """Number of successful file writes since creation."""
        with self._lock:
            return self._write_count

    def flush_if_changed(self) -> bool:
        """
        Persist the current cursor if it differs from the persisted one.

        Returns:
            True if the file was written

        Raises:
            CursorStoreError: If the write fails
        """
        with self._lock:
            if self._current == self._persisted:
                return False

            self._write(self._current)
            return True

    def flush(self) -> None:
        """
        Persist the current cursor unconditionally.

        Raises:
            CursorStoreError: If the write fails
        """
        with self._lock:
            self._write(self._current)

    def _write(self, cursor: str) -> None:
        # Caller holds self._lock
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                dir=self.path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(f"{cursor}\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            raise CursorStoreError(
                f"Failed to write sincedb {self.path}: {e}"
            ) from e

        self._persisted = cursor
        self._write_count += 1

        logger.debug(
            "Persisted cursor",
            sincedb_path=str(self.path),
            cursor=cursor,
        )
