"""
JournalSource backed by the systemd journal (python-systemd bindings).
"""

from typing import Any, Dict, Mapping, Optional

from systemd import id128, journal

from journaltail.source.base import (
    JournalSourceError,
    RawEntry,
    StaleCursorError,
)
from journaltail.utils.logging import get_logger

logger = get_logger(__name__)

REALTIME_FIELD = "__REALTIME_TIMESTAMP"
CURSOR_FIELD = "__CURSOR"


class _RawReader(journal.Reader):
    """Reader that leaves field values as the journal's raw bytes."""

    def _convert_field(self, key, value):
        return value


class SystemdJournalSource:
    """
    Journal source over ``systemd.journal.Reader``.

    Example:
        source = SystemdJournalSource(flags=0, path="/var/log/journal")
        source.seek_tail()
        source.move_previous()
        while True:
            while source.move_next():
                print(source.current_entry().fields.get("MESSAGE"))
            source.wait(1.0)
    """

    def __init__(self, flags: int = 0, path: Optional[str] = None):
        """
        Open the journal.

        Args:
            flags: sd_journal_open flags (0 all, 1 local, 2 runtime, 4 system)
            path: Directory holding journal files (None for the default set).
                Ignored when flags is non-zero, since the scope flags
                cannot be combined with a directory.

        Raises:
            JournalSourceError: If the journal cannot be opened
        """
        if flags and path:
            logger.info(
                "Journal flags set, opening the default journals instead of path",
                path=path,
                flags=flags,
            )
            path = None

        self.flags = flags
        self.path = path

        try:
            self._reader = _RawReader(flags=flags, path=path)
        except (OSError, ValueError) as e:
            raise JournalSourceError(
                f"Failed to open journal (path={path!r}, flags={flags}): {e}"
            ) from e

        self._entry: Dict[str, Any] = {}

        logger.info("Opened systemd journal", path=path, flags=flags)

    def seek_head(self) -> None:
        self._reader.seek_head()
        self._entry = {}

    def seek_tail(self) -> None:
        self._reader.seek_tail()
        self._entry = {}

    def seek_cursor(self, cursor: str) -> None:
        try:
            self._reader.seek_cursor(cursor)
        except (OSError, ValueError) as e:
            raise StaleCursorError(cursor, str(e)) from e
        self._entry = {}

    def move_next(self) -> bool:
        try:
            self._entry = self._reader.get_next()
        except OSError as e:
            raise JournalSourceError(f"Failed to read next journal entry: {e}") from e
        return bool(self._entry)

    def move_previous(self) -> bool:
        try:
            self._entry = self._reader.get_previous()
        except OSError as e:
            raise JournalSourceError(f"Failed to read previous journal entry: {e}") from e
        return bool(self._entry)

    def add_filter(self, filter: Mapping[str, str]) -> None:
        if filter:
            self._reader.add_match(*(f"{k}={v}" for k, v in filter.items()))

    def current_entry(self) -> RawEntry:
        fields = {
            k: v for k, v in self._entry.items()
            if not k.startswith("__")
        }
        return RawEntry(
            fields=fields,
            realtime_usec=int(self._entry.get(REALTIME_FIELD, 0)),
        )

    def cursor(self) -> str:
        return self._entry.get(CURSOR_FIELD, "")

    def wait(self, timeout: float) -> bool:
        try:
            return self._reader.wait(timeout) != journal.NOP
        except OSError as e:
            raise JournalSourceError(f"Failed waiting for journal: {e}") from e

    def boot_id(self) -> str:
        return id128.get_boot().hex

    def close(self) -> None:
        self._reader.close()
        logger.debug("Closed systemd journal", path=self.path)
