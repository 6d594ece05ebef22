"""Shared fixtures: an in-memory journal implementing JournalSource."""

import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import pytest

from journaltail.source.base import RawEntry, StaleCursorError

BOOT_ID = "5f3c0b8e2a6d4f1c9e7b0a3d2c1e4f60"


class MemoryJournal:
    """
    Append-only journal held in memory.

    Positions follow sd-journal: the reader is either on an entry
    (``_current``) or in the gap before entry ``_gap``, in which case the
    next move_next lands on that entry.
    Every primitive call is recorded in ``calls``.
    """

    def __init__(self, boot_id: str = BOOT_ID):
        self._boot_id = boot_id
        self._entries: List[Dict[str, bytes]] = []
        self._current: Optional[int] = None
        self._gap = 0
        self._matches: Dict[str, str] = {}
        self._changed = threading.Condition()
        self._seen = 0
        self.calls: List[str] = []
        self.closed = False

    @staticmethod
    def cursor_for(index: int) -> str:
        return f"s=memory;i={index:08x}"

    def append(self, message: str, **fields: str) -> str:
        """Append an entry; returns its cursor."""
        entry = {"MESSAGE": message.encode(), "_BOOT_ID": self._boot_id.encode()}
        entry.update({k: v.encode() if isinstance(v, str) else v for k, v in fields.items()})
        with self._changed:
            self._entries.append(entry)
            self._changed.notify_all()
            return self.cursor_for(len(self._entries) - 1)

    def __len__(self) -> int:
        return len(self._entries)

    def _matches_entry(self, index: int) -> bool:
        entry = self._entries[index]
        return all(entry.get(k) == v.encode() for k, v in self._matches.items())

    def _search(self, indices) -> bool:
        with self._changed:
            for index in indices:
                if index < len(self._entries) and self._matches_entry(index):
                    self._current = index
                    return True
            return False

    def seek_head(self) -> None:
        self.calls.append("seek_head")
        self._current, self._gap = None, 0

    def seek_tail(self) -> None:
        self.calls.append("seek_tail")
        self._current, self._gap = None, len(self._entries)

    def seek_cursor(self, cursor: str) -> None:
        self.calls.append("seek_cursor")
        for index in range(len(self._entries)):
            if self.cursor_for(index) == cursor:
                self._current, self._gap = None, index
                return
        raise StaleCursorError(cursor, "no such entry")

    def move_next(self) -> bool:
        self.calls.append("move_next")
        start = self._gap if self._current is None else self._current + 1
        return self._search(range(start, len(self._entries)))

    def move_previous(self) -> bool:
        self.calls.append("move_previous")
        start = self._gap - 1 if self._current is None else self._current - 1
        return self._search(range(start, -1, -1))

    def add_filter(self, filter: Mapping[str, str]) -> None:
        self.calls.append("add_filter")
        self._matches.update(filter)

    def current_entry(self) -> RawEntry:
        entry = self._entries[self._current]
        return RawEntry(
            fields=dict(entry),
            realtime_usec=1_700_000_000_000_000 + self._current,
        )

    def cursor(self) -> str:
        if self._current is None:
            return ""
        return self.cursor_for(self._current)

    def wait(self, timeout: float) -> bool:
        with self._changed:
            changed = self._changed.wait_for(
                lambda: len(self._entries) > self._seen,
                timeout=timeout,
            )
            self._seen = len(self._entries)
            return changed

    def boot_id(self) -> str:
        return self._boot_id

    def close(self) -> None:
        self.calls.append("close")
        self.closed = True

    def reopen(self) -> "MemoryJournal":
        """New reader over the same entries, as after a process restart."""
        reader = MemoryJournal(self._boot_id)
        reader._entries = self._entries
        reader._changed = self._changed
        return reader


@pytest.fixture
def memory_journal():
    """Empty in-memory journal."""
    return MemoryJournal()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sincedb_path(temp_dir):
    """Location of a sincedb file inside the temporary directory."""
    return temp_dir / ".sincedb_journal"
