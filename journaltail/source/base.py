"""
Journal source interface.

The engine drives the journal only through the primitives below: seeking,
single-step movement, reading the current entry and its cursor, matching
and blocking until more data arrives.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Protocol, Union, runtime_checkable

FieldValue = Union[bytes, List[bytes]]

HOSTNAME_FIELD = "_HOSTNAME"
BOOT_ID_FIELD = "_BOOT_ID"


class JournalSourceError(Exception):
    """Raised when the journal cannot be opened or read."""
    pass


class StaleCursorError(JournalSourceError):
    """Raised when a cursor no longer resolves to a position in the journal."""

    def __init__(self, cursor: str, reason: str = ""):
        self.cursor = cursor
        message = f"Cannot seek to cursor {cursor!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


@dataclass(frozen=True)
class RawEntry:
    """
    One journal entry as handed out by a source.

    Attributes:
        fields: Field name to raw value (a list for repeated fields)
        realtime_usec: Wall-clock timestamp in microseconds since the epoch
    """
    fields: Mapping[str, FieldValue] = field(default_factory=dict)
    realtime_usec: int = 0

    @property
    def hostname(self) -> Optional[FieldValue]:
        return self.fields.get(HOSTNAME_FIELD)


@runtime_checkable
class JournalSource(Protocol):
    """
    Positionable, waitable reader over an append-only journal.

    Movement follows sd-journal semantics: after ``seek_head`` the first
    ``move_next`` lands on the oldest entry; after ``seek_cursor`` the first
    ``move_next`` lands on the entry the cursor names.
    """

    def seek_head(self) -> None:
        ...

    def seek_tail(self) -> None:
        ...

    def seek_cursor(self, cursor: str) -> None:
        """Raises StaleCursorError if the cursor cannot be sought to."""
        ...

    def move_next(self) -> bool:
        """Step forward one matching entry; False at the end."""
        ...

    def move_previous(self) -> bool:
        """Step backward one matching entry; False at the start."""
        ...

    def add_filter(self, filter: Mapping[str, str]) -> None:
        """Only yield entries where every field equals its value."""
        ...

    def current_entry(self) -> RawEntry:
        ...

    def cursor(self) -> str:
        """Cursor of the entry the reader is positioned on."""
        ...

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; True if the journal changed."""
        ...

    def boot_id(self) -> str:
        """Identifier of the running boot, as stored in _BOOT_ID."""
        ...

    def close(self) -> None:
        ...
