"""Journal sources the tailer can read from."""

from journaltail.source.base import (
    BOOT_ID_FIELD,
    HOSTNAME_FIELD,
    JournalSource,
    JournalSourceError,
    RawEntry,
    StaleCursorError,
)

__all__ = [
    "BOOT_ID_FIELD",
    "HOSTNAME_FIELD",
    "JournalSource",
    "JournalSourceError",
    "RawEntry",
    "StaleCursorError",
]
