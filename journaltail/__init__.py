"""
journaltail - resumable tailing of the systemd journal.

Streams journal entries as normalized records and keeps the read position
in a small "sincedb" file, so that a restarted tailer picks up right after
the last delivered entry:
- Fresh start at the head or tail of the journal, optionally filtered and
  limited to the current boot
- Resume from a saved cursor without re-delivering its entry
- Periodic background checkpoints plus a final one on shutdown
- Optional renaming of reserved UPPERCASE fields to readable names
"""

__version__ = "0.1.0"

from journaltail.config import ConfigurationError, JournalInputConfig
from journaltail.input import JournalInput
from journaltail.position import CheckpointScheduler, CursorStore, CursorStoreError
from journaltail.reader import JournalEntry, ResumptionPlanner, TailLoop

__all__ = [
    "CheckpointScheduler",
    "ConfigurationError",
    "CursorStore",
    "CursorStoreError",
    "JournalEntry",
    "JournalInput",
    "JournalInputConfig",
    "ResumptionPlanner",
    "TailLoop",
]
