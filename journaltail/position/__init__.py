"""Read position persistence."""

from journaltail.position.checkpoint import CheckpointScheduler
from journaltail.position.store import CursorStore, CursorStoreError

__all__ = [
    "CheckpointScheduler",
    "CursorStore",
    "CursorStoreError",
]
