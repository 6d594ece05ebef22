"""
Startup positioning of the journal reader.

Decides once, from the saved cursor and the configuration, where tailing
begins, and moves the reader there.

Fresh start (no saved cursor):
- head: seek to the oldest entry, then apply the filter
- tail: seek to the end and step back one entry, then apply the filter.
  Without a concrete movement the journal treats the position as unset
  and the first wait would replay from the beginning.

Resume (saved cursor):
- seek to the cursor and step forward one entry, so the entry the
  cursor names (already delivered) is skipped. No filter is applied.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional

from journaltail.config import SeekTo, StaleCursorPolicy
from journaltail.source.base import BOOT_ID_FIELD, JournalSource, StaleCursorError
from journaltail.utils.logging import get_logger

logger = get_logger(__name__)


class ResumptionState(str, Enum):
    """How the reader was positioned."""
    FRESH = "fresh"
    RESUMING = "resuming"


@dataclass(frozen=True)
class ResumptionPlan:
    """
    Outcome of startup positioning.

    Attributes:
        state: Fresh start or resume
        seekto: Fresh-start position (None when resuming)
        cursor: Cursor resumed from ("" on a fresh start)
        filter: Matches applied to the reader (empty when resuming)
        stale_cursor: Saved cursor that could not be sought to, if any
    """
    state: ResumptionState
    seekto: Optional[SeekTo] = None
    cursor: str = ""
    filter: Dict[str, str] = field(default_factory=dict)
    stale_cursor: Optional[str] = None


class ResumptionPlanner:
    """Positions a JournalSource exactly once at startup."""

    def __init__(
        self,
        seekto: str = SeekTo.TAIL,
        filter: Optional[Mapping[str, str]] = None,
        thisboot: bool = True,
        on_stale_cursor: str = StaleCursorPolicy.FAIL,
    ):
        """
        Initialize planner.

        Args:
            seekto: Fresh-start position
            filter: Fresh-start matches (never used when resuming)
            thisboot: Add a _BOOT_ID match for the running boot on a fresh start
            on_stale_cursor: fail, or fall back to a fresh start at head/tail
        """
        self.seekto = SeekTo(seekto)
        self.filter = dict(filter or {})
        self.thisboot = thisboot
        self.on_stale_cursor = StaleCursorPolicy(on_stale_cursor)

        self._plan: Optional[ResumptionPlan] = None

    @property
    def plan(self) -> Optional[ResumptionPlan]:
        """The applied plan, or None before apply()."""
        return self._plan

    @staticmethod
    def state_for(saved_cursor: str) -> ResumptionState:
        if saved_cursor and saved_cursor.strip():
            return ResumptionState.RESUMING
        return ResumptionState.FRESH

    def apply(self, source: JournalSource, saved_cursor: str) -> ResumptionPlan:
        """
        Move the reader to its starting position.

        Args:
            source: Freshly opened journal source
            saved_cursor: Cursor loaded from the sincedb ("" if none)

        Returns:
            The plan that was carried out

        Raises:
            RuntimeError: If called more than once
            StaleCursorError: If the saved cursor cannot be sought to and
                the policy is to fail
        """
        if self._plan is not None:
            raise RuntimeError("Reader position has already been established")

        saved_cursor = (saved_cursor or "").strip()

        if self.state_for(saved_cursor) is ResumptionState.RESUMING:
            try:
                plan = self._resume(source, saved_cursor)
            except StaleCursorError as e:
                if self.on_stale_cursor is StaleCursorPolicy.FAIL:
                    logger.error("Saved cursor is stale", cursor=saved_cursor, error=str(e))
                    raise

                fallback = SeekTo(self.on_stale_cursor.value)
                logger.warning(
                    "Saved cursor is stale, starting fresh",
                    cursor=saved_cursor,
                    seekto=fallback.value,
                    error=str(e),
                )
                plan = self._fresh(source, fallback, stale_cursor=saved_cursor)
        else:
            plan = self._fresh(source, self.seekto)

        self._plan = plan
        return plan

    def _resume(self, source: JournalSource, cursor: str) -> ResumptionPlan:
        source.seek_cursor(cursor)
        source.move_next()

        logger.info("Resuming journal from saved cursor", cursor=cursor)

        return ResumptionPlan(state=ResumptionState.RESUMING, cursor=cursor)

    def _fresh(
        self,
        source: JournalSource,
        seekto: SeekTo,
        stale_cursor: Optional[str] = None,
    ) -> ResumptionPlan:
        if seekto is SeekTo.HEAD:
            source.seek_head()
        else:
            source.seek_tail()
            source.move_previous()

        effective_filter = dict(self.filter)
        if self.thisboot:
            effective_filter[BOOT_ID_FIELD] = source.boot_id()

        source.add_filter(effective_filter)

        logger.info(
            "Starting journal fresh",
            seekto=seekto.value,
            filter=effective_filter,
        )

        return ResumptionPlan(
            state=ResumptionState.FRESH,
            seekto=seekto,
            filter=effective_filter,
            stale_cursor=stale_cursor,
        )
