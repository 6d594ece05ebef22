"""Positioning, tailing and record normalization."""

from journaltail.reader.fieldmap import PRETTY_FIELD_MAP, pretty_key
from journaltail.reader.planner import (
    ResumptionPlan,
    ResumptionPlanner,
    ResumptionState,
)
from journaltail.reader.record import JournalEntry, build_record
from journaltail.reader.tail import TailLoop

__all__ = [
    "PRETTY_FIELD_MAP",
    "pretty_key",
    "ResumptionPlan",
    "ResumptionPlanner",
    "ResumptionState",
    "JournalEntry",
    "build_record",
    "TailLoop",
]
