from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceState
from .model import AttendanceRecord, state_of
from .transitions.base import AttendanceTransition
from .transitions.completed import CompletedTransition
from .transitions.time_in import TimeInTransition
from .transitions.time_out import TimeOutTransition


@dataclass
class AttendanceTransitionFactory:
    """Factory Pattern: choose the transition for the record's current state."""

    def for_record(self, record: Optional[AttendanceRecord]) -> AttendanceTransition:
        state = state_of(record)
        if state == AttendanceState.NONE:
            return TimeInTransition()
        if state == AttendanceState.IN_PROGRESS:
            return TimeOutTransition()
        if state == AttendanceState.COMPLETE:
            return CompletedTransition()
        raise ValueError(f"Unhandled attendance state: {state!r}")
