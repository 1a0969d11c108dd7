from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import format_hhmm, minute_of_day
from ...core.enums import AttendanceState, ScanAction
from ...core.exceptions import StateConflictError
from ...overrides.model import EffectiveWindow
from ..model import AttendanceRecord
from .base import AttendanceTransition, TransitionDecision


class TimeOutTransition(AttendanceTransition):
    """Completing scan: allowed from the effective end time (minute precision) on."""

    source = AttendanceState.IN_PROGRESS

    def decide(self, *, record: Optional[AttendanceRecord], now: datetime, window: EffectiveWindow) -> TransitionDecision:
        if minute_of_day(now) < minute_of_day(window.effective_end):
            raise StateConflictError(
                f"Too early: time out only allowed at or after {format_hhmm(window.effective_end)} "
                f"(class end time). Current time is {format_hhmm(now)}."
            )
        return TransitionDecision(action=ScanAction.TIME_OUT)
