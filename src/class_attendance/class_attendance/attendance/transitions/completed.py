from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceState
from ...core.exceptions import StateConflictError
from ...overrides.model import EffectiveWindow
from ..model import AttendanceRecord
from .base import AttendanceTransition, TransitionDecision

COMPLETED_MESSAGE = "Attendance already completed for today (both time in and time out recorded)"


class CompletedTransition(AttendanceTransition):
    """Terminal state: every further scan that day is rejected."""

    source = AttendanceState.COMPLETE

    def decide(self, *, record: Optional[AttendanceRecord], now: datetime, window: EffectiveWindow) -> TransitionDecision:
        raise StateConflictError(COMPLETED_MESSAGE)
