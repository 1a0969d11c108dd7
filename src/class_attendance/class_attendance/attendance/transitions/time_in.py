from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import whole_minutes_after
from ...core.enums import AttendanceState, ScanAction
from ...overrides.model import EffectiveWindow
from ..model import AttendanceRecord
from .base import AttendanceTransition, TransitionDecision


class TimeInTransition(AttendanceTransition):
    """First scan of the day. The only place lateness is computed."""

    source = AttendanceState.NONE

    def decide(self, *, record: Optional[AttendanceRecord], now: datetime, window: EffectiveWindow) -> TransitionDecision:
        return TransitionDecision(
            action=ScanAction.TIME_IN,
            late_minutes=whole_minutes_after(window.effective_start, now),
        )
