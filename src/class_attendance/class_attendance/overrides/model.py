from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import OverrideStatus, OverrideType


@dataclass(frozen=True)
class ScheduleOverride:
    """Date-specific change to a weekly schedule (time change or cancellation)."""

    override_id: int
    schedule_id: int
    override_date: date
    reason: str
    override_type: OverrideType
    status: OverrideStatus
    new_start_time: Optional[time] = None
    new_end_time: Optional[time] = None
    requested_by: Optional[int] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EffectiveWindow:
    """Class window for one calendar date after applying any approved override."""

    cancelled: bool
    effective_start: time
    effective_end: time
    reason: Optional[str] = None
    override_id: Optional[int] = None
