from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import OverrideStatus, OverrideType
from .model import ScheduleOverride


class OverrideRepository(Protocol):
    def get_by_id(self, override_id: int) -> Optional[ScheduleOverride]:
        raise NotImplementedError

    def get_for_schedule_and_date(self, *, schedule_id: int, on_date: date) -> Optional[ScheduleOverride]:
        """At most one override exists per (schedule, date), whatever its status."""

        raise NotImplementedError

    def create(
        self,
        *,
        schedule_id: int,
        on_date: date,
        reason: str,
        override_type: OverrideType,
        new_start_time: Optional[time],
        new_end_time: Optional[time],
        requested_by: Optional[int],
    ) -> int:
        """Insert a PENDING override. Raises DuplicateRecordError for a second one on the same date."""

        raise NotImplementedError

    def decide(
        self,
        *,
        override_id: int,
        status: OverrideStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Move a PENDING override to APPROVED/REJECTED. False if it was not pending."""

        raise NotImplementedError

    def list_overrides(
        self,
        *,
        status: Optional[OverrideStatus] = None,
        teacher_user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ScheduleOverride]:
        raise NotImplementedError
