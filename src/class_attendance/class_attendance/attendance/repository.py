from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_enrollment_and_date(self, enrollment_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_time_in(
        self,
        *,
        enrollment_id: int,
        attendance_date: date,
        time_in: datetime,
        scanned_at: datetime,
        late_minutes: int,
        status: AttendanceStatus,
        schedule_id: Optional[int],
        scanner_user_id: Optional[int],
        note: Optional[str] = None,
    ) -> int:
        """Insert the day's row.

        The (enrollment_id, attendance_date) unique key is the arbiter: a second
        insert raises DuplicateRecordError instead of overwriting.
        """

        raise NotImplementedError

    def set_time_out(self, *, attendance_id: int, time_out: datetime) -> bool:
        """Set time_out only if still unset. False when another scan completed it first."""

        raise NotImplementedError

    def list_for_schedule_and_date(self, *, schedule_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
