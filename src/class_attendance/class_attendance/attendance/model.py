from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_12h
from ..common.validators import optional_text, require_non_empty
from ..core.enums import AttendanceState, AttendanceStatus, ScanAction
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (enrollment, date). late_minutes is computed once at time-in."""

    attendance_id: int
    enrollment_id: int
    attendance_date: date
    status: AttendanceStatus
    time_in: Optional[datetime]
    time_out: Optional[datetime]
    scanned_at: datetime
    late_minutes: int = 0
    schedule_id: Optional[int] = None
    scanner_user_id: Optional[int] = None
    note: Optional[str] = None

    @property
    def state(self) -> AttendanceState:
        return AttendanceState.COMPLETE if self.time_out is not None else AttendanceState.IN_PROGRESS

    @property
    def is_late(self) -> bool:
        return self.late_minutes > 0


def state_of(record: Optional[AttendanceRecord]) -> AttendanceState:
    return record.state if record else AttendanceState.NONE


def status_label(status: AttendanceStatus) -> str:
    if status == AttendanceStatus.PRESENT:
        return "Present"
    if status == AttendanceStatus.ABSENT:
        return "Absent"
    if status == AttendanceStatus.LATE:
        return "Late"
    if status == AttendanceStatus.EXCUSED:
        return "Excused"
    raise ValueError(f"Unhandled attendance status: {status!r}")


@dataclass(frozen=True)
class ScanRequest:
    schedule_id: int
    student_id: str
    note: Optional[str] = None
    time_in: Optional[str] = None
    custom_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None, *, student_id: Optional[str] = None) -> "ScanRequest":
        """Accepts snake_case or camelCase keys (scheduleId, studentId, timeIn, customDate)."""

        if not isinstance(data, Mapping):
            raise ValidationError("Invalid payload")

        def pick(*keys):
            for k in keys:
                if data.get(k) not in (None, ""):
                    return data.get(k)
            return None

        raw_schedule = require_non_empty(pick("schedule_id", "scheduleId"), "Schedule ID")
        try:
            schedule_id = int(raw_schedule)
        except (TypeError, ValueError):
            raise ValidationError("Schedule ID must be a number")

        return cls(
            schedule_id=schedule_id,
            student_id=require_non_empty(student_id or pick("student_id", "studentId"), "Student ID"),
            note=optional_text(pick("note")),
            time_in=optional_text(pick("time_in", "timeIn")),
            custom_date=optional_text(pick("custom_date", "customDate")),
        )


@dataclass(frozen=True)
class ScanResult:
    attendance_id: int
    action: ScanAction
    is_late: bool
    late_minutes: int
    time_in: Optional[datetime]
    time_out: Optional[datetime]
    student_id: str
    student_name: str
    subject_code: Optional[str] = None
    subject_name: Optional[str] = None

    @property
    def message(self) -> str:
        if self.action == ScanAction.TIME_IN:
            late = f" (Late by {self.late_minutes} minutes)" if self.is_late else ""
            return f"Time IN recorded{late}"
        return "Time OUT recorded"

    @property
    def next_action(self) -> str:
        if self.action == ScanAction.TIME_IN:
            return "Scan again for time-out when class ends"
        return "Attendance completed for today"

    def to_dict(self) -> dict:
        return {
            "ok": True,
            "attendanceId": self.attendance_id,
            "action": self.action.value,
            "isLate": self.is_late,
            "lateMinutes": self.late_minutes,
            "timeIn": format_12h(self.time_in) if self.time_in else None,
            "timeOut": format_12h(self.time_out) if self.time_out else None,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "subjectCode": self.subject_code,
            "subjectName": self.subject_name,
            "message": self.message,
            "nextAction": self.next_action,
        }
