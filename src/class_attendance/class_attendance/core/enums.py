from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization checks."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance classification stored in the database."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class AttendanceState(str, Enum):
    """Progress of one (enrollment, date) record through the scan flow."""

    NONE = "NONE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"


class ScanAction(str, Enum):
    TIME_IN = "time_in"
    TIME_OUT = "time_out"


class OverrideType(str, Enum):
    TIME_CHANGE = "time-change"
    CANCEL = "cancel"


class OverrideStatus(str, Enum):
    """Approval workflow state of a schedule override request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
