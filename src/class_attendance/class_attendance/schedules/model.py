from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Any, Mapping, Optional

from ..common.datetime_utils import day_name, format_hhmm, parse_time_of_day
from ..common.validators import optional_text, require_day_of_week, require_non_empty
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Schedule:
    """Weekly class slot of a subject, scoped to one academic period."""

    schedule_id: int
    subject_id: str
    teacher_id: str
    day_of_week: int
    start_time: time
    end_time: time
    academic_year_id: str
    semester_id: str
    room: Optional[str] = None
    department: Optional[str] = None
    year_level: Optional[str] = None
    section_id: Optional[str] = None
    section_name: Optional[str] = None
    subject_code: Optional[str] = None
    subject_name: Optional[str] = None
    teacher_user_id: Optional[int] = None

    @property
    def day_name(self) -> str:
        return day_name(self.day_of_week)

    @property
    def time_label(self) -> str:
        return f"{format_hhmm(self.start_time)} - {format_hhmm(self.end_time)}"


@dataclass(frozen=True)
class ScheduleDraft:
    """A schedule not yet persisted (single create or one bulk candidate)."""

    subject_id: str
    teacher_id: str
    day_of_week: int
    start_time: time
    end_time: time
    room: Optional[str] = None
    department: Optional[str] = None
    year_level: Optional[str] = None
    section_id: Optional[str] = None

    @classmethod
    def from_input(cls, data: Mapping[str, Any], *, subject_id: str, teacher_id: str) -> "ScheduleDraft":
        """Parse form/JSON input; times may be "8:00 AM" or "08:00"."""

        start = parse_time_of_day(require_non_empty(data.get("start_time"), "Start time"))
        end = parse_time_of_day(require_non_empty(data.get("end_time"), "End time"))
        if start >= end:
            raise ValidationError("End time must be after start time")

        return cls(
            subject_id=require_non_empty(subject_id, "Subject"),
            teacher_id=require_non_empty(teacher_id, "Teacher"),
            day_of_week=require_day_of_week(data.get("day_of_week")),
            start_time=start,
            end_time=end,
            room=optional_text(data.get("room")),
            department=optional_text(data.get("department")),
            year_level=optional_text(data.get("year_level", data.get("year"))),
            section_id=optional_text(data.get("section_id")),
        )

    @property
    def day_name(self) -> str:
        return day_name(self.day_of_week)

    @property
    def time_label(self) -> str:
        return f"{format_hhmm(self.start_time)} - {format_hhmm(self.end_time)}"


@dataclass(frozen=True)
class ScheduleConflict:
    """A rejected candidate and the existing slots it collides with."""

    day: str
    time: str
    conflicts: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"day": self.day, "time": self.time, "conflicts": list(self.conflicts)}


@dataclass(frozen=True)
class BulkAssignResult:
    created_ids: list[int]
    conflicts: list[ScheduleConflict]

    @property
    def created_count(self) -> int:
        return len(self.created_ids)

    @property
    def skipped_count(self) -> int:
        return len(self.conflicts)

    @property
    def message(self) -> str:
        if self.conflicts:
            return (
                f"Subject assigned with {self.created_count} schedule(s). "
                f"{self.skipped_count} schedule(s) had conflicts and were skipped."
            )
        if self.created_ids:
            return f"Subject assigned successfully with {self.created_count} schedule(s)"
        return "Subject assigned successfully"
