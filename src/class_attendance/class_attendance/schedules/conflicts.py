from __future__ import annotations

from datetime import time
from typing import Iterable, Optional, Sequence, Union

from ..periods.model import ActivePeriod
from .model import Schedule, ScheduleConflict, ScheduleDraft
from .repository import ScheduleRepository

Slot = Union[Schedule, ScheduleDraft]


def times_overlap(start: time, end: time, other_start: time, other_end: time) -> bool:
    """Overlap test used for teacher schedules.

    Boundaries are inclusive: a slot ending exactly when another begins
    (08:00-09:30 vs 09:30-10:30) conflicts, as do equal starts or equal ends.
    """

    return start <= other_end and end >= other_start


def _conflict_entry(slot: Schedule) -> dict:
    return {"schedule_id": slot.schedule_id, "day": slot.day_name, "time": slot.time_label}


class ScheduleConflictDetector:
    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def find_conflicts(
        self,
        *,
        teacher_id: str,
        day_of_week: int,
        start: time,
        end: time,
        period: ActivePeriod,
        exclude_schedule_id: Optional[int] = None,
    ) -> list[Schedule]:
        existing = self._schedules.list_for_teacher(
            teacher_id=teacher_id,
            academic_year_id=period.academic_year_id,
            semester_id=period.semester_id,
            day_of_week=day_of_week,
        )
        return [
            s
            for s in existing
            if s.schedule_id != exclude_schedule_id
            and s.day_of_week == day_of_week
            and times_overlap(start, end, s.start_time, s.end_time)
        ]

    @staticmethod
    def partition(
        candidates: Iterable[ScheduleDraft], existing: Sequence[Schedule]
    ) -> tuple[list[ScheduleDraft], list[ScheduleConflict]]:
        """Split bulk candidates into accepted drafts and reported conflicts.

        Candidates are checked against ``existing`` and against candidates
        accepted earlier in the same batch.
        """

        valid: list[ScheduleDraft] = []
        conflicts: list[ScheduleConflict] = []

        for cand in candidates:
            details = [
                _conflict_entry(s)
                for s in existing
                if s.teacher_id == cand.teacher_id
                and s.day_of_week == cand.day_of_week
                and times_overlap(cand.start_time, cand.end_time, s.start_time, s.end_time)
            ]
            details.extend(
                {"schedule_id": None, "day": v.day_name, "time": v.time_label}
                for v in valid
                if v.teacher_id == cand.teacher_id
                and v.day_of_week == cand.day_of_week
                and times_overlap(cand.start_time, cand.end_time, v.start_time, v.end_time)
            )

            if details:
                conflicts.append(ScheduleConflict(day=cand.day_name, time=cand.time_label, conflicts=details))
            else:
                valid.append(cand)

        return valid, conflicts
