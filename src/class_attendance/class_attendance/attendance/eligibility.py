from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import day_name, day_of_week
from ..core.exceptions import EligibilityError
from ..overrides.model import EffectiveWindow
from ..overrides.resolver import OverrideResolver
from ..schedules.model import Schedule
from ..students.model import Enrollment, Student, normalize_year_level
from ..students.repository import EnrollmentRepository


@dataclass(frozen=True)
class EligibilityResult:
    enrollment: Enrollment
    window: EffectiveWindow


def _text(value) -> str:
    return str(value).strip() if value is not None else ""


class EligibilityValidator:
    """Checks that a student may be recorded against a schedule occurrence.

    Order matters for the message the teacher sees: day of week, cancellation,
    department/year/section constraints, then enrollment.
    """

    def __init__(self, enrollments: EnrollmentRepository, resolver: OverrideResolver):
        self._enrollments = enrollments
        self._resolver = resolver

    def check(self, *, student: Student, schedule: Schedule, now: datetime) -> EligibilityResult:
        today = now.date()

        today_dow = day_of_week(today)
        if schedule.day_of_week != today_dow:
            raise EligibilityError(
                f"This schedule is for {day_name(schedule.day_of_week)}, but today is {day_name(today_dow)}. "
                "Please scan during the correct day."
            )

        window = self._resolver.resolve(schedule, today)
        if window.cancelled:
            raise EligibilityError(
                f"This class has been cancelled for today ({today.isoformat()}). Reason: {window.reason}"
            )

        self._check_attributes(student, schedule)

        enrollment = self._enrollments.find(
            student_id=student.student_id,
            subject_id=schedule.subject_id,
            academic_year_id=schedule.academic_year_id,
            semester_id=schedule.semester_id,
        )
        if not enrollment:
            raise EligibilityError(
                f"Student is not enrolled in {schedule.subject_code or schedule.subject_id} "
                "for the current academic period"
            )

        return EligibilityResult(enrollment=enrollment, window=window)

    @staticmethod
    def _check_attributes(student: Student, schedule: Schedule) -> None:
        # Unset schedule attributes mean "any".
        if _text(schedule.department) and _text(student.department) != _text(schedule.department):
            raise EligibilityError(
                f"Student department ({student.department}) does not match "
                f"schedule department ({schedule.department})"
            )

        if _text(schedule.year_level):
            if normalize_year_level(student.year_level) != normalize_year_level(schedule.year_level):
                raise EligibilityError(
                    f"Student year level ({student.year_level}) does not match "
                    f"schedule year level ({schedule.year_level})"
                )

        if _text(schedule.section_id) and _text(student.section_id) != _text(schedule.section_id):
            raise EligibilityError(
                f"Student section ({student.section_name or student.section_id}) does not match "
                f"schedule section ({schedule.section_name or schedule.section_id})"
            )
