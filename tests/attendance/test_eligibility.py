from __future__ import annotations

from datetime import datetime

import pytest

from src.class_attendance.class_attendance.attendance.eligibility import EligibilityValidator
from src.class_attendance.class_attendance.core.exceptions import EligibilityError
from src.class_attendance.class_attendance.overrides.resolver import OverrideResolver
from src.class_attendance.class_attendance.students.model import normalize_year_level

from tests.fakes import (
    InMemoryEnrollments,
    InMemoryOverrides,
    approved_override,
    default_enrollment,
    make_schedule,
    make_student,
)

MONDAY_0805 = datetime(2025, 6, 2, 8, 5)


def _validator(*overrides, enrollments=None):
    return EligibilityValidator(
        enrollments if enrollments is not None else InMemoryEnrollments(default_enrollment()),
        OverrideResolver(InMemoryOverrides(*overrides)),
    )


def test_eligible_student_gets_enrollment_and_window():
    result = _validator().check(student=make_student(), schedule=make_schedule(), now=MONDAY_0805)
    assert result.enrollment.enrollment_id == 100
    assert not result.window.cancelled


@pytest.mark.parametrize("raw, expected", [("1st Year", "1"), ("1st", "1"), ("1", "1"), (" 2nd year ", "2"), ("Grade 7", "Grade 7")])
def test_year_level_normalization(raw, expected):
    assert normalize_year_level(raw) == expected


def test_year_level_mismatch():
    with pytest.raises(EligibilityError, match="year level"):
        _validator().check(student=make_student(year_level="2nd Year"), schedule=make_schedule(), now=MONDAY_0805)


def test_section_mismatch_names_both_sections():
    student = make_student(section_id="SEC-B", section_name="BSCS 1-B")
    with pytest.raises(EligibilityError) as exc:
        _validator().check(student=student, schedule=make_schedule(), now=MONDAY_0805)
    assert "BSCS 1-B" in str(exc.value)
    assert "BSCS 1-A" in str(exc.value)


def test_department_mismatch():
    with pytest.raises(EligibilityError, match="department"):
        _validator().check(student=make_student(department="IT"), schedule=make_schedule(), now=MONDAY_0805)


def test_unset_schedule_attributes_match_anyone():
    schedule = make_schedule(department=None, year_level=None, section_id=None, section_name=None)
    student = make_student(department="IT", year_level=None, section_id=None)
    _validator().check(student=student, schedule=schedule, now=MONDAY_0805)


def test_wrong_day_names_both_days():
    tuesday = datetime(2025, 6, 3, 8, 5)
    with pytest.raises(EligibilityError) as exc:
        _validator().check(student=make_student(), schedule=make_schedule(), now=tuesday)
    assert "Monday" in str(exc.value) and "Tuesday" in str(exc.value)


def test_cancelled_class_reports_reason():
    with pytest.raises(EligibilityError, match="Holiday"):
        _validator(approved_override()).check(student=make_student(), schedule=make_schedule(), now=MONDAY_0805)


def test_not_enrolled():
    with pytest.raises(EligibilityError, match="not enrolled in CS101"):
        _validator(enrollments=InMemoryEnrollments()).check(
            student=make_student(), schedule=make_schedule(), now=MONDAY_0805
        )
