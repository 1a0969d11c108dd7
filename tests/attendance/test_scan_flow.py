from __future__ import annotations

import logging
import threading
from datetime import datetime, time

import pytest

from src.class_attendance.class_attendance.attendance.eligibility import EligibilityValidator
from src.class_attendance.class_attendance.attendance.model import ScanRequest
from src.class_attendance.class_attendance.attendance.service import AttendanceService
from src.class_attendance.class_attendance.attendance.state_machine import AttendanceStateMachine
from src.class_attendance.class_attendance.core.enums import AttendanceState, OverrideType, Role, ScanAction
from src.class_attendance.class_attendance.core.exceptions import (
    AuthorizationError,
    InternalError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from src.class_attendance.class_attendance.overrides.resolver import OverrideResolver
from src.class_attendance.class_attendance.tokens.service import TokenService
from src.class_attendance.class_attendance.tokens.signer import TokenSigner

from tests.fakes import (
    PERIOD,
    Clock,
    FailingAudit,
    InMemoryAttendance,
    InMemoryAttendanceUnitOfWork,
    InMemoryAudit,
    InMemoryEnrollments,
    InMemoryOverrides,
    InMemorySchedules,
    InMemoryStudents,
    InMemoryTokens,
    approved_override,
    default_enrollment,
    make_schedule,
    make_student,
)


def _build(*, attendance=None, audit=None, students=None, overrides=(), allow_time_overrides=False, clock=None):
    attendance = attendance or InMemoryAttendance()
    audit = audit if audit is not None else InMemoryAudit()
    students = students or InMemoryStudents(make_student())
    override_repo = InMemoryOverrides(*overrides)
    svc = AttendanceService(
        attendance,
        students,
        InMemorySchedules(make_schedule(1)),
        TokenService(InMemoryTokens(), students, TokenSigner("k3y")),
        EligibilityValidator(InMemoryEnrollments(default_enrollment()), OverrideResolver(override_repo)),
        AttendanceStateMachine(attendance, InMemoryAttendanceUnitOfWork(attendance, audit)),
        allow_time_overrides=allow_time_overrides,
        clock=clock or Clock(datetime(2025, 6, 2, 8, 0)),
    )
    return svc, attendance, audit


def _scan(svc, *, teacher_user_id=10, **data):
    req = ScanRequest.from_dict({"scheduleId": 1, "studentId": "S-001", **data})
    return svc.scan(current_role=Role.TEACHER, scanner_user_id=teacher_user_id, request=req, period=PERIOD)


def test_full_day_scenario():
    clock = Clock(datetime(2025, 6, 2, 8, 5))
    svc, attendance, audit = _build(clock=clock)

    first = _scan(svc)
    assert first.action == ScanAction.TIME_IN
    assert first.late_minutes == 5 and first.is_late
    assert first.message == "Time IN recorded (Late by 5 minutes)"

    clock.now = datetime(2025, 6, 2, 9, 0)
    with pytest.raises(StateConflictError, match="time out only allowed at or after 09:30"):
        _scan(svc)

    clock.now = datetime(2025, 6, 2, 9, 31)
    second = _scan(svc)
    assert second.action == ScanAction.TIME_OUT
    assert second.late_minutes == 5
    assert second.to_dict()["timeOut"] == "9:31 AM"

    clock.now = datetime(2025, 6, 2, 9, 40)
    with pytest.raises(StateConflictError, match="already completed"):
        _scan(svc)

    [record] = attendance.all()
    assert record.state == AttendanceState.COMPLETE
    assert record.time_in == datetime(2025, 6, 2, 8, 5)
    assert audit.actions == ["attendance.time_in", "attendance.time_out"]


@pytest.mark.parametrize(
    "moment, minutes",
    [(time(7, 55), 0), (time(8, 0), 0), (time(8, 0, 59), 0), (time(8, 1), 1), (time(9, 15, 30), 75)],
)
def test_late_minutes_are_floored_whole_minutes(moment, minutes):
    svc, _, _ = _build(clock=Clock(datetime.combine(datetime(2025, 6, 2).date(), moment)))
    result = _scan(svc)
    assert result.late_minutes == minutes
    assert result.is_late is (minutes > 0)


def test_time_out_exactly_at_end_minute_is_allowed():
    clock = Clock(datetime(2025, 6, 2, 8, 0))
    svc, _, _ = _build(clock=clock)
    _scan(svc)
    clock.now = datetime(2025, 6, 2, 9, 30)
    assert _scan(svc).action == ScanAction.TIME_OUT


def test_time_change_override_moves_late_baseline_and_end():
    ov = approved_override(override_type=OverrideType.TIME_CHANGE, reason="Moved",
                           new_start_time=time(10, 0), new_end_time=time(11, 0))
    clock = Clock(datetime(2025, 6, 2, 10, 3))
    svc, _, _ = _build(overrides=[ov], clock=clock)

    assert _scan(svc).late_minutes == 3
    clock.now = datetime(2025, 6, 2, 10, 30)
    with pytest.raises(StateConflictError, match="11:00"):
        _scan(svc)


def test_concurrent_first_scans_create_one_row():
    attendance = InMemoryAttendance(lookup_barrier=threading.Barrier(2))
    svc, _, audit = _build(attendance=attendance, clock=Clock(datetime(2025, 6, 2, 8, 2)))

    results, errors = [], []

    def worker():
        try:
            results.append(_scan(svc))
        except StateConflictError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(attendance.all()) == 1
    assert len(results) == 1 and results[0].action == ScanAction.TIME_IN
    assert len(errors) == 1 and "already exists" in str(errors[0])
    assert audit.actions == ["attendance.time_in"]


def test_scan_requires_teacher_who_owns_schedule():
    svc, _, _ = _build()
    with pytest.raises(AuthorizationError, match="doesn't belong to you"):
        _scan(svc, teacher_user_id=20)

    req = ScanRequest.from_dict({"scheduleId": 1, "studentId": "S-001"})
    with pytest.raises(AuthorizationError):
        svc.scan(current_role=Role.ADMIN, scanner_user_id=10, request=req, period=PERIOD)


def test_unknown_schedule_or_student():
    svc, _, _ = _build()
    with pytest.raises(NotFoundError):
        svc.scan(
            current_role=Role.TEACHER, scanner_user_id=10,
            request=ScanRequest.from_dict({"scheduleId": 99, "studentId": "S-001"}), period=PERIOD,
        )
    with pytest.raises(NotFoundError):
        _scan(svc, studentId="S-404")


def test_time_overrides_need_to_be_enabled():
    svc, _, _ = _build()
    with pytest.raises(ValidationError):
        _scan(svc, timeIn="08:05")

    svc, _, _ = _build(allow_time_overrides=True, clock=Clock(datetime(2025, 6, 5, 14, 0)))
    result = _scan(svc, customDate="2025-06-02", timeIn="8:05 AM")
    assert result.late_minutes == 5


def test_scan_token_uses_token_student():
    tokens = InMemoryTokens()
    attendance = InMemoryAttendance()
    audit = InMemoryAudit()
    students = InMemoryStudents(make_student())
    token_service = TokenService(tokens, students, TokenSigner("k3y"))
    svc = AttendanceService(
        attendance,
        students,
        InMemorySchedules(make_schedule(1)),
        token_service,
        EligibilityValidator(InMemoryEnrollments(default_enrollment()), OverrideResolver(InMemoryOverrides())),
        AttendanceStateMachine(attendance, InMemoryAttendanceUnitOfWork(attendance, audit)),
        clock=Clock(datetime(2025, 6, 2, 8, 0)),
    )
    token = token_service.issue(current_role=Role.ADMIN, issuer_user_id=1, student_id="S-001", period=PERIOD)

    data = {**token.to_payload().to_dict(), "scheduleId": 1}
    result = svc.scan_token(current_role=Role.TEACHER, scanner_user_id=10, data=data, period=PERIOD)
    assert result.student_id == "S-001"
    assert result.late_minutes == 0


def test_failed_audit_write_rolls_back_time_in():
    audit = FailingAudit()
    svc, attendance, _ = _build(audit=audit, clock=Clock(datetime(2025, 6, 2, 8, 5)))

    with pytest.raises(InternalError):
        _scan(svc)

    assert attendance.all() == []
    assert audit.entries == []


def test_failed_audit_write_rolls_back_time_out():
    audit = FailingAudit(failing=False)
    clock = Clock(datetime(2025, 6, 2, 8, 5))
    svc, attendance, _ = _build(audit=audit, clock=clock)
    _scan(svc)

    audit.failing = True
    clock.now = datetime(2025, 6, 2, 9, 31)
    with pytest.raises(InternalError):
        _scan(svc)
    [record] = attendance.all()
    assert record.time_out is None
    assert record.state == AttendanceState.IN_PROGRESS

    audit.failing = False
    clock.now = datetime(2025, 6, 2, 9, 32)
    assert _scan(svc).action == ScanAction.TIME_OUT
    assert audit.actions == ["attendance.time_in", "attendance.time_out"]


def test_internal_failure_is_logged_with_traceback(caplog):
    svc, _, _ = _build(audit=FailingAudit(), clock=Clock(datetime(2025, 6, 2, 8, 5)))
    pkg_logger = logging.getLogger("class_attendance")
    pkg_logger.addHandler(caplog.handler)
    try:
        with pytest.raises(InternalError):
            _scan(svc)
    finally:
        pkg_logger.removeHandler(caplog.handler)

    [record] = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert record.exc_info is not None
    assert "student=S-001" in record.getMessage()
    assert "schedule=1" in record.getMessage()
    assert not [r for r in caplog.records if r.levelno == logging.WARNING]
