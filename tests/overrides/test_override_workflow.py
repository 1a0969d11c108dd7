from __future__ import annotations

from datetime import time

import pytest

from src.class_attendance.class_attendance.core.enums import OverrideStatus, OverrideType, Role
from src.class_attendance.class_attendance.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from src.class_attendance.class_attendance.overrides.resolver import OverrideResolver
from src.class_attendance.class_attendance.overrides.service import OverrideService

from tests.fakes import MONDAY, InMemoryAudit, InMemoryOverrides, InMemorySchedules, approved_override, make_schedule


def test_resolver_without_override_uses_weekly_times():
    window = OverrideResolver(InMemoryOverrides()).resolve(make_schedule(1), MONDAY)
    assert not window.cancelled
    assert (window.effective_start, window.effective_end) == (time(8, 0), time(9, 30))


def test_resolver_cancel():
    window = OverrideResolver(InMemoryOverrides(approved_override())).resolve(make_schedule(1), MONDAY)
    assert window.cancelled
    assert window.reason == "Holiday"


def test_resolver_partial_time_change_keeps_other_bound():
    ov = approved_override(override_type=OverrideType.TIME_CHANGE, reason="Seminar", new_end_time=time(10, 0))
    window = OverrideResolver(InMemoryOverrides(ov)).resolve(make_schedule(1), MONDAY)
    assert (window.effective_start, window.effective_end) == (time(8, 0), time(10, 0))


def test_resolver_ignores_pending_and_rejected():
    for status in (OverrideStatus.PENDING, OverrideStatus.REJECTED):
        window = OverrideResolver(InMemoryOverrides(approved_override(status=status))).resolve(make_schedule(1), MONDAY)
        assert not window.cancelled


def _service():
    overrides = InMemoryOverrides()
    audit = InMemoryAudit()
    svc = OverrideService(overrides, InMemorySchedules(make_schedule(1)), audit)
    return svc, overrides, audit


def _request(svc, **kw):
    args = dict(
        current_role=Role.TEACHER,
        teacher_user_id=10,
        schedule_id=1,
        on_date=MONDAY,
        reason="Faculty meeting",
        override_type="time-change",
        new_start_time="10:00",
        new_end_time="11:30",
    )
    args.update(kw)
    return svc.request(**args)


def test_request_then_approve():
    svc, overrides, audit = _service()
    override_id = _request(svc)
    assert overrides.get_by_id(override_id).status == OverrideStatus.PENDING

    svc.approve(current_role=Role.ADMIN, admin_user_id=1, override_id=override_id, admin_note="ok")
    ov = overrides.get_by_id(override_id)
    assert ov.status == OverrideStatus.APPROVED
    assert ov.new_start_time == time(10, 0)
    assert audit.actions == ["schedule.override_request", "schedule.override_approve"]

    with pytest.raises(StateConflictError):
        svc.reject(current_role=Role.ADMIN, admin_user_id=1, override_id=override_id)


def test_one_override_per_schedule_and_date():
    svc, _, _ = _service()
    _request(svc)
    with pytest.raises(StateConflictError, match="already exists"):
        _request(svc, override_type="cancel")


def test_request_validation():
    svc, _, _ = _service()
    with pytest.raises(ValidationError):
        _request(svc, reason="  ")
    with pytest.raises(ValidationError):
        _request(svc, override_type="swap")
    with pytest.raises(ValidationError):
        _request(svc, new_start_time=None, new_end_time=None)
    with pytest.raises(ValidationError, match="End time must be after start time"):
        _request(svc, new_start_time="10:00", new_end_time=None)


def test_request_requires_own_schedule_and_teacher_role():
    svc, _, _ = _service()
    with pytest.raises(NotFoundError):
        _request(svc, teacher_user_id=20)
    with pytest.raises(AuthorizationError):
        _request(svc, current_role=Role.ADMIN)


def test_only_admin_decides():
    svc, _, _ = _service()
    override_id = _request(svc, override_type="cancel")
    with pytest.raises(AuthorizationError):
        svc.approve(current_role=Role.TEACHER, admin_user_id=10, override_id=override_id)
