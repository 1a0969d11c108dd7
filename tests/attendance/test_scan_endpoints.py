from __future__ import annotations

import pytest

from src.class_attendance.class_attendance.container import wire_container
from src.class_attendance.class_attendance.core.enums import Role
from src.class_attendance.class_attendance.main import create_app

from tests.fakes import (
    PERIOD,
    InMemoryAttendance,
    InMemoryAttendanceUnitOfWork,
    InMemoryAudit,
    InMemoryEnrollments,
    InMemoryOverrides,
    InMemoryPeriods,
    InMemorySchedules,
    InMemoryStudents,
    InMemoryTokens,
    default_enrollment,
    make_schedule,
    make_student,
)


@pytest.fixture()
def container():
    attendance = InMemoryAttendance()
    audit = InMemoryAudit()
    return wire_container(
        conn=None,
        periods_repo=InMemoryPeriods(),
        students_repo=InMemoryStudents(make_student()),
        enrollments_repo=InMemoryEnrollments(default_enrollment()),
        tokens_repo=InMemoryTokens(),
        schedules_repo=InMemorySchedules(make_schedule(1)),
        overrides_repo=InMemoryOverrides(),
        attendance_repo=attendance,
        attendance_unit_of_work=InMemoryAttendanceUnitOfWork(attendance, audit),
        audit_sink=audit,
        qr_secret="k3y",
        allow_scan_time_overrides=True,
    )


@pytest.fixture()
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def _login(client, *, user_id=10, role=Role.TEACHER):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role.value


def test_scan_time_in_then_time_out(client, container):
    _login(client)
    body = {"scheduleId": 1, "studentId": "S-001", "customDate": "2025-06-02", "timeIn": "08:05"}

    resp = client.post("/api/teacher/scan", json=body)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert data["action"] == "time_in"
    assert data["lateMinutes"] == 5
    assert data["isLate"] is True
    assert data["timeIn"] == "8:05 AM"

    resp = client.post("/api/teacher/scan", json={**body, "timeIn": "09:00"})
    assert resp.status_code == 409
    assert "09:30" in resp.get_json()["error"]

    resp = client.post("/api/teacher/scan", json={**body, "timeIn": "09:35"})
    assert resp.status_code == 200
    assert resp.get_json()["action"] == "time_out"

    resp = client.get("/api/teacher/attendance/1?date=2025-06-02")
    assert resp.status_code == 200
    [row] = resp.get_json()["records"]
    assert row["lateMinutes"] == 5
    assert row["state"] == "COMPLETE"


def test_scan_with_signed_token(client, container):
    token = container.token_service.issue(current_role=Role.ADMIN, issuer_user_id=1, student_id="S-001", period=PERIOD)
    _login(client)
    payload = {**token.to_payload().to_dict(), "scheduleId": 1, "customDate": "2025-06-02", "timeIn": "07:58"}

    resp = client.post("/api/teacher/scan/token", json=payload)
    assert resp.status_code == 200
    assert resp.get_json()["lateMinutes"] == 0

    tampered = {**payload, "sig": "0" * 64}
    resp = client.post("/api/teacher/scan/token", json=tampered)
    assert resp.status_code == 400
    assert resp.get_json() == {"ok": False, "error": "Invalid signature"}


def test_scan_errors_map_to_status_codes(client):
    _login(client, user_id=20)
    body = {"scheduleId": 1, "studentId": "S-001", "customDate": "2025-06-02", "timeIn": "08:05"}
    assert client.post("/api/teacher/scan", json=body).status_code == 403

    _login(client)
    assert client.post("/api/teacher/scan", json={"studentId": "S-001"}).status_code == 400
    assert client.post("/api/teacher/scan", json={**body, "studentId": "S-404"}).status_code == 404
    assert client.post("/api/teacher/scan", json={**body, "customDate": "2025-06-03"}).status_code == 400


def test_scan_requires_teacher_session(client):
    resp = client.post("/api/teacher/scan", json={"scheduleId": 1, "studentId": "S-001"})
    assert resp.status_code == 401

    _login(client, user_id=1, role=Role.ADMIN)
    resp = client.post("/api/teacher/scan", json={"scheduleId": 1, "studentId": "S-001"})
    assert resp.status_code == 403


def test_token_qr_png(client):
    _login(client, user_id=1, role=Role.ADMIN)
    resp = client.get("/api/tokens/S-001/qr.png")
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")


def test_token_verify_endpoint(client, container):
    token = container.token_service.issue(current_role=Role.ADMIN, issuer_user_id=1, student_id="S-001", period=PERIOD)
    _login(client, user_id=1, role=Role.ADMIN)

    resp = client.post("/api/tokens/verify", json=token.to_payload().to_dict())
    assert resp.get_json() == {"ok": True, "valid": True}

    for body in ([1], "x", 7):
        resp = client.post("/api/tokens/verify", json=body)
        assert resp.status_code == 400
        assert resp.get_json() == {"ok": False, "error": "Invalid payload"}


def test_bulk_assign_endpoint_reports_skipped(client):
    _login(client, user_id=1, role=Role.ADMIN)
    resp = client.post(
        "/api/admin/subjects/SUBJ-2/assign",
        json={
            "teacher_id": "T-1",
            "schedules": [
                {"day_of_week": 1, "start_time": "9:30 AM", "end_time": "10:30 AM"},
                {"day_of_week": 2, "start_time": "08:00", "end_time": "09:00"},
            ],
        },
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert len(data["createdIds"]) == 1
    assert data["skipped"][0]["day"] == "Monday"
