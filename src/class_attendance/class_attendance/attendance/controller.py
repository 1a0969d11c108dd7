from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_12h, parse_iso_date
from ..common.http import current_role, current_user_id, error_response, require_active_period, role_required
from ..core.enums import Role
from ..container import Container
from .model import ScanRequest, status_label


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teacher/scan", methods=["POST"], endpoint="api_teacher_scan")
    @role_required(Role.TEACHER)
    def api_teacher_scan():
        """Scan by bare student id (manual entry or a plain-text QR)."""
        try:
            period = require_active_period(container.periods_repo)
            scan = ScanRequest.from_dict(request.get_json(silent=True))
            result = container.attendance_service.scan(
                current_role=current_role(),
                scanner_user_id=current_user_id(),
                request=scan,
                period=period,
            )
            return jsonify(result.to_dict()), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/teacher/scan/token", methods=["POST"], endpoint="api_teacher_scan_token")
    @role_required(Role.TEACHER)
    def api_teacher_scan_token():
        """Scan with the full signed QR payload plus scheduleId."""
        try:
            period = require_active_period(container.periods_repo)
            result = container.attendance_service.scan_token(
                current_role=current_role(),
                scanner_user_id=current_user_id(),
                data=request.get_json(silent=True),
                period=period,
            )
            return jsonify(result.to_dict()), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/teacher/attendance/<int:schedule_id>", methods=["GET"], endpoint="api_teacher_attendance")
    @role_required(Role.TEACHER)
    def api_teacher_attendance(schedule_id: int):
        try:
            period = require_active_period(container.periods_repo)
            day_s = request.args.get("date")
            on_date = parse_iso_date(day_s) if day_s else date.today()
            records = container.attendance_service.list_for_schedule(
                current_role=current_role(),
                teacher_user_id=current_user_id(),
                schedule_id=schedule_id,
                on_date=on_date,
                period=period,
            )
        except Exception as e:
            return error_response(e)

        rows = [
            {
                "attendanceId": r.attendance_id,
                "enrollmentId": r.enrollment_id,
                "date": r.attendance_date.isoformat(),
                "status": status_label(r.status),
                "state": r.state.value,
                "timeIn": format_12h(r.time_in) if r.time_in else None,
                "timeOut": format_12h(r.time_out) if r.time_out else None,
                "isLate": r.is_late,
                "lateMinutes": r.late_minutes,
            }
            for r in records
        ]
        return jsonify({"ok": True, "date": on_date.isoformat(), "records": rows}), 200
