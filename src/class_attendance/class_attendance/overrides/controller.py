from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_hhmm, parse_iso_date
from ..common.http import current_role, current_user_id, error_response, role_required
from ..core.enums import OverrideStatus, Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ScheduleOverride


def _to_dict(ov: ScheduleOverride) -> dict:
    return {
        "overrideId": ov.override_id,
        "scheduleId": ov.schedule_id,
        "date": ov.override_date.isoformat(),
        "type": ov.override_type.value,
        "status": ov.status.value,
        "reason": ov.reason,
        "newStartTime": format_hhmm(ov.new_start_time) if ov.new_start_time else None,
        "newEndTime": format_hhmm(ov.new_end_time) if ov.new_end_time else None,
        "adminNote": ov.admin_note,
    }


def _parse_schedule_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Schedule ID must be a number")


def _parse_status(value):
    if not value:
        return None
    try:
        return OverrideStatus(value.upper())
    except ValueError:
        raise ValidationError(f"Unknown override status: {value}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teacher/overrides", methods=["POST"], endpoint="api_teacher_override_request")
    @role_required(Role.TEACHER)
    def api_teacher_override_request():
        try:
            data = request.get_json(silent=True) or {}
            override_id = container.override_service.request(
                current_role=current_role(),
                teacher_user_id=current_user_id(),
                schedule_id=_parse_schedule_id(data.get("schedule_id")),
                on_date=parse_iso_date(data.get("date") or ""),
                reason=data.get("reason"),
                override_type=data.get("type"),
                new_start_time=data.get("new_start_time"),
                new_end_time=data.get("new_end_time"),
            )
            return jsonify({"ok": True, "overrideId": override_id, "message": "Override request submitted"}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/teacher/overrides", methods=["GET"], endpoint="api_teacher_override_list")
    @role_required(Role.TEACHER)
    def api_teacher_override_list():
        items = container.override_service.list_for_teacher(teacher_user_id=current_user_id())
        return jsonify({"ok": True, "overrides": [_to_dict(ov) for ov in items]}), 200

    @app.route("/api/admin/overrides", methods=["GET"], endpoint="api_admin_override_list")
    @role_required(Role.ADMIN)
    def api_admin_override_list():
        try:
            items = container.override_service.list_all(
                current_role=current_role(),
                status=_parse_status(request.args.get("status")),
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"ok": True, "overrides": [_to_dict(ov) for ov in items]}), 200

    @app.route("/api/admin/overrides/<int:override_id>/<decision>", methods=["POST"], endpoint="api_admin_override_decide")
    @role_required(Role.ADMIN)
    def api_admin_override_decide(override_id: int, decision: str):
        if decision not in {"approve", "reject"}:
            return jsonify({"ok": False, "error": "Unknown decision"}), 404
        try:
            data = request.get_json(silent=True) or {}
            decide = container.override_service.approve if decision == "approve" else container.override_service.reject
            decide(
                current_role=current_role(),
                admin_user_id=current_user_id(),
                override_id=override_id,
                admin_note=str(data.get("admin_note") or ""),
            )
            return jsonify({"ok": True, "message": f"Override {decision}d"}), 200
        except Exception as e:
            return error_response(e)
