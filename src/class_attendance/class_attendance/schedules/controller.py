from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_role, current_user_id, error_response, require_active_period, role_required
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ScheduleDraft


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid payload")
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/schedules", methods=["POST"], endpoint="api_admin_schedule_create")
    @role_required(Role.ADMIN)
    def api_admin_schedule_create():
        try:
            data = _json_body()
            period = require_active_period(container.periods_repo)
            draft = ScheduleDraft.from_input(data, subject_id=data.get("subject_id"), teacher_id=data.get("teacher_id"))
            schedule_id = container.schedule_service.create(
                current_role=current_role(),
                actor_user_id=current_user_id(),
                draft=draft,
                period=period,
            )
            return jsonify({"ok": True, "scheduleId": schedule_id, "message": "Schedule created successfully"}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/<int:schedule_id>", methods=["PUT"], endpoint="api_admin_schedule_update")
    @role_required(Role.ADMIN)
    def api_admin_schedule_update(schedule_id: int):
        try:
            data = _json_body()
            draft = ScheduleDraft.from_input(data, subject_id=data.get("subject_id"), teacher_id=data.get("teacher_id"))
            container.schedule_service.update(
                current_role=current_role(),
                actor_user_id=current_user_id(),
                schedule_id=schedule_id,
                draft=draft,
            )
            return jsonify({"ok": True, "message": "Schedule updated successfully"}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="api_admin_schedule_delete")
    @role_required(Role.ADMIN)
    def api_admin_schedule_delete(schedule_id: int):
        try:
            container.schedule_service.delete(
                current_role=current_role(),
                actor_user_id=current_user_id(),
                schedule_id=schedule_id,
            )
            return jsonify({"ok": True, "message": "Schedule deleted"}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/subjects/<subject_id>/assign", methods=["POST"], endpoint="api_admin_subject_assign")
    @role_required(Role.ADMIN)
    def api_admin_subject_assign(subject_id: str):
        """Assign a subject to a teacher with several weekly slots at once.

        Body: {"teacher_id": "...", "schedules": [{"day_of_week": 1, "start_time": "08:00", ...}, ...]}
        """
        try:
            data = _json_body()
            candidates = data.get("schedules") or []
            if not isinstance(candidates, list):
                raise ValidationError("schedules must be a list")
            period = require_active_period(container.periods_repo)
            result = container.schedule_service.bulk_assign(
                current_role=current_role(),
                actor_user_id=current_user_id(),
                subject_id=subject_id,
                teacher_id=data.get("teacher_id"),
                candidates=candidates,
                period=period,
            )
        except Exception as e:
            return error_response(e)

        return jsonify({
            "ok": True,
            "message": result.message,
            "createdIds": result.created_ids,
            "skipped": [c.to_dict() for c in result.conflicts],
        }), 200
