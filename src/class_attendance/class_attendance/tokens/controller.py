from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import current_role, current_user_id, error_response, require_active_period, role_required
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _issue(student_id: str):
        period = require_active_period(container.periods_repo)
        return container.token_service.issue(
            current_role=current_role(),
            issuer_user_id=current_user_id(),
            student_id=student_id,
            period=period,
        )

    @app.route("/api/tokens/<student_id>", methods=["POST"], endpoint="api_token_issue")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_token_issue(student_id: str):
        """Issue (or return the existing) identity token for a student."""
        try:
            token = _issue(student_id)
        except Exception as e:
            return error_response(e)
        return jsonify({"ok": True, "token": token.to_payload().to_dict()}), 200

    @app.route("/api/tokens/<student_id>/qr.png", methods=["GET"], endpoint="api_token_qr")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_token_qr(student_id: str):
        try:
            token = _issue(student_id)
            png = container.token_service.render_qr_png(token)
        except Exception as e:
            return error_response(e)
        return send_file(io.BytesIO(png), mimetype="image/png", download_name=f"{token.student_id}_qr.png")

    @app.route("/api/tokens/verify", methods=["POST"], endpoint="api_token_verify")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_token_verify():
        """Signature-only check; does not consult the stored token."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return error_response(ValidationError("Invalid payload"))
        return jsonify({"ok": True, "valid": container.token_service.verify(data)}), 200
