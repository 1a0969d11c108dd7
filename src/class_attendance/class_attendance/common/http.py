from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..app_logger import get_logger
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    EligibilityError,
    NotFoundError,
    SignatureError,
    StateConflictError,
    ValidationError,
)
from ..periods.model import ActivePeriod
from ..periods.repository import PeriodRepository

logger = get_logger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (SignatureError, 400),
    (EligibilityError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateConflictError, 409),
)


def error_response(exc: Exception):
    """JSON body + status for an exception raised by a service call."""

    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            body = {"ok": False, "error": str(exc)}
            if isinstance(exc, StateConflictError) and exc.conflicts:
                body["conflicts"] = exc.conflicts
            return jsonify(body), status

    # InternalError and anything unexpected: details go to the log only.
    logger.error("unhandled error: %r", exc, exc_info=exc)
    return jsonify({"ok": False, "error": "Internal server error"}), 500


def current_role() -> Role | None:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def current_user_id() -> int:
    return int(session["user_id"])


def role_required(*roles: Role):
    """Reject the request unless the session user has one of ``roles``."""

    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"ok": False, "error": "Login required"}), 401
            if session.get("role") not in allowed:
                return jsonify({"ok": False, "error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def require_active_period(periods: PeriodRepository) -> ActivePeriod:
    period = periods.get_active()
    if period is None:
        raise NotFoundError("No active academic period is configured")
    return period


