from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_fields(payload: Mapping[str, Any] | None, fields: Iterable[str]) -> None:
    """Reject a payload missing any of ``fields`` (None or blank counts as missing)."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Invalid payload")
    missing = [f for f in fields if payload.get(f) is None or not str(payload.get(f)).strip()]
    if missing:
        raise ValidationError(f"Invalid payload: missing {', '.join(missing)}")


def require_day_of_week(value) -> int:
    try:
        dow = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Day of week must be a number between 0 and 6")
    if not 0 <= dow <= 6:
        raise ValidationError("Day of week must be a number between 0 and 6")
    return dow


def optional_text(value) -> str | None:
    v = (value or "").strip() if isinstance(value, str) else value
    return v or None
