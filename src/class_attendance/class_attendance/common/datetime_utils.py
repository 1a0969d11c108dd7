from __future__ import annotations

import re
from datetime import date, datetime, time, timezone

from ..core.constants import DAY_NAMES
from ..core.exceptions import ValidationError

_TIME_12H = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])$")
_TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def utc_now_ms() -> datetime:
    """Current UTC time truncated to milliseconds (DATETIME(3) precision)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def parse_time_of_day(value) -> time:
    """Normalize "8:00 AM", "08:00" or "08:00:30" into a time-of-day.

    Only the clock portion matters; the calendar date is never involved.
    """

    if isinstance(value, datetime):
        return value.time().replace(microsecond=0)
    if isinstance(value, time):
        return value.replace(microsecond=0)

    text = (value or "").strip()
    m = _TIME_12H.match(text)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        second = int(m.group(3) or 0)
        if not 1 <= hour <= 12:
            raise ValidationError(f"Invalid time: {text!r}")
        period = m.group(4).upper()
        if period == "PM" and hour != 12:
            hour += 12
        elif period == "AM" and hour == 12:
            hour = 0
        return _build_time(hour, minute, second, text)

    m = _TIME_24H.match(text)
    if m:
        return _build_time(int(m.group(1)), int(m.group(2)), int(m.group(3) or 0), text)

    raise ValidationError(f"Invalid time: {text!r} (expected HH:MM or H:MM AM/PM)")


def _build_time(hour: int, minute: int, second: int, raw: str) -> time:
    try:
        return time(hour=hour, minute=minute, second=second)
    except ValueError:
        raise ValidationError(f"Invalid time: {raw!r}")


def minute_of_day(value) -> int:
    t = value.time() if isinstance(value, datetime) else value
    return t.hour * 60 + t.minute


def whole_minutes_after(start: time, moment) -> int:
    """Whole minutes from ``start`` to the clock time of ``moment``, floored at zero."""
    t = moment.time() if isinstance(moment, datetime) else moment
    start_seconds = start.hour * 3600 + start.minute * 60 + start.second
    seconds = t.hour * 3600 + t.minute * 60 + t.second
    return max(0, (seconds - start_seconds) // 60)


def day_of_week(value: date) -> int:
    """Day number with Sunday = 0 (Python's weekday() has Monday = 0)."""
    return (value.weekday() + 1) % 7


def day_name(dow: int) -> str:
    return DAY_NAMES[int(dow)]


def format_hhmm(value) -> str:
    return value.strftime("%H:%M")


def format_12h(value) -> str:
    hour = value.hour % 12 or 12
    suffix = "PM" if value.hour >= 12 else "AM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_issued_at(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2025-06-01T08:00:00.000Z."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"
