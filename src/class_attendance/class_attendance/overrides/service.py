from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..app_logger import get_logger
from ..audit.model import AuditLogEntry
from ..audit.repository import AuditSink
from ..common.datetime_utils import format_hhmm, parse_time_of_day
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_OVERRIDE_LIST_LIMIT
from ..core.enums import OverrideStatus, OverrideType, Role
from ..core.exceptions import (
    AuthorizationError,
    DuplicateRecordError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from ..schedules.repository import ScheduleRepository
from .model import ScheduleOverride
from .repository import OverrideRepository

logger = get_logger(__name__)

_DUPLICATE_MESSAGE = "An override request already exists for this schedule on this date"


class OverrideService:
    """Teacher-submitted override requests and their admin approval."""

    def __init__(self, overrides: OverrideRepository, schedules: ScheduleRepository, audit: AuditSink):
        self._overrides = overrides
        self._schedules = schedules
        self._audit = audit

    @staticmethod
    def _parse_type(value) -> OverrideType:
        try:
            return OverrideType(str(value or "").strip())
        except ValueError:
            raise ValidationError("Override type must be 'time-change' or 'cancel'")

    def request(
        self,
        *,
        current_role: Role,
        teacher_user_id: int,
        schedule_id: int,
        on_date: date,
        reason: str,
        override_type: str,
        new_start_time: Optional[str] = None,
        new_end_time: Optional[str] = None,
    ) -> int:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can request schedule overrides")

        schedule = self._schedules.get_by_id(int(schedule_id))
        if not schedule or schedule.teacher_user_id != int(teacher_user_id):
            raise NotFoundError("Schedule not found or not assigned to you")

        reason = require_non_empty(reason, "Reason")
        kind = self._parse_type(override_type)

        start = end = None
        if kind == OverrideType.TIME_CHANGE:
            start = parse_time_of_day(new_start_time) if optional_text(new_start_time) else None
            end = parse_time_of_day(new_end_time) if optional_text(new_end_time) else None
            if start is None and end is None:
                raise ValidationError("A time change needs a new start or end time")
            if (start or schedule.start_time) >= (end or schedule.end_time):
                raise ValidationError("End time must be after start time")

        if self._overrides.get_for_schedule_and_date(schedule_id=schedule.schedule_id, on_date=on_date):
            raise StateConflictError(_DUPLICATE_MESSAGE)

        try:
            override_id = self._overrides.create(
                schedule_id=schedule.schedule_id,
                on_date=on_date,
                reason=reason,
                override_type=kind,
                new_start_time=start,
                new_end_time=end,
                requested_by=int(teacher_user_id),
            )
        except DuplicateRecordError:
            raise StateConflictError(_DUPLICATE_MESSAGE)

        self._audit.append(
            AuditLogEntry(
                actor_user_id=int(teacher_user_id),
                actor_role=current_role,
                action="schedule.override_request",
                entity="Schedule",
                entity_id=str(schedule.schedule_id),
                metadata={
                    "override_id": override_id,
                    "date": on_date.isoformat(),
                    "type": kind.value,
                    "new_start_time": format_hhmm(start) if start else None,
                    "new_end_time": format_hhmm(end) if end else None,
                },
            )
        )
        return override_id

    def approve(self, *, current_role: Role, admin_user_id: int, override_id: int, admin_note: str = "") -> None:
        self._decide(current_role, admin_user_id, override_id, OverrideStatus.APPROVED, admin_note)

    def reject(self, *, current_role: Role, admin_user_id: int, override_id: int, admin_note: str = "") -> None:
        self._decide(current_role, admin_user_id, override_id, OverrideStatus.REJECTED, admin_note)

    def _decide(self, current_role: Role, admin_user_id: int, override_id: int, status: OverrideStatus, admin_note: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can decide schedule overrides")

        ov = self._overrides.get_by_id(int(override_id))
        if not ov:
            raise NotFoundError("Override request not found")
        if ov.status != OverrideStatus.PENDING:
            raise StateConflictError("Override request was already decided")

        decided = self._overrides.decide(
            override_id=ov.override_id,
            status=status,
            decided_by=int(admin_user_id),
            admin_note=optional_text(admin_note),
        )
        if not decided:
            raise StateConflictError("Override request was already decided")

        action = "schedule.override_approve" if status == OverrideStatus.APPROVED else "schedule.override_reject"
        self._audit.append(
            AuditLogEntry(
                actor_user_id=int(admin_user_id),
                actor_role=current_role,
                action=action,
                entity="ScheduleOverride",
                entity_id=str(ov.override_id),
                metadata={"schedule_id": ov.schedule_id, "date": ov.override_date.isoformat()},
            )
        )
        logger.info("override %s for schedule %s on %s -> %s", ov.override_id, ov.schedule_id, ov.override_date, status.value)

    def list_for_teacher(self, *, teacher_user_id: int, limit: int = DEFAULT_OVERRIDE_LIST_LIMIT) -> Sequence[ScheduleOverride]:
        return self._overrides.list_overrides(teacher_user_id=int(teacher_user_id), limit=limit)

    def list_all(self, *, current_role: Role, status: Optional[OverrideStatus] = None,
                 limit: int = DEFAULT_OVERRIDE_LIST_LIMIT) -> Sequence[ScheduleOverride]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can list all override requests")
        return self._overrides.list_overrides(status=status, limit=limit)
