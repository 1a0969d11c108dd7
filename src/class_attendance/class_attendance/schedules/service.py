from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..app_logger import get_logger
from ..audit.model import AuditLogEntry
from ..audit.repository import AuditSink
from ..common.datetime_utils import format_hhmm
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, StateConflictError
from ..periods.model import ActivePeriod
from .conflicts import ScheduleConflictDetector
from .model import BulkAssignResult, Schedule, ScheduleDraft
from .repository import ScheduleRepository

logger = get_logger(__name__)


def _describe(conflicts: Sequence[Schedule]) -> str:
    return ", ".join(f"{s.day_name} {s.time_label}" for s in conflicts)


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, detector: ScheduleConflictDetector, audit: AuditSink):
        self._schedules = schedules
        self._detector = detector
        self._audit = audit

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can manage schedules")

    def _reject_conflicts(self, draft: ScheduleDraft, period: ActivePeriod, *, exclude_schedule_id: Optional[int] = None) -> None:
        conflicts = self._detector.find_conflicts(
            teacher_id=draft.teacher_id,
            day_of_week=draft.day_of_week,
            start=draft.start_time,
            end=draft.end_time,
            period=period,
            exclude_schedule_id=exclude_schedule_id,
        )
        if conflicts:
            raise StateConflictError(
                f"Schedule conflict: teacher already has a class on {_describe(conflicts)} "
                f"(requested {draft.day_name} {draft.time_label})",
                conflicts=[{"schedule_id": s.schedule_id, "day": s.day_name, "time": s.time_label} for s in conflicts],
            )

    def create(self, *, current_role: Role, actor_user_id: int, draft: ScheduleDraft, period: ActivePeriod) -> int:
        """Strict create: any overlap with the teacher's existing slots rejects it."""

        self._require_admin(current_role)
        self._reject_conflicts(draft, period)

        schedule_id = self._schedules.create(draft, period)
        self._audit.append(
            AuditLogEntry(
                actor_user_id=actor_user_id,
                actor_role=current_role,
                action="schedule.create",
                entity="Schedule",
                entity_id=str(schedule_id),
                metadata={
                    "teacher_id": draft.teacher_id,
                    "subject_id": draft.subject_id,
                    "day_of_week": draft.day_of_week,
                    "start_time": format_hhmm(draft.start_time),
                    "end_time": format_hhmm(draft.end_time),
                },
            )
        )
        logger.info("created schedule %s for teacher=%s %s %s", schedule_id, draft.teacher_id, draft.day_name, draft.time_label)
        return schedule_id

    def update(self, *, current_role: Role, actor_user_id: int, schedule_id: int, draft: ScheduleDraft) -> None:
        self._require_admin(current_role)

        current = self._schedules.get_by_id(int(schedule_id))
        if not current:
            raise NotFoundError("Schedule not found")

        period = ActivePeriod(academic_year_id=current.academic_year_id, semester_id=current.semester_id)
        self._reject_conflicts(draft, period, exclude_schedule_id=current.schedule_id)

        self._schedules.update(current.schedule_id, draft)
        self._audit.append(
            AuditLogEntry(
                actor_user_id=actor_user_id,
                actor_role=current_role,
                action="schedule.update",
                entity="Schedule",
                entity_id=str(current.schedule_id),
                metadata={"day_of_week": draft.day_of_week, "time": draft.time_label},
            )
        )

    def delete(self, *, current_role: Role, actor_user_id: int, schedule_id: int) -> None:
        self._require_admin(current_role)

        schedule_id = int(schedule_id)
        if not self._schedules.get_by_id(schedule_id):
            raise NotFoundError("Schedule not found")
        # Attendance history keeps its schedule link.
        if self._schedules.has_attendance(schedule_id=schedule_id):
            raise StateConflictError("Cannot delete schedule with attendance records")
        if not self._schedules.delete(schedule_id=schedule_id):
            raise NotFoundError("Schedule not found")
        self._audit.append(
            AuditLogEntry(
                actor_user_id=actor_user_id,
                actor_role=current_role,
                action="schedule.delete",
                entity="Schedule",
                entity_id=str(schedule_id),
            )
        )

    def bulk_assign(
        self,
        *,
        current_role: Role,
        actor_user_id: int,
        subject_id: str,
        teacher_id: str,
        candidates: Sequence[Mapping[str, Any]],
        period: ActivePeriod,
    ) -> BulkAssignResult:
        """Partial accept: persist non-conflicting candidates, report the rest.

        Fails only when there were candidates and every one of them conflicted.
        """

        self._require_admin(current_role)

        drafts = [ScheduleDraft.from_input(c, subject_id=subject_id, teacher_id=teacher_id) for c in candidates]
        if not drafts:
            return BulkAssignResult(created_ids=[], conflicts=[])

        existing = self._schedules.list_for_teacher(
            teacher_id=teacher_id,
            academic_year_id=period.academic_year_id,
            semester_id=period.semester_id,
        )
        valid, conflicts = self._detector.partition(drafts, existing)

        if not valid:
            logger.warning("bulk assign for subject=%s skipped all %d schedule(s)", subject_id, len(conflicts))
            raise StateConflictError(
                "No schedules were created due to conflicts",
                conflicts=[c.to_dict() for c in conflicts],
            )

        created_ids = self._schedules.create_many(valid, period)
        result = BulkAssignResult(created_ids=created_ids, conflicts=conflicts)

        self._audit.append(
            AuditLogEntry(
                actor_user_id=actor_user_id,
                actor_role=current_role,
                action="schedule.bulk_assign",
                entity="Subject",
                entity_id=str(subject_id),
                metadata={
                    "teacher_id": teacher_id,
                    "created": created_ids,
                    "skipped": [c.to_dict() for c in conflicts],
                },
            )
        )
        logger.info(
            "bulk assign subject=%s teacher=%s created=%d skipped=%d",
            subject_id, teacher_id, result.created_count, result.skipped_count,
        )
        return result
