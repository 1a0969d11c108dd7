from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..app_logger import get_logger
from ..audit.model import AuditLogEntry
from ..core.enums import AttendanceStatus, Role, ScanAction
from ..core.exceptions import DuplicateRecordError, InternalError, StateConflictError
from ..overrides.model import EffectiveWindow
from ..schedules.model import Schedule
from ..students.model import Enrollment
from .factory import AttendanceTransitionFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .transitions.base import TransitionDecision
from .transitions.completed import COMPLETED_MESSAGE
from .unit_of_work import AttendanceUnitOfWork, AttendanceWrite

logger = get_logger(__name__)

DUPLICATE_MESSAGE = "Attendance record already exists for this student today. Please scan again for time-out."


class AttendanceStateMachine:
    """NONE -> IN_PROGRESS -> COMPLETE per (enrollment, date).

    The read of today's record only picks the transition; the storage unique
    key and the conditional time-out update decide races. The row change and
    its audit entry are written in one unit of work.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        unit_of_work: AttendanceUnitOfWork,
        *,
        factory: AttendanceTransitionFactory | None = None,
    ):
        self._attendance = attendance
        self._unit_of_work = unit_of_work
        self._factory = factory or AttendanceTransitionFactory()

    def apply(
        self,
        *,
        enrollment: Enrollment,
        schedule: Schedule,
        window: EffectiveWindow,
        now: datetime,
        scanner_user_id: Optional[int],
        actor_role: Role = Role.TEACHER,
        note: Optional[str] = None,
    ) -> tuple[AttendanceRecord, TransitionDecision]:
        today = now.date()
        record = self._attendance.get_for_enrollment_and_date(enrollment.enrollment_id, today)
        decision = self._factory.for_record(record).decide(record=record, now=now, window=window)

        try:
            with self._unit_of_work() as uow:
                saved = self._write(
                    uow,
                    decision=decision,
                    record=record,
                    enrollment=enrollment,
                    schedule=schedule,
                    now=now,
                    scanner_user_id=scanner_user_id,
                    actor_role=actor_role,
                    note=note,
                )
        except DuplicateRecordError:
            logger.warning("duplicate time-in for enrollment=%s on %s", enrollment.enrollment_id, today)
            raise StateConflictError(DUPLICATE_MESSAGE)

        return saved, decision

    @staticmethod
    def _write(
        uow: AttendanceWrite,
        *,
        decision: TransitionDecision,
        record: Optional[AttendanceRecord],
        enrollment: Enrollment,
        schedule: Schedule,
        now: datetime,
        scanner_user_id: Optional[int],
        actor_role: Role,
        note: Optional[str],
    ) -> AttendanceRecord:
        if decision.action == ScanAction.TIME_IN:
            attendance_id = uow.attendance.create_time_in(
                enrollment_id=enrollment.enrollment_id,
                attendance_date=now.date(),
                time_in=now,
                scanned_at=now,
                late_minutes=decision.late_minutes,
                status=AttendanceStatus.PRESENT,
                schedule_id=schedule.schedule_id,
                scanner_user_id=scanner_user_id,
                note=note,
            )
        else:
            attendance_id = record.attendance_id
            if not uow.attendance.set_time_out(attendance_id=attendance_id, time_out=now):
                raise StateConflictError(COMPLETED_MESSAGE)

        saved = uow.attendance.get_by_id(attendance_id)
        if saved is None:
            raise InternalError(f"Attendance {attendance_id} missing after {decision.action.value}")

        uow.audit.append(
            AuditLogEntry(
                actor_user_id=scanner_user_id,
                actor_role=actor_role,
                action=f"attendance.{decision.action.value}",
                entity="Attendance",
                entity_id=str(attendance_id),
                metadata={
                    "enrollment_id": enrollment.enrollment_id,
                    "schedule_id": schedule.schedule_id,
                    "student_id": enrollment.student_id,
                    "late_minutes": saved.late_minutes,
                },
            )
        )
        return saved
