from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Mapping, Sequence

from ..app_logger import get_logger
from ..common.datetime_utils import now_local, parse_iso_date, parse_time_of_day
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, InternalError, NotFoundError, ValidationError
from ..periods.model import ActivePeriod
from ..schedules.model import Schedule
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from ..tokens.service import TokenService
from .eligibility import EligibilityValidator
from .model import AttendanceRecord, ScanRequest, ScanResult
from .repository import AttendanceRepository
from .state_machine import AttendanceStateMachine

logger = get_logger(__name__)


class AttendanceService:
    """Scan orchestration: schedule/student lookup, eligibility, state transition."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        schedules: ScheduleRepository,
        tokens: TokenService,
        validator: EligibilityValidator,
        machine: AttendanceStateMachine,
        *,
        allow_time_overrides: bool = False,
        clock: Callable[[], datetime] | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._schedules = schedules
        self._tokens = tokens
        self._validator = validator
        self._machine = machine
        self._allow_time_overrides = bool(allow_time_overrides)
        self._clock = clock or now_local

    def _scan_time(self, req: ScanRequest) -> datetime:
        now = self._clock()
        if not (req.time_in or req.custom_date):
            return now
        if not self._allow_time_overrides:
            raise ValidationError("Scan time overrides are disabled")

        if req.custom_date:
            try:
                if "T" in req.custom_date:
                    now = datetime.fromisoformat(req.custom_date).replace(tzinfo=None)
                else:
                    now = datetime.combine(parse_iso_date(req.custom_date), now.time())
            except ValueError:
                raise ValidationError(f"Invalid custom date: {req.custom_date!r}")
        if req.time_in:
            now = datetime.combine(now.date(), parse_time_of_day(req.time_in))
        return now

    def _owned_schedule(self, *, schedule_id: int, teacher_user_id: int, period: ActivePeriod) -> Schedule:
        schedule = self._schedules.get_by_id(int(schedule_id))
        if not schedule or not period.matches(schedule.academic_year_id, schedule.semester_id):
            raise NotFoundError("Schedule not found in the active academic period")
        if schedule.teacher_user_id != int(teacher_user_id):
            raise AuthorizationError("Unauthorized: This schedule doesn't belong to you")
        return schedule

    def scan(self, *, current_role: Role, scanner_user_id: int, request: ScanRequest, period: ActivePeriod) -> ScanResult:
        """Record time-in or time-out for ``request.student_id`` against a schedule."""

        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can record attendance")

        try:
            now = self._scan_time(request)
            schedule = self._owned_schedule(schedule_id=request.schedule_id, teacher_user_id=scanner_user_id, period=period)

            student = self._students.get_by_id(request.student_id)
            if not student:
                raise NotFoundError(f"Student {request.student_id} not found")

            eligible = self._validator.check(student=student, schedule=schedule, now=now)
            record, decision = self._machine.apply(
                enrollment=eligible.enrollment,
                schedule=schedule,
                window=eligible.window,
                now=now,
                scanner_user_id=int(scanner_user_id),
                actor_role=current_role,
                note=request.note,
            )
        except InternalError:
            logger.exception("scan failed student=%s schedule=%s", request.student_id, request.schedule_id)
            raise
        except DomainError as e:
            logger.warning(
                "scan rejected student=%s schedule=%s: %s", request.student_id, request.schedule_id, e
            )
            raise

        logger.info(
            "%s student=%s schedule=%s attendance=%s late_minutes=%s",
            decision.action.value, student.student_id, schedule.schedule_id, record.attendance_id, record.late_minutes,
        )
        return ScanResult(
            attendance_id=record.attendance_id,
            action=decision.action,
            is_late=record.is_late,
            late_minutes=record.late_minutes,
            time_in=record.time_in,
            time_out=record.time_out,
            student_id=student.student_id,
            student_name=student.full_name,
            subject_code=schedule.subject_code,
            subject_name=schedule.subject_name,
        )

    def scan_token(
        self,
        *,
        current_role: Role,
        scanner_user_id: int,
        data: Mapping[str, Any],
        period: ActivePeriod,
    ) -> ScanResult:
        """Variant taking the full signed QR payload; the signature is checked first."""

        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can record attendance")

        try:
            token = self._tokens.authenticate(data, period)
        except InternalError:
            logger.exception("token lookup failed uuid=%s", data.get("uuid") if isinstance(data, Mapping) else None)
            raise
        except DomainError as e:
            uuid = data.get("uuid") if isinstance(data, Mapping) else None
            logger.warning("token rejected uuid=%s: %s", uuid, e)
            raise

        request = ScanRequest.from_dict(data, student_id=token.student_id)
        return self.scan(current_role=current_role, scanner_user_id=scanner_user_id, request=request, period=period)

    def list_for_schedule(
        self, *, current_role: Role, teacher_user_id: int, schedule_id: int, on_date: date, period: ActivePeriod
    ) -> Sequence[AttendanceRecord]:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can view class attendance")
        schedule = self._owned_schedule(schedule_id=schedule_id, teacher_user_id=teacher_user_id, period=period)
        return self._attendance.list_for_schedule_and_date(schedule_id=schedule.schedule_id, attendance_date=on_date)
