from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.eligibility import EligibilityValidator
from .attendance.factory import AttendanceTransitionFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.state_machine import AttendanceStateMachine
from .attendance.unit_of_work import AttendanceUnitOfWork, MySQLAttendanceUnitOfWork
from .audit.mysql_audit_repository import MySQLAuditSink
from .audit.repository import AuditSink
from .database.connection import DBConfig, DatabaseConnection
from .overrides.mysql_override_repository import MySQLOverrideRepository
from .overrides.repository import OverrideRepository
from .overrides.resolver import OverrideResolver
from .overrides.service import OverrideService
from .periods.mysql_period_repository import MySQLPeriodRepository
from .periods.repository import PeriodRepository
from .schedules.conflicts import ScheduleConflictDetector
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .students.mysql_student_repository import MySQLEnrollmentRepository, MySQLStudentRepository
from .students.repository import EnrollmentRepository, StudentRepository
from .tokens.mysql_token_repository import MySQLTokenRepository
from .tokens.repository import TokenRepository
from .tokens.service import TokenService
from .tokens.signer import TokenSigner


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    periods_repo: PeriodRepository
    students_repo: StudentRepository
    enrollments_repo: EnrollmentRepository
    tokens_repo: TokenRepository
    schedules_repo: ScheduleRepository
    overrides_repo: OverrideRepository
    attendance_repo: AttendanceRepository
    attendance_unit_of_work: AttendanceUnitOfWork
    audit_sink: AuditSink

    token_service: TokenService
    schedule_service: ScheduleService
    override_service: OverrideService
    attendance_service: AttendanceService


def wire_container(
    *,
    conn: Optional[DatabaseConnection],
    periods_repo: PeriodRepository,
    students_repo: StudentRepository,
    enrollments_repo: EnrollmentRepository,
    tokens_repo: TokenRepository,
    schedules_repo: ScheduleRepository,
    overrides_repo: OverrideRepository,
    attendance_repo: AttendanceRepository,
    attendance_unit_of_work: AttendanceUnitOfWork,
    audit_sink: AuditSink,
    qr_secret: str,
    allow_scan_time_overrides: bool = False,
) -> Container:
    """Build the services on top of already-constructed repositories."""

    token_service = TokenService(tokens_repo, students_repo, TokenSigner(qr_secret))
    schedule_service = ScheduleService(schedules_repo, ScheduleConflictDetector(schedules_repo), audit_sink)
    override_service = OverrideService(overrides_repo, schedules_repo, audit_sink)
    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        schedules_repo,
        token_service,
        EligibilityValidator(enrollments_repo, OverrideResolver(overrides_repo)),
        AttendanceStateMachine(attendance_repo, attendance_unit_of_work, factory=AttendanceTransitionFactory()),
        allow_time_overrides=allow_scan_time_overrides,
    )

    return Container(
        conn=conn,
        periods_repo=periods_repo,
        students_repo=students_repo,
        enrollments_repo=enrollments_repo,
        tokens_repo=tokens_repo,
        schedules_repo=schedules_repo,
        overrides_repo=overrides_repo,
        attendance_repo=attendance_repo,
        attendance_unit_of_work=attendance_unit_of_work,
        audit_sink=audit_sink,
        token_service=token_service,
        schedule_service=schedule_service,
        override_service=override_service,
        attendance_service=attendance_service,
    )


def build_container(*, db_config: dict, qr_secret: str, allow_scan_time_overrides: bool = False) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        periods_repo=MySQLPeriodRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        tokens_repo=MySQLTokenRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        overrides_repo=MySQLOverrideRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        attendance_unit_of_work=MySQLAttendanceUnitOfWork(conn),
        audit_sink=MySQLAuditSink(conn),
        qr_secret=qr_secret,
        allow_scan_time_overrides=allow_scan_time_overrides,
    )
