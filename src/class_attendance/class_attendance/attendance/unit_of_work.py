from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import ContextManager, Iterator, Protocol

from ..audit.mysql_audit_repository import MySQLAuditSink
from ..audit.repository import AuditSink
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .mysql_attendance_repository import MySQLAttendanceRepository
from .repository import AttendanceRepository


@dataclass(frozen=True)
class AttendanceWrite:
    """Repositories sharing one transaction: the attendance row and its audit entry."""

    attendance: AttendanceRepository
    audit: AuditSink


class AttendanceUnitOfWork(Protocol):
    def __call__(self) -> ContextManager[AttendanceWrite]:
        """Commit everything written through the unit on exit, or nothing if the block raises."""

        raise NotImplementedError


class MySQLAttendanceUnitOfWork(AttendanceUnitOfWork):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def __call__(self) -> Iterator[AttendanceWrite]:
        # db_cursor commits on exit and rolls back (translating driver errors) on failure.
        with db_cursor(self._conn_factory) as tx:
            yield AttendanceWrite(
                attendance=MySQLAttendanceRepository(self._conn_factory, tx=tx),
                audit=MySQLAuditSink(self._conn_factory, tx=tx),
            )
