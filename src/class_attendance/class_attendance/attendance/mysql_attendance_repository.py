from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import cursor_for, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, enrollment_id, attendance_date, status, time_in, time_out, scanned_at,
    late_minutes, schedule_id, scanner_user_id, note
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        enrollment_id=int(r["enrollment_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        scanned_at=r["scanned_at"],
        late_minutes=int(r.get("late_minutes") or 0),
        schedule_id=r.get("schedule_id"),
        scanner_user_id=r.get("scanner_user_id"),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tx=None):
        """``tx`` is an open (conn, cursor) pair to join instead of opening a connection per call."""
        self._conn_factory = conn_factory
        self._tx = tx

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with cursor_for(self._conn_factory, self._tx) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_enrollment_and_date(self, enrollment_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with cursor_for(self._conn_factory, self._tx) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE enrollment_id=%s AND attendance_date=%s
                """,
                (int(enrollment_id), attendance_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create_time_in(
        self,
        *,
        enrollment_id: int,
        attendance_date: date,
        time_in: datetime,
        scanned_at: datetime,
        late_minutes: int,
        status: AttendanceStatus,
        schedule_id: Optional[int],
        scanner_user_id: Optional[int],
        note: Optional[str] = None,
    ) -> int:
        # Plain INSERT (no upsert): a duplicate key must fail, never overwrite.
        with cursor_for(self._conn_factory, self._tx) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(enrollment_id, attendance_date, status, time_in, scanned_at,
                                       late_minutes, schedule_id, scanner_user_id, note)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(enrollment_id),
                    attendance_date,
                    status.value,
                    time_in,
                    scanned_at,
                    int(late_minutes),
                    schedule_id,
                    scanner_user_id,
                    note,
                ),
            )
            return int(cur.lastrowid)

    def set_time_out(self, *, attendance_id: int, time_out: datetime) -> bool:
        with cursor_for(self._conn_factory, self._tx) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET time_out=%s
                WHERE attendance_id=%s AND time_out IS NULL
                """,
                (time_out, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_for_schedule_and_date(self, *, schedule_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        with cursor_for(self._conn_factory, self._tx) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE schedule_id=%s AND attendance_date=%s
                ORDER BY time_in ASC
                """,
                (int(schedule_id), attendance_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
