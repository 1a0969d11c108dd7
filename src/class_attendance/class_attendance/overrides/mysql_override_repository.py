from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..core.enums import OverrideStatus, OverrideType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ScheduleOverride
from .repository import OverrideRepository

_COLUMNS = """
    ov.override_id, ov.schedule_id, ov.override_date, ov.reason, ov.override_type, ov.status,
    ov.new_start_time, ov.new_end_time, ov.requested_by, ov.decided_by, ov.decided_at,
    ov.admin_note, ov.created_at
"""


def _row_to_override(r: dict) -> ScheduleOverride:
    return ScheduleOverride(
        override_id=int(r["override_id"]),
        schedule_id=int(r["schedule_id"]),
        override_date=r["override_date"],
        reason=r["reason"],
        override_type=OverrideType(r["override_type"]),
        status=OverrideStatus(r["status"]),
        new_start_time=normalize_mysql_time(r.get("new_start_time")),
        new_end_time=normalize_mysql_time(r.get("new_end_time")),
        requested_by=r.get("requested_by"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
        created_at=r.get("created_at"),
    )


class MySQLOverrideRepository(OverrideRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, override_id: int) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedule_overrides ov WHERE ov.override_id=%s", (int(override_id),))
            r = fetchone(cur)
            return _row_to_override(r) if r else None

    def get_for_schedule_and_date(self, *, schedule_id: int, on_date: date) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedule_overrides ov
                WHERE ov.schedule_id=%s AND ov.override_date=%s
                """,
                (int(schedule_id), on_date),
            )
            r = fetchone(cur)
            return _row_to_override(r) if r else None

    def create(
        self,
        *,
        schedule_id: int,
        on_date: date,
        reason: str,
        override_type: OverrideType,
        new_start_time: Optional[time],
        new_end_time: Optional[time],
        requested_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_overrides(schedule_id, override_date, reason, override_type,
                                               new_start_time, new_end_time, status, requested_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(schedule_id),
                    on_date,
                    reason,
                    override_type.value,
                    new_start_time,
                    new_end_time,
                    OverrideStatus.PENDING.value,
                    requested_by,
                ),
            )
            return int(cur.lastrowid)

    def decide(
        self,
        *,
        override_id: int,
        status: OverrideStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedule_overrides
                SET status=%s, decided_by=%s, decided_at=%s, admin_note=%s
                WHERE override_id=%s AND status=%s
                """,
                (status.value, int(decided_by), datetime.now(), admin_note, int(override_id), OverrideStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_overrides(
        self,
        *,
        status: Optional[OverrideStatus] = None,
        teacher_user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ScheduleOverride]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("ov.status=%s")
            params.append(status.value)
        if teacher_user_id is not None:
            clauses.append("t.user_id=%s")
            params.append(int(teacher_user_id))
        params.append(int(limit))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedule_overrides ov
                JOIN schedules sc ON sc.schedule_id = ov.schedule_id
                JOIN teachers t ON t.teacher_id = sc.teacher_id
                WHERE {where}
                ORDER BY ov.override_date DESC, ov.override_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_row_to_override(r) for r in fetchall(cur)]
