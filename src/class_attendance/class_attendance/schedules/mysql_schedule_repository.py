from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from ..periods.model import ActivePeriod
from .model import Schedule, ScheduleDraft
from .repository import ScheduleRepository

_SELECT = """
    SELECT sc.schedule_id, sc.subject_id, sc.teacher_id, sc.day_of_week, sc.start_time, sc.end_time,
           sc.academic_year_id, sc.semester_id, sc.room, sc.department_name, sc.year_level, sc.section_id,
           sec.section_name, sub.subject_code, sub.subject_name, t.user_id AS teacher_user_id
    FROM schedules sc
    JOIN subjects sub ON sub.subject_id = sc.subject_id
    JOIN teachers t ON t.teacher_id = sc.teacher_id
    LEFT JOIN sections sec ON sec.section_id = sc.section_id
"""

_INSERT = """
    INSERT INTO schedules(subject_id, teacher_id, day_of_week, start_time, end_time, room,
                          department_name, year_level, section_id, academic_year_id, semester_id)
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _row_to_schedule(r: dict) -> Schedule:
    return Schedule(
        schedule_id=int(r["schedule_id"]),
        subject_id=str(r["subject_id"]),
        teacher_id=str(r["teacher_id"]),
        day_of_week=int(r["day_of_week"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        academic_year_id=str(r["academic_year_id"]),
        semester_id=str(r["semester_id"]),
        room=r.get("room"),
        department=r.get("department_name"),
        year_level=r.get("year_level"),
        section_id=r.get("section_id"),
        section_name=r.get("section_name"),
        subject_code=r.get("subject_code"),
        subject_name=r.get("subject_name"),
        teacher_user_id=int(r["teacher_user_id"]) if r.get("teacher_user_id") is not None else None,
    )


def _insert_params(d: ScheduleDraft, period: ActivePeriod) -> tuple:
    return (
        d.subject_id,
        d.teacher_id,
        int(d.day_of_week),
        d.start_time,
        d.end_time,
        d.room,
        d.department,
        d.year_level,
        d.section_id,
        period.academic_year_id,
        period.semester_id,
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE sc.schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _row_to_schedule(r) if r else None

    def list_for_teacher(
        self,
        *,
        teacher_id: str,
        academic_year_id: str,
        semester_id: str,
        day_of_week: Optional[int] = None,
    ) -> Sequence[Schedule]:
        clauses = ["sc.teacher_id=%s", "sc.academic_year_id=%s", "sc.semester_id=%s"]
        params: list[object] = [str(teacher_id), str(academic_year_id), str(semester_id)]
        if day_of_week is not None:
            clauses.append("sc.day_of_week=%s")
            params.append(int(day_of_week))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY sc.day_of_week ASC, sc.start_time ASC",
                tuple(params),
            )
            return [_row_to_schedule(r) for r in fetchall(cur)]

    def create(self, draft: ScheduleDraft, period: ActivePeriod) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT, _insert_params(draft, period))
            return int(cur.lastrowid)

    def create_many(self, drafts: Sequence[ScheduleDraft], period: ActivePeriod) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for d in drafts:
                cur.execute(_INSERT, _insert_params(d, period))
                ids.append(int(cur.lastrowid))
        return ids

    def update(self, schedule_id: int, draft: ScheduleDraft) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedules
                SET subject_id=%s, teacher_id=%s, day_of_week=%s, start_time=%s, end_time=%s, room=%s,
                    department_name=%s, year_level=%s, section_id=%s
                WHERE schedule_id=%s
                """,
                (
                    draft.subject_id,
                    draft.teacher_id,
                    int(draft.day_of_week),
                    draft.start_time,
                    draft.end_time,
                    draft.room,
                    draft.department,
                    draft.year_level,
                    draft.section_id,
                    int(schedule_id),
                ),
            )
            return cur.rowcount > 0

    def has_attendance(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 FROM attendance WHERE schedule_id=%s LIMIT 1", (int(schedule_id),))
            return cur.fetchone() is not None

    def delete(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0
