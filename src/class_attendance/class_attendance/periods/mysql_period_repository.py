from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ActivePeriod
from .repository import PeriodRepository


class MySQLPeriodRepository(PeriodRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self) -> Optional[ActivePeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT active_academic_year_id, active_semester_id
                FROM settings
                WHERE id='singleton'
                """
            )
            r = fetchone(cur)
            if not r or not r.get("active_academic_year_id") or not r.get("active_semester_id"):
                return None
            return ActivePeriod(
                academic_year_id=str(r["active_academic_year_id"]),
                semester_id=str(r["active_semester_id"]),
            )
