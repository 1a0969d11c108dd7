from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import IdentityToken
from .repository import TokenRepository

_COLUMNS = "token_id, student_id, academic_year_id, semester_id, uuid, issued_at, signature, is_revoked, created_by"


def _row_to_token(r: dict) -> IdentityToken:
    return IdentityToken(
        token_id=int(r["token_id"]),
        student_id=str(r["student_id"]),
        academic_year_id=str(r["academic_year_id"]),
        semester_id=str(r["semester_id"]),
        uuid=r["uuid"],
        issued_at=r["issued_at"],
        signature=r["signature"],
        is_revoked=bool(r["is_revoked"]),
        created_by=r.get("created_by"),
    )


class MySQLTokenRepository(TokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_live_for_student(
        self, *, student_id: str, academic_year_id: str, semester_id: str
    ) -> Optional[IdentityToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM qr_tokens
                WHERE student_id=%s AND academic_year_id=%s AND semester_id=%s AND is_revoked=0
                """,
                (str(student_id), str(academic_year_id), str(semester_id)),
            )
            r = fetchone(cur)
            return _row_to_token(r) if r else None

    def get_by_uuid(self, token_uuid: str) -> Optional[IdentityToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM qr_tokens WHERE uuid=%s", (str(token_uuid),))
            r = fetchone(cur)
            return _row_to_token(r) if r else None

    def create(
        self,
        *,
        student_id: str,
        academic_year_id: str,
        semester_id: str,
        token_uuid: str,
        issued_at: datetime,
        signature: str,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO qr_tokens(student_id, academic_year_id, semester_id, uuid, issued_at, signature, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    str(student_id),
                    str(academic_year_id),
                    str(semester_id),
                    token_uuid,
                    issued_at.replace(tzinfo=None),
                    signature,
                    created_by,
                ),
            )
            return int(cur.lastrowid)
