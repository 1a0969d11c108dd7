from __future__ import annotations

import json

from ..database.connection import DatabaseConnection
from ..database.mysql_base import cursor_for
from .model import AuditLogEntry
from .repository import AuditSink


class MySQLAuditSink(AuditSink):
    def __init__(self, conn_factory: DatabaseConnection, *, tx=None):
        self._conn_factory = conn_factory
        self._tx = tx

    def append(self, entry: AuditLogEntry) -> None:
        with cursor_for(self._conn_factory, self._tx) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(actor_user_id, actor_role, action, entity, entity_id, metadata, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,COALESCE(%s, CURRENT_TIMESTAMP))
                """,
                (
                    entry.actor_user_id,
                    entry.actor_role.value if entry.actor_role else None,
                    entry.action,
                    entry.entity,
                    entry.entity_id,
                    json.dumps(entry.metadata, default=str),
                    entry.created_at,
                ),
            )
