from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import parse_time_of_day
from ..core.exceptions import DuplicateRecordError, InternalError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) inside one transaction.

    Commits on success, rolls back on any error. Duplicate-key violations
    surface as DuplicateRecordError; other driver errors as InternalError.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise InternalError("Database unavailable") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateRecordError(str(e)) from e
        raise InternalError("Database integrity error") from e
    except mysql.connector.Error as e:
        conn.rollback()
        raise InternalError("Database error") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def joined_cursor(tx):
    """Reuse an open (conn, cursor) pair. The unit that opened it commits or rolls back."""
    yield tx


def cursor_for(conn_factory: DatabaseConnection, tx=None):
    return joined_cursor(tx) if tx is not None else db_cursor(conn_factory)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns come back as time, timedelta (pure connector) or "HH:MM:SS" text."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)
    if isinstance(value, str):
        return parse_time_of_day(value)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
