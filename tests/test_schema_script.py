from __future__ import annotations

from pathlib import Path

from src.class_attendance.class_attendance.database.bootstrap import _strip_create_db_and_use, iter_sql_statements

SCHEMA = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


def test_split_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- comment; with a semicolon
    CREATE TABLE a (note VARCHAR(10) DEFAULT 'x;y');
    INSERT INTO a VALUES ('it\\'s; fine');
    """
    stmts = list(iter_sql_statements(sql))
    assert len(stmts) == 2
    assert stmts[0].startswith("CREATE TABLE a")
    assert stmts[1].endswith("('it\\'s; fine')")


def test_strip_create_database_and_use():
    sql = "CREATE DATABASE foo;\nUSE foo;\nCREATE TABLE t (id INT);"
    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_schema_has_the_unique_keys_scans_rely_on():
    stmts = list(iter_sql_statements(SCHEMA.read_text(encoding="utf-8")))
    assert len(stmts) == 11
    text = "\n".join(stmts)
    assert "UNIQUE KEY uq_attendance_enrollment_date (enrollment_id, attendance_date)" in text
    assert "live_flag" in text


def test_deleting_a_schedule_cannot_rewrite_attendance():
    text = SCHEMA.read_text(encoding="utf-8")
    assert "REFERENCES schedules(schedule_id) ON DELETE RESTRICT" in text
    assert "SET NULL" not in text
