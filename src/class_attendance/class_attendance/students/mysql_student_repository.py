from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Enrollment, Student
from .repository import EnrollmentRepository, StudentRepository


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT st.student_id, st.full_name, st.department_name, st.section_id, st.year_level,
                       sec.section_name
                FROM students st
                LEFT JOIN sections sec ON sec.section_id = st.section_id
                WHERE st.student_id=%s
                """,
                (str(student_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Student(
                student_id=str(r["student_id"]),
                full_name=r["full_name"],
                department=r.get("department_name"),
                section_id=r.get("section_id"),
                section_name=r.get("section_name"),
                year_level=r.get("year_level"),
            )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(
        self,
        *,
        student_id: str,
        subject_id: str,
        academic_year_id: str,
        semester_id: str,
    ) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT enrollment_id, student_id, subject_id, academic_year_id, semester_id
                FROM enrollments
                WHERE student_id=%s AND subject_id=%s AND academic_year_id=%s AND semester_id=%s
                """,
                (str(student_id), str(subject_id), str(academic_year_id), str(semester_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Enrollment(
                enrollment_id=int(r["enrollment_id"]),
                student_id=str(r["student_id"]),
                subject_id=str(r["subject_id"]),
                academic_year_id=str(r["academic_year_id"]),
                semester_id=str(r["semester_id"]),
            )
