from __future__ import annotations

from typing import Optional, Protocol

from .model import Enrollment, Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError


class EnrollmentRepository(Protocol):
    def find(
        self,
        *,
        student_id: str,
        subject_id: str,
        academic_year_id: str,
        semester_id: str,
    ) -> Optional[Enrollment]:
        raise NotImplementedError
