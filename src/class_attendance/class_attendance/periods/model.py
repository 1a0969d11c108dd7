from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActivePeriod:
    """Academic period (academic year + semester) a request is evaluated against.

    Passed explicitly into every core call instead of being read from the
    settings row deep inside the services.
    """

    academic_year_id: str
    semester_id: str

    def matches(self, academic_year_id, semester_id) -> bool:
        return str(academic_year_id) == self.academic_year_id and str(semester_id) == self.semester_id
