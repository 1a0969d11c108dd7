from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_YEAR_LEVEL = re.compile(r"^\s*(\d+)\s*(?:st|nd|rd|th)?\s*(?:year)?\s*$", re.IGNORECASE)


def normalize_year_level(value) -> Optional[str]:
    """Canonicalize "1st Year", "1st", "1" to "1"; other text is only trimmed."""

    if value is None:
        return None
    text = str(value).strip()
    m = _YEAR_LEVEL.match(text)
    if not m:
        return text
    return m.group(1).lstrip("0") or "0"


@dataclass(frozen=True)
class Student:
    """Read model: owned by the admin subsystem, read-only here."""

    student_id: str
    full_name: str
    department: Optional[str]
    section_id: Optional[str]
    section_name: Optional[str]
    year_level: Optional[str]


@dataclass(frozen=True)
class Enrollment:
    enrollment_id: int
    student_id: str
    subject_id: str
    academic_year_id: str
    semester_id: str
