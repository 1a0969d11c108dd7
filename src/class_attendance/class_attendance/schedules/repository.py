from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..periods.model import ActivePeriod
from .model import Schedule, ScheduleDraft


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        """Schedule joined with subject code/name, section name and teacher user id."""

        raise NotImplementedError

    def list_for_teacher(
        self,
        *,
        teacher_id: str,
        academic_year_id: str,
        semester_id: str,
        day_of_week: Optional[int] = None,
    ) -> Sequence[Schedule]:
        raise NotImplementedError

    def create(self, draft: ScheduleDraft, period: ActivePeriod) -> int:
        raise NotImplementedError

    def create_many(self, drafts: Sequence[ScheduleDraft], period: ActivePeriod) -> list[int]:
        """Insert all drafts in one transaction. Returns schedule ids in input order."""

        raise NotImplementedError

    def update(self, schedule_id: int, draft: ScheduleDraft) -> bool:
        raise NotImplementedError

    def has_attendance(self, *, schedule_id: int) -> bool:
        """True once any attendance row points at the schedule."""

        raise NotImplementedError

    def delete(self, *, schedule_id: int) -> bool:
        raise NotImplementedError
