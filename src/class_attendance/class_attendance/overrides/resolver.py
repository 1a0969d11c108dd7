from __future__ import annotations

from datetime import date

from ..core.enums import OverrideStatus, OverrideType
from ..schedules.model import Schedule
from .model import EffectiveWindow
from .repository import OverrideRepository


class OverrideResolver:
    """Effective start/end (or cancellation) of a schedule on a given date.

    Only APPROVED overrides count; pending and rejected ones are ignored.
    """

    def __init__(self, overrides: OverrideRepository):
        self._overrides = overrides

    def resolve(self, schedule: Schedule, on_date: date) -> EffectiveWindow:
        ov = self._overrides.get_for_schedule_and_date(schedule_id=schedule.schedule_id, on_date=on_date)

        if not ov or ov.status != OverrideStatus.APPROVED:
            return EffectiveWindow(
                cancelled=False,
                effective_start=schedule.start_time,
                effective_end=schedule.end_time,
            )

        if ov.override_type == OverrideType.CANCEL:
            return EffectiveWindow(
                cancelled=True,
                effective_start=schedule.start_time,
                effective_end=schedule.end_time,
                reason=ov.reason,
                override_id=ov.override_id,
            )

        # Time change: either bound may be left unset and keeps the weekly value.
        return EffectiveWindow(
            cancelled=False,
            effective_start=ov.new_start_time or schedule.start_time,
            effective_end=ov.new_end_time or schedule.end_time,
            reason=ov.reason,
            override_id=ov.override_id,
        )
