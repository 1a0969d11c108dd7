from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceState, ScanAction
from ...overrides.model import EffectiveWindow
from ..model import AttendanceRecord


@dataclass(frozen=True)
class TransitionDecision:
    action: ScanAction
    late_minutes: int = 0

    @property
    def is_late(self) -> bool:
        return self.late_minutes > 0


class AttendanceTransition(ABC):
    """Strategy Pattern: what a scan does from one attendance state."""

    source: AttendanceState

    @abstractmethod
    def decide(self, *, record: Optional[AttendanceRecord], now: datetime, window: EffectiveWindow) -> TransitionDecision:
        """Return the transition to apply, or raise StateConflictError."""

        raise NotImplementedError
