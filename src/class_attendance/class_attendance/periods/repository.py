from __future__ import annotations

from typing import Optional, Protocol

from .model import ActivePeriod


class PeriodRepository(Protocol):
    def get_active(self) -> Optional[ActivePeriod]:
        """Return the configured active period, or None when none is set."""

        raise NotImplementedError
