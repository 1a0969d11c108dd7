from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class AuditLogEntry:
    """Append-only record of a state-changing action."""

    actor_user_id: Optional[int]
    actor_role: Optional[Role]
    action: str
    entity: str
    entity_id: Optional[str]
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
