from __future__ import annotations

from typing import Protocol

from .model import AuditLogEntry


class AuditSink(Protocol):
    """Write-only: the core appends entries and never reads them back."""

    def append(self, entry: AuditLogEntry) -> None:
        raise NotImplementedError
