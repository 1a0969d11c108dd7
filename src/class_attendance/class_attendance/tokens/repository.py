from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import IdentityToken


class TokenRepository(Protocol):
    def get_live_for_student(
        self, *, student_id: str, academic_year_id: str, semester_id: str
    ) -> Optional[IdentityToken]:
        """Return the non-revoked token for the triple, if any."""

        raise NotImplementedError

    def get_by_uuid(self, token_uuid: str) -> Optional[IdentityToken]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: str,
        academic_year_id: str,
        semester_id: str,
        token_uuid: str,
        issued_at: datetime,
        signature: str,
        created_by: Optional[int],
    ) -> int:
        """Insert a live token. Raises DuplicateRecordError if one already exists.

        Returns token_id.
        """

        raise NotImplementedError
