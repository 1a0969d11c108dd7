from __future__ import annotations

import hashlib
import hmac
from typing import Any, Mapping

from ..core.constants import TOKEN_PAYLOAD_FIELDS


def canonical_message(student_id, uuid, academic_year_id, semester_id, issued_at) -> str:
    """Pipe-delimited message the signature covers; field order is fixed."""
    return f"{student_id}|{uuid}|{academic_year_id}|{semester_id}|{issued_at}"


class TokenSigner:
    """HMAC-SHA256 signer/verifier for identity tokens. Pure: no storage access."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("QR_SECRET must be configured")
        self._key = secret.encode("utf-8")

    def sign(self, *, student_id, uuid, academic_year_id, semester_id, issued_at) -> str:
        message = canonical_message(student_id, uuid, academic_year_id, semester_id, issued_at)
        return hmac.new(self._key, message.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify(self, payload) -> bool:
        """Recompute the signature over the payload's canonical fields.

        Accepts a TokenPayload or a mapping; any missing field means False.
        """

        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else payload.to_dict()
        if any(not data.get(f) for f in TOKEN_PAYLOAD_FIELDS):
            return False

        expected = self.sign(
            student_id=data["student_id"],
            uuid=data["uuid"],
            academic_year_id=data["academic_year_id"],
            semester_id=data["semester_id"],
            issued_at=data["issued_at"],
        )
        return hmac.compare_digest(expected, str(data["sig"]).lower())
