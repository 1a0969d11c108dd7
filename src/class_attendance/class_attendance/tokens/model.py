from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_issued_at
from ..common.validators import require_fields
from ..core.constants import TOKEN_PAYLOAD_FIELDS


@dataclass(frozen=True)
class TokenPayload:
    """Wire form of a QR identity token (what is encoded into the QR image)."""

    student_id: str
    uuid: str
    academic_year_id: str
    semester_id: str
    issued_at: str
    sig: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "TokenPayload":
        """Build from decoded JSON; every field is required (ValidationError otherwise)."""
        require_fields(data, TOKEN_PAYLOAD_FIELDS)
        return cls(**{f: str(data[f]) for f in TOKEN_PAYLOAD_FIELDS})

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class IdentityToken:
    """Persisted token row. uuid/issued_at/signature never change once issued."""

    token_id: int
    student_id: str
    academic_year_id: str
    semester_id: str
    uuid: str
    issued_at: datetime
    signature: str
    is_revoked: bool = False
    created_by: Optional[int] = None

    @property
    def issued_at_iso(self) -> str:
        return format_issued_at(self.issued_at)

    def to_payload(self) -> TokenPayload:
        return TokenPayload(
            student_id=self.student_id,
            uuid=self.uuid,
            academic_year_id=self.academic_year_id,
            semester_id=self.semester_id,
            issued_at=self.issued_at_iso,
            sig=self.signature,
        )
