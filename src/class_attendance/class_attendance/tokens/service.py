from __future__ import annotations

import io
import json
import uuid
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

import qrcode

from ..app_logger import get_logger
from ..common.datetime_utils import format_issued_at, utc_now_ms
from ..core.constants import DEFAULT_QR_BORDER, DEFAULT_QR_BOX_SIZE
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DuplicateRecordError,
    EligibilityError,
    InternalError,
    NotFoundError,
    SignatureError,
)
from ..periods.model import ActivePeriod
from ..students.repository import StudentRepository
from .model import IdentityToken, TokenPayload
from .repository import TokenRepository
from .signer import TokenSigner

logger = get_logger(__name__)

_ISSUER_ROLES = (Role.ADMIN, Role.TEACHER)


class TokenService:
    """Issues student identity tokens and authenticates them at scan time."""

    def __init__(
        self,
        tokens: TokenRepository,
        students: StudentRepository,
        signer: TokenSigner,
        *,
        uuid_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._tokens = tokens
        self._students = students
        self._signer = signer
        self._uuid_factory = uuid_factory or (lambda: str(uuid.uuid4()))
        self._clock = clock or utc_now_ms

    def issue(self, *, current_role: Role, issuer_user_id: Optional[int], student_id: str, period: ActivePeriod) -> IdentityToken:
        """Return the student's live token for the period, creating it on first request.

        Repeated calls return the stored token unchanged (same uuid and signature).
        """

        if current_role not in _ISSUER_ROLES:
            raise AuthorizationError("Only teachers and admins can issue QR tokens")

        student_id = str(student_id).strip()
        if not self._students.get_by_id(student_id):
            raise NotFoundError(f"Student {student_id} not found")

        existing = self._live_token(student_id, period)
        if existing:
            return existing

        token_uuid = self._uuid_factory()
        issued_at = self._clock()
        signature = self._signer.sign(
            student_id=student_id,
            uuid=token_uuid,
            academic_year_id=period.academic_year_id,
            semester_id=period.semester_id,
            issued_at=format_issued_at(issued_at),
        )

        try:
            self._tokens.create(
                student_id=student_id,
                academic_year_id=period.academic_year_id,
                semester_id=period.semester_id,
                token_uuid=token_uuid,
                issued_at=issued_at,
                signature=signature,
                created_by=issuer_user_id,
            )
        except DuplicateRecordError:
            # A concurrent request issued first; its token is the one to keep.
            logger.info("token for student=%s already issued concurrently, returning it", student_id)

        token = self._live_token(student_id, period)
        if not token:
            raise InternalError("Token was not persisted")
        if token.uuid == token_uuid:
            logger.info("issued token uuid=%s student=%s period=%s/%s", token_uuid, student_id,
                        period.academic_year_id, period.semester_id)
        return token

    def _live_token(self, student_id: str, period: ActivePeriod) -> Optional[IdentityToken]:
        return self._tokens.get_live_for_student(
            student_id=student_id,
            academic_year_id=period.academic_year_id,
            semester_id=period.semester_id,
        )

    def verify(self, payload: TokenPayload | Mapping[str, Any]) -> bool:
        return self._signer.verify(payload)

    def authenticate(self, data: Mapping[str, Any] | None, period: ActivePeriod) -> IdentityToken:
        """Check a scanned payload and return the live token record it belongs to.

        Order: required fields (ValidationError), signature (SignatureError),
        active period (EligibilityError), then the stored record must exist,
        belong to the same student/period and not be revoked (SignatureError).
        """

        payload = TokenPayload.from_dict(data)

        if not self._signer.verify(payload):
            raise SignatureError("Invalid signature")

        if not period.matches(payload.academic_year_id, payload.semester_id):
            raise EligibilityError("Token was issued for an inactive academic period")

        token = self._tokens.get_by_uuid(payload.uuid)
        if (
            token is None
            or token.is_revoked
            or token.student_id != payload.student_id
            or not period.matches(token.academic_year_id, token.semester_id)
        ):
            raise SignatureError("QR token not found or revoked")

        return token

    @staticmethod
    def render_qr_png(token: IdentityToken, *, box_size: int = DEFAULT_QR_BOX_SIZE, border: int = DEFAULT_QR_BORDER) -> bytes:
        """PNG image of the token payload as compact JSON."""

        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=border,
        )
        qr.add_data(json.dumps(token.to_payload().to_dict(), separators=(",", ":")))
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
