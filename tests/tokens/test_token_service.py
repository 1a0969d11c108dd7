from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.class_attendance.class_attendance.core.enums import Role
from src.class_attendance.class_attendance.core.exceptions import (
    AuthorizationError,
    EligibilityError,
    NotFoundError,
    SignatureError,
    ValidationError,
)
from src.class_attendance.class_attendance.periods.model import ActivePeriod
from src.class_attendance.class_attendance.tokens.service import TokenService
from src.class_attendance.class_attendance.tokens.signer import TokenSigner, canonical_message

from tests.fakes import PERIOD, InMemoryStudents, InMemoryTokens, make_student

ISSUED_AT = datetime(2025, 6, 1, 8, 0, 0, 123000, tzinfo=timezone.utc)


def _service(tokens=None, *, secret="k3y"):
    uuids = iter(["uuid-1", "uuid-2", "uuid-3"])
    return TokenService(
        tokens or InMemoryTokens(),
        InMemoryStudents(make_student("S-001"), make_student("S-002", full_name="Ben Reyes")),
        TokenSigner(secret),
        uuid_factory=lambda: next(uuids),
        clock=lambda: ISSUED_AT,
    )


def _issue(svc, student_id="S-001", role=Role.ADMIN):
    return svc.issue(current_role=role, issuer_user_id=1, student_id=student_id, period=PERIOD)


def test_signer_round_trip_and_single_field_tamper():
    signer = TokenSigner("k3y")
    payload = {
        "student_id": "S-001",
        "uuid": "u-1",
        "academic_year_id": "AY2025",
        "semester_id": "SEM1",
        "issued_at": "2025-06-01T08:00:00.123Z",
    }
    payload["sig"] = signer.sign(**payload)

    assert signer.verify(payload) is True
    for field in ("student_id", "uuid", "academic_year_id", "semester_id", "issued_at"):
        assert signer.verify({**payload, field: payload[field] + "x"}) is False
    assert signer.verify({**payload, "sig": "0" * 64}) is False
    assert TokenSigner("other").verify(payload) is False


def test_signer_missing_field_is_invalid_not_an_error():
    signer = TokenSigner("k3y")
    assert signer.verify({"student_id": "S-001", "sig": "abc"}) is False


def test_canonical_message_field_order():
    assert canonical_message("S", "U", "AY", "SEM", "T") == "S|U|AY|SEM|T"


def test_signer_requires_secret():
    with pytest.raises(ValueError):
        TokenSigner("")


def test_issue_is_idempotent():
    svc = _service()
    first = _issue(svc)
    second = _issue(svc, role=Role.TEACHER)

    assert first.uuid == second.uuid == "uuid-1"
    assert first.signature == second.signature
    assert first.issued_at_iso == "2025-06-01T08:00:00.123Z"
    assert svc.verify(first.to_payload()) is True


def test_issue_per_student_is_distinct():
    svc = _service()
    assert _issue(svc, "S-001").uuid != _issue(svc, "S-002").uuid


def test_issue_rejects_students_and_unknown_ids():
    svc = _service()
    with pytest.raises(AuthorizationError):
        _issue(svc, role=Role.STUDENT)
    with pytest.raises(NotFoundError):
        _issue(svc, "S-404")


class RacingTokens(InMemoryTokens):
    """Another request inserts its token between our read and our insert."""

    def __init__(self):
        super().__init__()
        self.raced = False

    def create(self, **kwargs):
        if not self.raced:
            self.raced = True
            super().create(**{**kwargs, "token_uuid": "winner-uuid", "signature": "winner-sig"})
        return super().create(**kwargs)


def test_issue_returns_winner_on_concurrent_insert():
    tokens = RacingTokens()
    token = _issue(_service(tokens))

    assert token.uuid == "winner-uuid"
    assert tokens.get_live_for_student(student_id="S-001", academic_year_id="AY2025", semester_id="SEM1").uuid == "winner-uuid"


def test_authenticate_accepts_live_token():
    svc = _service()
    token = _issue(svc)
    assert svc.authenticate(token.to_payload().to_dict(), PERIOD).token_id == token.token_id


def test_authenticate_missing_field_is_validation_error():
    svc = _service()
    payload = _issue(svc).to_payload().to_dict()
    del payload["issued_at"]
    with pytest.raises(ValidationError):
        svc.authenticate(payload, PERIOD)


def test_authenticate_bad_signature():
    svc = _service()
    payload = _issue(svc).to_payload().to_dict()
    payload["student_id"] = "S-002"
    with pytest.raises(SignatureError, match="Invalid signature"):
        svc.authenticate(payload, PERIOD)


def test_authenticate_revoked_or_unknown_token():
    tokens = InMemoryTokens()
    svc = _service(tokens)
    token = _issue(svc)
    payload = token.to_payload().to_dict()

    tokens.revoke(token.uuid)
    with pytest.raises(SignatureError, match="not found or revoked"):
        svc.authenticate(payload, PERIOD)

    # Validly signed with the same key but never stored.
    other = _service(InMemoryTokens())
    forged = _issue(other).to_payload().to_dict()
    forged["uuid"] = "never-issued"
    forged["sig"] = TokenSigner("k3y").sign(**{k: forged[k] for k in forged if k != "sig"})
    with pytest.raises(SignatureError):
        svc.authenticate(forged, PERIOD)


def test_authenticate_rejects_token_of_another_student():
    svc = _service()
    own = _issue(svc, "S-001")
    _issue(svc, "S-002")

    # S-001's stored uuid, correctly signed for S-002.
    payload = own.to_payload().to_dict()
    payload["student_id"] = "S-002"
    payload["sig"] = TokenSigner("k3y").sign(**{k: payload[k] for k in payload if k != "sig"})
    assert svc.verify(payload) is True
    with pytest.raises(SignatureError, match="QR token not found or revoked"):
        svc.authenticate(payload, PERIOD)


def test_authenticate_and_verify_agree_on_padded_fields():
    svc = _service()
    payload = _issue(svc).to_payload().to_dict()
    payload["student_id"] = "S-001   "

    assert svc.verify(payload) is False
    with pytest.raises(SignatureError, match="Invalid signature"):
        svc.authenticate(payload, PERIOD)


def test_authenticate_inactive_period():
    svc = _service()
    payload = _issue(svc).to_payload().to_dict()
    with pytest.raises(EligibilityError):
        svc.authenticate(payload, ActivePeriod(academic_year_id="AY2026", semester_id="SEM1"))


def test_render_qr_png():
    svc = _service()
    png = svc.render_qr_png(_issue(svc))
    assert png.startswith(b"\x89PNG")
