"""
Attendance token tests.

Verifies:
- Secrets are 8 characters from the unambiguous alphabet and unique
- Validation normalizes case and whitespace
- Expired, inactive and unknown secrets are rejected
- Regenerating the QR keeps the secret
- Deleting a token keeps its attendance records
- Deleting an event deactivates its tokens for good
"""

import json
from datetime import timedelta

import pytest

from app.extensions import db
from app.models import AttendanceRecord, AttendanceToken
from app.services import checkin_service, event_service, token_service
from app.services.token_service import InvalidTokenError, TOKEN_ALPHABET, TOKEN_LENGTH
from app.time_utils import utcnow
from app.validation import NotFoundError, ValidationError


def _issue(event, **kwargs):
    kwargs.setdefault("expires_at", utcnow() + timedelta(hours=2))
    return token_service.issue_token(event.id, **kwargs)


class TestIssue:

    def test_secret_shape(self, event):
        issued = _issue(event, label="Session 1")
        secret = issued.token.secret

        assert len(secret) == TOKEN_LENGTH
        assert all(ch in TOKEN_ALPHABET for ch in secret)
        for ambiguous in "01IO":
            assert ambiguous not in secret

    def test_secrets_unique(self, event):
        secrets = {_issue(event).token.secret for _ in range(25)}
        assert len(secrets) == 25

    def test_payload_and_qr(self, event):
        issued = _issue(event)

        payload = json.loads(issued.payload)
        assert payload == {"token": issued.token.secret, "event_id": event.id}
        assert issued.qr_code.startswith("data:image/png;base64,")

        body = issued.to_dict()
        assert body["token"] == issued.token.secret
        assert body["payload"] == issued.payload
        assert body["qr_code"] == issued.qr_code

    def test_unknown_event(self, db_session):
        with pytest.raises(NotFoundError):
            token_service.issue_token(999, utcnow() + timedelta(hours=1))

    def test_blank_label_stored_as_none(self, event):
        issued = _issue(event, label="   ")
        assert issued.token.label is None


class TestValidate:

    def test_case_and_whitespace_insensitive(self, event):
        issued = _issue(event, label="Morning")
        binding = token_service.validate(f"  {issued.token.secret.lower()} ")

        assert binding.token_id == issued.token.id
        assert binding.event_id == event.id
        assert binding.label == "Morning"

    def test_unknown_secret(self, event):
        with pytest.raises(InvalidTokenError):
            token_service.validate("ZZZZZZZZ")

    def test_blank_secret(self, event):
        with pytest.raises(InvalidTokenError):
            token_service.validate("   ")
        with pytest.raises(InvalidTokenError):
            token_service.validate(None)

    @pytest.mark.parametrize("is_active", [True, False])
    def test_expired_one_second_ago(self, event, is_active):
        issued = _issue(event, expires_at=utcnow() - timedelta(seconds=1), is_active=is_active)
        with pytest.raises(InvalidTokenError):
            token_service.validate(issued.token.secret)

    def test_inactive(self, event):
        issued = _issue(event, is_active=False)
        with pytest.raises(InvalidTokenError):
            token_service.validate(issued.token.secret)

    def test_reactivated_token_validates(self, event):
        issued = _issue(event, is_active=False)
        token_service.update_token(issued.token.id, {"is_active": True})
        assert token_service.validate(issued.token.secret).token_id == issued.token.id

    @pytest.mark.parametrize("secret", [12345678, ["ABCDEFGH"], {"token": "ABCDEFGH"}])
    def test_non_string_secret(self, event, secret):
        _issue(event)
        with pytest.raises(InvalidTokenError):
            token_service.validate(secret)

    def test_error_carries_code(self, event):
        with pytest.raises(InvalidTokenError) as exc:
            token_service.validate("NOPE2345")
        assert exc.value.to_dict()["code"] == "INVALID_TOKEN"


class TestLifecycle:

    def test_regenerate_keeps_secret(self, event):
        issued = _issue(event)
        again = token_service.regenerate(issued.token.id)

        assert again.token.secret == issued.token.secret
        assert again.payload == issued.payload

    def test_update_rejects_secret(self, event):
        issued = _issue(event)
        with pytest.raises(ValidationError):
            token_service.update_token(issued.token.id, {"secret": "AAAAAAAA"})

    def test_delete_keeps_records(self, event, member):
        issued = _issue(event, label="Session A")
        token_id = issued.token.id
        record = checkin_service.check_in_by_token(member.id, issued.token.secret)
        record_id = record.id

        token_service.delete_token(token_id)

        assert db.session.get(AttendanceToken, token_id) is None
        kept = db.session.get(AttendanceRecord, record_id)
        assert kept is not None
        assert kept.token_id is None
        assert kept.token_label == "Session A"
        assert kept.event_id == event.id

    def test_event_delete_deactivates_tokens(self, event):
        first = _issue(event)
        second = _issue(event)

        event_service.delete_event(event.id)

        for issued in (first, second):
            token = db.session.get(AttendanceToken, issued.token.id)
            assert token.is_active is False
            with pytest.raises(InvalidTokenError):
                token_service.validate(token.secret)

    def test_deleted_event_token_cannot_be_reactivated(self, event):
        issued = _issue(event)
        event_service.delete_event(event.id)

        with pytest.raises(ValidationError):
            token_service.update_token(issued.token.id, {"is_active": True})
        assert db.session.get(AttendanceToken, issued.token.id).is_active is False

    def test_deleted_event_token_never_validates(self, event, member):
        issued = _issue(event)
        event_service.delete_event(event.id)

        # flag flipped outside the service layer
        token = db.session.get(AttendanceToken, issued.token.id)
        token.is_active = True
        db.session.commit()

        with pytest.raises(InvalidTokenError):
            checkin_service.check_in_by_token(member.id, token.secret)
        assert db.session.query(AttendanceRecord).count() == 0

    def test_list_filters(self, event):
        _issue(event)
        _issue(event, is_active=False)

        assert token_service.list_tokens(event_id=event.id)["total"] == 2
        active = token_service.list_tokens(event_id=event.id, is_active=True)
        assert active["total"] == 1
        assert active["items"][0]["is_active"] is True
