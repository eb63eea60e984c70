"""
Check-in engine tests.

Verifies:
- Token check-in creates a present record bound to the token's event
- The same member cannot check in twice with the same token
- One member may hold one record per session (token) of an event
- Manual entries are unique per (member, event) and independent of scans
- Status edits and deletion
- Per-event summary counts
"""

from datetime import timedelta

import pytest

from app.models import SOURCE_MANUAL, SOURCE_TOKEN
from app.services import checkin_service, token_service
from app.services.checkin_service import DuplicateCheckInError
from app.services.token_service import InvalidTokenError
from app.time_utils import utcnow
from app.validation import NotFoundError, ValidationError


def _secret(event, label=None):
    issued = token_service.issue_token(event.id, utcnow() + timedelta(hours=2), label=label)
    return issued.token.secret


class TestTokenCheckIn:

    def test_scan_creates_present_record(self, event, member):
        secret = _secret(event, label="Morning")

        record = checkin_service.check_in_by_token(member.id, secret.lower())

        assert record.person_id == member.id
        assert record.event_id == event.id
        assert record.status == "present"
        assert record.source == SOURCE_TOKEN
        assert record.token_label == "Morning"
        assert record.check_in_time is not None

    def test_second_scan_is_duplicate(self, event, member):
        secret = _secret(event)
        checkin_service.check_in_by_token(member.id, secret)

        with pytest.raises(DuplicateCheckInError) as exc:
            checkin_service.check_in_by_token(member.id, secret)
        assert exc.value.to_dict()["code"] == "DUPLICATE_CHECK_IN"

        assert checkin_service.list_records(person_id=member.id)["total"] == 1

    def test_two_sessions_same_event(self, event, member):
        morning = _secret(event, label="Morning")
        afternoon = _secret(event, label="Afternoon")

        checkin_service.check_in_by_token(member.id, morning)
        checkin_service.check_in_by_token(member.id, afternoon)

        assert checkin_service.list_records(event_id=event.id, person_id=member.id)["total"] == 2

    def test_different_members_same_token(self, event, member, other_member):
        secret = _secret(event)
        checkin_service.check_in_by_token(member.id, secret)
        checkin_service.check_in_by_token(other_member.id, secret)

        assert checkin_service.list_records(event_id=event.id)["total"] == 2

    def test_invalid_token(self, event, member):
        with pytest.raises(InvalidTokenError):
            checkin_service.check_in_by_token(member.id, "QQQQQQQQ")

    def test_expired_token(self, event, member):
        issued = token_service.issue_token(event.id, utcnow() - timedelta(seconds=1))
        with pytest.raises(InvalidTokenError):
            checkin_service.check_in_by_token(member.id, issued.token.secret)

    def test_unknown_member(self, event):
        secret = _secret(event)
        with pytest.raises(NotFoundError):
            checkin_service.check_in_by_token(9999, secret)


class TestManualCheckIn:

    def test_manual_record(self, event, member):
        record = checkin_service.check_in_manual(member.id, event.id, status="sick", note="flu")

        assert record.source == SOURCE_MANUAL
        assert record.status == "sick"
        assert record.note == "flu"
        assert record.token_id is None

    def test_manual_duplicate(self, event, member):
        checkin_service.check_in_manual(member.id, event.id)
        with pytest.raises(DuplicateCheckInError):
            checkin_service.check_in_manual(member.id, event.id, status="excused")

    def test_manual_alongside_scan(self, event, member):
        checkin_service.check_in_by_token(member.id, _secret(event))
        record = checkin_service.check_in_manual(member.id, event.id, status="present")

        assert record.source == SOURCE_MANUAL
        assert checkin_service.list_records(event_id=event.id)["total"] == 2

    def test_manual_bad_status(self, event, member):
        with pytest.raises(ValidationError):
            checkin_service.check_in_manual(member.id, event.id, status="late")

    def test_manual_unknown_event(self, member):
        with pytest.raises(NotFoundError):
            checkin_service.check_in_manual(member.id, 9999)


class TestEditAndSummary:

    def test_update_status_and_note(self, event, member):
        record = checkin_service.check_in_manual(member.id, event.id, note="late bus")

        updated = checkin_service.update_status(record.id, status="excused")
        assert updated.status == "excused"
        assert updated.note == "late bus"

        cleared = checkin_service.update_status(record.id, note=None)
        assert cleared.status == "excused"
        assert cleared.note is None

    def test_update_rejects_unknown_status(self, event, member):
        record = checkin_service.check_in_manual(member.id, event.id)
        with pytest.raises(ValidationError):
            checkin_service.update_status(record.id, status="gone")

    def test_delete_record(self, event, member):
        record = checkin_service.check_in_manual(member.id, event.id)
        record_id = record.id
        checkin_service.delete(record_id)

        with pytest.raises(NotFoundError):
            checkin_service.get_record(record_id)

        # the manual slot is free again
        checkin_service.check_in_manual(member.id, event.id)

    def test_summary(self, event, member, other_member, organizer):
        checkin_service.check_in_by_token(member.id, _secret(event, label="A"))
        checkin_service.check_in_by_token(member.id, _secret(event, label="B"))
        checkin_service.check_in_manual(other_member.id, event.id, status="sick")
        checkin_service.check_in_manual(organizer.id, event.id, status="absent")

        summary = checkin_service.event_summary(event.id)

        assert summary["event_id"] == event.id
        assert summary["event_name"] == "General Assembly"
        assert summary["counts"] == {"absent": 1, "excused": 0, "present": 2, "sick": 1}
        assert summary["total"] == 4
        assert summary["unique_members"] == 3
