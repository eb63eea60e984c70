# Overview: Service-layer operations for attendance check-in; encapsulates business logic and database work.

"""
Check-in Engine

WHY: Attendance is recorded either by a member presenting a token (QR scan
or typed code) or by an organizer entering it by hand.

CONCURRENCY:
Duplicate detection is left to the database. Two simultaneous scans of the
same token by the same member both try to INSERT; UNIQUE(person_id, token_id)
lets exactly one commit and the other surfaces as DuplicateCheckInError.
Manual entries are guarded the same way by the partial unique index on
(person_id, event_id) WHERE source = 'manual'.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import (
    AttendanceRecord,
    ATTENDANCE_STATUSES,
    Event,
    Member,
    SOURCE_MANUAL,
    SOURCE_TOKEN,
)
from . import token_service
from .pagination import paginate
from app.time_utils import utcnow
from app.validation import ConflictError, NotFoundError, ValidationError


_UNSET = object()


class DuplicateCheckInError(ConflictError):
    """Person already has a record for this session (token) or event (manual)."""
    code = "DUPLICATE_CHECK_IN"


def _get_live_member(person_id: int) -> Member:
    member = db.session.get(Member, person_id)
    if not member or member.deleted_at is not None:
        raise NotFoundError("Member not found")
    return member


def _get_live_event(event_id: int) -> Event:
    event = db.session.get(Event, event_id)
    if not event or event.deleted_at is not None:
        raise NotFoundError("Event not found")
    return event


def _validate_status(status: str) -> str:
    if not isinstance(status, str) or status not in ATTENDANCE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(sorted(ATTENDANCE_STATUSES))}", "status")
    return status


def _insert(record: AttendanceRecord, duplicate_message: str) -> AttendanceRecord:
    db.session.add(record)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateCheckInError(duplicate_message)
    db.session.commit()
    return record


def check_in_by_token(person_id: int, raw_secret: str | None) -> AttendanceRecord:
    """
    Check a member in with a scanned or typed token.

    Raises:
        InvalidTokenError: unknown, inactive or expired token
        NotFoundError: member missing
        DuplicateCheckInError: member already checked in with this token
    """
    binding = token_service.validate(raw_secret)
    _get_live_member(person_id)

    record = AttendanceRecord(
        person_id=person_id,
        event_id=binding.event_id,
        token_id=binding.token_id,
        token_label=binding.label,
        source=SOURCE_TOKEN,
        status="present",
        check_in_time=utcnow(),
    )
    record = _insert(record, "already checked in for this session")

    current_app.logger.info(
        "Member %s checked in to event %s with token %s",
        person_id, binding.event_id, binding.token_id,
    )
    return record


def check_in_manual(
    person_id: int,
    event_id: int,
    status: str = "present",
    note: str | None = None,
    token_label: str | None = None,
) -> AttendanceRecord:
    """
    Record attendance entered by an organizer.

    At most one manual record exists per (person, event); token check-ins
    for the same event do not count against it.
    """
    _validate_status(status)
    _get_live_member(person_id)
    _get_live_event(event_id)

    record = AttendanceRecord(
        person_id=person_id,
        event_id=event_id,
        token_id=None,
        token_label=token_label,
        source=SOURCE_MANUAL,
        status=status,
        check_in_time=utcnow(),
        note=note,
    )
    return _insert(record, "attendance already recorded for this event")


def get_record(record_id: int) -> AttendanceRecord:
    record = db.session.get(AttendanceRecord, record_id)
    if not record:
        raise NotFoundError("Attendance record not found")
    return record


def update_status(record_id: int, status: str | None = None, note=_UNSET) -> AttendanceRecord:
    """Edit status and/or note. Passing note=None clears it."""
    record = get_record(record_id)

    if status is not None:
        record.status = _validate_status(status)
    if note is not _UNSET:
        record.note = note

    db.session.commit()
    return record


def delete(record_id: int) -> None:
    record = get_record(record_id)
    db.session.delete(record)
    db.session.commit()


def list_records(
    event_id: int | None = None,
    person_id: int | None = None,
    token_id: int | None = None,
    status: str | None = None,
    source: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    query = db.session.query(AttendanceRecord)
    if event_id is not None:
        query = query.filter(AttendanceRecord.event_id == event_id)
    if person_id is not None:
        query = query.filter(AttendanceRecord.person_id == person_id)
    if token_id is not None:
        query = query.filter(AttendanceRecord.token_id == token_id)
    if status:
        query = query.filter(AttendanceRecord.status == _validate_status(status))
    if source:
        query = query.filter(AttendanceRecord.source == source)

    query = query.order_by(AttendanceRecord.check_in_time.desc(), AttendanceRecord.id.desc())
    return paginate(query, page, limit)


def event_summary(event_id: int) -> dict:
    """
    Per-status record counts for one event.

    unique_members counts distinct people with any record, since a member
    may hold one record per session.
    """
    event = _get_live_event(event_id)

    rows = (
        db.session.query(AttendanceRecord.status, db.func.count(AttendanceRecord.id))
        .filter(AttendanceRecord.event_id == event_id)
        .group_by(AttendanceRecord.status)
        .all()
    )
    counts = {status: 0 for status in sorted(ATTENDANCE_STATUSES)}
    for status, count in rows:
        counts[status] = count

    unique_members = (
        db.session.query(db.func.count(db.distinct(AttendanceRecord.person_id)))
        .filter(AttendanceRecord.event_id == event_id)
        .scalar()
    )

    return {
        "event_id": event.id,
        "event_name": event.name,
        "counts": counts,
        "total": sum(counts.values()),
        "unique_members": unique_members or 0,
    }
