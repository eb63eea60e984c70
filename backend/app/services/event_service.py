# Overview: Service-layer operations for events; encapsulates business logic and database work.

"""
Events

Soft-deleting an event deactivates all of its attendance tokens in the same
transaction so nobody can check in to a deleted event. Existing attendance
records are kept.
"""

from flask import current_app

from ..extensions import db
from ..models import Department, Event, EVENT_STATUSES
from . import token_service
from .pagination import paginate
from app.time_utils import utcnow
from app.validation import ModelValidationPolicy, NotFoundError, ValidationError, validate_payload


EVENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "location", "start_at", "end_at", "event_type", "status", "department_id"},
    required_on_create={"name", "start_at"},
    choices={"status": EVENT_STATUSES},
)


def get_event(event_id: int) -> Event:
    event = db.session.get(Event, event_id)
    if not event or event.deleted_at is not None:
        raise NotFoundError("Event not found")
    return event


def _check_patch(patch: dict, start_at=None, end_at=None) -> None:
    department_id = patch.get("department_id")
    if department_id is not None:
        department = db.session.get(Department, department_id)
        if not department or department.deleted_at is not None:
            raise ValidationError("Department not found", "department_id")

    start_at = patch.get("start_at", start_at)
    end_at = patch.get("end_at", end_at)
    if start_at is not None and end_at is not None and end_at < start_at:
        raise ValidationError("end_at must not be before start_at", "end_at")


def create_event(payload: dict, created_by: int | None = None) -> Event:
    patch = validate_payload(model=Event, payload=payload, policy=EVENT_POLICY, partial=False)
    _check_patch(patch)

    event = Event(created_by=created_by, **patch)
    db.session.add(event)
    db.session.commit()
    return event


def update_event(event_id: int, payload: dict) -> Event:
    event = get_event(event_id)
    patch = validate_payload(model=Event, payload=payload, policy=EVENT_POLICY, partial=True)
    _check_patch(patch, event.start_at, event.end_at)

    for key, value in patch.items():
        setattr(event, key, value)
    db.session.commit()
    return event


def delete_event(event_id: int) -> None:
    event = get_event(event_id)
    event.deleted_at = utcnow()
    deactivated = token_service.deactivate_event_tokens(event.id)
    db.session.commit()
    current_app.logger.info("Event %s deleted; %s attendance tokens deactivated", event_id, deactivated)


def list_events(
    search: str | None = None,
    status: str | None = None,
    department_id: int | None = None,
    start_from=None,
    start_to=None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    query = db.session.query(Event).filter(Event.deleted_at.is_(None))
    if search:
        query = query.filter(Event.name.ilike(f"%{search}%"))
    if status:
        if status not in EVENT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(sorted(EVENT_STATUSES))}", "status")
        query = query.filter(Event.status == status)
    if department_id is not None:
        query = query.filter(Event.department_id == department_id)
    if start_from is not None:
        query = query.filter(Event.start_at >= start_from)
    if start_to is not None:
        query = query.filter(Event.start_at <= start_to)

    query = query.order_by(Event.start_at.desc(), Event.id.desc())
    return paginate(query, page, limit)
