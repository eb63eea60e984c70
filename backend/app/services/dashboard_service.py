# Overview: Read-only dashboard aggregates across members, events, attendance, cash and archives.

"""
Dashboard Read Model

WHY: The landing page needs one round trip for organization-wide numbers.
Everything here is a plain aggregate over live rows; nothing is cached or
stored, so the figures are as fresh as the last committed write.

WINDOWS (UTC):
- today's attendance: check_in_time in [00:00 today, 00:00 tomorrow)
- attendance by status: check_in_time on or after the 1st of this month
"""

from __future__ import annotations

from datetime import datetime, timedelta

from ..extensions import db
from ..models import (
    ATTENDANCE_STATUSES,
    EVENT_STATUSES,
    Archive,
    AttendanceRecord,
    Department,
    Event,
    Member,
)
from . import ledger_service
from app.time_utils import to_utc_z, utcnow


RECENT_LIMIT = 5


def _count_live(model) -> int:
    return db.session.query(db.func.count(model.id)).filter(model.deleted_at.is_(None)).scalar() or 0


def _status_counts(column, statuses, *filters) -> dict:
    rows = (
        db.session.query(column, db.func.count())
        .filter(*filters)
        .group_by(column)
        .all()
    )
    counts = {status: 0 for status in sorted(statuses)}
    for status, count in rows:
        if status in counts:
            counts[status] = count
    return counts


def _recent_events() -> list[dict]:
    events = (
        db.session.query(Event)
        .filter(Event.deleted_at.is_(None))
        .order_by(Event.start_at.desc(), Event.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    return [
        {
            "id": e.id,
            "name": e.name,
            "start_at": to_utc_z(e.start_at),
            "status": e.status,
            "event_type": e.event_type,
        }
        for e in events
    ]


def _recent_attendance() -> list[dict]:
    rows = (
        db.session.query(AttendanceRecord, Member.name, Event.name)
        .outerjoin(Member, AttendanceRecord.person_id == Member.id)
        .outerjoin(Event, AttendanceRecord.event_id == Event.id)
        .order_by(AttendanceRecord.check_in_time.desc(), AttendanceRecord.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    return [
        {
            "id": record.id,
            "person_name": person_name,
            "event_name": event_name,
            "status": record.status,
            "check_in_time": to_utc_z(record.check_in_time),
        }
        for record, person_name, event_name in rows
    ]


def get_dashboard_stats(now: datetime | None = None) -> dict:
    """
    Snapshot of organization-wide figures.

    The active cash period's balance is read through ledger_service.get_balance
    so the dashboard and the ledger never disagree.
    """
    now = now or utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)
    month_start = today.replace(day=1)

    today_attendance = (
        db.session.query(db.func.count(AttendanceRecord.id))
        .filter(AttendanceRecord.check_in_time >= today, AttendanceRecord.check_in_time < tomorrow)
        .scalar()
    ) or 0

    active = ledger_service.get_active_period()
    cash_balance = ledger_service.get_balance(active.id).to_dict()["closing_balance"] if active else "0.00"

    return {
        "stats": {
            "total_members": _count_live(Member),
            "total_events": _count_live(Event),
            "today_attendance": today_attendance,
            "total_departments": _count_live(Department),
            "total_archives": _count_live(Archive),
            "cash_balance": cash_balance,
            "cash_period": active.label if active else None,
        },
        "events_by_status": _status_counts(Event.status, EVENT_STATUSES, Event.deleted_at.is_(None)),
        "attendance_by_status": _status_counts(
            AttendanceRecord.status,
            ATTENDANCE_STATUSES,
            AttendanceRecord.check_in_time >= month_start,
        ),
        "recent_events": _recent_events(),
        "recent_attendance": _recent_attendance(),
    }
