from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z


EVENT_STATUSES = {"upcoming", "ongoing", "completed", "cancelled"}


class Event(db.Model):
    """
    An organization event (meeting, training, gathering).

    Attendance tokens and records hang off events. Soft-deleted; deleting an
    event deactivates its tokens (see event_service.delete_event).
    """
    __tablename__ = "events"
    __table_args__ = (
        db.Index("ix_events_status_start", "status", "start_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(255), nullable=True)
    start_at = db.Column(db.DateTime, nullable=False)
    end_at = db.Column(db.DateTime, nullable=True)
    event_type = db.Column(db.String(50), nullable=True)

    # upcoming, ongoing, completed, cancelled
    status = db.Column(db.String(20), nullable=False, default="upcoming")

    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=True, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=True)

    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    department = db.relationship("Department", backref=db.backref("events", lazy=True))
    creator = db.relationship("Member")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "start_at": to_utc_z(self.start_at),
            "end_at": to_utc_z(self.end_at) if self.end_at else None,
            "event_type": self.event_type,
            "status": self.status,
            "department_id": self.department_id,
            "department_name": self.department.name if self.department else None,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
