from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z


ATTENDANCE_STATUSES = {"present", "excused", "sick", "absent"}

SOURCE_TOKEN = "token"
SOURCE_MANUAL = "manual"


class AttendanceToken(db.Model):
    """
    Short-lived, human-enterable code bound to one event session.

    INVARIANTS:
    - secret is globally unique (DB constraint), 8 uppercase characters
    - usable only while is_active and expires_at > now
    - only label, expires_at and is_active change after creation

    Hard-deleted. Records that referenced the token keep their row with
    token_id set to NULL and token_label preserved.
    """
    __tablename__ = "attendance_tokens"
    __table_args__ = (
        db.Index("ix_attendance_tokens_event_active", "event_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    secret = db.Column(db.String(16), nullable=False, unique=True, index=True)

    # Session label shown to attendees, e.g. "Session 1", "Day 2"
    label = db.Column(db.String(255), nullable=True)

    expires_at = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    event = db.relationship("Event", backref=db.backref("attendance_tokens", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "event_name": self.event.name if self.event else None,
            "token": self.secret,
            "label": self.label,
            "expires_at": to_utc_z(self.expires_at),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class AttendanceRecord(db.Model):
    """
    One member's attendance at an event.

    source = "token": created by check-in; UNIQUE(person_id, token_id) allows
    one check-in per person per session.
    source = "manual": entered by an organizer; the partial unique index
    allows one manual record per person per event.

    Hard-deleted. Only status and note are editable.
    """
    __tablename__ = "attendance_records"
    __table_args__ = (
        db.UniqueConstraint("person_id", "token_id", name="uq_attendance_person_token"),
        db.Index(
            "uq_attendance_manual_person_event",
            "person_id",
            "event_id",
            unique=True,
            sqlite_where=db.text("source = 'manual'"),
            postgresql_where=db.text("source = 'manual'"),
        ),
        db.Index("ix_attendance_event_status", "event_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    person_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    token_id = db.Column(
        db.Integer,
        db.ForeignKey("attendance_tokens.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Copied from the token at check-in so it survives token deletion
    token_label = db.Column(db.String(255), nullable=True)

    source = db.Column(db.String(16), nullable=False, default=SOURCE_TOKEN)

    # present, excused, sick, absent
    status = db.Column(db.String(16), nullable=False, default="present")

    check_in_time = db.Column(db.DateTime, nullable=False)
    note = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    person = db.relationship("Member", backref=db.backref("attendance_records", lazy=True))
    event = db.relationship("Event", backref=db.backref("attendance_records", lazy=True))
    token = db.relationship("AttendanceToken", backref=db.backref("records", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "person_id": self.person_id,
            "person_name": self.person.name if self.person else None,
            "student_number": self.person.student_number if self.person else None,
            "event_id": self.event_id,
            "event_name": self.event.name if self.event else None,
            "token_id": self.token_id,
            "token_label": self.token_label,
            "source": self.source,
            "status": self.status,
            "check_in_time": to_utc_z(self.check_in_time),
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
