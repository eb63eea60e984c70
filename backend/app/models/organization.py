from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z, to_iso_date


class Department(db.Model):
    """Organizational unit (e.g. "Education", "Public Relations")."""
    __tablename__ = "departments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    logo_ref = db.Column(db.Text, nullable=True)

    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "logo_ref": self.logo_ref,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class LeadershipTerm(db.Model):
    """
    A member holding a position in a department for one organizational period.

    period_label is free text such as "2024/2025".
    """
    __tablename__ = "leadership_terms"
    __table_args__ = (
        db.Index("ix_leadership_terms_period", "period_label"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    person_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=False, index=True)
    position = db.Column(db.String(100), nullable=False)
    period_label = db.Column(db.String(20), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    person = db.relationship("Member", backref=db.backref("leadership_terms", lazy=True))
    department = db.relationship("Department", backref=db.backref("leadership_terms", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "person_id": self.person_id,
            "person_name": self.person.name if self.person else None,
            "department_id": self.department_id,
            "department_name": self.department.name if self.department else None,
            "position": self.position,
            "period_label": self.period_label,
            "start_date": to_iso_date(self.start_date),
            "end_date": to_iso_date(self.end_date),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Archive(db.Model):
    """
    Archived document metadata.

    file_ref is the opaque reference returned by the file storage
    collaborator; contents are never inspected here.
    """
    __tablename__ = "archives"
    __table_args__ = (
        db.Index("ix_archives_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True)
    file_ref = db.Column(db.Text, nullable=False)
    file_type = db.Column(db.String(50), nullable=True)
    file_size = db.Column(db.Integer, nullable=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=True, index=True)
    uploaded_by = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=True)

    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    department = db.relationship("Department")
    uploader = db.relationship("Member")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "file_ref": self.file_ref,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "department_id": self.department_id,
            "uploaded_by": self.uploaded_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
