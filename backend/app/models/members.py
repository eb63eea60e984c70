from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z


class Member(db.Model):
    """
    Member accounts: the people the organization tracks and who log in.

    WHY: Every check-in, transaction and report is attributed to a member.
    The member's role_name selects a static capability set (app.permissions).

    Soft-deleted via deleted_at; email stays reserved after deletion.
    """
    __tablename__ = "members"
    __table_args__ = (
        db.Index("ix_members_role_name", "role_name"),
        db.Index("ix_members_department_id", "department_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    name = db.Column(db.String(255), nullable=False)
    student_number = db.Column(db.String(20), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    faculty = db.Column(db.String(100), nullable=True)
    study_program = db.Column(db.String(100), nullable=True)
    cohort = db.Column(db.String(10), nullable=True)

    # Reference handed back by the file storage collaborator
    avatar_ref = db.Column(db.Text, nullable=True)

    # One of app.permissions.ROLE_NAMES
    role_name = db.Column(db.String(32), nullable=False, default="member")

    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    last_login_at = db.Column(db.DateTime, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    department = db.relationship("Department", backref=db.backref("members", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "student_number": self.student_number,
            "phone": self.phone,
            "faculty": self.faculty,
            "study_program": self.study_program,
            "cohort": self.cohort,
            "avatar_ref": self.avatar_ref,
            "role_name": self.role_name,
            "department_id": self.department_id,
            "is_active": self.is_active,
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SessionToken(db.Model):
    """
    Bearer session for an authenticated member.

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256)
    - 24-hour absolute timeout
    - 2-hour idle timeout
    - Revocable on logout or deactivation
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_member_active", "member_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Session metadata
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    user_agent = db.Column(db.String(255), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime, nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    member = db.relationship("Member", backref=db.backref("sessions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "member_id": self.member_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
