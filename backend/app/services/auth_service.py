# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Member Authentication Service

WHY: Every check-in, cash transaction and report is attributed to a member.
Uses bcrypt for password hashing and validates password strength.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters, mixed case, at least one digit
- Session tokens managed separately (see session_service.py)
- Soft-deleted or deactivated members cannot authenticate
"""

import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import Member
from ..permissions import validate_role_name, ROLE_MEMBER
from app.time_utils import utcnow
from app.validation import ConflictError, ValidationError


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""

    def __init__(self, message: str):
        super().__init__(message, "password")


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing. The cost factor
    comes from app config so tests can run with a cheap one.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A malformed stored hash is treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_email(email: str) -> str:
    if not isinstance(email, str) or "@" not in email:
        raise ValidationError("email must be a valid address", "email")
    return email.strip().lower()


def create_member(
    email: str,
    password: str,
    name: str,
    role_name: str = ROLE_MEMBER,
    **profile,
) -> Member:
    """
    Create new member with bcrypt password hashing.

    Email is unique across all members, including soft-deleted ones.

    Raises:
        ValidationError: bad email, weak password, unknown role
        ConflictError: email already registered
    """
    email = normalize_email(email)
    if not name or not str(name).strip():
        raise ValidationError("name is required", "name")
    if not validate_role_name(role_name):
        raise ValidationError(f"Unknown role: {role_name}", "role_name")

    existing = db.session.query(Member).filter(Member.email == email).first()
    if existing:
        raise ConflictError("Email already registered")

    member = Member(
        email=email,
        password_hash=hash_password(password),
        name=str(name).strip(),
        role_name=role_name,
        **profile,
    )

    db.session.add(member)
    db.session.commit()
    return member


def authenticate(email: str, password: str) -> Member | None:
    """
    Authenticate member with email and password.

    Returns Member if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.

    WHY: Central authentication function. All login flows go through here.
    """
    if not email or not password:
        return None

    member = db.session.query(Member).filter(
        Member.email == email.strip().lower(),
        Member.is_active.is_(True),
        Member.deleted_at.is_(None),
    ).first()

    if not member:
        return None

    if verify_password(password, member.password_hash):
        member.last_login_at = utcnow()
        db.session.commit()
        return member

    return None


def change_password(member: Member, current_password: str, new_password: str) -> None:
    """
    Change a member's password after re-verifying the current one.

    Callers are expected to revoke the member's other sessions afterwards.
    """
    if not verify_password(current_password or "", member.password_hash):
        raise ValidationError("Current password is incorrect", "current_password")
    member.password_hash = hash_password(new_password)
    db.session.commit()
