# Overview: Service-layer operations for member sessions; encapsulates business logic and database work.

"""
Member Sessions

WHY: Every API call after login carries an opaque bearer token. Only a
SHA-256 digest of it is stored, so a leaked database cannot be replayed.

LIFETIME:
- a session ends 24h after login no matter what (SESSION_ABSOLUTE_TIMEOUT)
- 2h without a request ends it early (SESSION_IDLE_TIMEOUT)
- logout, a password change and deactivating the member revoke it
- revoked or expired rows are purged after SESSION_RETENTION
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from ..extensions import db
from ..models import Member, SessionToken
from app.time_utils import utcnow
from app.validation import NotFoundError


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)
SESSION_RETENTION = timedelta(days=30)


@dataclass
class SessionContext:
    """Who is calling, and through which session."""
    member: Member
    session: SessionToken


def generate_token() -> str:
    """64 hex characters handed to the client once; never persisted."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Lookup key for a bearer token. A plain digest suffices for 256-bit random input."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _find_open(token: str) -> SessionToken | None:
    return db.session.query(SessionToken).filter(
        SessionToken.token_hash == hash_token(token),
        SessionToken.is_revoked.is_(False),
    ).first()


def _revoke(session: SessionToken, reason: str, now) -> None:
    session.is_revoked = True
    session.revoked_at = now
    session.revoked_reason = reason


def _member_usable(member: Member | None) -> bool:
    return member is not None and member.is_active and member.deleted_at is None


def create_session(
    member_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Open a session for a member.

    Returns (row, plaintext token). The caller hands the plaintext to the
    client; it cannot be recovered later.
    """
    member = db.session.get(Member, member_id)
    if not member or member.deleted_at is not None:
        raise NotFoundError("Member not found")

    token = generate_token()
    now = utcnow()
    session = SessionToken(
        member_id=member_id,
        token_hash=hash_token(token),
        created_at=now,
        last_used_at=now,
        expires_at=now + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    db.session.commit()
    return session, token


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token, or None when it cannot be used.

    Idle sessions and sessions of members that were deactivated or deleted
    are revoked on the spot. A successful lookup refreshes last_used_at.
    """
    session = _find_open(token)
    if not session:
        return None

    now = utcnow()
    if session.expires_at < now:
        return None

    if now - session.last_used_at > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout", now)
        db.session.commit()
        return None

    member = session.member
    if not _member_usable(member):
        _revoke(session, "Member account deactivated", now)
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()
    return SessionContext(member=member, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """False when the token matches no open session."""
    session = _find_open(token)
    if not session:
        return False

    _revoke(session, reason, utcnow())
    db.session.commit()
    return True


def revoke_all_member_sessions(
    member_id: int,
    reason: str = "Revoke all sessions",
    except_session_id: int | None = None,
) -> int:
    """
    Close every open session of a member, optionally sparing one.

    Returns how many were closed.
    """
    query = db.session.query(SessionToken).filter(
        SessionToken.member_id == member_id,
        SessionToken.is_revoked.is_(False),
    )
    if except_session_id is not None:
        query = query.filter(SessionToken.id != except_session_id)

    now = utcnow()
    sessions = query.all()
    for session in sessions:
        _revoke(session, reason, now)

    db.session.commit()
    return len(sessions)


def cleanup_expired_sessions() -> int:
    """Purge expired or revoked sessions created more than SESSION_RETENTION ago."""
    now = utcnow()
    deleted = db.session.query(SessionToken).filter(
        db.or_(SessionToken.expires_at < now, SessionToken.is_revoked.is_(True)),
        SessionToken.created_at < now - SESSION_RETENTION,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
