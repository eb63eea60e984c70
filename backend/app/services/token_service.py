# Overview: Service-layer operations for attendance tokens; encapsulates business logic and database work.

"""
Attendance Token Store

WHY: Check-in is driven by short codes that attendees scan (QR) or type.
A token binds one event session; its secret must be unambiguous when read
aloud or typed, so the alphabet excludes 0/O and 1/I.

INVARIANTS:
- secret is unique across all token rows (UNIQUE column is the arbiter)
- a token validates only while is_active and expires_at > now
- the QR image and payload are derived on demand, never stored
"""

import base64
import json
import secrets
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

import qrcode
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import AttendanceToken, Event
from .pagination import paginate
from app.time_utils import utcnow
from app.validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    validate_payload,
)


TOKEN_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
TOKEN_LENGTH = 8
MAX_GENERATION_ATTEMPTS = 10

TOKEN_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"label", "expires_at", "is_active"},
)


class InvalidTokenError(ValidationError):
    """Token is unknown, inactive or expired."""
    code = "INVALID_TOKEN"

    def __init__(self, message: str = "Invalid or expired attendance token"):
        super().__init__(message, "token")


@dataclass(frozen=True)
class TokenBinding:
    """What a validated secret resolves to."""
    token_id: int
    event_id: int
    label: str | None


@dataclass(frozen=True)
class IssuedToken:
    token: AttendanceToken
    payload: str
    qr_code: str

    def to_dict(self) -> dict:
        data = self.token.to_dict()
        data["payload"] = self.payload
        data["qr_code"] = self.qr_code
        return data


def generate_secret() -> str:
    """8 characters drawn with a CSPRNG from the unambiguous alphabet."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def build_payload(token: AttendanceToken) -> str:
    """Content encoded in the QR image; scanners post the token field back."""
    return json.dumps({"token": token.secret, "event_id": token.event_id}, separators=(",", ":"))


def render_qr(payload: str) -> str:
    """Render payload as a PNG data URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=current_app.config.get("ATTENDANCE_QR_BOX_SIZE", 10),
        border=current_app.config.get("ATTENDANCE_QR_BORDER", 2),
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")

    encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{encoded}"


def _issued(token: AttendanceToken) -> IssuedToken:
    payload = build_payload(token)
    return IssuedToken(token=token, payload=payload, qr_code=render_qr(payload))


def _get_live_event(event_id: int) -> Event:
    event = db.session.get(Event, event_id)
    if not event or event.deleted_at is not None:
        raise NotFoundError("Event not found")
    return event


def get_token(token_id: int) -> AttendanceToken:
    token = db.session.get(AttendanceToken, token_id)
    if not token:
        raise NotFoundError("Attendance token not found")
    return token


def issue_token(
    event_id: int,
    expires_at: datetime,
    label: str | None = None,
    is_active: bool = True,
) -> IssuedToken:
    """
    Mint a new token for an event and render its QR code.

    Secrets are retried until no existing row holds them. A concurrent insert
    that wins the same secret between the check and the commit is caught by
    the UNIQUE constraint and retried as well.

    Raises:
        NotFoundError: event missing or deleted
        ValidationError: expires_at missing, label too long
    """
    _get_live_event(event_id)

    if not isinstance(expires_at, datetime):
        raise ValidationError("expires_at must be a datetime", "expires_at")
    if label is not None:
        label = str(label).strip() or None
        if label and len(label) > 255:
            raise ValidationError("label exceeds max length 255", "label")

    for _ in range(MAX_GENERATION_ATTEMPTS):
        secret = generate_secret()
        if db.session.query(AttendanceToken.id).filter_by(secret=secret).first():
            continue

        token = AttendanceToken(
            event_id=event_id,
            secret=secret,
            label=label,
            expires_at=expires_at,
            is_active=bool(is_active),
        )
        db.session.add(token)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            continue

        current_app.logger.info("Attendance token %s issued for event %s", token.id, event_id)
        return _issued(token)

    raise RuntimeError("Could not generate a unique attendance token")


def regenerate(token_id: int) -> IssuedToken:
    """Re-derive payload and QR image. Secret and validity window are unchanged."""
    return _issued(get_token(token_id))


def validate(secret: str | None) -> TokenBinding:
    """
    Resolve a raw secret (as scanned or typed) to its event binding.

    Input is trimmed and upper-cased. Raises InvalidTokenError when no
    active, unexpired token of a live event matches.
    """
    if secret is not None and not isinstance(secret, str):
        raise InvalidTokenError("Attendance token must be a string")
    normalized = (secret or "").strip().upper()
    if not normalized:
        raise InvalidTokenError("Attendance token is required")

    token = db.session.query(AttendanceToken).join(Event).filter(
        Event.deleted_at.is_(None),
        AttendanceToken.secret == normalized,
        AttendanceToken.is_active.is_(True),
        AttendanceToken.expires_at > utcnow(),
    ).first()

    if not token:
        raise InvalidTokenError()

    return TokenBinding(token_id=token.id, event_id=token.event_id, label=token.label)


def update_token(token_id: int, payload: dict) -> AttendanceToken:
    """Patch label / expires_at / is_active. Anything else is rejected."""
    token = get_token(token_id)
    patch = validate_payload(model=AttendanceToken, payload=payload, policy=TOKEN_UPDATE_POLICY, partial=True)

    if patch.get("is_active") and token.event.deleted_at is not None:
        raise ValidationError("Cannot activate a token of a deleted event", "is_active")

    for key, value in patch.items():
        setattr(token, key, value)

    db.session.commit()
    return token


def delete_token(token_id: int) -> None:
    """
    Hard delete. Records that used the token survive with token_id = NULL;
    their token_label keeps the session name.
    """
    token = get_token(token_id)
    for record in token.records:
        record.token_id = None
    db.session.delete(token)
    db.session.commit()
    current_app.logger.info("Attendance token %s deleted", token_id)


def deactivate_event_tokens(event_id: int) -> int:
    """Flag every active token of an event inactive. Caller commits."""
    return db.session.query(AttendanceToken).filter(
        AttendanceToken.event_id == event_id,
        AttendanceToken.is_active.is_(True),
    ).update({AttendanceToken.is_active: False}, synchronize_session="fetch")


def list_tokens(
    event_id: int | None = None,
    is_active: bool | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    query = db.session.query(AttendanceToken)
    if event_id is not None:
        query = query.filter(AttendanceToken.event_id == event_id)
    if is_active is not None:
        query = query.filter(AttendanceToken.is_active.is_(is_active))

    query = query.order_by(AttendanceToken.created_at.desc(), AttendanceToken.id.desc())
    return paginate(query, page, limit)
