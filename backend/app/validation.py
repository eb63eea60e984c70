# Overview: Typed request errors and the column-driven payload validator used by every service.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from app.time_utils import parse_iso_date, parse_iso_datetime


# Numeric(15, 2) upper bound
MAX_AMOUNT = Decimal("9999999999999.99")
CENT = Decimal("0.01")


class ValidationError(ValueError):
    """Bad client input; answered with 400."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        body = {"error": str(self), "code": self.code}
        if self.field:
            body["errors"] = [{"field": self.field, "message": str(self)}]
        return body


class ConflictError(ValueError):
    """Request collides with existing state (duplicate email, duplicate check-in); 409."""
    code = "CONFLICT"

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class NotFoundError(LookupError):
    """Referenced row is missing or soft-deleted; 404."""
    code = "NOT_FOUND"

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Per-model write rules.

    writable_fields is the allowlist; anything else in a payload is rejected.
    required_on_create only applies when partial=False. choices pins string
    columns to a closed set.
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    choices: dict[str, set[str]] | None = None


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """JSON number or numeric string -> non-negative Decimal with two places."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field)
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number", field)
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number", field)
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0", field)
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} exceeds {MAX_AMOUNT}", field)
    return amount.quantize(CENT)


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer", key)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal", key)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be an integer", key)

    text = value.strip()
    # "1e3" and "12.0" parse elsewhere but are not ids
    if "e" in text.lower() or "." in text:
        raise ValidationError(f"{key} must be a plain integer", key)
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"{key} must be an integer", key)


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{key} must be a boolean", key)


def _parse_datetime(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a datetime", key)
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{key} must be an ISO-8601 datetime", key)
    return parsed


def _parse_date(key: str, value: Any) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a date", key)
    try:
        parsed = parse_iso_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{key} must be an ISO-8601 date", key)
    return parsed


def _coerce(column, value: Any):
    """Convert one non-null JSON value to the Python type of its column."""
    coltype = column.type
    key = column.key

    if isinstance(coltype, Integer):
        return _parse_int(key, value)
    if isinstance(coltype, Numeric):
        return parse_amount(value, key)
    if isinstance(coltype, Boolean):
        return _parse_bool(key, value)
    if isinstance(coltype, DateTime):
        return _parse_datetime(key, value)
    if isinstance(coltype, Date):
        return _parse_date(key, value)
    if isinstance(coltype, (String, Text)):
        return str(value).strip()
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Turn a JSON body into a dict of column values safe to setattr on model.

    Keys outside the policy allowlist are errors, not silently dropped.
    Values are coerced by column type, NULLs checked against nullability,
    strings trimmed and length-checked. With partial=False the policy's
    required_on_create fields must be present and non-empty.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(
            name for name in (policy.required_on_create or set())
            if payload.get(name) in (None, "")
        )
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing[0])

    columns = {c.key: c for c in model.__mapper__.columns}
    choices = policy.choices or {}

    for key in payload:
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}", key)
        if key not in columns:
            raise ValidationError(f"Unknown field: {key}", key)

    cleaned: dict = {}
    for key, raw in payload.items():
        column = columns[key]

        if raw is None:
            if not column.nullable:
                raise ValidationError(f"{key} cannot be null", key)
            cleaned[key] = None
            continue

        value = _coerce(column, raw)

        if isinstance(value, str):
            if value == "" and not column.nullable:
                raise ValidationError(f"{key} cannot be blank", key)
            length = getattr(column.type, "length", None)
            if length and len(value) > length:
                raise ValidationError(f"{key} exceeds max length {length}", key)

        if key in choices and value not in choices[key]:
            raise ValidationError(f"{key} must be one of: {', '.join(sorted(choices[key]))}", key)

        cleaned[key] = value

    return cleaned


def enforce_date_range(start, end, *, start_field: str = "start_date", end_field: str = "end_date") -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError(f"{start_field} must be on or before {end_field}", start_field)
