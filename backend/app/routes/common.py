# Overview: Shared request parsing and error mapping for API routes.

from flask import jsonify, request

from app.time_utils import parse_iso_date, parse_iso_datetime
from app.validation import ConflictError, NotFoundError, ValidationError


_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
)


def error_response(e: Exception):
    """Map a typed service error to its JSON body and HTTP status."""
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(e, cls):
            return jsonify(e.to_dict()), status
    raise e


def page_args() -> tuple[int | None, int | None]:
    return request.args.get("page", type=int), request.args.get("limit", type=int)


def bool_arg(name: str) -> bool | None:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValidationError(f"{name} must be true or false", name)


def date_arg(name: str):
    try:
        return parse_iso_date(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 date", name)


def datetime_arg(name: str):
    try:
        return parse_iso_datetime(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 datetime", name)


def require_int(data: dict, name: str) -> int:
    value = data.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        raise ValidationError(f"{name} must be an integer", name)
    return value
