# Overview: Flask API routes for attendance token operations; parses input and returns JSON responses.

"""
Attendance Token Routes

SECURITY:
- Listing and reading tokens requires MANAGE_ATTENDANCE_TOKENS or VIEW_ATTENDANCE.
- Issuing, editing and re-rendering tokens requires MANAGE_ATTENDANCE_TOKENS.
- Deleting a token requires DELETE_ATTENDANCE_TOKENS.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_any_permission, require_auth, require_permission
from ..extensions import db
from ..services import token_service
from app.time_utils import parse_iso_datetime
from app.validation import ValidationError, NotFoundError
from .common import bool_arg, error_response, page_args, require_int


attendance_tokens_bp = Blueprint("attendance_tokens", __name__, url_prefix="/api/attendance-tokens")


@attendance_tokens_bp.get("")
@require_auth
@require_any_permission("MANAGE_ATTENDANCE_TOKENS", "VIEW_ATTENDANCE")
def list_tokens_route():
    page, limit = page_args()
    try:
        result = token_service.list_tokens(
            event_id=request.args.get("event_id", type=int),
            is_active=bool_arg("is_active"),
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        return error_response(e)
    return jsonify(result)


@attendance_tokens_bp.get("/<int:token_id>")
@require_auth
@require_any_permission("MANAGE_ATTENDANCE_TOKENS", "VIEW_ATTENDANCE")
def get_token_route(token_id: int):
    try:
        token = token_service.get_token(token_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"token": token.to_dict()})


@attendance_tokens_bp.post("")
@require_auth
@require_permission("MANAGE_ATTENDANCE_TOKENS")
def issue_token_route():
    """
    Issue a token for an event session.

    Body: {event_id, expires_at (ISO-8601), label?, is_active?}
    Returns the token with its QR payload and PNG data URL.
    """
    data = request.get_json(silent=True) or {}

    try:
        event_id = require_int(data, "event_id")
        try:
            expires_at = parse_iso_datetime(data.get("expires_at"))
        except (TypeError, ValueError, AttributeError):
            raise ValidationError("expires_at must be an ISO-8601 datetime", "expires_at")
        if expires_at is None:
            raise ValidationError("expires_at is required", "expires_at")

        issued = token_service.issue_token(
            event_id=event_id,
            expires_at=expires_at,
            label=data.get("label"),
            is_active=data.get("is_active", True) is not False,
        )
        return jsonify({"token": issued.to_dict()}), 201
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to issue attendance token")
        return jsonify({"error": "Internal server error"}), 500


@attendance_tokens_bp.post("/<int:token_id>/regenerate-qr")
@require_auth
@require_permission("MANAGE_ATTENDANCE_TOKENS")
def regenerate_qr_route(token_id: int):
    try:
        issued = token_service.regenerate(token_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"token": issued.to_dict()})


@attendance_tokens_bp.patch("/<int:token_id>")
@require_auth
@require_permission("MANAGE_ATTENDANCE_TOKENS")
def update_token_route(token_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        token = token_service.update_token(token_id, payload)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"token": token.to_dict()})


@attendance_tokens_bp.delete("/<int:token_id>")
@require_auth
@require_permission("DELETE_ATTENDANCE_TOKENS")
def delete_token_route(token_id: int):
    try:
        token_service.delete_token(token_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Attendance token deleted"})
