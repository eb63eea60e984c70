# Overview: Flask API routes for attendance operations; parses input and returns JSON responses.

"""
Attendance Routes

SECURITY:
- Any member with CHECK_IN can scan a token for themselves.
- Manual entry and edits require RECORD_ATTENDANCE; deletion DELETE_ATTENDANCE.
- Members can read their own history; everything else needs VIEW_ATTENDANCE.

Invalid tokens and duplicate check-ins are expected outcomes of scanning and
are logged at INFO.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission, require_self_or_permission
from ..extensions import db
from ..services import checkin_service
from ..services.checkin_service import DuplicateCheckInError
from ..services.token_service import InvalidTokenError
from app.validation import ValidationError, NotFoundError
from .common import error_response, page_args, require_int


attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/attendance")


@attendance_bp.post("/scan")
@require_auth
@require_permission("CHECK_IN")
def scan_route():
    """
    Check the caller in with a scanned or typed token.

    Body: {token}
    """
    data = request.get_json(silent=True) or {}
    member_id = g.current_user.id

    try:
        record = checkin_service.check_in_by_token(member_id, data.get("token"))
        return jsonify({"record": record.to_dict(), "message": "Checked in"}), 201
    except InvalidTokenError as e:
        current_app.logger.info("Rejected attendance token from member %s", member_id)
        return error_response(e)
    except DuplicateCheckInError as e:
        current_app.logger.info("Duplicate check-in by member %s", member_id)
        return error_response(e)
    except NotFoundError as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to check in member %s", member_id)
        return jsonify({"error": "Internal server error"}), 500


@attendance_bp.post("/manual")
@require_auth
@require_permission("RECORD_ATTENDANCE")
def manual_route():
    """
    Record attendance on behalf of a member.

    Body: {person_id, event_id, status?, note?, token_label?}
    """
    data = request.get_json(silent=True) or {}

    try:
        record = checkin_service.check_in_manual(
            person_id=require_int(data, "person_id"),
            event_id=require_int(data, "event_id"),
            status=data.get("status") or "present",
            note=data.get("note"),
            token_label=data.get("token_label"),
        )
        return jsonify({"record": record.to_dict()}), 201
    except DuplicateCheckInError as e:
        current_app.logger.info("Duplicate manual attendance for member %s", data.get("person_id"))
        return error_response(e)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to record manual attendance")
        return jsonify({"error": "Internal server error"}), 500


@attendance_bp.get("")
@require_auth
@require_permission("VIEW_ATTENDANCE")
def list_records_route():
    page, limit = page_args()
    try:
        result = checkin_service.list_records(
            event_id=request.args.get("event_id", type=int),
            person_id=request.args.get("person_id", type=int),
            token_id=request.args.get("token_id", type=int),
            status=request.args.get("status"),
            source=request.args.get("source"),
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        return error_response(e)
    return jsonify(result)


@attendance_bp.get("/<int:record_id>")
@require_auth
@require_permission("VIEW_ATTENDANCE")
def get_record_route(record_id: int):
    try:
        record = checkin_service.get_record(record_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"record": record.to_dict()})


@attendance_bp.patch("/<int:record_id>")
@require_auth
@require_permission("RECORD_ATTENDANCE")
def update_record_route(record_id: int):
    """Body: {status?, note?}. Other fields are immutable."""
    data = request.get_json(silent=True) or {}
    unknown = set(data) - {"status", "note"}
    if unknown:
        return error_response(ValidationError(f"Field not allowed: {sorted(unknown)[0]}", sorted(unknown)[0]))

    kwargs = {"status": data.get("status")}
    if "note" in data:
        kwargs["note"] = data["note"]

    try:
        record = checkin_service.update_status(record_id, **kwargs)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"record": record.to_dict()})


@attendance_bp.delete("/<int:record_id>")
@require_auth
@require_permission("DELETE_ATTENDANCE")
def delete_record_route(record_id: int):
    try:
        checkin_service.delete(record_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Attendance record deleted"})


@attendance_bp.get("/person/<int:person_id>")
@require_auth
@require_self_or_permission("VIEW_ATTENDANCE", arg_name="person_id")
def person_history_route(person_id: int):
    page, limit = page_args()
    return jsonify(checkin_service.list_records(person_id=person_id, page=page, limit=limit))


@attendance_bp.get("/event/<int:event_id>")
@require_auth
@require_permission("VIEW_ATTENDANCE")
def event_records_route(event_id: int):
    page, limit = page_args()
    try:
        result = checkin_service.list_records(
            event_id=event_id,
            status=request.args.get("status"),
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        return error_response(e)
    return jsonify(result)


@attendance_bp.get("/event/<int:event_id>/summary")
@require_auth
@require_permission("VIEW_ATTENDANCE")
def event_summary_route(event_id: int):
    try:
        summary = checkin_service.event_summary(event_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"summary": summary})
