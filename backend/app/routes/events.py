# Overview: Flask API routes for event operations; parses input and returns JSON responses.

"""
Event Routes

SECURITY:
- Reading requires VIEW_EVENTS.
- Create and edit require MANAGE_EVENTS; delete requires DELETE_EVENTS.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import event_service
from app.validation import ValidationError, NotFoundError
from .common import datetime_arg, error_response, page_args


events_bp = Blueprint("events", __name__, url_prefix="/api/events")


@events_bp.get("")
@require_auth
@require_permission("VIEW_EVENTS")
def list_events_route():
    page, limit = page_args()
    try:
        result = event_service.list_events(
            search=request.args.get("search"),
            status=request.args.get("status"),
            department_id=request.args.get("department_id", type=int),
            start_from=datetime_arg("start_from"),
            start_to=datetime_arg("start_to"),
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        return error_response(e)
    return jsonify(result)


@events_bp.get("/<int:event_id>")
@require_auth
@require_permission("VIEW_EVENTS")
def get_event_route(event_id: int):
    try:
        event = event_service.get_event(event_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"event": event.to_dict()})


@events_bp.post("")
@require_auth
@require_permission("MANAGE_EVENTS")
def create_event_route():
    payload = request.get_json(silent=True) or {}
    try:
        event = event_service.create_event(payload, created_by=g.current_user.id)
    except ValidationError as e:
        return error_response(e)
    return jsonify({"event": event.to_dict()}), 201


@events_bp.patch("/<int:event_id>")
@require_auth
@require_permission("MANAGE_EVENTS")
def update_event_route(event_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        event = event_service.update_event(event_id, payload)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"event": event.to_dict()})


@events_bp.delete("/<int:event_id>")
@require_auth
@require_permission("DELETE_EVENTS")
def delete_event_route(event_id: int):
    try:
        event_service.delete_event(event_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Event deleted"})
