# Overview: Flask API routes for member operations; parses input and returns JSON responses.

"""
Member Routes

SECURITY:
- Listing requires VIEW_MEMBERS; a member may always read their own record.
- Create, edit and delete require MANAGE_MEMBERS.
- PATCH /me lets members edit their own contact details (not role/status).
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission, require_self_or_permission
from ..extensions import db
from ..services import member_service
from app.validation import ValidationError, NotFoundError, ConflictError
from .common import bool_arg, error_response, page_args


members_bp = Blueprint("members", __name__, url_prefix="/api/members")


@members_bp.get("")
@require_auth
@require_permission("VIEW_MEMBERS")
def list_members_route():
    page, limit = page_args()
    try:
        result = member_service.list_members(
            search=request.args.get("search"),
            role_name=request.args.get("role_name"),
            department_id=request.args.get("department_id", type=int),
            is_active=bool_arg("is_active"),
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        return error_response(e)
    return jsonify(result)


@members_bp.get("/<int:member_id>")
@require_auth
@require_self_or_permission("VIEW_MEMBERS", arg_name="member_id")
def get_member_route(member_id: int):
    try:
        member = member_service.get_member(member_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"member": member.to_dict()})


@members_bp.post("")
@require_auth
@require_permission("MANAGE_MEMBERS")
def create_member_route():
    payload = request.get_json(silent=True) or {}
    try:
        member = member_service.create_member(payload)
        return jsonify({"member": member.to_dict()}), 201
    except (ValidationError, ConflictError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create member")
        return jsonify({"error": "Internal server error"}), 500


@members_bp.patch("/me")
@require_auth
def update_me_route():
    payload = request.get_json(silent=True) or {}
    try:
        member = member_service.update_member(g.current_user.id, payload, self_service=True)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"member": member.to_dict()})


@members_bp.patch("/<int:member_id>")
@require_auth
@require_permission("MANAGE_MEMBERS")
def update_member_route(member_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        member = member_service.update_member(member_id, payload)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"member": member.to_dict()})


@members_bp.delete("/<int:member_id>")
@require_auth
@require_permission("MANAGE_MEMBERS")
def delete_member_route(member_id: int):
    if member_id == g.current_user.id:
        return error_response(ValidationError("You cannot delete your own account"))
    try:
        member_service.delete_member(member_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Member deleted"})
