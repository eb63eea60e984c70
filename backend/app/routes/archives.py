# Overview: Flask API routes for archive operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import archive_service
from app.validation import ValidationError, NotFoundError
from .common import error_response, page_args


archives_bp = Blueprint("archives", __name__, url_prefix="/api/archives")


@archives_bp.get("")
@require_auth
@require_permission("VIEW_ARCHIVES")
def list_archives_route():
    page, limit = page_args()
    return jsonify(archive_service.list_archives(
        search=request.args.get("search"),
        category=request.args.get("category"),
        department_id=request.args.get("department_id", type=int),
        page=page,
        limit=limit,
    ))


@archives_bp.get("/categories")
@require_auth
@require_permission("VIEW_ARCHIVES")
def list_categories_route():
    return jsonify({"categories": archive_service.list_categories()})


@archives_bp.get("/<int:archive_id>")
@require_auth
@require_permission("VIEW_ARCHIVES")
def get_archive_route(archive_id: int):
    try:
        archive = archive_service.get_archive(archive_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"archive": archive.to_dict()})


@archives_bp.post("")
@require_auth
@require_permission("MANAGE_ARCHIVES")
def create_archive_route():
    """Body: {title, file_ref, description?, category?, file_type?, file_size?, department_id?}"""
    payload = request.get_json(silent=True) or {}
    try:
        archive = archive_service.create_archive(payload, uploaded_by=g.current_user.id)
    except ValidationError as e:
        return error_response(e)
    return jsonify({"archive": archive.to_dict()}), 201


@archives_bp.patch("/<int:archive_id>")
@require_auth
@require_permission("MANAGE_ARCHIVES")
def update_archive_route(archive_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        archive = archive_service.update_archive(archive_id, payload)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"archive": archive.to_dict()})


@archives_bp.delete("/<int:archive_id>")
@require_auth
@require_permission("DELETE_ARCHIVES")
def delete_archive_route(archive_id: int):
    try:
        archive_service.delete_archive(archive_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Archive deleted"})
