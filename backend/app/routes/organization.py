# Overview: Flask API routes for departments and leadership terms; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..services import organization_service
from app.validation import ValidationError, NotFoundError
from .common import bool_arg, error_response, page_args


departments_bp = Blueprint("departments", __name__, url_prefix="/api/departments")
leadership_bp = Blueprint("leadership", __name__, url_prefix="/api/leadership")


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------

@departments_bp.get("")
@require_auth
@require_permission("VIEW_DEPARTMENTS")
def list_departments_route():
    page, limit = page_args()
    return jsonify(organization_service.list_departments(
        search=request.args.get("search"), page=page, limit=limit,
    ))


@departments_bp.get("/<int:department_id>")
@require_auth
@require_permission("VIEW_DEPARTMENTS")
def get_department_route(department_id: int):
    try:
        department = organization_service.get_department(department_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"department": department.to_dict()})


@departments_bp.get("/<int:department_id>/members")
@require_auth
@require_permission("VIEW_DEPARTMENTS")
def department_members_route(department_id: int):
    try:
        return jsonify(organization_service.list_department_members(department_id))
    except NotFoundError as e:
        return error_response(e)


@departments_bp.post("")
@require_auth
@require_permission("MANAGE_DEPARTMENTS")
def create_department_route():
    payload = request.get_json(silent=True) or {}
    try:
        department = organization_service.create_department(payload)
    except ValidationError as e:
        return error_response(e)
    return jsonify({"department": department.to_dict()}), 201


@departments_bp.patch("/<int:department_id>")
@require_auth
@require_permission("MANAGE_DEPARTMENTS")
def update_department_route(department_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        department = organization_service.update_department(department_id, payload)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"department": department.to_dict()})


@departments_bp.delete("/<int:department_id>")
@require_auth
@require_permission("MANAGE_DEPARTMENTS")
def delete_department_route(department_id: int):
    try:
        organization_service.delete_department(department_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Department deleted"})


# ---------------------------------------------------------------------------
# Leadership terms
# ---------------------------------------------------------------------------

@leadership_bp.get("")
@require_auth
@require_permission("VIEW_LEADERSHIP")
def list_terms_route():
    page, limit = page_args()
    try:
        result = organization_service.list_terms(
            period_label=request.args.get("period_label"),
            department_id=request.args.get("department_id", type=int),
            person_id=request.args.get("person_id", type=int),
            is_active=bool_arg("is_active"),
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        return error_response(e)
    return jsonify(result)


@leadership_bp.get("/<int:term_id>")
@require_auth
@require_permission("VIEW_LEADERSHIP")
def get_term_route(term_id: int):
    try:
        term = organization_service.get_term(term_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"term": term.to_dict()})


@leadership_bp.post("")
@require_auth
@require_permission("MANAGE_LEADERSHIP")
def create_term_route():
    payload = request.get_json(silent=True) or {}
    try:
        term = organization_service.create_term(payload)
    except ValidationError as e:
        return error_response(e)
    return jsonify({"term": term.to_dict()}), 201


@leadership_bp.patch("/<int:term_id>")
@require_auth
@require_permission("MANAGE_LEADERSHIP")
def update_term_route(term_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        term = organization_service.update_term(term_id, payload)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"term": term.to_dict()})


@leadership_bp.delete("/<int:term_id>")
@require_auth
@require_permission("MANAGE_LEADERSHIP")
def delete_term_route(term_id: int):
    try:
        organization_service.delete_term(term_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Leadership term deleted"})
