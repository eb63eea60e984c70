# Overview: Service-layer operations for members; encapsulates business logic and database work.

"""
Member Directory

Members are soft-deleted. Deleting or deactivating a member revokes every
open session so the account is locked out immediately.
"""

from ..extensions import db
from ..models import Department, Member
from ..permissions import ROLE_NAMES
from . import auth_service, session_service
from .pagination import paginate
from app.time_utils import utcnow
from app.validation import ModelValidationPolicy, NotFoundError, ValidationError, validate_payload


PROFILE_FIELDS = {
    "name",
    "student_number",
    "phone",
    "faculty",
    "study_program",
    "cohort",
    "avatar_ref",
    "department_id",
}

MEMBER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=PROFILE_FIELDS | {"email", "role_name"},
    required_on_create={"email", "name"},
    choices={"role_name": set(ROLE_NAMES)},
)

MEMBER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=PROFILE_FIELDS | {"role_name", "is_active"},
    choices={"role_name": set(ROLE_NAMES)},
)

SELF_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone", "faculty", "study_program", "cohort", "avatar_ref"},
)


def get_member(member_id: int) -> Member:
    member = db.session.get(Member, member_id)
    if not member or member.deleted_at is not None:
        raise NotFoundError("Member not found")
    return member


def _check_department(department_id) -> None:
    if department_id is None:
        return
    department = db.session.get(Department, department_id)
    if not department or department.deleted_at is not None:
        raise ValidationError("Department not found", "department_id")


def create_member(payload: dict) -> Member:
    """Validate an admin-supplied payload and create the account."""
    payload = dict(payload or {})
    password = payload.pop("password", None)
    if not password:
        raise ValidationError("Missing required fields: password", "password")

    patch = validate_payload(model=Member, payload=payload, policy=MEMBER_CREATE_POLICY, partial=False)
    _check_department(patch.get("department_id"))

    email = patch.pop("email")
    name = patch.pop("name")
    return auth_service.create_member(email=email, password=password, name=name, **patch)


def update_member(member_id: int, payload: dict, *, self_service: bool = False) -> Member:
    member = get_member(member_id)
    policy = SELF_UPDATE_POLICY if self_service else MEMBER_UPDATE_POLICY
    patch = validate_payload(model=Member, payload=payload, policy=policy, partial=True)
    if "department_id" in patch:
        _check_department(patch["department_id"])

    for key, value in patch.items():
        setattr(member, key, value)
    db.session.commit()

    if patch.get("is_active") is False:
        session_service.revoke_all_member_sessions(member.id, reason="Member deactivated")

    return member


def delete_member(member_id: int) -> None:
    member = get_member(member_id)
    member.deleted_at = utcnow()
    member.is_active = False
    db.session.commit()
    session_service.revoke_all_member_sessions(member.id, reason="Member deleted")


def list_members(
    search: str | None = None,
    role_name: str | None = None,
    department_id: int | None = None,
    is_active: bool | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    query = db.session.query(Member).filter(Member.deleted_at.is_(None))
    if search:
        pattern = f"%{search}%"
        query = query.filter(db.or_(
            Member.name.ilike(pattern),
            Member.email.ilike(pattern),
            Member.student_number.ilike(pattern),
        ))
    if role_name:
        query = query.filter(Member.role_name == role_name)
    if department_id is not None:
        query = query.filter(Member.department_id == department_id)
    if is_active is not None:
        query = query.filter(Member.is_active.is_(is_active))

    query = query.order_by(Member.name.asc(), Member.id.asc())
    return paginate(query, page, limit)
