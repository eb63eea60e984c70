# Overview: Service-layer operations for departments and leadership terms; encapsulates business logic and database work.

from ..extensions import db
from ..models import Department, LeadershipTerm, Member
from .pagination import paginate
from app.time_utils import utcnow
from app.validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_date_range,
    validate_payload,
)


DEPARTMENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "logo_ref"},
    required_on_create={"name"},
)

LEADERSHIP_POLICY = ModelValidationPolicy(
    writable_fields={"person_id", "department_id", "position", "period_label", "start_date", "end_date", "is_active"},
    required_on_create={"person_id", "department_id", "position", "period_label", "start_date"},
)


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------

def get_department(department_id: int) -> Department:
    department = db.session.get(Department, department_id)
    if not department or department.deleted_at is not None:
        raise NotFoundError("Department not found")
    return department


def create_department(payload: dict) -> Department:
    patch = validate_payload(model=Department, payload=payload, policy=DEPARTMENT_POLICY, partial=False)
    department = Department(**patch)
    db.session.add(department)
    db.session.commit()
    return department


def update_department(department_id: int, payload: dict) -> Department:
    department = get_department(department_id)
    patch = validate_payload(model=Department, payload=payload, policy=DEPARTMENT_POLICY, partial=True)
    for key, value in patch.items():
        setattr(department, key, value)
    db.session.commit()
    return department


def delete_department(department_id: int) -> None:
    department = get_department(department_id)
    department.deleted_at = utcnow()
    db.session.commit()


def list_departments(search: str | None = None, page: int | None = None, limit: int | None = None) -> dict:
    query = db.session.query(Department).filter(Department.deleted_at.is_(None))
    if search:
        query = query.filter(Department.name.ilike(f"%{search}%"))
    query = query.order_by(Department.name.asc(), Department.id.asc())
    return paginate(query, page, limit)


def list_department_members(department_id: int) -> dict:
    """
    Roster of a department's live members, by name.

    Contact fields stay on /api/members, which needs VIEW_MEMBERS.
    """
    department = get_department(department_id)
    members = (
        db.session.query(Member)
        .filter(Member.department_id == department.id, Member.deleted_at.is_(None))
        .order_by(Member.name.asc(), Member.id.asc())
        .all()
    )
    return {
        "department": {"id": department.id, "name": department.name},
        "members": [
            {
                "id": m.id,
                "name": m.name,
                "student_number": m.student_number,
                "faculty": m.faculty,
                "study_program": m.study_program,
                "cohort": m.cohort,
                "role_name": m.role_name,
                "is_active": m.is_active,
            }
            for m in members
        ],
        "total_members": len(members),
    }


# ---------------------------------------------------------------------------
# Leadership terms
# ---------------------------------------------------------------------------

def get_term(term_id: int) -> LeadershipTerm:
    term = db.session.get(LeadershipTerm, term_id)
    if not term or term.deleted_at is not None:
        raise NotFoundError("Leadership term not found")
    return term


def _check_references(patch: dict) -> None:
    if "person_id" in patch:
        person = db.session.get(Member, patch["person_id"])
        if not person or person.deleted_at is not None:
            raise ValidationError("Member not found", "person_id")
    if "department_id" in patch:
        department = db.session.get(Department, patch["department_id"])
        if not department or department.deleted_at is not None:
            raise ValidationError("Department not found", "department_id")


def create_term(payload: dict) -> LeadershipTerm:
    patch = validate_payload(model=LeadershipTerm, payload=payload, policy=LEADERSHIP_POLICY, partial=False)
    _check_references(patch)
    enforce_date_range(patch.get("start_date"), patch.get("end_date"))

    term = LeadershipTerm(**patch)
    db.session.add(term)
    db.session.commit()
    return term


def update_term(term_id: int, payload: dict) -> LeadershipTerm:
    term = get_term(term_id)
    patch = validate_payload(model=LeadershipTerm, payload=payload, policy=LEADERSHIP_POLICY, partial=True)
    _check_references(patch)
    enforce_date_range(patch.get("start_date", term.start_date), patch.get("end_date", term.end_date))

    for key, value in patch.items():
        setattr(term, key, value)
    db.session.commit()
    return term


def delete_term(term_id: int) -> None:
    term = get_term(term_id)
    term.deleted_at = utcnow()
    db.session.commit()


def list_terms(
    period_label: str | None = None,
    department_id: int | None = None,
    person_id: int | None = None,
    is_active: bool | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    query = db.session.query(LeadershipTerm).filter(LeadershipTerm.deleted_at.is_(None))
    if period_label:
        query = query.filter(LeadershipTerm.period_label == period_label)
    if department_id is not None:
        query = query.filter(LeadershipTerm.department_id == department_id)
    if person_id is not None:
        query = query.filter(LeadershipTerm.person_id == person_id)
    if is_active is not None:
        query = query.filter(LeadershipTerm.is_active.is_(is_active))
    query = query.order_by(LeadershipTerm.start_date.desc(), LeadershipTerm.id.desc())
    return paginate(query, page, limit)
