# Overview: Service-layer operations for archived documents; encapsulates business logic and database work.

from ..extensions import db
from ..models import Archive, Department
from .pagination import paginate
from app.time_utils import utcnow
from app.validation import ModelValidationPolicy, NotFoundError, ValidationError, validate_payload


ARCHIVE_POLICY = ModelValidationPolicy(
    writable_fields={"title", "description", "category", "file_ref", "file_type", "file_size", "department_id"},
    required_on_create={"title", "file_ref"},
)


def get_archive(archive_id: int) -> Archive:
    archive = db.session.get(Archive, archive_id)
    if not archive or archive.deleted_at is not None:
        raise NotFoundError("Archive not found")
    return archive


def _check_patch(patch: dict) -> None:
    if patch.get("file_size") is not None and patch["file_size"] < 0:
        raise ValidationError("file_size must be >= 0", "file_size")
    department_id = patch.get("department_id")
    if department_id is not None:
        department = db.session.get(Department, department_id)
        if not department or department.deleted_at is not None:
            raise ValidationError("Department not found", "department_id")


def create_archive(payload: dict, uploaded_by: int | None = None) -> Archive:
    """Register metadata for a document already handed to file storage."""
    patch = validate_payload(model=Archive, payload=payload, policy=ARCHIVE_POLICY, partial=False)
    _check_patch(patch)

    archive = Archive(uploaded_by=uploaded_by, **patch)
    db.session.add(archive)
    db.session.commit()
    return archive


def update_archive(archive_id: int, payload: dict) -> Archive:
    archive = get_archive(archive_id)
    patch = validate_payload(model=Archive, payload=payload, policy=ARCHIVE_POLICY, partial=True)
    _check_patch(patch)

    for key, value in patch.items():
        setattr(archive, key, value)
    db.session.commit()
    return archive


def delete_archive(archive_id: int) -> None:
    archive = get_archive(archive_id)
    archive.deleted_at = utcnow()
    db.session.commit()


def list_archives(
    search: str | None = None,
    category: str | None = None,
    department_id: int | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    query = db.session.query(Archive).filter(Archive.deleted_at.is_(None))
    if search:
        query = query.filter(Archive.title.ilike(f"%{search}%"))
    if category:
        query = query.filter(Archive.category == category)
    if department_id is not None:
        query = query.filter(Archive.department_id == department_id)
    query = query.order_by(Archive.created_at.desc(), Archive.id.desc())
    return paginate(query, page, limit)


def list_categories() -> list[str]:
    """Distinct non-empty categories used by live archives, alphabetical."""
    rows = (
        db.session.query(Archive.category)
        .filter(Archive.deleted_at.is_(None), Archive.category.isnot(None), Archive.category != "")
        .distinct()
        .order_by(Archive.category.asc())
        .all()
    )
    return [category for (category,) in rows]
