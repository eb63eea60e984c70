# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Permission Checking

WHY: Enforce role-based access control. Members carry exactly one static
role; the role's capability set lives in app.permissions.

DESIGN PRINCIPLES:
- Fail closed: Deny by default, unknown roles hold nothing
- Log denials only: Permission grants are not logged
- No database lookups: the role table is static
"""

from flask import current_app

from ..models import Member
from ..permissions import get_role_permissions, role_has_permission, ROLE_ADMIN, get_all_permission_codes


class PermissionDeniedError(Exception):
    """Raised when member lacks required permission."""
    pass


def get_member_permissions(member: Member) -> set[str]:
    """
    Get all permission codes for a member.

    Admin resolves to every known code so the set can be shown to clients.
    """
    if member.role_name == ROLE_ADMIN:
        return set(get_all_permission_codes())
    return set(get_role_permissions(member.role_name))


def member_has_permission(member: Member, permission_code: str) -> bool:
    """Core permission check. Used by decorators and manual checks."""
    return role_has_permission(member.role_name, permission_code)


def require_permission(
    member: Member,
    permission_code: str,
    resource: str | None = None,
) -> None:
    """
    Require member to have permission, raise PermissionDeniedError if not.

    Usage:
        require_permission(g.current_user, "RECORD_CASH_TRANSACTIONS", resource="/api/cash/transactions")
    """
    if not member_has_permission(member, permission_code):
        current_app.logger.warning(
            "Permission denied: member=%s role=%s permission=%s resource=%s",
            member.id, member.role_name, permission_code, resource,
        )
        raise PermissionDeniedError(f"Permission denied: {permission_code}")
