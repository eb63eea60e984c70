# Overview: Permission system package.
# Re-exports all public APIs for backwards-compatible imports.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    MEMBER_PERMISSIONS,
    ORGANIZATION_PERMISSIONS,
    EVENT_PERMISSIONS,
    ATTENDANCE_PERMISSIONS,
    CASH_PERMISSIONS,
    ARCHIVE_PERMISSIONS,
    DASHBOARD_PERMISSIONS,
)
from .roles import (
    DEFAULT_ROLE_PERMISSIONS,
    ROLE_ADMIN,
    ROLE_ORGANIZER,
    ROLE_TREASURER,
    ROLE_MEMBER,
    ROLE_NAMES,
    ROLE_DESCRIPTIONS,
)
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    validate_permission_code,
    validate_role_name,
    get_role_permissions,
    role_has_permission,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "MEMBER_PERMISSIONS",
    "ORGANIZATION_PERMISSIONS",
    "EVENT_PERMISSIONS",
    "ATTENDANCE_PERMISSIONS",
    "CASH_PERMISSIONS",
    "ARCHIVE_PERMISSIONS",
    "DASHBOARD_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "ROLE_ADMIN",
    "ROLE_ORGANIZER",
    "ROLE_TREASURER",
    "ROLE_MEMBER",
    "ROLE_NAMES",
    "ROLE_DESCRIPTIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "validate_permission_code",
    "validate_role_name",
    "get_role_permissions",
    "role_has_permission",
]
