# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS
from .roles import DEFAULT_ROLE_PERMISSIONS, ROLE_ADMIN, ROLE_NAMES


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_category(category):
    """Get all permissions in a category."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == category]


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()


def validate_role_name(role_name):
    return role_name in ROLE_NAMES


def get_role_permissions(role_name) -> frozenset:
    """Capability set for a role; unknown roles get nothing."""
    return DEFAULT_ROLE_PERMISSIONS.get(role_name, frozenset())


def role_has_permission(role_name, code) -> bool:
    """Pure check: does this role carry the capability? Admin carries all."""
    if role_name == ROLE_ADMIN:
        return True
    return code in get_role_permissions(role_name)
