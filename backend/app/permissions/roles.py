# Overview: Static role -> capability mapping.
#
# Roles are a closed set. Each maps to a frozenset of permission codes and is
# checked through role_has_permission(); nothing here touches the database.

from .definitions import PERMISSION_DEFINITIONS


ROLE_ADMIN = "admin"
ROLE_ORGANIZER = "organizer"
ROLE_TREASURER = "treasurer"
ROLE_MEMBER = "member"

ROLE_NAMES = (ROLE_ADMIN, ROLE_ORGANIZER, ROLE_TREASURER, ROLE_MEMBER)

ROLE_DESCRIPTIONS = {
    ROLE_ADMIN: "Administrator with full access",
    ROLE_ORGANIZER: "Organizer: runs events and attendance",
    ROLE_TREASURER: "Treasurer: keeps the cash ledger",
    ROLE_MEMBER: "Regular member",
}


DEFAULT_ROLE_PERMISSIONS = {
    ROLE_ADMIN: frozenset(perm[0] for perm in PERMISSION_DEFINITIONS),
    ROLE_ORGANIZER: frozenset({
        "VIEW_MEMBERS",
        "VIEW_DEPARTMENTS",
        "VIEW_LEADERSHIP",
        "VIEW_EVENTS",
        "MANAGE_EVENTS",
        "CHECK_IN",
        "MANAGE_ATTENDANCE_TOKENS",
        "VIEW_ATTENDANCE",
        "RECORD_ATTENDANCE",
        "VIEW_ARCHIVES",
        "MANAGE_ARCHIVES",
        "VIEW_DASHBOARD",
    }),
    ROLE_TREASURER: frozenset({
        "VIEW_MEMBERS",
        "VIEW_DEPARTMENTS",
        "VIEW_EVENTS",
        "CHECK_IN",
        "VIEW_CASH",
        "MANAGE_CASH_PERIODS",
        "RECORD_CASH_TRANSACTIONS",
        "GENERATE_CASH_REPORTS",
        "VIEW_ARCHIVES",
        "MANAGE_ARCHIVES",
        "VIEW_DASHBOARD",
    }),
    ROLE_MEMBER: frozenset({
        "VIEW_DEPARTMENTS",
        "VIEW_EVENTS",
        "CHECK_IN",
        "VIEW_ARCHIVES",
    }),
}
