# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- MEMBERS --

MEMBER_PERMISSIONS = [
    (
        "VIEW_MEMBERS",
        "View Members",
        "List and view member profiles",
        PermissionCategory.MEMBERS,
    ),
    (
        "MANAGE_MEMBERS",
        "Manage Members",
        "Create, edit, deactivate and delete member accounts",
        PermissionCategory.MEMBERS,
    ),
]


# -- ORGANIZATION --

ORGANIZATION_PERMISSIONS = [
    (
        "VIEW_DEPARTMENTS",
        "View Departments",
        "List and view departments",
        PermissionCategory.ORGANIZATION,
    ),
    (
        "MANAGE_DEPARTMENTS",
        "Manage Departments",
        "Create, edit and delete departments",
        PermissionCategory.ORGANIZATION,
    ),
    (
        "VIEW_LEADERSHIP",
        "View Leadership",
        "List leadership terms and positions",
        PermissionCategory.ORGANIZATION,
    ),
    (
        "MANAGE_LEADERSHIP",
        "Manage Leadership",
        "Assign, edit and end leadership terms",
        PermissionCategory.ORGANIZATION,
    ),
]


# -- EVENTS --

EVENT_PERMISSIONS = [
    (
        "VIEW_EVENTS",
        "View Events",
        "List and view events",
        PermissionCategory.EVENTS,
    ),
    (
        "MANAGE_EVENTS",
        "Manage Events",
        "Create and edit events",
        PermissionCategory.EVENTS,
    ),
    (
        "DELETE_EVENTS",
        "Delete Events",
        "Delete events (deactivates their attendance tokens)",
        PermissionCategory.EVENTS,
    ),
]


# -- ATTENDANCE --

ATTENDANCE_PERMISSIONS = [
    (
        "CHECK_IN",
        "Check In",
        "Check in to an event session with an attendance token",
        PermissionCategory.ATTENDANCE,
    ),
    (
        "MANAGE_ATTENDANCE_TOKENS",
        "Manage Attendance Tokens",
        "Issue, edit and regenerate attendance tokens",
        PermissionCategory.ATTENDANCE,
    ),
    (
        "DELETE_ATTENDANCE_TOKENS",
        "Delete Attendance Tokens",
        "Permanently delete attendance tokens",
        PermissionCategory.ATTENDANCE,
    ),
    (
        "VIEW_ATTENDANCE",
        "View Attendance",
        "View attendance records of any member",
        PermissionCategory.ATTENDANCE,
    ),
    (
        "RECORD_ATTENDANCE",
        "Record Attendance",
        "Enter attendance manually and edit status or notes",
        PermissionCategory.ATTENDANCE,
    ),
    (
        "DELETE_ATTENDANCE",
        "Delete Attendance",
        "Permanently delete attendance records",
        PermissionCategory.ATTENDANCE,
    ),
]


# -- CASH --

CASH_PERMISSIONS = [
    (
        "VIEW_CASH",
        "View Cash",
        "View cash periods, transactions, balances and reports",
        PermissionCategory.CASH,
    ),
    (
        "CREATE_CASH_PERIODS",
        "Create Cash Periods",
        "Open new cash periods",
        PermissionCategory.CASH,
    ),
    (
        "MANAGE_CASH_PERIODS",
        "Manage Cash Periods",
        "Edit cash periods and switch the active period",
        PermissionCategory.CASH,
    ),
    (
        "DELETE_CASH_PERIODS",
        "Delete Cash Periods",
        "Delete cash periods",
        PermissionCategory.CASH,
    ),
    (
        "RECORD_CASH_TRANSACTIONS",
        "Record Cash Transactions",
        "Create and edit inflow/outflow transactions",
        PermissionCategory.CASH,
    ),
    (
        "DELETE_CASH_TRANSACTIONS",
        "Delete Cash Transactions",
        "Permanently delete cash transactions",
        PermissionCategory.CASH,
    ),
    (
        "GENERATE_CASH_REPORTS",
        "Generate Cash Reports",
        "Freeze ledger totals into a cash report",
        PermissionCategory.CASH,
    ),
    (
        "DELETE_CASH_REPORTS",
        "Delete Cash Reports",
        "Delete generated cash reports",
        PermissionCategory.CASH,
    ),
]


# -- ARCHIVES --

ARCHIVE_PERMISSIONS = [
    (
        "VIEW_ARCHIVES",
        "View Archives",
        "List and open archived documents",
        PermissionCategory.ARCHIVES,
    ),
    (
        "MANAGE_ARCHIVES",
        "Manage Archives",
        "Register and edit archived documents",
        PermissionCategory.ARCHIVES,
    ),
    (
        "DELETE_ARCHIVES",
        "Delete Archives",
        "Delete archived documents",
        PermissionCategory.ARCHIVES,
    ),
]


# -- DASHBOARD --

DASHBOARD_PERMISSIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "See organization-wide counts, cash balance and recent activity",
        PermissionCategory.DASHBOARD,
    ),
]


# Combined list of all permissions (preserves original ordering)
PERMISSION_DEFINITIONS = (
    MEMBER_PERMISSIONS
    + ORGANIZATION_PERMISSIONS
    + EVENT_PERMISSIONS
    + ATTENDANCE_PERMISSIONS
    + CASH_PERMISSIONS
    + ARCHIVE_PERMISSIONS
    + DASHBOARD_PERMISSIONS
)
