# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    MEMBERS = "MEMBERS"
    ORGANIZATION = "ORGANIZATION"
    EVENTS = "EVENTS"
    ATTENDANCE = "ATTENDANCE"
    CASH = "CASH"
    ARCHIVES = "ARCHIVES"
    DASHBOARD = "DASHBOARD"
