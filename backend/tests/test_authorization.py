"""
Authorization tests for OrgDesk.

Verifies:
- Unauthenticated requests return 401
- Regular members are denied organizer and treasurer operations (403)
- Organizers and treasurers are confined to their own areas
- Admin can perform privileged operations
"""

import pytest


# =============================================================================
# UNAUTHENTICATED ACCESS — 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/members"),
            ("GET", "/api/departments"),
            ("GET", "/api/leadership"),
            ("GET", "/api/events"),
            ("GET", "/api/archives"),
            ("GET", "/api/attendance-tokens"),
            ("POST", "/api/attendance-tokens"),
            ("POST", "/api/attendance/scan"),
            ("POST", "/api/attendance/manual"),
            ("GET", "/api/attendance"),
            ("GET", "/api/cash/periods"),
            ("POST", "/api/cash/transactions"),
            ("GET", "/api/cash/reports"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/events", headers={"Authorization": "Bearer not-a-session"})
        assert resp.status_code == 401


# =============================================================================
# MEMBER DENIED PRIVILEGED OPERATIONS — 403
# =============================================================================


class TestMemberDenied:
    """Regular members can scan and browse, nothing more."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/members"),
            ("POST", "/api/members"),
            ("POST", "/api/events"),
            ("DELETE", "/api/events/1"),
            ("GET", "/api/attendance-tokens"),
            ("POST", "/api/attendance-tokens"),
            ("POST", "/api/attendance/manual"),
            ("GET", "/api/attendance"),
            ("GET", "/api/attendance/event/1/summary"),
            ("GET", "/api/cash/periods"),
            ("POST", "/api/cash/periods"),
            ("POST", "/api/cash/transactions"),
            ("POST", "/api/cash/reports"),
            ("POST", "/api/departments"),
            ("POST", "/api/archives"),
        ],
    )
    def test_forbidden(self, client, member_headers, method, path):
        resp = getattr(client, method.lower())(path, json={}, headers=member_headers)
        assert resp.status_code == 403, f"{method} {path} returned {resp.status_code}"
        assert resp.json["error"] == "Permission denied"

    def test_own_history_allowed(self, client, member, member_headers):
        resp = client.get(f"/api/attendance/person/{member.id}", headers=member_headers)
        assert resp.status_code == 200

    def test_other_history_denied(self, client, member_headers, other_member):
        resp = client.get(f"/api/attendance/person/{other_member.id}", headers=member_headers)
        assert resp.status_code == 403


# =============================================================================
# ROLE BOUNDARIES
# =============================================================================


class TestRoleBoundaries:

    def test_organizer_cannot_touch_cash(self, client, organizer_headers):
        resp = client.post(
            "/api/cash/periods",
            json={"label": "Sneaky"},
            headers=organizer_headers,
        )
        assert resp.status_code == 403

    def test_organizer_cannot_delete_tokens(self, client, organizer_headers):
        resp = client.delete("/api/attendance-tokens/1", headers=organizer_headers)
        assert resp.status_code == 403

    def test_treasurer_cannot_issue_tokens(self, client, treasurer_headers):
        resp = client.post(
            "/api/attendance-tokens",
            json={"event_id": 1, "expires_at": "2030-01-01T00:00:00Z"},
            headers=treasurer_headers,
        )
        assert resp.status_code == 403

    def test_treasurer_cannot_list_tokens(self, client, treasurer_headers):
        resp = client.get("/api/attendance-tokens", headers=treasurer_headers)
        assert resp.status_code == 403
        assert resp.json["required_permissions"] == ["MANAGE_ATTENDANCE_TOKENS", "VIEW_ATTENDANCE"]

    def test_treasurer_cannot_delete_periods(self, client, treasurer_headers):
        resp = client.delete("/api/cash/periods/1", headers=treasurer_headers)
        assert resp.status_code == 403

    def test_organizer_can_view_attendance(self, client, organizer_headers):
        resp = client.get("/api/attendance", headers=organizer_headers)
        assert resp.status_code == 200

    def test_treasurer_can_view_cash(self, client, treasurer_headers):
        resp = client.get("/api/cash/periods", headers=treasurer_headers)
        assert resp.status_code == 200


# =============================================================================
# ADMIN — ALLOWED
# =============================================================================


class TestAdminAllowed:

    def test_list_members(self, client, admin_headers):
        resp = client.get("/api/members", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["total"] == 1

    def test_create_member(self, client, admin_headers):
        resp = client.post(
            "/api/members",
            json={"email": "new@orgdesk.test", "name": "New Person", "password": "Password123"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["member"]["role_name"] == "member"

    def test_delete_cash_period(self, client, admin_headers):
        created = client.post("/api/cash/periods", json={"label": "Temp"}, headers=admin_headers)
        assert created.status_code == 201

        resp = client.delete(f"/api/cash/periods/{created.json['period']['id']}", headers=admin_headers)
        assert resp.status_code == 200

    def test_cannot_delete_self(self, client, admin, admin_headers):
        resp = client.delete(f"/api/members/{admin.id}", headers=admin_headers)
        assert resp.status_code == 400
