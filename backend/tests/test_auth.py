"""
Authentication and session tests.

Verifies:
- Login issues a bearer token and returns the member's capabilities
- Bad credentials and deactivated accounts are rejected
- Logout revokes the token
- Changing the password revokes every other session
"""

import pytest

from app.services import auth_service, member_service, session_service
from app.services.auth_service import PasswordValidationError
from app.validation import ConflictError


PASSWORD = "Password123"


def auth_headers(member):
    _session, token = session_service.create_session(member.id)
    return {"Authorization": f"Bearer {token}"}


def _login(client, email, password=PASSWORD):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


class TestLogin:

    def test_login_and_me(self, client, treasurer):
        resp = _login(client, "  TREASURER@orgdesk.test ")
        assert resp.status_code == 200
        assert resp.json["member"]["id"] == treasurer.id
        assert "RECORD_CASH_TRANSACTIONS" in resp.json["permissions"]

        me = client.get('/api/auth/me', headers={'Authorization': f"Bearer {resp.json['token']}"})
        assert me.status_code == 200
        assert me.json["member"]["email"] == "treasurer@orgdesk.test"

    def test_wrong_password(self, client, member):
        resp = _login(client, member.email, "Wrong12345")
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        resp = client.post('/api/auth/login', json={'email': 'x@y.z'})
        assert resp.status_code == 400

    def test_deactivated_member(self, client, member):
        member_service.update_member(member.id, {"is_active": False})
        resp = _login(client, "member@orgdesk.test")
        assert resp.status_code == 401

    def test_deactivation_kills_open_sessions(self, client, member):
        headers = auth_headers(member)
        member_service.update_member(member.id, {"is_active": False})

        resp = client.get('/api/auth/me', headers=headers)
        assert resp.status_code == 401


class TestLogout:

    def test_logout_revokes(self, client, member):
        headers = auth_headers(member)

        resp = client.post('/api/auth/logout', headers=headers)
        assert resp.status_code == 200

        after = client.get('/api/auth/me', headers=headers)
        assert after.status_code == 401


class TestPasswords:

    def test_weak_password_rejected(self, db_session):
        with pytest.raises(PasswordValidationError):
            auth_service.create_member("weak@orgdesk.test", "password", "Weak")

    def test_duplicate_email(self, member):
        with pytest.raises(ConflictError):
            auth_service.create_member("Member@OrgDesk.test", PASSWORD, "Copy")

    def test_change_password_revokes_others(self, client, member):
        current = auth_headers(member)
        other = auth_headers(member)

        resp = client.post(
            '/api/auth/change-password',
            json={'current_password': PASSWORD, 'new_password': 'Newpass456'},
            headers=current,
        )
        assert resp.status_code == 200
        assert resp.json["revoked_sessions"] == 1

        assert client.get('/api/auth/me', headers=current).status_code == 200
        assert client.get('/api/auth/me', headers=other).status_code == 401
        assert _login(client, "member@orgdesk.test", "Newpass456").status_code == 200

    def test_change_password_wrong_current(self, client, member):
        resp = client.post(
            '/api/auth/change-password',
            json={'current_password': 'Nope12345', 'new_password': 'Newpass456'},
            headers=auth_headers(member),
        )
        assert resp.status_code == 400


def test_health(client, db_session):
    resp = client.get('/api/health')
    assert resp.status_code == 200
    assert resp.json["checks"]["database"]["status"] == "healthy"
