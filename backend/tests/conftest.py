"""
Pytest fixtures for OrgDesk backend tests.

Provides an in-memory database, test client, one member per role and
ready-made bearer headers for each of them.
"""

from datetime import timedelta

import pytest

from app import create_app
from app.config import TestConfig
from app.extensions import db
from app.permissions import ROLE_ADMIN, ROLE_MEMBER, ROLE_ORGANIZER, ROLE_TREASURER
from app.services import event_service, session_service
from app.services.auth_service import create_member
from app.time_utils import utcnow


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _make_member(role: str, email: str, name: str):
    return create_member(email=email, password=PASSWORD, name=name, role_name=role)


@pytest.fixture(scope='function')
def admin(db_session):
    return _make_member(ROLE_ADMIN, "admin@orgdesk.test", "Ada Admin")


@pytest.fixture(scope='function')
def organizer(db_session):
    return _make_member(ROLE_ORGANIZER, "organizer@orgdesk.test", "Olu Organizer")


@pytest.fixture(scope='function')
def treasurer(db_session):
    return _make_member(ROLE_TREASURER, "treasurer@orgdesk.test", "Tari Treasurer")


@pytest.fixture(scope='function')
def member(db_session):
    return _make_member(ROLE_MEMBER, "member@orgdesk.test", "Mika Member")


@pytest.fixture(scope='function')
def other_member(db_session):
    return _make_member(ROLE_MEMBER, "other@orgdesk.test", "Omar Other")


def auth_headers(member) -> dict:
    """Open a session for member and return Authorization headers."""
    _session, token = session_service.create_session(member.id)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture(scope='function')
def organizer_headers(organizer):
    return auth_headers(organizer)


@pytest.fixture(scope='function')
def treasurer_headers(treasurer):
    return auth_headers(treasurer)


@pytest.fixture(scope='function')
def member_headers(member):
    return auth_headers(member)


@pytest.fixture(scope='function')
def event(db_session, organizer):
    """An upcoming event starting tomorrow."""
    return event_service.create_event(
        {"name": "General Assembly", "start_at": utcnow() + timedelta(days=1)},
        created_by=organizer.id,
    )
