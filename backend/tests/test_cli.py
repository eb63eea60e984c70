"""
CLI command tests.
"""

from app.extensions import db
from app.models import Department, Member


def test_system_init_idempotent(app, db_session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["system", "init", "--admin-email", "root@orgdesk.test"])
    assert first.exit_code == 0, first.output
    assert "Created admin" in first.output

    second = runner.invoke(args=["system", "init", "--admin-email", "root@orgdesk.test"])
    assert second.exit_code == 0, second.output
    assert "Admin exists" in second.output

    assert db.session.query(Member).filter_by(role_name="admin").count() == 1
    assert db.session.query(Department).count() == 3


def test_users_create_rejects_weak_password(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "users", "create",
        "--email", "t@orgdesk.test",
        "--name", "Treasurer",
        "--password", "weak",
        "--role", "treasurer",
    ])
    assert result.exit_code != 0
    assert db.session.query(Member).count() == 0


def test_perms_list_for_role(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["perms", "list", "--role", "member"])

    assert result.exit_code == 0
    assert "CHECK_IN" in result.output
    assert "VIEW_CASH" not in result.output
