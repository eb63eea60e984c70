# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/app/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--admin-email admin@orgdesk.local] [--admin-password "Password123"]
#   Idempotent bootstrap: default departments and an admin account.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Member inspection/bootstrap:
# - python -m flask users list [--role treasurer]
#   List members with role and active status.
# - python -m flask users create --email t@orgdesk.local --name "Treasurer" --password "Password123" --role treasurer
#   Create a member account (prompts if options are omitted).
#
# Permission inspection:
# - python -m flask perms list [--role organizer]
#   List capability codes, optionally for one role.
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions
#   Delete expired or revoked sessions older than 30 days.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Department, Member
from .permissions import (
    PERMISSION_DEFINITIONS,
    ROLE_ADMIN,
    ROLE_DESCRIPTIONS,
    ROLE_NAMES,
    get_permissions_by_category,
    get_role_permissions,
)
from .services.auth_service import create_member
from .services import session_service
from .validation import ConflictError, ValidationError


DEFAULT_DEPARTMENTS = (
    ("Core Board", "Chair, secretary and treasurer"),
    ("Education", "Study groups and training"),
    ("Public Relations", "Publications and partnerships"),
)


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--admin-email', default='admin@orgdesk.local', show_default=True, help='Admin login email')
@click.option('--admin-name', default='Administrator', show_default=True, help='Admin display name')
@click.option('--admin-password', default='Password123', show_default=True, help='Admin password')
@with_appcontext
def init_system(admin_email, admin_name, admin_password):
    """
    Initialize the system: default departments and an admin account.

    Safe to run repeatedly; existing rows are left untouched.

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing system...")

    db.create_all()

    for name, description in DEFAULT_DEPARTMENTS:
        existing = db.session.query(Department).filter_by(name=name).first()
        if existing:
            click.echo(f"PASS Department exists: {name}")
            continue
        db.session.add(Department(name=name, description=description))
        click.echo(f"PASS Created department: {name}")
    db.session.commit()

    admin = db.session.query(Member).filter_by(email=admin_email.strip().lower()).first()
    if admin:
        click.echo(f"PASS Admin exists: {admin.email} (ID: {admin.id})")
    else:
        try:
            admin = create_member(
                email=admin_email,
                password=admin_password,
                name=admin_name,
                role_name=ROLE_ADMIN,
            )
        except ValidationError as e:
            raise click.ClickException(f"Could not create admin: {e}")
        click.echo(f"PASS Created admin: {admin.email} (ID: {admin.id})")

    click.echo("DONE System initialized.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """Member inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLE_NAMES), default='member', show_default=True, help='Role')
@with_appcontext
def create_user_cli(email, name, password, role):
    """
    Create a member account.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    """
    try:
        member = create_member(email=email, password=password, name=name, role_name=role)
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created member: {member.name} ({member.email}) with role '{role}'")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLE_NAMES), help='Filter by role')
@with_appcontext
def list_users(role):
    """List members with their roles."""
    query = db.session.query(Member).filter(Member.deleted_at.is_(None))
    if role:
        query = query.filter_by(role_name=role)

    members = query.order_by(Member.id).all()

    if not members:
        click.echo("No members found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<35} {'Active':<8} {'Role'}")
    click.echo("="*90)

    for member in members:
        active_str = "Yes" if member.is_active else "No"
        click.echo(f"{member.id:<5} {member.name[:24]:<25} {member.email[:34]:<35} {active_str:<8} {member.role_name}")

    click.echo("="*90 + "\n")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(ROLE_NAMES), help='Show capabilities of one role')
def list_permissions_cli(role):
    """List capability codes grouped by category."""
    granted = get_role_permissions(role) if role else None

    if role:
        click.echo(f"\nRole {role}: {ROLE_DESCRIPTIONS[role]}")

    count = 0
    for category in dict.fromkeys(perm[3] for perm in PERMISSION_DEFINITIONS):
        rows = [
            perm for perm in get_permissions_by_category(category)
            if granted is None or perm[0] in granted
        ]
        if not rows:
            continue
        click.echo(f"\nCATEGORY {category}")
        click.echo("-"*60)
        for code, name, _description, _category in rows:
            click.echo(f"  {code:<28} {name}")
        count += len(rows)

    click.echo(f"\n Total: {count} permissions\n")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions_cli():
    """Delete expired or revoked sessions older than 30 days."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"Deleted {deleted} stale sessions.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(maintenance_group)
