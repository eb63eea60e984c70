"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the organization admin schema from scratch:
- members, session_tokens: accounts and bearer sessions
- departments, leadership_terms, archives: organization structure
- events, attendance_tokens, attendance_records: attendance
- cash_periods, cash_transactions, cash_reports: cash ledger

Uniqueness that decides races lives here, not in application code:
- attendance_tokens.secret UNIQUE
- attendance_records UNIQUE(person_id, token_id)
- attendance_records partial UNIQUE(person_id, event_id) WHERE source = 'manual'
- cash_periods partial UNIQUE(is_active) WHERE is_active
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    # ============================================================================
    # departments
    # ============================================================================
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_ref', sa.Text(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # members / session_tokens
    # ============================================================================
    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('student_number', sa.String(length=20), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('faculty', sa.String(length=100), nullable=True),
        sa.Column('study_program', sa.String(length=100), nullable=True),
        sa.Column('cohort', sa.String(length=10), nullable=True),
        sa.Column('avatar_ref', sa.Text(), nullable=True),
        sa.Column('role_name', sa.String(length=32), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_members_email', 'members', ['email'], unique=True)
    op.create_index('ix_members_role_name', 'members', ['role_name'])
    op.create_index('ix_members_department_id', 'members', ['department_id'])

    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_used_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('is_revoked', sa.Boolean(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_member_id', 'session_tokens', ['member_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)
    op.create_index('ix_session_tokens_expires_at', 'session_tokens', ['expires_at'])
    op.create_index('ix_session_tokens_member_active', 'session_tokens', ['member_id', 'is_revoked'])

    # ============================================================================
    # leadership_terms / archives
    # ============================================================================
    op.create_table(
        'leadership_terms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.String(length=100), nullable=False),
        sa.Column('period_label', sa.String(length=20), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['person_id'], ['members.id']),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_leadership_terms_person_id', 'leadership_terms', ['person_id'])
    op.create_index('ix_leadership_terms_department_id', 'leadership_terms', ['department_id'])
    op.create_index('ix_leadership_terms_period', 'leadership_terms', ['period_label'])

    op.create_table(
        'archives',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('file_ref', sa.Text(), nullable=False),
        sa.Column('file_type', sa.String(length=50), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('uploaded_by', sa.Integer(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id']),
        sa.ForeignKeyConstraint(['uploaded_by'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_archives_department_id', 'archives', ['department_id'])
    op.create_index('ix_archives_category', 'archives', ['category'])

    # ============================================================================
    # events / attendance
    # ============================================================================
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('start_at', sa.DateTime(), nullable=False),
        sa.Column('end_at', sa.DateTime(), nullable=True),
        sa.Column('event_type', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id']),
        sa.ForeignKeyConstraint(['created_by'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_events_department_id', 'events', ['department_id'])
    op.create_index('ix_events_status_start', 'events', ['status', 'start_at'])

    op.create_table(
        'attendance_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('secret', sa.String(length=16), nullable=False),
        sa.Column('label', sa.String(length=255), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_attendance_tokens_event_id', 'attendance_tokens', ['event_id'])
    op.create_index('ix_attendance_tokens_secret', 'attendance_tokens', ['secret'], unique=True)
    op.create_index('ix_attendance_tokens_event_active', 'attendance_tokens', ['event_id', 'is_active'])

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('token_id', sa.Integer(), nullable=True),
        sa.Column('token_label', sa.String(length=255), nullable=True),
        sa.Column('source', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('check_in_time', sa.DateTime(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['person_id'], ['members.id']),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.ForeignKeyConstraint(['token_id'], ['attendance_tokens.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('person_id', 'token_id', name='uq_attendance_person_token'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_attendance_records_person_id', 'attendance_records', ['person_id'])
    op.create_index('ix_attendance_records_event_id', 'attendance_records', ['event_id'])
    op.create_index('ix_attendance_records_token_id', 'attendance_records', ['token_id'])
    op.create_index('ix_attendance_event_status', 'attendance_records', ['event_id', 'status'])
    op.create_index(
        'uq_attendance_manual_person_event',
        'attendance_records',
        ['person_id', 'event_id'],
        unique=True,
        sqlite_where=sa.text("source = 'manual'"),
        postgresql_where=sa.text("source = 'manual'"),
    )

    # ============================================================================
    # cash ledger
    # ============================================================================
    op.create_table(
        'cash_periods',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('opening_balance', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('closing_balance', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index(
        'uq_cash_periods_single_active',
        'cash_periods',
        ['is_active'],
        unique=True,
        sqlite_where=sa.text('is_active = 1'),
        postgresql_where=sa.text('is_active'),
    )

    op.create_table(
        'cash_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cash_period_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('receipt_ref', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cash_period_id'], ['cash_periods.id']),
        sa.ForeignKeyConstraint(['created_by'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount >= 0', name='ck_cash_transactions_amount_non_negative'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_cash_transactions_cash_period_id', 'cash_transactions', ['cash_period_id'])
    op.create_index('ix_cash_transactions_period_date', 'cash_transactions', ['cash_period_id', 'date'])

    op.create_table(
        'cash_reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cash_period_id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(length=50), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('total_inflow', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('total_outflow', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('opening_balance', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('closing_balance', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('generated_by', sa.Integer(), nullable=True),
        sa.Column('generated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['cash_period_id'], ['cash_periods.id']),
        sa.ForeignKeyConstraint(['generated_by'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_cash_reports_cash_period_id', 'cash_reports', ['cash_period_id'])


def downgrade():
    op.drop_table('cash_reports')
    op.drop_table('cash_transactions')
    op.drop_index('uq_cash_periods_single_active', table_name='cash_periods')
    op.drop_table('cash_periods')
    op.drop_index('uq_attendance_manual_person_event', table_name='attendance_records')
    op.drop_table('attendance_records')
    op.drop_table('attendance_tokens')
    op.drop_table('events')
    op.drop_table('archives')
    op.drop_table('leadership_terms')
    op.drop_table('session_tokens')
    op.drop_table('members')
    op.drop_table('departments')
