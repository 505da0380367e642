"""Initial schema: organizations, users, sessions, claims, notifications, files, jobs.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ('admin', 'manager', 'biller', 'rcm_specialist', 'appeals_specialist')
CLAIM_STATUSES = ('pending', 'in_progress', 'appealed', 'resolved', 'rejected', 'paid', 'partial_paid')
CLAIM_PRIORITIES = ('critical', 'high', 'medium', 'low')
NOTIFICATION_TYPES = ('in_app', 'email', 'sms')
JOB_STATUSES = ('pending', 'running', 'completed', 'dead')


def _enum(values, name):
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade():
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('role', _enum(USER_ROLES, 'user_role'), nullable=False),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime()),
        sa.Column('password_reset_token', sa.String(64)),
        sa.Column('password_reset_expires', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_users_organization', 'users', ['organization_id'])

    op.create_table(
        'user_sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('user_agent', sa.Text()),
        sa.Column('ip_address', sa.String(45)),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_user_sessions_user_expires', 'user_sessions', ['user_id', 'expires_at'])

    op.create_table(
        'claims',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('claim_number', sa.String(100), nullable=False),
        sa.Column('patient_name', sa.String(255)),
        sa.Column('payer_id', sa.String(100)),
        sa.Column('payer_name', sa.String(255)),
        sa.Column('date_of_service', sa.Date(), nullable=False),
        sa.Column('total_charge', sa.Numeric(12, 2), nullable=False),
        sa.Column('cpt_codes', sa.JSON(), nullable=False),
        sa.Column('denial_code', sa.String(20)),
        sa.Column('denial_reason', sa.Text()),
        sa.Column('status', _enum(CLAIM_STATUSES, 'claim_status'), nullable=False),
        sa.Column('priority', _enum(CLAIM_PRIORITIES, 'claim_priority'), nullable=False),
        sa.Column('assigned_to', sa.String(36), sa.ForeignKey('users.id')),
        sa.Column('assigned_at', sa.DateTime()),
        sa.Column('ai_recommended_action', sa.Text()),
        sa.Column('ai_confidence_score', sa.Float()),
        sa.Column('ai_analyzed_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_claims_org_status', 'claims', ['organization_id', 'status'])
    op.create_index('idx_claims_org_priority', 'claims', ['organization_id', 'priority'])
    op.create_index('idx_claims_assigned', 'claims', ['assigned_to'])

    op.create_table(
        'claim_actions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('claim_id', sa.String(36), sa.ForeignKey('claims.id'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id')),
        sa.Column('action_type', sa.String(50), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_claim_actions_claim', 'claim_actions', ['claim_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('type', _enum(NOTIFICATION_TYPES, 'notification_type'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('related_claim_id', sa.String(36), sa.ForeignKey('claims.id')),
        sa.Column('action_url', sa.String(500)),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_notifications_user_read', 'notifications', ['user_id', 'is_read'])

    op.create_table(
        'files',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('uploaded_by', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('original_name', sa.String(255), nullable=False),
        sa.Column('content_type', sa.String(100)),
        sa.Column('size_bytes', sa.Integer(), nullable=False),
        sa.Column('storage_path', sa.String(500), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_files_organization', 'files', ['organization_id'])

    op.create_table(
        'background_jobs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('organization_id', sa.String(36)),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('status', _enum(JOB_STATUSES, 'job_status'), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('max_attempts', sa.Integer(), nullable=False),
        sa.Column('run_at', sa.DateTime(), nullable=False),
        sa.Column('started_at', sa.DateTime()),
        sa.Column('last_error', sa.Text()),
        sa.Column('result', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_background_jobs_due', 'background_jobs', ['status', 'run_at'])


def downgrade():
    op.drop_index('idx_background_jobs_due', table_name='background_jobs')
    op.drop_table('background_jobs')
    op.drop_index('idx_files_organization', table_name='files')
    op.drop_table('files')
    op.drop_index('idx_notifications_user_read', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('idx_claim_actions_claim', table_name='claim_actions')
    op.drop_table('claim_actions')
    op.drop_index('idx_claims_assigned', table_name='claims')
    op.drop_index('idx_claims_org_priority', table_name='claims')
    op.drop_index('idx_claims_org_status', table_name='claims')
    op.drop_table('claims')
    op.drop_index('idx_user_sessions_user_expires', table_name='user_sessions')
    op.drop_table('user_sessions')
    op.drop_index('idx_users_organization', table_name='users')
    op.drop_table('users')
    op.drop_table('organizations')
