"""create training lifecycle tables

Revision ID: 5d1c0b7e2a41
Revises:
Create Date: 2026-10-18 09:12:44.218305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5d1c0b7e2a41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade() -> None:
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=64), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_organizations_slug', 'organizations', ['slug'], unique=True)
    op.create_index('ix_organizations_is_active', 'organizations', ['is_active'])

    op.create_table(
        'org_members',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('org_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', _enum('member_role_enum', 'OWNER', 'ADMIN', 'MEMBER'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('org_id', 'email', name='uq_org_members_org_email'),
    )
    op.create_index('ix_org_members_org_id', 'org_members', ['org_id'])
    op.create_index('ix_org_members_email', 'org_members', ['email'])
    op.create_index('ix_org_members_org_role', 'org_members', ['org_id', 'role'])

    op.create_table(
        'audit_events',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('org_id', sa.String(length=36), nullable=False),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('actor_user_id', sa.String(length=36), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('before', sa.JSON(), nullable=True),
        sa.Column('after', sa.JSON(), nullable=True),
        sa.Column('correlation_id', sa.String(length=64), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_user_id'], ['org_members.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_events_id', 'audit_events', ['id'])
    op.create_index('ix_audit_events_org_id', 'audit_events', ['org_id'])
    op.create_index('ix_audit_events_entity_type', 'audit_events', ['entity_type'])
    op.create_index('ix_audit_events_entity_id', 'audit_events', ['entity_id'])
    op.create_index('ix_audit_events_action', 'audit_events', ['action'])
    op.create_index('ix_audit_events_actor_user_id', 'audit_events', ['actor_user_id'])
    op.create_index('ix_audit_events_occurred_at', 'audit_events', ['occurred_at'])
    op.create_index('ix_audit_events_correlation_id', 'audit_events', ['correlation_id'])
    op.create_index('ix_audit_events_org_entity', 'audit_events', ['org_id', 'entity_type', 'entity_id'])
    op.create_index('ix_audit_events_org_action', 'audit_events', ['org_id', 'action'])
    op.create_index('ix_audit_events_org_time_desc', 'audit_events', ['org_id', sa.text('occurred_at DESC')])

    op.create_table(
        'email_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('org_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('recipient', sa.String(length=255), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('template_key', sa.String(length=128), nullable=False),
        sa.Column(
            'status',
            _enum('email_status_enum', 'QUEUED', 'SENT', 'LOGGED', 'FAILED', 'SKIPPED_NO_PROVIDER'),
            nullable=False,
        ),
        sa.Column('provider_message_id', sa.String(length=255), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('context_json', sa.JSON(), nullable=True),
        sa.Column('correlation_id', sa.String(length=128), nullable=True),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_email_logs_id', 'email_logs', ['id'])
    op.create_index('ix_email_logs_org_id', 'email_logs', ['org_id'])
    op.create_index('ix_email_logs_created_at', 'email_logs', ['created_at'])
    op.create_index('ix_email_logs_template_key', 'email_logs', ['template_key'])
    op.create_index('ix_email_logs_status', 'email_logs', ['status'])
    op.create_index('ix_email_logs_correlation_id', 'email_logs', ['correlation_id'])
    op.create_index('ix_email_logs_org_created', 'email_logs', ['org_id', 'created_at'])
    op.create_index('ix_email_logs_org_status', 'email_logs', ['org_id', 'status'])
    op.create_index('ix_email_logs_org_template', 'email_logs', ['org_id', 'template_key'])

    op.create_table(
        'training_assignments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('org_id', sa.String(length=36), nullable=False),
        sa.Column('track', _enum('training_track_enum', 'recruiter', 'manager', 'admin', 'executive'), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('user_name', sa.String(length=255), nullable=False),
        sa.Column(
            'status',
            _enum('training_assignment_status_enum', 'pending', 'in_progress', 'completed'),
            nullable=False,
        ),
        sa.Column('assigned_by_user_id', sa.String(length=36), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('magic_token', sa.String(length=64), nullable=False),
        sa.Column('token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_by_user_id'], ['org_members.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('magic_token'),
        sa.UniqueConstraint('org_id', 'user_email', 'track', name='uq_training_assignments_org_email_track'),
    )
    op.create_index('ix_training_assignments_org_id', 'training_assignments', ['org_id'])
    op.create_index('ix_training_assignments_track', 'training_assignments', ['track'])
    op.create_index('ix_training_assignments_status', 'training_assignments', ['status'])
    op.create_index('idx_training_assignments_org_status', 'training_assignments', ['org_id', 'status'])
    op.create_index('idx_training_assignments_email', 'training_assignments', ['user_email'])

    op.create_table(
        'training_section_progress',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('assignment_id', sa.String(length=36), nullable=False),
        sa.Column('section_number', sa.Integer(), nullable=False),
        sa.Column('video_watched_seconds', sa.Integer(), nullable=False),
        sa.Column('video_total_seconds', sa.Integer(), nullable=False),
        sa.Column('video_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('quiz_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('quiz_score', sa.Integer(), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['assignment_id'], ['training_assignments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('assignment_id', 'section_number', name='uq_training_progress_assignment_section'),
    )
    op.create_index('ix_training_section_progress_assignment_id', 'training_section_progress', ['assignment_id'])

    op.create_table(
        'training_quiz_attempts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('assignment_id', sa.String(length=36), nullable=False),
        sa.Column('section_number', sa.Integer(), nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('passed', sa.Boolean(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['assignment_id'], ['training_assignments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_training_quiz_attempts_assignment_section',
        'training_quiz_attempts',
        ['assignment_id', 'section_number'],
    )

    op.create_table(
        'training_certificates',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('assignment_id', sa.String(length=36), nullable=False),
        sa.Column('certificate_number', sa.String(length=32), nullable=False),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['assignment_id'], ['training_assignments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('assignment_id'),
    )
    op.create_index(
        'ix_training_certificates_certificate_number',
        'training_certificates',
        ['certificate_number'],
        unique=True,
    )
    op.create_index('ix_training_certificates_expires_at', 'training_certificates', ['expires_at'])

    op.create_table(
        'training_cert_notifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('certificate_id', sa.String(length=36), nullable=False),
        sa.Column(
            'notification_type',
            _enum('training_notification_type_enum', 'day_30', 'day_7', 'day_0'),
            nullable=False,
        ),
        sa.Column('status', _enum('training_notification_status_enum', 'CLAIMED', 'SENT'), nullable=False),
        sa.Column('email_to', sa.String(length=255), nullable=False),
        sa.Column('email_message_id', sa.String(length=255), nullable=True),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['certificate_id'], ['training_certificates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'certificate_id',
            'notification_type',
            name='uq_training_cert_notifications_cert_type',
        ),
    )
    op.create_index(
        'ix_training_cert_notifications_certificate_id',
        'training_cert_notifications',
        ['certificate_id'],
    )


def downgrade() -> None:
    op.drop_table('training_cert_notifications')
    op.drop_table('training_certificates')
    op.drop_table('training_quiz_attempts')
    op.drop_table('training_section_progress')
    op.drop_table('training_assignments')
    op.drop_table('email_logs')
    op.drop_table('audit_events')
    op.drop_table('org_members')
    op.drop_table('organizations')
