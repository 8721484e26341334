"""Create users, WIP windows, events, attendances and bills

Revision ID: 3a7c91e0b2d4
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a7c91e0b2d4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True):
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
        )
    return columns


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('email_verified', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_users_email')
    )
    op.create_index('ix_users_name', 'users', ['name'])

    op.create_table(
        'wip_windows',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_wip_windows_active', 'wip_windows', ['is_active'])
    op.create_index('ix_wip_windows_start_date', 'wip_windows', ['start_date'])

    op.create_table(
        'org_settings',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('current_wip_window_id', sa.UUID(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['current_wip_window_id'], ['wip_windows.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'events',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('wip_window_id', sa.UUID(), nullable=False),
        sa.Column('creator_id', sa.String(length=255), nullable=False),
        sa.Column('paid_by_id', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['wip_window_id'], ['wip_windows.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.ForeignKeyConstraint(['paid_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_events_date', 'events', ['date'])
    op.create_index('ix_events_creator', 'events', ['creator_id'])
    op.create_index('ix_events_wip_window', 'events', ['wip_window_id'])

    op.create_table(
        'attendances',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('status', sa.String(length=16), server_default='PROPOSED', nullable=False),
        sa.Column('invited_by_id', sa.String(length=255), nullable=True),
        sa.Column('is_paid', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('paid_by_id', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invited_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['paid_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.CheckConstraint("status IN ('PROPOSED', 'CONFIRMED', 'DECLINED')", name='attendance_status'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_attendances_event_user'),
        sa.UniqueConstraint('event_id', 'email', name='uq_attendances_event_email')
    )
    op.create_index('ix_attendances_event', 'attendances', ['event_id'])
    op.create_index('ix_attendances_user', 'attendances', ['user_id'])
    op.create_index('ix_attendances_email', 'attendances', ['email'])

    op.create_table(
        'bills',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=False),
        sa.Column('payer_id', sa.String(length=255), nullable=False),
        sa.Column('subtotal_cents', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('tax_cents', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('tip_cents', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('total_cents', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('currency', sa.String(length=3), server_default='INR', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['payer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_bills_event', 'bills', ['event_id'])
    op.create_index('ix_bills_payer', 'bills', ['payer_id'])

    op.create_table(
        'bill_items',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('bill_id', sa.UUID(), nullable=False),
        sa.Column('label', sa.String(length=200), nullable=False),
        sa.Column('amount_cents', sa.BigInteger(), nullable=False),
        sa.Column('quantity', sa.Integer(), server_default='1', nullable=False),
        sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'attachments',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('bill_id', sa.UUID(), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('uploaded_by_id', sa.String(length=255), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['uploaded_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_attachments_bill', 'attachments', ['bill_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_attachments_bill', table_name='attachments')
    op.drop_table('attachments')
    op.drop_table('bill_items')
    op.drop_index('ix_bills_payer', table_name='bills')
    op.drop_index('ix_bills_event', table_name='bills')
    op.drop_table('bills')
    op.drop_index('ix_attendances_email', table_name='attendances')
    op.drop_index('ix_attendances_user', table_name='attendances')
    op.drop_index('ix_attendances_event', table_name='attendances')
    op.drop_table('attendances')
    op.drop_index('ix_events_wip_window', table_name='events')
    op.drop_index('ix_events_creator', table_name='events')
    op.drop_index('ix_events_date', table_name='events')
    op.drop_table('events')
    op.drop_table('org_settings')
    op.drop_index('ix_wip_windows_start_date', table_name='wip_windows')
    op.drop_index('ix_wip_windows_active', table_name='wip_windows')
    op.drop_table('wip_windows')
    op.drop_index('ix_users_name', table_name='users')
    op.drop_table('users')
