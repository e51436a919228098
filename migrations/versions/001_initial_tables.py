"""Create consultation and payment tables

Revision ID: 001
Revises:
Create Date: 2025-07-19 10:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create consultation and payment tables"""

    # 1. Create user_responses table
    op.create_table('user_responses',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('module_name', sa.String(32), nullable=False),
        sa.Column('question_id', sa.String(64), nullable=False),
        sa.Column('response_value', sa.Text(), nullable=False),
        sa.Column('response_type', sa.String(32), nullable=False, server_default='text'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'module_name', 'question_id', name='uq_user_responses_user_module_question'),
        sa.CheckConstraint("response_type IN ('text', 'multiple_choice')", name='ck_user_responses_type'),
    )
    op.create_index('ix_user_responses_user_id', 'user_responses', ['user_id'])

    # 2. Create user_progress table
    op.create_table('user_progress',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('module_name', sa.String(32), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'module_name', name='uq_user_progress_user_module'),
    )
    op.create_index('ix_user_progress_user_id', 'user_progress', ['user_id'])

    # 3. Create user_subscriptions table
    op.create_table('user_subscriptions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('subscription_type', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('amount_paid', sa.Numeric(10, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('stripe_customer_id', sa.String(255), nullable=True),
        sa.Column('stripe_session_id', sa.String(255), nullable=True),
        sa.Column('welcome_email_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("subscription_type IN ('free', 'paid', 'pending')", name='ck_user_subscriptions_type'),
        sa.CheckConstraint("status IN ('active', 'pending')", name='ck_user_subscriptions_status'),
    )
    op.create_index('ix_user_subscriptions_user_id', 'user_subscriptions', ['user_id'], unique=True)

    # 4. Create webhook_events table
    op.create_table('webhook_events',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('stripe_event_id', sa.String(255), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stripe_event_id'),
    )


def downgrade() -> None:
    """Drop consultation and payment tables"""
    op.drop_table('webhook_events')
    op.drop_index('ix_user_subscriptions_user_id', table_name='user_subscriptions')
    op.drop_table('user_subscriptions')
    op.drop_index('ix_user_progress_user_id', table_name='user_progress')
    op.drop_table('user_progress')
    op.drop_index('ix_user_responses_user_id', table_name='user_responses')
    op.drop_table('user_responses')
