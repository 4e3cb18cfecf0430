"""initial skin schema

Revision ID: 5c1d2e7f9a30
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1d2e7f9a30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

subscription_tier = sa.Enum('FREE', 'PREMIUM', 'PROFESSIONAL', name='subscriptiontier')
subscription_status = sa.Enum('ACTIVE', 'TRIAL', 'INACTIVE', 'CANCELED', name='subscriptionstatus')


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('subscription_tier', subscription_tier, nullable=False),
        sa.Column('subscription_status', subscription_status, nullable=False),
        sa.Column('subscription_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('skin_analyses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('ai_analysis_results', sa.JSON(), nullable=True),
        sa.Column('detected_issues', sa.JSON(), nullable=True),
        sa.Column('severity_scores', sa.JSON(), nullable=True),
        sa.Column('recommendations', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_skin_analyses_id'), 'skin_analyses', ['id'], unique=False)
    op.create_index(op.f('ix_skin_analyses_user_id'), 'skin_analyses', ['user_id'], unique=False)

    op.create_table('skin_journal',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('mood', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('diet_notes', sa.Text(), nullable=True),
        sa.Column('sleep_quality', sa.Integer(), nullable=True),
        sa.Column('stress_level', sa.Integer(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_skin_journal_id'), 'skin_journal', ['id'], unique=False)
    op.create_index(op.f('ix_skin_journal_user_id'), 'skin_journal', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('skin_journal')
    op.drop_table('skin_analyses')
    op.drop_table('users')
    subscription_status.drop(op.get_bind(), checkfirst=True)
    subscription_tier.drop(op.get_bind(), checkfirst=True)
