"""add treatment tracking

Revision ID: 8e4b6a1d2c57
Revises: 5c1d2e7f9a30
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8e4b6a1d2c57'
down_revision: Union[str, None] = '5c1d2e7f9a30'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

treatment_status = sa.Enum('ACTIVE', 'PAUSED', 'COMPLETED', 'CANCELED', name='treatmentstatus')


def upgrade() -> None:
    op.create_table('treatment_tracking',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('analysis_id', sa.Integer(), nullable=False),
        sa.Column('solution_index', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('status', treatment_status, nullable=False),
        sa.Column('progress', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['analysis_id'], ['skin_analyses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_treatment_tracking_id'), 'treatment_tracking', ['id'], unique=False)
    op.create_index(op.f('ix_treatment_tracking_analysis_id'), 'treatment_tracking', ['analysis_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_treatment_tracking_analysis_id'), table_name='treatment_tracking')
    op.drop_index(op.f('ix_treatment_tracking_id'), table_name='treatment_tracking')
    op.drop_table('treatment_tracking')
    treatment_status.drop(op.get_bind(), checkfirst=True)
