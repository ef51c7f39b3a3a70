"""Create beds table

Revision ID: 001
Revises:
Create Date: 2026-02-05 17:57:46.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'beds',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('bed_number', sa.String(length=20), nullable=False),
        sa.Column(
            'state',
            sa.Enum('available', 'occupied', 'maintenance', name='bed_state', native_enum=False, create_constraint=True, length=20),
            nullable=False,
            server_default='available'
        ),
        sa.Column('patient_name', sa.String(length=255), nullable=True),
        sa.Column('urgency_level', sa.String(length=50), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('discharged_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_beds_bed_number', 'beds', ['bed_number'], unique=True)
    op.create_index('ix_beds_state', 'beds', ['state'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_beds_state', table_name='beds')
    op.drop_index('ix_beds_bed_number', table_name='beds')
    op.drop_table('beds')
