"""create users and bp_readings tables

Revision ID: 3b7e9d2c41a0
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7e9d2c41a0'
down_revision = None
branch_labels = None
depends_on = None

BP_CATEGORIES = (
    'very-low', 'low', 'normal', 'elevated',
    'high-stage-1', 'high-stage-2', 'hypertensive-crisis',
)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'bp_readings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('systolic', sa.Integer(), nullable=False),
        sa.Column('diastolic', sa.Integer(), nullable=False),
        sa.Column('pulse_rate', sa.Integer(), nullable=True),
        sa.Column('category', sa.Enum(*BP_CATEGORIES, name='bp_category'), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('comments', sa.String(length=500), nullable=True),
        sa.Column('location', sa.String(length=100), nullable=True),
        sa.Column('device_used', sa.String(length=100), nullable=True),
        sa.Column('tags', sa.Text(), nullable=True),
        sa.Column('is_validated', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bp_readings_user_id', 'bp_readings', ['user_id'])
    op.create_index('ix_bp_readings_user_timestamp', 'bp_readings', ['user_id', 'timestamp'])
    op.create_index('ix_bp_readings_user_category', 'bp_readings', ['user_id', 'category'])


def downgrade():
    op.drop_index('ix_bp_readings_user_category', table_name='bp_readings')
    op.drop_index('ix_bp_readings_user_timestamp', table_name='bp_readings')
    op.drop_index('ix_bp_readings_user_id', table_name='bp_readings')
    op.drop_table('bp_readings')
    sa.Enum(name='bp_category').drop(op.get_bind(), checkfirst=True)
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
