"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def _owner_column(table_name):
    return sa.Column(
        'user_id',
        sa.String(36),
        sa.ForeignKey('users.id', name=f'fk_{table_name}_user_id_users', ondelete='CASCADE'),
        nullable=False,
    )


def upgrade():
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Create weight_entries table
    op.create_table(
        'weight_entries',
        sa.Column('id', sa.String(36), nullable=False),
        _owner_column('weight_entries'),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(), nullable=False),
        sa.Column('notes', sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_weight_entries'),
        sa.UniqueConstraint('user_id', 'recorded_at', name='uq_weight_entries_user_id_recorded_at'),
    )

    # Create medications table
    op.create_table(
        'medications',
        sa.Column('id', sa.String(36), nullable=False),
        _owner_column('medications'),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('dosage', sa.String(100), nullable=False),
        sa.Column('frequency', sa.String(100), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_medications'),
    )
    op.create_index('ix_medications_user_id_start_date', 'medications', ['user_id', 'start_date'])

    # Create shipments table
    op.create_table(
        'shipments',
        sa.Column('id', sa.String(36), nullable=False),
        _owner_column('shipments'),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('tracking_number', sa.String(50), nullable=True),
        sa.Column('shipped_at', sa.DateTime(), nullable=True),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_shipments'),
    )
    op.create_index('ix_shipments_user_id_created_at', 'shipments', ['user_id', 'created_at'])
    op.create_index('ix_shipments_user_id_status', 'shipments', ['user_id', 'status'])
    op.create_index('ix_shipments_tracking_number', 'shipments', ['tracking_number'])


def downgrade():
    # Drop tables in reverse order
    op.drop_index('ix_shipments_tracking_number', table_name='shipments')
    op.drop_index('ix_shipments_user_id_status', table_name='shipments')
    op.drop_index('ix_shipments_user_id_created_at', table_name='shipments')
    op.drop_table('shipments')
    op.drop_index('ix_medications_user_id_start_date', table_name='medications')
    op.drop_table('medications')
    op.drop_table('weight_entries')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
