"""initial_schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-02-02 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('personnel',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('middle_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('department', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('reason_for_deactivation', sa.Text(), nullable=True),
        sa.Column('avatar_path', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_personnel_id', 'personnel', ['id'])
    op.create_index('ix_personnel_username', 'personnel', ['username'], unique=True)

    op.create_table('directors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('middle_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('department', sa.String(length=255), nullable=True),
        sa.Column('director_level', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('reason_for_deactivation', sa.Text(), nullable=True),
        sa.Column('avatar_path', sa.String(length=500), nullable=True),
        sa.Column('signature_path', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_directors_id', 'directors', ['id'])
    op.create_index('ix_directors_username', 'directors', ['username'], unique=True)

    op.create_table('ict_admins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ict_admins_id', 'ict_admins', ['id'])
    op.create_index('ix_ict_admins_username', 'ict_admins', ['username'], unique=True)

    op.create_table('travel_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('personnel_id', sa.Integer(), nullable=False),
        sa.Column('travel_purpose', sa.String(length=500), nullable=False),
        sa.Column('destination', sa.String(length=255), nullable=False),
        sa.Column('official_station', sa.String(length=255), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('objectives', sa.Text(), nullable=True),
        sa.Column('per_diems_expenses', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('per_diems_note', sa.String(length=255), nullable=True),
        sa.Column('assistant_or_laborers_allowed', sa.String(length=255), nullable=True),
        sa.Column('appropriation', sa.String(length=255), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='draft'),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('approval_chain_length', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['personnel_id'], ['personnel.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_travel_orders_id', 'travel_orders', ['id'])
    op.create_index('ix_travel_orders_personnel_id', 'travel_orders', ['personnel_id'])
    op.create_index('ix_travel_orders_status', 'travel_orders', ['status'])

    op.create_table('travel_order_approvals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('travel_order_id', sa.Integer(), nullable=False),
        sa.Column('director_id', sa.Integer(), nullable=False),
        sa.Column('step_order', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='pending'),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('acted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['travel_order_id'], ['travel_orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['director_id'], ['directors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('travel_order_id', 'step_order', name='uq_travel_order_approvals_order_step')
    )
    op.create_index('ix_travel_order_approvals_id', 'travel_order_approvals', ['id'])
    op.create_index('ix_travel_order_approvals_travel_order_id', 'travel_order_approvals', ['travel_order_id'])
    op.create_index('ix_travel_order_approvals_director_id', 'travel_order_approvals', ['director_id'])

    op.create_table('travel_order_attachments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('travel_order_id', sa.Integer(), nullable=False),
        sa.Column('file_path', sa.String(length=1024), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=100), nullable=False, server_default='other'),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['travel_order_id'], ['travel_orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_travel_order_attachments_id', 'travel_order_attachments', ['id'])
    op.create_index('ix_travel_order_attachments_travel_order_id', 'travel_order_attachments', ['travel_order_id'])

    op.create_table('time_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('personnel_id', sa.Integer(), nullable=True),
        sa.Column('director_id', sa.Integer(), nullable=True),
        sa.Column('log_date', sa.Date(), nullable=False),
        sa.Column('time_in', sa.Time(), nullable=False),
        sa.Column('time_out', sa.Time(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['personnel_id'], ['personnel.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['director_id'], ['directors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_time_logs_id', 'time_logs', ['id'])
    op.create_index('ix_time_logs_personnel_id', 'time_logs', ['personnel_id'])
    op.create_index('ix_time_logs_director_id', 'time_logs', ['director_id'])
    op.create_index('ix_time_logs_log_date', 'time_logs', ['log_date'])


def downgrade() -> None:
    op.drop_table('time_logs')
    op.drop_table('travel_order_attachments')
    op.drop_table('travel_order_approvals')
    op.drop_table('travel_orders')
    op.drop_table('ict_admins')
    op.drop_table('directors')
    op.drop_table('personnel')
