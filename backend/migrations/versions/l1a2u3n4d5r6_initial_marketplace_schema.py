"""initial marketplace schema

Revision ID: l1a2u3n4d5r6
Revises:
Create Date: 2026-10-17 00:00:00.000000

Creates the marketplace schema from scratch:
- users: accounts with a closed role set and suspension state
- laundries: tenants, one per ADMIN user
- laundry_suspensions: suspension history per laundry
- orders: customer orders with lifecycle status
- activities: append-only event log (order transitions, suspensions, registrations)

Enum columns are stored as VARCHAR (native_enum=False) so adding a value
never needs an ALTER TYPE.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'l1a2u3n4d5r6'
down_revision = None
branch_labels = None
depends_on = None


USER_ROLES = ('CUSTOMER', 'ADMIN', 'SUPER_ADMIN', 'DELIVERY_GUY')
LAUNDRY_STATUSES = ('ACTIVE', 'INACTIVE', 'SUSPENDED', 'PENDING')
ORDER_STATUSES = (
    'PENDING', 'CONFIRMED', 'IN_PROGRESS', 'READY_FOR_PICKUP', 'OUT_FOR_DELIVERY',
    'DELIVERED', 'COMPLETED', 'CANCELED', 'REFUNDED',
)
ACTIVITY_TYPES = (
    'ORDER_CREATED', 'ORDER_UPDATED', 'ORDER_CONFIRMED', 'ORDER_DELIVERED',
    'ORDER_COMPLETED', 'ORDER_CANCELED', 'LAUNDRY_SUSPENDED', 'LAUNDRY_ACTIVATED',
    'USER_REGISTERED', 'USER_SUSPENDED', 'USER_REINSTATED', 'USER_ROLE_CHANGED',
)


def upgrade():

    # ============================================================================
    # users
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('role', sa.Enum(*USER_ROLES, name='user_role', native_enum=False, length=32),
                  nullable=False),
        sa.Column('suspended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('suspension_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # ============================================================================
    # laundries: one per ADMIN user
    # ============================================================================
    op.create_table(
        'laundries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum(*LAUNDRY_STATUSES, name='laundry_status', native_enum=False, length=16),
                  nullable=False),
        sa.Column('admin_id', sa.Integer(), nullable=False),
        sa.Column('suspended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('suspension_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['admin_id'], ['users.id'], name='fk_laundries_admin_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_laundries'),
        sa.UniqueConstraint('email', name='uq_laundries_email'),
        sa.UniqueConstraint('admin_id', name='uq_laundries_admin_id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_laundries_status', 'laundries', ['status'])

    # ============================================================================
    # laundry_suspensions: history, at most one active row per laundry
    # ============================================================================
    op.create_table(
        'laundry_suspensions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('laundry_id', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('suspended_by_id', sa.Integer(), nullable=False),
        sa.Column('suspended_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('lifted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('lifted_by_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['laundry_id'], ['laundries.id'], name='fk_laundry_suspensions_laundry_id_laundries', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['suspended_by_id'], ['users.id'], name='fk_laundry_suspensions_suspended_by_id_users'),
        sa.ForeignKeyConstraint(['lifted_by_id'], ['users.id'], name='fk_laundry_suspensions_lifted_by_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_laundry_suspensions'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_laundry_suspensions_laundry_id', 'laundry_suspensions', ['laundry_id'])
    op.create_index('ix_laundry_suspensions_laundry_active', 'laundry_suspensions', ['laundry_id', 'is_active'])

    # ============================================================================
    # orders
    # ============================================================================
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='order_status', native_enum=False, length=32),
                  nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False),
        sa.Column('final_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('pickup_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('laundry_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['customer_id'], ['users.id'], name='fk_orders_customer_id_users'),
        sa.ForeignKeyConstraint(['laundry_id'], ['laundries.id'], name='fk_orders_laundry_id_laundries'),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
        sa.UniqueConstraint('order_number', name='uq_orders_order_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_laundry_id', 'orders', ['laundry_id'])
    op.create_index('ix_orders_laundry_status', 'orders', ['laundry_id', 'status'])

    # ============================================================================
    # activities: append-only
    # ============================================================================
    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type', sa.Enum(*ACTIVITY_TYPES, name='activity_type', native_enum=False, length=32),
                  nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('laundry_id', sa.Integer(), nullable=True),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_activities_user_id_users', ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['laundry_id'], ['laundries.id'], name='fk_activities_laundry_id_laundries', ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name='fk_activities_order_id_orders', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='pk_activities'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_activities_type', 'activities', ['type'])
    op.create_index('ix_activities_user_id', 'activities', ['user_id'])
    op.create_index('ix_activities_laundry_id', 'activities', ['laundry_id'])
    op.create_index('ix_activities_order_created', 'activities', ['order_id', 'created_at'])


def downgrade():
    op.drop_index('ix_activities_order_created', table_name='activities')
    op.drop_index('ix_activities_laundry_id', table_name='activities')
    op.drop_index('ix_activities_user_id', table_name='activities')
    op.drop_index('ix_activities_type', table_name='activities')
    op.drop_table('activities')

    op.drop_index('ix_orders_laundry_status', table_name='orders')
    op.drop_index('ix_orders_laundry_id', table_name='orders')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_table('orders')

    op.drop_index('ix_laundry_suspensions_laundry_active', table_name='laundry_suspensions')
    op.drop_index('ix_laundry_suspensions_laundry_id', table_name='laundry_suspensions')
    op.drop_table('laundry_suspensions')

    op.drop_index('ix_laundries_status', table_name='laundries')
    op.drop_table('laundries')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
