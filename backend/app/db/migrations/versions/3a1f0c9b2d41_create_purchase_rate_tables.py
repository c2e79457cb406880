"""create users, arrivals and purchase_rates tables

Revision ID: 3a1f0c9b2d41
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a1f0c9b2d41'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=128), nullable=True),
        sa.Column('role', sa.String(length=16), nullable=False, server_default=sa.text("'staff'")),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'arrivals',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('movement_type', sa.String(length=16), nullable=False),
        sa.Column('bags', sa.Integer(), nullable=False),
        sa.Column('net_weight', sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_arrivals'),
    )
    op.create_index('ix_arrivals_movement_type', 'arrivals', ['movement_type'])

    op.create_table(
        'purchase_rates',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('arrival_id', sa.Integer(), nullable=False),

        sa.Column('sute', sa.Numeric(14, 4), nullable=False),
        sa.Column('sute_calculation_method', sa.String(length=16), nullable=False),
        sa.Column('base_rate', sa.Numeric(14, 4), nullable=False),
        sa.Column('rate_type', sa.String(length=8), nullable=False),
        sa.Column('h', sa.Numeric(14, 4), nullable=False),
        sa.Column('b', sa.Numeric(14, 4), nullable=False),
        sa.Column('b_calculation_method', sa.String(length=16), nullable=False),
        sa.Column('lf', sa.Numeric(14, 4), nullable=False),
        sa.Column('lf_calculation_method', sa.String(length=16), nullable=False),
        sa.Column('egb', sa.Numeric(14, 4), nullable=False),

        sa.Column('sute_amount', sa.Numeric(14, 4), nullable=True),
        sa.Column('sute_net_weight', sa.Numeric(14, 4), nullable=True),
        sa.Column('base_rate_amount', sa.Numeric(14, 4), nullable=True),
        sa.Column('h_amount', sa.Numeric(14, 4), nullable=True),
        sa.Column('b_amount', sa.Numeric(14, 4), nullable=True),
        sa.Column('lf_amount', sa.Numeric(14, 4), nullable=True),
        sa.Column('egb_amount', sa.Numeric(14, 4), nullable=True),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('average_rate', sa.Numeric(14, 2), nullable=False),
        sa.Column('amount_formula', sa.Text(), nullable=False),

        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        *_timestamps(),

        sa.PrimaryKeyConstraint('id', name='pk_purchase_rates'),
        sa.ForeignKeyConstraint(['arrival_id'], ['arrivals.id'], ondelete='CASCADE',
                                name='fk_purchase_rates_arrival_id_arrivals'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], name='fk_purchase_rates_created_by_users'),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], name='fk_purchase_rates_updated_by_users'),
        # 每个 arrival 至多一条结算；upsert 的 ON CONFLICT 目标
        sa.UniqueConstraint('arrival_id', name='uq_purchase_rates_arrival_id'),
    )


def downgrade() -> None:
    op.drop_table('purchase_rates')
    op.drop_index('ix_arrivals_movement_type', table_name='arrivals')
    op.drop_table('arrivals')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
