"""Initial affiliate network schema

Revision ID: 20261001_000001
Revises:
Create Date: 2026-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261001_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.DECIMAL(precision=18, scale=8)
PERCENT = sa.DECIMAL(precision=10, scale=4)


def _id() -> sa.Column:
    return sa.Column('id', sa.Integer(), autoincrement=True, nullable=False)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    # Users and settings
    op.create_table(
        'users',
        _id(),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('referral_code', sa.String(length=20), nullable=True),
        sa.Column('referred_by_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'referred_by_id IS NULL OR referred_by_id <> id',
            name='check_user_not_self_referred'
        ),
        sa.ForeignKeyConstraint(
            ['referred_by_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index(
        'ix_users_referral_code', 'users', ['referral_code'], unique=True
    )
    op.create_index(
        'ix_users_referred_by_id', 'users', ['referred_by_id'], unique=False
    )

    op.create_table(
        'app_settings',
        _id(),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_app_settings_key', 'app_settings', ['key'], unique=True)

    # Binary network
    op.create_table(
        'binary_package_purchases',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('sponsor_user_id', sa.Integer(), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('credits_received', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_first_purchase', sa.Boolean(), nullable=False),
        sa.Column('commissions_distributed', sa.Boolean(), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint('amount > 0', name='check_purchase_amount_positive'),
        sa.CheckConstraint(
            'credits_received >= 0', name='check_purchase_credits_non_negative'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['sponsor_user_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['approved_by'], ['users.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_binary_package_purchases_user_id', 'binary_package_purchases',
        ['user_id'], unique=False
    )
    op.create_index(
        'ix_binary_package_purchases_status', 'binary_package_purchases',
        ['status'], unique=False
    )

    op.create_table(
        'binary_network',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('account_number', sa.Integer(), nullable=False),
        sa.Column('sponsor_id', sa.Integer(), nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('placement_leg', sa.String(length=5), nullable=True),
        sa.Column('left_child_id', sa.Integer(), nullable=True),
        sa.Column('right_child_id', sa.Integer(), nullable=True),
        sa.Column('left_volume', MONEY, nullable=False),
        sa.Column('right_volume', MONEY, nullable=False),
        sa.Column('total_cycles', sa.Integer(), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            'user_id', 'account_number', name='uq_binary_user_account'
        ),
        sa.UniqueConstraint(
            'parent_id', 'placement_leg', name='uq_binary_parent_leg'
        ),
        sa.CheckConstraint(
            'left_volume >= 0', name='check_binary_left_volume_non_negative'
        ),
        sa.CheckConstraint(
            'right_volume >= 0', name='check_binary_right_volume_non_negative'
        ),
        sa.CheckConstraint(
            'account_number >= 1', name='check_binary_account_number_positive'
        ),
        sa.CheckConstraint(
            "(parent_id IS NULL AND placement_leg IS NULL) OR "
            "(parent_id IS NOT NULL AND placement_leg IN ('left', 'right'))",
            name='check_binary_parent_leg_consistent'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['sponsor_id'], ['binary_network.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['parent_id'], ['binary_network.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['left_child_id'], ['binary_network.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['right_child_id'], ['binary_network.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_binary_network_user_id', 'binary_network', ['user_id'], unique=False
    )
    op.create_index(
        'ix_binary_network_parent_id', 'binary_network',
        ['parent_id'], unique=False
    )
    op.create_index(
        'idx_binary_sponsor', 'binary_network', ['sponsor_id'], unique=False
    )

    op.create_table(
        'binary_pending_placements',
        _id(),
        sa.Column('sponsor_user_id', sa.Integer(), nullable=False),
        sa.Column('pending_user_id', sa.Integer(), nullable=False),
        sa.Column('purchase_id', sa.Integer(), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('chosen_leg', sa.String(length=5), nullable=True),
        sa.Column('placed_node_id', sa.Integer(), nullable=True),
        _created_at(),
        sa.Column('placed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['sponsor_user_id'], ['users.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['pending_user_id'], ['users.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['purchase_id'], ['binary_package_purchases.id'],
            ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['placed_node_id'], ['binary_network.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_binary_pending_placements_pending_user_id',
        'binary_pending_placements', ['pending_user_id'], unique=False
    )
    op.create_index(
        'idx_pending_placement_sponsor_status', 'binary_pending_placements',
        ['sponsor_user_id', 'status'], unique=False
    )

    op.create_table(
        'binary_commissions',
        _id(),
        sa.Column('node_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('flushed_amount', MONEY, nullable=False),
        sa.Column('cycles_matched', sa.Integer(), nullable=False),
        sa.Column('left_volume_used', MONEY, nullable=False),
        sa.Column('right_volume_used', MONEY, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        _created_at(),
        sa.CheckConstraint(
            'amount >= 0', name='check_binary_commission_non_negative'
        ),
        sa.ForeignKeyConstraint(
            ['node_id'], ['binary_network.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_binary_commissions_node_id', 'binary_commissions',
        ['node_id'], unique=False
    )
    op.create_index(
        'ix_binary_commissions_user_id', 'binary_commissions',
        ['user_id'], unique=False
    )

    op.create_table(
        'binary_daily_earnings',
        _id(),
        sa.Column('node_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('earning_date', sa.Date(), nullable=False),
        sa.Column('total_earned', MONEY, nullable=False),
        sa.Column('cycles', sa.Integer(), nullable=False),
        sa.Column('flushed_amount', MONEY, nullable=False),
        sa.UniqueConstraint(
            'node_id', 'earning_date', name='uq_binary_daily_node_date'
        ),
        sa.ForeignKeyConstraint(
            ['node_id'], ['binary_network.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_binary_daily_earnings_user_id', 'binary_daily_earnings',
        ['user_id'], unique=False
    )

    op.create_table(
        'binary_auto_replenish',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('commission_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('credits_added', sa.Integer(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['commission_id'], ['binary_commissions.id'], ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_binary_auto_replenish_user_id', 'binary_auto_replenish',
        ['user_id'], unique=False
    )

    # Orders and referral commissions
    op.create_table(
        'orders',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('total_amount', MONEY, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('commissions_distributed', sa.Boolean(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'], unique=False)

    op.create_table(
        'order_items',
        _id(),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', MONEY, nullable=False),
        sa.Column('total_price', MONEY, nullable=False),
        sa.Column('commission_percentage', PERCENT, nullable=False),
        sa.CheckConstraint('quantity >= 1', name='check_order_item_quantity'),
        sa.CheckConstraint(
            'commission_percentage >= 0 AND commission_percentage <= 100',
            name='check_order_item_commission_range'
        ),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'], ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_order_items_order_id', 'order_items', ['order_id'], unique=False
    )

    op.create_table(
        'commissions',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('from_user_id', sa.Integer(), nullable=True),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('purchase_id', sa.Integer(), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('percentage', PERCENT, nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('commission_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        _created_at(),
        sa.CheckConstraint('amount >= 0', name='check_commission_non_negative'),
        sa.CheckConstraint('level >= 1', name='check_commission_level_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['from_user_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['purchase_id'], ['binary_package_purchases.id'],
            ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_commission_user_status', 'commissions',
        ['user_id', 'status'], unique=False
    )
    op.create_index(
        'idx_commission_order', 'commissions', ['order_id'], unique=False
    )

    op.create_table(
        'upline_transfer_requests',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('current_upline_id', sa.Integer(), nullable=True),
        sa.Column('requested_upline_id', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['current_upline_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['requested_upline_id'], ['users.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['processed_by'], ['users.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_upline_transfer_user_status', 'upline_transfer_requests',
        ['user_id', 'status'], unique=False
    )

    # Stair-step plan
    op.create_table(
        'stair_step_config',
        _id(),
        sa.Column('step_number', sa.Integer(), nullable=False),
        sa.Column('step_name', sa.String(length=100), nullable=False),
        sa.Column('commission_percentage', PERCENT, nullable=False),
        sa.Column('sales_quota', MONEY, nullable=False),
        sa.Column('months_to_qualify', sa.Integer(), nullable=False),
        sa.Column('breakaway_percentage', PERCENT, nullable=False),
        sa.Column('qualification_type', sa.String(length=20), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.CheckConstraint('step_number >= 1', name='check_step_number_positive'),
        sa.CheckConstraint(
            'commission_percentage >= 0 AND commission_percentage <= 100',
            name='check_step_commission_range'
        ),
        sa.CheckConstraint(
            'breakaway_percentage >= 0 AND breakaway_percentage <= 100',
            name='check_step_breakaway_range'
        ),
        sa.CheckConstraint(
            'sales_quota >= 0', name='check_step_quota_non_negative'
        ),
        sa.CheckConstraint(
            'months_to_qualify >= 1', name='check_step_months_positive'
        ),
        sa.UniqueConstraint('step_number'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'affiliate_current_rank',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('current_step', sa.Integer(), nullable=False),
        sa.Column('qualification_count', sa.Integer(), nullable=False),
        sa.Column('is_fixed', sa.Boolean(), nullable=False),
        sa.Column('last_qualified_step', sa.Integer(), nullable=False),
        sa.Column('last_qualified_at', sa.Date(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'affiliate_monthly_sales',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('sales_month', sa.Date(), nullable=False),
        sa.Column('personal_sales', MONEY, nullable=False),
        sa.Column('team_sales', MONEY, nullable=False),
        sa.Column('total_sales', MONEY, nullable=False),
        sa.UniqueConstraint(
            'user_id', 'sales_month', name='uq_monthly_sales_user_month'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'affiliate_rank_history',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('step_number', sa.Integer(), nullable=False),
        sa.Column('qualified_month', sa.Date(), nullable=False),
        sa.Column('sales_volume', MONEY, nullable=False),
        sa.Column('qualification_count', sa.Integer(), nullable=False),
        sa.Column('is_fixed', sa.Boolean(), nullable=False),
        sa.Column('reverted_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_rank_history_user_month', 'affiliate_rank_history',
        ['user_id', 'qualified_month'], unique=False
    )

    op.create_table(
        'leadership_commissions',
        _id(),
        sa.Column('upline_id', sa.Integer(), nullable=False),
        sa.Column('downline_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('sales_amount', MONEY, nullable=False),
        sa.Column('percentage', PERCENT, nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('commission_type', sa.String(length=20), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('purchase_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            'amount >= 0', name='check_leadership_commission_non_negative'
        ),
        sa.ForeignKeyConstraint(
            ['upline_id'], ['users.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['downline_id'], ['users.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['purchase_id'], ['binary_package_purchases.id'],
            ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_leadership_upline_status', 'leadership_commissions',
        ['upline_id', 'status'], unique=False
    )

    # Wallets
    op.create_table(
        'wallets',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('diamonds', sa.Integer(), nullable=False),
        sa.Column('ai_credits', sa.Integer(), nullable=False),
        sa.Column('cash_balance', MONEY, nullable=False),
        sa.Column('pin_hash', sa.String(length=255), nullable=True),
        sa.Column('pin_attempts', sa.Integer(), nullable=False),
        sa.Column(
            'pin_locked_until', sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'credits >= 0', name='check_wallet_credits_non_negative'
        ),
        sa.CheckConstraint(
            'diamonds >= 0', name='check_wallet_diamonds_non_negative'
        ),
        sa.CheckConstraint(
            'ai_credits >= 0', name='check_wallet_ai_credits_non_negative'
        ),
        sa.CheckConstraint(
            'cash_balance >= 0', name='check_wallet_cash_non_negative'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'cash_transactions',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('transaction_type', sa.String(length=30), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('balance_after', MONEY, nullable=False),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_cash_tx_user_created', 'cash_transactions',
        ['user_id', 'created_at'], unique=False
    )

    op.create_table(
        'payout_requests',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('payout_account', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint('amount > 0', name='check_payout_amount_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['processed_by'], ['users.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_payout_requests_user_id', 'payout_requests',
        ['user_id'], unique=False
    )
    op.create_index(
        'ix_payout_requests_status', 'payout_requests',
        ['status'], unique=False
    )

    op.create_table(
        'ai_credit_usage',
        _id(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('feature', sa.String(length=50), nullable=False),
        sa.Column('credits_used', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_ai_credit_usage_user_id', 'ai_credit_usage',
        ['user_id'], unique=False
    )


def downgrade() -> None:
    for table in (
        'ai_credit_usage',
        'payout_requests',
        'cash_transactions',
        'wallets',
        'leadership_commissions',
        'affiliate_rank_history',
        'affiliate_monthly_sales',
        'affiliate_current_rank',
        'stair_step_config',
        'upline_transfer_requests',
        'commissions',
        'order_items',
        'orders',
        'binary_auto_replenish',
        'binary_daily_earnings',
        'binary_commissions',
        'binary_pending_placements',
        'binary_network',
        'binary_package_purchases',
        'app_settings',
        'users',
    ):
        op.drop_table(table)
