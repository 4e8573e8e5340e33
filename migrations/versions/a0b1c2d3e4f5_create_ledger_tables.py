"""create ledger tables

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-19 10:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a0b1c2d3e4f5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    # 1. wallets
    op.create_table(
        'wallets',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False, server_default='other'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='IDR'),
        sa.Column('initial_balance', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('balance', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('icon', sa.String(length=64), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    # 2. categories
    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('icon', sa.String(length=64), nullable=True),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('group', sa.String(length=20), nullable=False, server_default='wants'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    # 3. transactions (source of truth для балансов)
    op.create_table(
        'transactions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=True),
        sa.Column('wallet_id', sa.String(length=36), nullable=False),
        sa.Column('to_wallet_id', sa.String(length=36), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('idempotency_key', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['wallet_id'], ['wallets.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['to_wallet_id'], ['wallets.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('idempotency_key'),
        sa.CheckConstraint('amount > 0', name='ck_transactions_amount_positive'),
        sa.CheckConstraint("type IN ('income', 'expense', 'transfer')", name='ck_transactions_type'),
    )
    op.create_index('ix_transactions_wallet_id', 'transactions', ['wallet_id'])
    op.create_index('ix_transactions_to_wallet_id', 'transactions', ['to_wallet_id'])
    op.create_index('ix_transactions_category_date', 'transactions', ['category_id', 'date'])
    op.create_index('ix_transactions_date', 'transactions', ['date'])

    # 4. budgets
    op.create_table(
        'budgets',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('category_id', 'month', name='uq_budget_category_month'),
    )

    # 5. goals
    op.create_table(
        'goals',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('target_amount', sa.BigInteger(), nullable=False),
        sa.Column('current_amount', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('deadline', sa.Date(), nullable=True),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('icon', sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('goals')
    op.drop_table('budgets')
    op.drop_index('ix_transactions_date', table_name='transactions')
    op.drop_index('ix_transactions_category_date', table_name='transactions')
    op.drop_index('ix_transactions_to_wallet_id', table_name='transactions')
    op.drop_index('ix_transactions_wallet_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('categories')
    op.drop_table('wallets')
