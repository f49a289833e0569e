"""initial_ledger_schema

Revision ID: 5c1e2a7d9b40
Revises:
Create Date: 2026-10-18 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e2a7d9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(15, 2)
ZERO = sa.text("0")
NOW = sa.text("CURRENT_TIMESTAMP")


def upgrade() -> None:
    op.create_table(
        'organisation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('amount', MONEY, nullable=False, server_default=ZERO),
        sa.Column('penalty', MONEY, nullable=False, server_default=ZERO),
        sa.Column('profit', MONEY, nullable=False, server_default=ZERO),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'member',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('fathers_name', sa.String(length=100), nullable=True),
        sa.Column('mobile', sa.String(length=15), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_member_name', 'member', ['name'])
    op.create_index('ix_member_mobile', 'member', ['mobile'])

    op.create_table(
        'account',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('account_number', sa.String(length=50), nullable=False),
        sa.Column('total_amount', MONEY, nullable=False, server_default=ZERO),
        sa.Column('released_money', MONEY, nullable=False, server_default=ZERO),
        sa.ForeignKeyConstraint(['member_id'], ['member.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_account_member_id', 'account', ['member_id'], unique=True)
    op.create_index('ix_account_account_number', 'account', ['account_number'], unique=True)

    op.create_table(
        'transaction_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), nullable=False),
        sa.Column('basic_pay', MONEY, nullable=False, server_default=ZERO),
        sa.Column('development_fee', MONEY, nullable=False, server_default=ZERO),
        sa.Column('penalty', MONEY, nullable=False, server_default=ZERO),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.ForeignKeyConstraint(['member_id'], ['member.id']),
        sa.ForeignKeyConstraint(['account_id'], ['account.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transaction_log_member_id', 'transaction_log', ['member_id'])
    op.create_index('ix_transaction_log_account_id', 'transaction_log', ['account_id'])
    op.create_index('ix_transaction_log_created_at', 'transaction_log', ['created_at'])

    op.create_table(
        'loan',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('principal_amount', MONEY, nullable=False),
        sa.Column('interest_rate', sa.Numeric(10, 6), nullable=False),
        sa.Column('time_period', sa.Integer(), nullable=False),
        sa.Column('emi_amount', MONEY, nullable=False),
        sa.Column('remaining_balance', MONEY, nullable=False),
        sa.Column('total_interest_paid', MONEY, nullable=False, server_default=ZERO),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='ACTIVE'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['member.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_loan_member_id', 'loan', ['member_id'])
    op.create_index('ix_loan_status', 'loan', ['status'])

    op.create_table(
        'loan_payment',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('loan_id', sa.Uuid(), nullable=False),
        sa.Column('principal_paid', MONEY, nullable=False, server_default=ZERO),
        sa.Column('extra_principal', MONEY, nullable=False, server_default=ZERO),
        sa.Column('interest_paid', MONEY, nullable=False, server_default=ZERO),
        sa.Column('penalty', MONEY, nullable=False, server_default=ZERO),
        sa.Column('total_paid', MONEY, nullable=False),
        sa.Column('remaining_after', MONEY, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.ForeignKeyConstraint(['loan_id'], ['loan.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_loan_payment_loan_id', 'loan_payment', ['loan_id'])
    op.create_index('ix_loan_payment_created_at', 'loan_payment', ['created_at'])

    op.create_table(
        'org_withdrawal',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('purpose', sa.String(length=255), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('source', sa.String(length=7), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_org_withdrawal_created_at', 'org_withdrawal', ['created_at'])

    op.create_table(
        'released_money_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('profit', MONEY, nullable=True),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.ForeignKeyConstraint(['account_id'], ['account.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_released_money_log_account_id', 'released_money_log', ['account_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('total_profit', MONEY, nullable=False),
        sa.Column('member_count', sa.Integer(), nullable=False),
        sa.Column('per_member_share', MONEY, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('audit_log')
    op.drop_index('ix_released_money_log_account_id', table_name='released_money_log')
    op.drop_table('released_money_log')
    op.drop_index('ix_org_withdrawal_created_at', table_name='org_withdrawal')
    op.drop_table('org_withdrawal')
    op.drop_index('ix_loan_payment_created_at', table_name='loan_payment')
    op.drop_index('ix_loan_payment_loan_id', table_name='loan_payment')
    op.drop_table('loan_payment')
    op.drop_index('ix_loan_status', table_name='loan')
    op.drop_index('ix_loan_member_id', table_name='loan')
    op.drop_table('loan')
    op.drop_index('ix_transaction_log_created_at', table_name='transaction_log')
    op.drop_index('ix_transaction_log_account_id', table_name='transaction_log')
    op.drop_index('ix_transaction_log_member_id', table_name='transaction_log')
    op.drop_table('transaction_log')
    op.drop_index('ix_account_account_number', table_name='account')
    op.drop_index('ix_account_member_id', table_name='account')
    op.drop_table('account')
    op.drop_index('ix_member_mobile', table_name='member')
    op.drop_index('ix_member_name', table_name='member')
    op.drop_table('member')
    op.drop_table('organisation')
