"""Create partner program tables.

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, closure, commission, withdrawal, transaction and audit tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('referral_code', sa.String(12), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)

    op.create_table(
        'partner_relationships',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('partner_id', sa.Integer(), nullable=False),
        sa.Column('referral_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False, comment='Distance from partner, 1..5'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['partner_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['referral_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('referral_id', 'level', name='uq_partner_relationships_referral_level'),
        sa.UniqueConstraint('partner_id', 'referral_id', name='uq_partner_relationships_pair'),
        sa.CheckConstraint('level >= 1 AND level <= 5', name='check_partner_relationships_level_range'),
    )
    op.create_index('ix_partner_relationships_partner_id', 'partner_relationships', ['partner_id'])
    op.create_index('ix_partner_relationships_referral_id', 'partner_relationships', ['referral_id'])
    op.create_index('idx_partner_relationships_partner_level', 'partner_relationships', ['partner_id', 'level'])

    op.create_table(
        'partner_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('partner_id', sa.Integer(), nullable=False),
        sa.Column('source_user_id', sa.Integer(), nullable=False),
        sa.Column('source_transaction_id', sa.String(64), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False, comment='Commission amount'),
        sa.Column('rate', sa.DECIMAL(5, 4), nullable=False, comment='Rate applied (0.10 = 10%)'),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['partner_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['source_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('partner_id', 'source_transaction_id', 'level', name='uq_partner_commissions_partner_tx_level'),
        sa.CheckConstraint('amount > 0', name='check_partner_commissions_amount_positive'),
    )
    op.create_index('ix_partner_commissions_partner_id', 'partner_commissions', ['partner_id'])
    op.create_index('ix_partner_commissions_source_user_id', 'partner_commissions', ['source_user_id'])
    op.create_index('ix_partner_commissions_source_transaction_id', 'partner_commissions', ['source_transaction_id'])
    op.create_index('ix_partner_commissions_status', 'partner_commissions', ['status'])
    op.create_index('ix_partner_commissions_created_at', 'partner_commissions', ['created_at'])
    op.create_index('idx_partner_commissions_partner_status', 'partner_commissions', ['partner_id', 'status'])

    op.create_table(
        'withdrawal_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='RUB'),
        sa.Column('tax_status', sa.String(20), nullable=False, server_default='INDIVIDUAL'),
        sa.Column('tax_amount', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('payment_details', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='check_withdrawal_requests_amount_positive'),
    )
    op.create_index('ix_withdrawal_requests_user_id', 'withdrawal_requests', ['user_id'])
    op.create_index('ix_withdrawal_requests_status', 'withdrawal_requests', ['status'])
    op.create_index('ix_withdrawal_requests_created_at', 'withdrawal_requests', ['created_at'])
    op.create_index('idx_withdrawal_requests_user_status', 'withdrawal_requests', ['user_id', 'status'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('idx_transactions_user_status', 'transactions', ['user_id', 'status'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=False),
        sa.Column('new_value', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('idx_audit_logs_entity', 'audit_logs', ['entity_type', 'entity_id'])


def downgrade() -> None:
    """Drop partner program tables."""
    op.drop_table('audit_logs')
    op.drop_table('withdrawal_requests')
    op.drop_table('partner_commissions')
    op.drop_table('partner_relationships')
    # transactions and users belong to other subsystems in production
    op.drop_table('transactions')
    op.drop_table('users')
