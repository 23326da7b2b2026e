"""Add accounts, level_change_logs, redemption_records and reward_level_overrides tables.

Revision ID: f1a2b3c4d5e6
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'f1a2b3c4d5e6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the account ladder, audit and redemption tables."""
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='BUSINESS'),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('sub_level', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('xp', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('tier', sa.String(20), nullable=False, server_default='BASIC'),
        sa.Column('billing_cycle', sa.String(20), nullable=False, server_default='MONTHLY'),
        sa.Column('upgrade_requested', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('upgrade_requested_at', sa.DateTime(), nullable=True),
        sa.Column('upgrade_approved_at', sa.DateTime(), nullable=True),
        sa.Column('last_upgrade_approved_by', sa.String(64), nullable=True),
        sa.Column('last_upgrade_rejected_by', sa.String(64), nullable=True),
        sa.Column('last_upgrade_rejected_at', sa.DateTime(), nullable=True),
        sa.Column('last_upgrade_rejection_reason', sa.String(500), nullable=True),
        sa.Column('missions_created_this_month', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('meetups_hosted_this_month', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('meetups_joined_this_month', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('boosts_used_this_month', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('growth_credits', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('lifetime_points', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('missions_completed', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('rewards_redeemed', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('version', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    # Admin upgrade queue
    op.create_index('ix_accounts_upgrade_requested', 'accounts', ['role', 'upgrade_requested'])

    op.create_table(
        'level_change_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.String(64), nullable=False),
        sa.Column('change_type', sa.String(30), nullable=False),
        sa.Column('previous_level', sa.Integer(), nullable=True),
        sa.Column('new_level', sa.Integer(), nullable=True),
        sa.Column('previous_sub_level', sa.Integer(), nullable=True),
        sa.Column('new_sub_level', sa.Integer(), nullable=True),
        sa.Column('xp_delta', sa.Integer(), nullable=True),
        sa.Column('reason', sa.String(500), nullable=True),
        sa.Column('created_by', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_level_change_logs_account_id', 'level_change_logs', ['account_id'])

    op.create_table(
        'redemption_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('business_id', sa.String(64), nullable=False),
        sa.Column('reward_id', sa.String(64), nullable=False),
        sa.Column('redeemed_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_redemption_records_user_id', 'redemption_records', ['user_id'])
    op.create_index('ix_redemption_records_business_id', 'redemption_records', ['business_id'])
    op.create_index('ix_redemption_records_user_redeemed_at', 'redemption_records', ['user_id', 'redeemed_at'])

    op.create_table(
        'reward_level_overrides',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reward_id', sa.String(64), nullable=False),
        sa.Column('customer_level', sa.String(20), nullable=False),
        sa.Column('per_day', sa.Integer(), nullable=True),
        sa.Column('per_week', sa.Integer(), nullable=True),
        sa.Column('repeat_usage_per_business', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reward_id', 'customer_level', name='uq_reward_level_override'),
    )


def downgrade():
    """Drop the account ladder, audit and redemption tables."""
    op.drop_table('reward_level_overrides')
    op.drop_index('ix_redemption_records_user_redeemed_at', table_name='redemption_records')
    op.drop_index('ix_redemption_records_business_id', table_name='redemption_records')
    op.drop_index('ix_redemption_records_user_id', table_name='redemption_records')
    op.drop_table('redemption_records')
    op.drop_index('ix_level_change_logs_account_id', table_name='level_change_logs')
    op.drop_table('level_change_logs')
    op.drop_index('ix_accounts_upgrade_requested', table_name='accounts')
    op.drop_table('accounts')
