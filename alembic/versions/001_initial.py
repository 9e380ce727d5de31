# alembic/versions/001_initial.py

"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Collaborator tables (users, accounts, transactions, schedules, debts)
    # are migrated by the services that own them.
    op.create_table('decision_state',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('decision_version', sa.String(length=20), nullable=False),
        sa.Column('risk_level', sa.String(length=20), nullable=False),
        sa.Column('primary_command_type', sa.String(length=20), nullable=False),
        sa.Column('primary_command_text', sa.Text(), nullable=False),
        sa.Column('primary_command_amount_cents', sa.BigInteger(), nullable=True),
        sa.Column('primary_command_target', sa.String(length=200), nullable=True),
        sa.Column('primary_command_date', sa.String(length=10), nullable=True),
        sa.Column('warning_1', sa.Text(), nullable=True),
        sa.Column('warning_2', sa.Text(), nullable=True),
        sa.Column('suggestion', sa.Text(), nullable=True),
        sa.Column('next_action_text', sa.String(length=200), nullable=False),
        sa.Column('next_action_url', sa.String(length=200), nullable=False),
        sa.Column('decision_basis_json', sa.Text(), nullable=True),
        sa.Column('computed_at', sa.BigInteger(), nullable=False),
        sa.Column('expires_at', sa.BigInteger(), nullable=False),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('acknowledged_at', sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index('ix_decision_state_user_id', 'decision_state', ['user_id'])
    op.create_index('ix_decision_state_expires', 'decision_state', ['expires_at'])
    op.create_index('ix_decision_state_user_computed', 'decision_state', ['user_id', 'computed_at'])

    # ✅ At most one current (unlocked) decision per user
    op.create_index(
        'ux_decision_state_user_unlocked',
        'decision_state',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text('is_locked = false'),
        sqlite_where=sa.text('is_locked = 0'),
    )


def downgrade():
    op.drop_index('ux_decision_state_user_unlocked', table_name='decision_state')
    op.drop_index('ix_decision_state_user_computed', table_name='decision_state')
    op.drop_index('ix_decision_state_expires', table_name='decision_state')
    op.drop_index('ix_decision_state_user_id', table_name='decision_state')
    op.drop_table('decision_state')
