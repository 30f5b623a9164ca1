"""add_order_activities

Revision ID: 0002_add_order_activities
Revises: 0001_init

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_add_order_activities'
down_revision = '0001_init'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'order_activities',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('order_id', sa.Integer, sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('action', sa.String(30), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('browser_info', sa.String(500), nullable=True),
        sa.Column('timestamp', sa.DateTime, nullable=False)
    )
    op.create_index('ix_order_activities_account_id', 'order_activities', ['account_id'])
    op.create_index('ix_order_activities_order_id', 'order_activities', ['order_id'])
    op.create_index('ix_order_activities_timestamp', 'order_activities', ['timestamp'])


def downgrade() -> None:
    op.drop_table('order_activities')
