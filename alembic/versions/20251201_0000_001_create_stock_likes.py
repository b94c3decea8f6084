"""Create stock_likes table.

Revision ID: 001
Revises: 
Create Date: 2025-12-01

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'stock_likes',
        sa.Column('symbol', sa.String(), primary_key=True),
        sa.Column('likes', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('ips', postgresql.ARRAY(sa.String()), nullable=False, server_default=sa.text("'{}'")),
        sa.CheckConstraint('likes >= 0', name='ck_stock_likes_non_negative'),
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_table('stock_likes')
