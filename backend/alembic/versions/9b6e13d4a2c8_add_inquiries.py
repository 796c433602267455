"""Add inquiries taken while online ordering is off

Revision ID: 9b6e13d4a2c8
Revises: 4f2a9c1e7b30
Create Date: 2026-10-16 15:40:27.503911

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers used by Alembic
revision: str = '9b6e13d4a2c8'
down_revision: Union[str, Sequence[str], None] = '4f2a9c1e7b30'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

inquiry_status = sa.Enum('NEW', 'CONTACTED', 'RESOLVED', name='inquirystatus')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'inquiries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('customer_name', sa.String(length=200), nullable=False),
        sa.Column('customer_email', sa.String(), nullable=False),
        sa.Column('message', sa.String(length=2000), nullable=True),
        sa.Column('status', inquiry_status, nullable=False),
        sa.Column('staff_notes', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_inquiries_id'), 'inquiries', ['id'], unique=False)
    op.create_index(op.f('ix_inquiries_created_at'), 'inquiries', ['created_at'], unique=False)
    op.create_index(op.f('ix_inquiries_customer_email'), 'inquiries', ['customer_email'], unique=False)
    op.create_index(op.f('ix_inquiries_status'), 'inquiries', ['status'], unique=False)

    op.create_table(
        'inquiry_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('inquiry_id', sa.Integer(), sa.ForeignKey('inquiries.id'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id'), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_inquiry_items_id'), 'inquiry_items', ['id'], unique=False)
    op.create_index(op.f('ix_inquiry_items_inquiry_id'), 'inquiry_items', ['inquiry_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('inquiry_items')
    op.drop_table('inquiries')
    inquiry_status.drop(op.get_bind(), checkfirst=True)
