"""create store tables

Revision ID: 4f1d2a9c7b30
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates the two tables behind the SQL store backend:

1. documents  - durable documents keyed by (collection, id)
2. live_nodes - the live key/value tree, one row per path

Payloads are stored whole as JSON; order_key copies the document's
timestamp so interaction logs can be listed newest first in SQL.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1d2a9c7b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the documents and live_nodes tables."""
    op.create_table(
        'documents',
        # Composite primary key
        sa.Column('collection', sa.String(length=100), nullable=False),
        sa.Column('id', sa.String(length=255), nullable=False),

        # Whole document payload
        sa.Column('data', sa.JSON(), nullable=False),

        # Sort key copied out of the payload
        sa.Column('order_key', sa.String(length=64), nullable=True),

        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),

        sa.PrimaryKeyConstraint('collection', 'id'),
    )

    op.create_index(
        op.f('ix_documents_order_key'),
        'documents',
        ['order_key'],
        unique=False
    )

    op.create_table(
        'live_nodes',
        sa.Column('path', sa.String(length=512), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('path'),
    )


def downgrade() -> None:
    """Drop the store tables."""
    op.drop_table('live_nodes')
    op.drop_index(op.f('ix_documents_order_key'), table_name='documents')
    op.drop_table('documents')
