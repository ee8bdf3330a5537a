"""item tags, favorites and expiration

Revision ID: 2b3c4d5e6f7a
Revises: 1a2b3c4d5e6f
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '2b3c4d5e6f7a'
down_revision: Union[str, None] = '1a2b3c4d5e6f'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table('items') as batch:
        batch.add_column(sa.Column('tags', sa.JSON(), nullable=True))
        batch.add_column(sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default=sa.false()))
        batch.add_column(sa.Column('expiration_date', sa.Date(), nullable=True))
        batch.create_index('ix_items_expiration_date', ['expiration_date'])

    with op.batch_alter_table('notifications') as batch:
        batch.alter_column(
            'type',
            existing_type=sa.Enum('share', 'comment', 'mention', native_enum=False, length=7),
            type_=sa.Enum('share', 'comment', 'mention', 'expiration', native_enum=False, length=10),
            existing_nullable=False,
        )


def downgrade() -> None:
    op.execute("DELETE FROM notifications WHERE type = 'expiration'")
    with op.batch_alter_table('notifications') as batch:
        batch.alter_column(
            'type',
            existing_type=sa.Enum('share', 'comment', 'mention', 'expiration', native_enum=False, length=10),
            type_=sa.Enum('share', 'comment', 'mention', native_enum=False, length=7),
            existing_nullable=False,
        )

    with op.batch_alter_table('items') as batch:
        batch.drop_index('ix_items_expiration_date')
        batch.drop_column('expiration_date')
        batch.drop_column('is_favorite')
        batch.drop_column('tags')
