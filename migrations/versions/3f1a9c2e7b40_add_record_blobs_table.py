"""add record_blobs table

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-19 09:12:41.208315

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the key/value table holding the device, log and directory blobs."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    if "record_blobs" in set(inspector.get_table_names()):
        return
    op.create_table(
        "record_blobs",
        sa.Column("key", sa.String(64), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("record_blobs")
