"""Media library schema - users, items, user_data, placeholder item

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the tables the persistence core works on and seeds the placeholder
item that detached UserData is attached to. user_data.item_id is RESTRICT:
item deletion detaches or deletes UserData explicitly, never by cascade.
"""

from collections.abc import Sequence
from uuid import UUID

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

PLACEHOLDER_ID = UUID("00000000-0000-0000-0000-000000000001")
PLACEHOLDER_NAME = (
    "This is a placeholder item for UserData that has been detached from its original item"
)


def upgrade() -> None:
    # ==========================================================================
    # users table
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    # ==========================================================================
    # items table
    # ==========================================================================
    op.create_table(
        "items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("type <> ''", name="ck_items_type_nonempty"),
    )

    # ==========================================================================
    # user_data table
    # ==========================================================================
    op.create_table(
        "user_data",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("custom_data_key", sa.Text(), nullable=False),
        sa.Column("play_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("playback_position_ticks", sa.BigInteger(), server_default="0", nullable=False),
        sa.Column("last_played_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("played", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_favorite", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("retention_date", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"], ondelete="RESTRICT"),
        # The constraint item deletion must never violate
        sa.UniqueConstraint(
            "user_id", "item_id", "custom_data_key", name="uq_user_data_user_item_key"
        ),
        sa.CheckConstraint("play_count >= 0", name="ck_user_data_play_count"),
    )
    op.create_index("ix_user_data_item_id", "user_data", ["item_id"])
    op.create_index("ix_user_data_retention_date", "user_data", ["retention_date"])

    # ==========================================================================
    # placeholder item
    # ==========================================================================
    items = sa.table(
        "items",
        sa.column("id", sa.Uuid()),
        sa.column("type", sa.Text()),
        sa.column("name", sa.Text()),
    )
    op.bulk_insert(
        items,
        [{"id": PLACEHOLDER_ID, "type": "PLACEHOLDER", "name": PLACEHOLDER_NAME}],
    )


def downgrade() -> None:
    op.drop_index("ix_user_data_retention_date", table_name="user_data")
    op.drop_index("ix_user_data_item_id", table_name="user_data")
    op.drop_table("user_data")
    op.drop_table("items")
    op.drop_table("users")
