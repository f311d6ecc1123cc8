"""Initial database schema - shops, channels, categories, items, skus, customers

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # --- Shops ---
    op.create_table(
        "shops",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("status", sa.String(50)),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
    )

    # --- Channels ---
    op.create_table(
        "channels",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("shop_id", sa.String(64), sa.ForeignKey("shops.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_channels_shop_id", "channels", ["shop_id"])

    # --- Categories ---
    op.create_table(
        "categories",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(500)),
        sa.Column("images", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("status", sa.String(50)),
        sa.Column("shop_id", sa.String(64), sa.ForeignKey("shops.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_categories_name", "categories", ["name"])
    op.create_index("ix_categories_shop_id", "categories", ["shop_id"])

    # --- Items ---
    op.create_table(
        "items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("s_id", sa.String(100), nullable=False, unique=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("images", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("origin_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(50)),
        sa.Column("shop_id", sa.String(64), sa.ForeignKey("shops.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.String(64), sa.ForeignKey("categories.id", ondelete="SET NULL")),
        *_timestamps(),
    )
    op.create_index("ix_items_name", "items", ["name"])
    op.create_index("ix_items_shop_id", "items", ["shop_id"])

    # --- SKUs ---
    op.create_table(
        "skus",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("s_id", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("origin_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(50)),
        sa.Column("item_id", sa.Integer, sa.ForeignKey("items.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_skus_item_id", "skus", ["item_id"])

    # --- Customers ---
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("platform", sa.String(50), nullable=False),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255)),
        sa.Column("shop_id", sa.String(64), sa.ForeignKey("shops.id"), nullable=False),
        sa.Column("channel_id", sa.Integer, sa.ForeignKey("channels.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("platform", "external_id", name="uq_customers_platform_external_id"),
    )
    op.create_index("ix_customers_platform", "customers", ["platform"])
    op.create_index("ix_customers_shop_id", "customers", ["shop_id"])
    op.create_index("ix_customers_channel_id", "customers", ["channel_id"])


def downgrade() -> None:
    op.drop_table("customers")
    op.drop_table("skus")
    op.drop_table("items")
    op.drop_table("categories")
    op.drop_table("channels")
    op.drop_table("shops")
