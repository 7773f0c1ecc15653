"""Orders schema — orders, delivery, payment, items.

Revision ID: 001_orders
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_orders"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_uid", sa.String(255), nullable=False),
        sa.Column("track_number", sa.String(255), nullable=False, server_default=""),
        sa.Column("entry", sa.String(255), nullable=False, server_default=""),
        sa.Column("locale", sa.String(10), nullable=False, server_default=""),
        sa.Column("internal_signature", sa.String(255), nullable=False, server_default=""),
        sa.Column("customer_id", sa.String(255), nullable=False, server_default=""),
        sa.Column("delivery_service", sa.String(255), nullable=False, server_default=""),
        sa.Column("shardkey", sa.String(50), nullable=False, server_default=""),
        sa.Column("sm_id", sa.Integer, nullable=False, server_default="0"),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=True),
        sa.Column("oof_shard", sa.String(50), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_orders_order_uid", "orders", ["order_uid"], unique=True)
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "delivery",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(50), nullable=False, server_default=""),
        sa.Column("zip", sa.String(20), nullable=False, server_default=""),
        sa.Column("city", sa.String(255), nullable=False, server_default=""),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("region", sa.String(255), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False, server_default=""),
    )

    op.create_table(
        "payment",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("transaction", sa.String(255), nullable=False, server_default=""),
        sa.Column("request_id", sa.String(255), nullable=False, server_default=""),
        sa.Column("currency", sa.String(10), nullable=False, server_default=""),
        sa.Column("provider", sa.String(100), nullable=False, server_default=""),
        sa.Column("amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("payment_dt", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("bank", sa.String(100), nullable=False, server_default=""),
        sa.Column("delivery_cost", sa.Integer, nullable=False, server_default="0"),
        sa.Column("goods_total", sa.Integer, nullable=False, server_default="0"),
        sa.Column("custom_fee", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("chrt_id", sa.Integer, nullable=False),
        sa.Column("track_number", sa.String(255), nullable=False, server_default=""),
        sa.Column("price", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rid", sa.String(255), nullable=False, server_default=""),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("sale", sa.Integer, nullable=False, server_default="0"),
        sa.Column("size", sa.String(50), nullable=False, server_default=""),
        sa.Column("total_price", sa.Integer, nullable=False, server_default="0"),
        sa.Column("nm_id", sa.Integer, nullable=False, server_default="0"),
        sa.Column("brand", sa.String(255), nullable=False, server_default=""),
        sa.Column("status", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_items_order_id", "items", ["order_id"])


def downgrade() -> None:
    op.drop_index("ix_items_order_id", table_name="items")
    op.drop_table("items")
    op.drop_table("payment")
    op.drop_table("delivery")
    op.drop_index("ix_orders_created_at", table_name="orders")
    op.drop_index("ix_orders_order_uid", table_name="orders")
    op.drop_table("orders")
