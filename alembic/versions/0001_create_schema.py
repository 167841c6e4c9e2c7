from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "0001_create_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    existing = set(inspector.get_table_names())

    if "menu_items" not in existing:
        op.create_table(
            "menu_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("price", sa.Numeric(10, 2), nullable=False),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("image_url", sa.String(length=500), nullable=True),
            sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
        )
        op.create_index("ix_menu_items_category_name", "menu_items", ["category", "name"], unique=False)

    if "categories" not in existing:
        op.create_table(
            "categories",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=100), nullable=False, unique=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
        )

    if "inventory_items" not in existing:
        op.create_table(
            "inventory_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("sku", sa.String(length=100), nullable=False, unique=True),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("current_stock", sa.Numeric(10, 2), nullable=False, server_default="0"),
            sa.Column("minimum_stock", sa.Numeric(10, 2), nullable=False, server_default="0"),
            sa.Column("unit", sa.String(length=50), nullable=False),
            sa.Column("cost_per_unit", sa.Numeric(10, 2), nullable=False),
            sa.Column("supplier", sa.String(length=255), nullable=True),
            sa.Column("last_restock_date", sa.DateTime(timezone=True), nullable=True),
            sa.Column("expiry_date", sa.Date(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_inventory_items_category", "inventory_items", ["category"], unique=False)

    if "inventory_transactions" not in existing:
        op.create_table(
            "inventory_transactions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("inventory_item_id", sa.Integer(), sa.ForeignKey("inventory_items.id"), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False),
            sa.Column("quantity", sa.Numeric(10, 2), nullable=False),
            sa.Column("unit_cost", sa.Numeric(10, 2), nullable=True),
            sa.Column("total_cost", sa.Numeric(10, 2), nullable=True),
            sa.Column("reason", sa.Text(), nullable=True),
            sa.Column("reference_id", sa.String(length=100), nullable=True),
            sa.Column("created_by", sa.String(length=255), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.CheckConstraint("quantity > 0", name="ck_inventory_transactions_quantity_positive"),
        )
        op.create_index(
            "ix_inventory_transactions_inventory_item_id",
            "inventory_transactions",
            ["inventory_item_id"],
            unique=False,
        )

    if "members" not in existing:
        op.create_table(
            "members",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False, unique=True),
            sa.Column("phone", sa.String(length=50), nullable=True, unique=True),
            sa.Column("membership_level", sa.String(length=20), nullable=False, server_default="Bronze"),
            sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("balance", sa.Numeric(10, 2), nullable=False, server_default="0"),
            sa.Column("member_since", sa.Date(), nullable=False, server_default=sa.func.current_date()),
            *_timestamps(),
            sa.CheckConstraint("balance >= 0", name="ck_members_balance_non_negative"),
            sa.CheckConstraint("points >= 0", name="ck_members_points_non_negative"),
        )

    if "orders" not in existing:
        op.create_table(
            "orders",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=True),
            sa.Column("customer_name", sa.String(length=255), nullable=True),
            sa.Column("customer_email", sa.String(length=255), nullable=True),
            sa.Column("customer_phone", sa.String(length=50), nullable=True),
            sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("order_type", sa.String(length=20), nullable=False, server_default="dine-in"),
            sa.Column("payment_method", sa.String(length=30), nullable=False, server_default="cash"),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("points_used", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
        )
        op.create_index("ix_orders_member_id", "orders", ["member_id"], unique=False)
        op.create_index("ix_orders_status", "orders", ["status"], unique=False)

    if "order_items" not in existing:
        op.create_table(
            "order_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
            sa.Column(
                "menu_item_id",
                sa.Integer(),
                sa.ForeignKey("menu_items.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("menu_item_name", sa.String(length=255), nullable=False),
            sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
            sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
            sa.Column("customizations", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_order_items_order_id", "order_items", ["order_id"], unique=False)
        op.create_index("ix_order_items_menu_item_id", "order_items", ["menu_item_id"], unique=False)

    if "member_transactions" not in existing:
        op.create_table(
            "member_transactions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False),
            sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=True),
            sa.Column("transaction_type", sa.String(length=20), nullable=False),
            sa.Column("amount", sa.Numeric(10, 2), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("balance_after", sa.Numeric(10, 2), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_member_transactions_member_id", "member_transactions", ["member_id"], unique=False)
        op.create_index("ix_member_transactions_order_id", "member_transactions", ["order_id"], unique=False)

    if "reservations" not in existing:
        op.create_table(
            "reservations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.String(length=100), nullable=True),
            sa.Column("customer_name", sa.String(length=255), nullable=False),
            sa.Column("customer_phone", sa.String(length=50), nullable=False),
            sa.Column("customer_email", sa.String(length=255), nullable=True),
            sa.Column("party_size", sa.Integer(), nullable=False),
            sa.Column("reservation_time", sa.DateTime(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("notes", sa.Text(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_reservations_reservation_time", "reservations", ["reservation_time"], unique=False)
        op.create_index("ix_reservations_user_id", "reservations", ["user_id"], unique=False)

    if "wishlist" not in existing:
        op.create_table(
            "wishlist",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "menu_item_id",
                sa.Integer(),
                sa.ForeignKey("menu_items.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("user_id", sa.String(length=100), nullable=True),
            sa.Column("guest_id", sa.String(length=100), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_wishlist_menu_item_id", "wishlist", ["menu_item_id"], unique=False)
        op.create_index("ix_wishlist_user_id", "wishlist", ["user_id"], unique=False)
        op.create_index("ix_wishlist_guest_id", "wishlist", ["guest_id"], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    existing = set(inspector.get_table_names())

    for table in (
        "wishlist",
        "reservations",
        "member_transactions",
        "order_items",
        "orders",
        "members",
        "inventory_transactions",
        "inventory_items",
        "categories",
        "menu_items",
    ):
        if table in existing:
            op.drop_table(table)
