"""Initial database schema - users, roles, outlets, inventory, requests, vendors, purchase orders, deliveries

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19
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
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # --- User roles ---
    op.create_table(
        "user_roles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("role", sa.String(30), nullable=False, server_default="customer"),
        *_timestamps(),
    )
    op.create_index("ix_user_roles_role", "user_roles", ["role"])

    # --- Outlets ---
    op.create_table(
        "outlets",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text),
        sa.Column("phone", sa.String(20)),
        sa.Column("email", sa.String(255)),
        sa.Column("status", sa.String(30), nullable=False, server_default="active"),
        *_timestamps(),
    )

    # --- Inventory ---
    op.create_table(
        "inventory",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("reorder_level", sa.Integer, nullable=False, server_default="0"),
        sa.Column("price_per_unit", sa.Numeric(12, 2), nullable=False),
        sa.Column("unit", sa.String(50), nullable=False),
        sa.Column("category", sa.String(100)),
        sa.Column("last_restocked", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        sa.CheckConstraint("reorder_level >= 0", name="ck_inventory_reorder_level_non_negative"),
    )
    op.create_index("ix_inventory_name", "inventory", ["name"])
    op.create_index("ix_inventory_category", "inventory", ["category"])

    # --- Vendors ---
    op.create_table(
        "vendors",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_person", sa.String(255)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(20)),
        sa.Column("address", sa.Text),
        sa.Column("status", sa.String(30), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_vendors_name", "vendors", ["name"])

    op.create_table(
        "vendor_products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("vendor_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("minimum_order_quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("lead_time_days", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("vendor_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False),
        sa.Column("inventory_item_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("inventory.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("vendor_id", "inventory_item_id", name="uq_vendor_product_item"),
    )
    op.create_index("ix_vendor_products_vendor_id", "vendor_products", ["vendor_id"])
    op.create_index("ix_vendor_products_inventory_item_id", "vendor_products", ["inventory_item_id"])

    # --- Purchase orders ---
    op.create_table(
        "purchase_orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("po_number", sa.String(50), nullable=False, unique=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="pending"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("order_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expected_delivery_date", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text),
        sa.Column("outlet_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("outlets.id"), nullable=False),
        sa.Column("vendor_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("created_by_user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(),
    )
    op.create_index("ix_purchase_orders_po_number", "purchase_orders", ["po_number"])
    op.create_index("ix_purchase_orders_outlet_id", "purchase_orders", ["outlet_id"])
    op.create_index("ix_purchase_orders_vendor_id", "purchase_orders", ["vendor_id"])
    op.create_index("ix_purchase_orders_status_created", "purchase_orders", ["status", "created_at"])

    op.create_table(
        "purchase_order_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("purchase_order_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("inventory_item_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("inventory.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_purchase_order_items_purchase_order_id", "purchase_order_items", ["purchase_order_id"])

    # --- Inventory requests ---
    op.create_table(
        "inventory_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("staff_entered_quantity", sa.Integer, nullable=False),
        sa.Column("requested_quantity", sa.Integer, nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("status", sa.String(30), nullable=False, server_default="pending"),
        sa.Column("rejected_reason", sa.Text),
        sa.Column("approved_at", sa.DateTime(timezone=True)),
        sa.Column("idempotency_key", sa.String(64), unique=True),
        sa.Column("inventory_item_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("inventory.id", ondelete="CASCADE"), nullable=False),
        sa.Column("requested_by_user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("approved_by_user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("purchase_order_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("purchase_orders.id", ondelete="SET NULL")),
        *_timestamps(),
    )
    op.create_index("ix_inventory_requests_idempotency_key", "inventory_requests", ["idempotency_key"])
    op.create_index("ix_inventory_requests_inventory_item_id", "inventory_requests", ["inventory_item_id"])
    op.create_index("ix_inventory_requests_purchase_order_id", "inventory_requests", ["purchase_order_id"])
    op.create_index("ix_inventory_requests_status_created", "inventory_requests", ["status", "created_at"])

    op.create_table(
        "inventory_request_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("previous_status", sa.String(30)),
        sa.Column("new_status", sa.String(30), nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("inventory_request_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("inventory_requests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
    )
    op.create_index("ix_inventory_request_history_inventory_request_id", "inventory_request_history", ["inventory_request_id"])

    # --- Deliveries ---
    op.create_table(
        "deliveries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("delivery_number", sa.String(50), nullable=False, unique=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="scheduled"),
        sa.Column("delivery_date", sa.DateTime(timezone=True)),
        sa.Column("received_date", sa.DateTime(timezone=True)),
        sa.Column("tracking_number", sa.String(100)),
        sa.Column("notes", sa.Text),
        sa.Column("stock_applied_at", sa.DateTime(timezone=True)),
        sa.Column("purchase_order_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("purchase_orders.id"), nullable=False),
        sa.Column("vendor_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("outlet_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("outlets.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_deliveries_delivery_number", "deliveries", ["delivery_number"])
    op.create_index("ix_deliveries_status", "deliveries", ["status"])
    op.create_index("ix_deliveries_purchase_order_id", "deliveries", ["purchase_order_id"])

    op.create_table(
        "delivery_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("ordered_quantity", sa.Integer, nullable=False),
        sa.Column("delivered_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("received_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("delivery_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("deliveries.id", ondelete="CASCADE"), nullable=False),
        sa.Column("inventory_item_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("inventory.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_delivery_items_delivery_id", "delivery_items", ["delivery_id"])


def downgrade() -> None:
    op.drop_table("delivery_items")
    op.drop_table("deliveries")
    op.drop_table("inventory_request_history")
    op.drop_table("inventory_requests")
    op.drop_table("purchase_order_items")
    op.drop_table("purchase_orders")
    op.drop_table("vendor_products")
    op.drop_table("vendors")
    op.drop_table("inventory")
    op.drop_table("outlets")
    op.drop_table("user_roles")
    op.drop_table("users")
