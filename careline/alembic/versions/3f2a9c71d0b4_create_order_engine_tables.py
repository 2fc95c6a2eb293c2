"""create order engine tables

Revision ID: 3f2a9c71d0b4
Revises:
Create Date: 2026-10-12
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c71d0b4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE = sa.Enum(
    "patient", "healthcare_provider", "facility_admin", "admin", "delivery_agent",
    name="role",
)
FACILITY_TYPE = sa.Enum("clinic", "pharmacy", "hospital", name="facility_type")
PRESCRIPTION_STATUS = sa.Enum(
    "draft", "issued", "fulfilled", "cancelled", "revoked",
    name="prescription_status",
)
ORDER_STATUS = sa.Enum(
    "pending", "confirmed", "preparing", "ready_for_pickup", "out_for_delivery", "delivered", "cancelled",
    name="order_status",
)
NOTIFICATION_TYPE = sa.Enum(
    "order_created", "order_status_changed", "order_delivered", "order_cancelled",
    name="notification_type",
)
NOTIFICATION_CHANNEL = sa.Enum("in_app", name="notification_channel")

PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", ROLE, nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "facilities",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("type", FACILITY_TYPE, nullable=False),
        sa.Column("admin_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("active", sa.Boolean(), nullable=False),
    )

    op.create_table(
        "facility_medicines",
        sa.Column("id", PK, primary_key=True),
        sa.Column("facility_id", sa.BigInteger(), sa.ForeignKey("facilities.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(128)),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("reorder_level", sa.Integer(), nullable=False),
        sa.Column("requires_prescription", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("facility_id", "name", name="uq_facility_medicine_name"),
        sa.CheckConstraint("stock >= 0", name="ck_facility_medicine_stock_nonneg"),
        sa.CheckConstraint("price >= 0", name="ck_facility_medicine_price_nonneg"),
    )
    op.create_index("ix_facility_medicines_facility_id", "facility_medicines", ["facility_id"])

    op.create_table(
        "prescriptions",
        sa.Column("id", PK, primary_key=True),
        sa.Column("patient_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("facility_id", sa.BigInteger(), sa.ForeignKey("facilities.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", PRESCRIPTION_STATUS, nullable=False),
        sa.Column("diagnosis", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_prescriptions_patient_id", "prescriptions", ["patient_id"])

    op.create_table(
        "orders",
        sa.Column("id", PK, primary_key=True),
        sa.Column("order_number", sa.String(64), nullable=False, unique=True),
        sa.Column("patient_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("facility_id", sa.BigInteger(), sa.ForeignKey("facilities.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("prescription_id", sa.BigInteger(), sa.ForeignKey("prescriptions.id", ondelete="RESTRICT")),
        sa.Column("status", ORDER_STATUS, nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("delivery_address", sa.String(255)),
        sa.Column("delivery_phone", sa.String(32)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("total_amount >= 0", name="ck_order_total_nonneg"),
    )
    op.create_index("ix_orders_patient_id", "orders", ["patient_id"])
    op.create_index("ix_orders_facility_id", "orders", ["facility_id"])
    op.create_index("ix_orders_facility_created", "orders", ["facility_id", "created_at"])

    op.create_table(
        "order_items",
        sa.Column("id", PK, primary_key=True),
        sa.Column("order_id", sa.BigInteger(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "medicine_id",
            sa.BigInteger(),
            sa.ForeignKey("facility_medicines.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.UniqueConstraint("order_id", "position", name="uq_order_item_position"),
        sa.CheckConstraint("quantity > 0", name="ck_order_item_qty_pos"),
        sa.CheckConstraint("unit_price >= 0", name="ck_order_item_unit_price_nonneg"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "notifications",
        sa.Column("id", PK, primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order_id", sa.BigInteger(), sa.ForeignKey("orders.id", ondelete="CASCADE")),
        sa.Column("type", NOTIFICATION_TYPE, nullable=False),
        sa.Column("channel", NOTIFICATION_CHANNEL, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notifications_user_created", "notifications", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("ix_orders_facility_created", table_name="orders")
    op.drop_index("ix_orders_facility_id", table_name="orders")
    op.drop_index("ix_orders_patient_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_prescriptions_patient_id", table_name="prescriptions")
    op.drop_table("prescriptions")
    op.drop_index("ix_facility_medicines_facility_id", table_name="facility_medicines")
    op.drop_table("facility_medicines")
    op.drop_table("facilities")
    op.drop_table("users")

    # Postgres : les types ENUM survivent au DROP TABLE
    bind = op.get_bind()
    for enum_type in (
        NOTIFICATION_CHANNEL,
        NOTIFICATION_TYPE,
        ORDER_STATUS,
        PRESCRIPTION_STATUS,
        FACILITY_TYPE,
        ROLE,
    ):
        enum_type.drop(bind, checkfirst=True)
