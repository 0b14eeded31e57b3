from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


revision = "0001_milk_ops_base"
down_revision = None
branch_labels = None
depends_on = None


def _has_index(inspector, table_name: str, index_name: str) -> bool:
    return any(idx["name"] == index_name for idx in inspector.get_indexes(table_name))


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)

    if "orders" not in inspector.get_table_names():
        op.create_table(
            "orders",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("customer_name", sa.String(length=120), nullable=False, server_default=""),
            sa.Column("customer_phone", sa.String(length=30), nullable=False),
            sa.Column("customer_address", sa.Text(), nullable=False, server_default=""),
            sa.Column("location_link", sa.String(length=500), nullable=True),
            sa.Column("order_date", sa.Date(), nullable=False),
            sa.Column("quantity", sa.Float(), nullable=False, server_default="0"),
            sa.Column("price_per_liter", sa.Float(), nullable=False, server_default="0"),
            sa.Column("total_amount", sa.Float(), nullable=False, server_default="0"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("payment_type", sa.String(length=20), nullable=False, server_default="offline"),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_orders_customer_phone", "orders", ["customer_phone"], unique=False)
        op.create_index("ix_orders_order_date", "orders", ["order_date"], unique=False)

    inspector = inspect(bind)
    if "user_profiles" not in inspector.get_table_names():
        op.create_table(
            "user_profiles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("phone", sa.String(length=30), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_user_profiles_phone", "user_profiles", ["phone"], unique=False)

    inspector = inspect(bind)
    if "user_addresses" not in inspector.get_table_names():
        op.create_table(
            "user_addresses",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("profile_id", sa.Integer(), sa.ForeignKey("user_profiles.id"), nullable=False),
            sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("address", sa.Text(), nullable=False, server_default=""),
            sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("lat", sa.Float(), nullable=True),
            sa.Column("lng", sa.Float(), nullable=True),
            sa.Column("live_location_link", sa.String(length=500), nullable=True),
        )
        op.create_index("ix_user_addresses_profile_id", "user_addresses", ["profile_id"], unique=False)

    inspector = inspect(bind)
    if "subscriptions" not in inspector.get_table_names():
        op.create_table(
            "subscriptions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("customer_name", sa.String(length=120), nullable=False),
            sa.Column("customer_phone", sa.String(length=30), nullable=False),
            sa.Column("customer_address", sa.Text(), nullable=False),
            sa.Column("map_link", sa.String(length=500), nullable=True),
            sa.Column("quantity", sa.Float(), nullable=False),
            sa.Column("price_per_liter", sa.Float(), nullable=False),
            sa.Column("total_amount", sa.Float(), nullable=False),
            sa.Column("frequency", sa.String(length=20), nullable=False, server_default="daily"),
            sa.Column("delivery_days", sa.JSON(), nullable=False),
            sa.Column("start_date", sa.Date(), nullable=False),
            sa.Column("end_date", sa.Date(), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
            sa.Column("payment_type", sa.String(length=20), nullable=False, server_default="online"),
            sa.Column("payment_status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("auto_renew", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_subscriptions_customer_phone", "subscriptions", ["customer_phone"], unique=False)
        op.create_index("ix_subscriptions_status", "subscriptions", ["status"], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)

    for table_name, index_names in (
        ("subscriptions", ["ix_subscriptions_status", "ix_subscriptions_customer_phone"]),
        ("user_addresses", ["ix_user_addresses_profile_id"]),
        ("user_profiles", ["ix_user_profiles_phone"]),
        ("orders", ["ix_orders_order_date", "ix_orders_customer_phone"]),
    ):
        if table_name not in inspector.get_table_names():
            continue
        for index_name in index_names:
            if _has_index(inspector, table_name, index_name):
                op.drop_index(index_name, table_name=table_name)
        op.drop_table(table_name)
        inspector = inspect(bind)
