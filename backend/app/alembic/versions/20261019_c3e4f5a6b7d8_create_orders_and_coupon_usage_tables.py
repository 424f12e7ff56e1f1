"""create orders and coupon_usage tables

Revision ID: c3e4f5a6b7d8
Revises: b2d3e4f5a6c7
Create Date: 2026-10-19 00:00:02.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "c3e4f5a6b7d8"
down_revision = "b2d3e4f5a6c7"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("plan_id", sa.String(length=36), nullable=True),
        sa.Column("node_location", sa.String(length=255), nullable=False),
        sa.Column("cpu", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("ram", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("disk", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("databases", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("backups", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("original_price", sa.Numeric(precision=14, scale=6), nullable=False),
        sa.Column(
            "discount_amount",
            sa.Numeric(precision=14, scale=6),
            nullable=False,
            server_default="0",
        ),
        sa.Column("final_price", sa.Numeric(precision=14, scale=6), nullable=False),
        sa.Column("coupon_id", sa.String(length=36), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("payment_reference", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.CheckConstraint("discount_amount >= 0", name="ck_orders_discount_non_negative"),
        sa.CheckConstraint("final_price >= 0", name="ck_orders_final_price_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    op.create_index("ix_orders_plan_id", "orders", ["plan_id"])
    op.create_index("ix_orders_coupon_id", "orders", ["coupon_id"])
    op.create_index("ix_orders_status", "orders", ["status"])

    op.create_table(
        "coupon_usage",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("coupon_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("order_id", sa.String(length=36), nullable=False),
        sa.Column("discount_amount", sa.Numeric(precision=14, scale=6), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_coupon_usage_coupon_id", "coupon_usage", ["coupon_id"])
    op.create_index("ix_coupon_usage_user_id", "coupon_usage", ["user_id"])
    op.create_index("ix_coupon_usage_order_id", "coupon_usage", ["order_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_coupon_usage_order_id", table_name="coupon_usage")
    op.drop_index("ix_coupon_usage_user_id", table_name="coupon_usage")
    op.drop_index("ix_coupon_usage_coupon_id", table_name="coupon_usage")
    op.drop_table("coupon_usage")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_coupon_id", table_name="orders")
    op.drop_index("ix_orders_plan_id", table_name="orders")
    op.drop_index("ix_orders_user_id", table_name="orders")
    op.drop_table("orders")
