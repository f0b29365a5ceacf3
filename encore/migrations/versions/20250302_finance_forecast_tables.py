"""Commerce orders/subscriptions and finance forecast tables.

Revision ID: 20250302_finance_forecast_tables
Revises: 20250301_core_users_roles
Create Date: 2025-03-02
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20250302_finance_forecast_tables"
down_revision = "20250301_core_users_roles"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "commerce_product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("product_type", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "commerce_order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("commerce_product.id"), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_commerce_order_user_id", "commerce_order", ["user_id"])
    op.create_index("ix_commerce_order_status_created_at", "commerce_order", ["status", "created_at"])

    op.create_table(
        "commerce_subscription",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("plan_type", sa.String(length=32), nullable=False, server_default="monthly"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_commerce_subscription_user_id", "commerce_subscription", ["user_id"])
    op.create_index("ix_commerce_subscription_status", "commerce_subscription", ["status"])

    op.create_table(
        "finance_transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("external_transaction_id", sa.String(length=128), nullable=False),
        sa.Column("transaction_date", sa.DateTime(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=True, server_default="GBP"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("merchant_name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("source", "external_transaction_id", name="uq_finance_transaction_source_external"),
    )
    op.create_index("ix_finance_transaction_date", "finance_transaction", ["transaction_date"])

    op.create_table(
        "finance_transaction_category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "transaction_id",
            sa.Integer(),
            sa.ForeignKey("finance_transaction.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("is_auto_categorized", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("categorized_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("transaction_id", name="uq_finance_transaction_category_transaction"),
    )
    op.create_index(
        "ix_finance_transaction_category_category", "finance_transaction_category", ["category"]
    )

    op.create_table(
        "finance_expense_forecast_setting",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("frequency", sa.String(length=16), nullable=False, server_default="monthly"),
        sa.Column("expense_type", sa.String(length=16), nullable=False, server_default="fixed"),
        sa.Column("baseline_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("baseline_currency", sa.String(length=8), nullable=True, server_default="GBP"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("category", name="uq_finance_expense_forecast_setting_category"),
    )

    op.create_table(
        "finance_forecast_override",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("forecast_month", sa.Date(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("override_type", sa.String(length=16), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False, server_default="GBP"),
        sa.Column("is_baseline", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "forecast_month", "category", "override_type", name="uq_finance_forecast_override_cell"
        ),
    )
    op.create_index(
        "ix_finance_forecast_override_forecast_month", "finance_forecast_override", ["forecast_month"]
    )


def downgrade():
    op.drop_index("ix_finance_forecast_override_forecast_month", table_name="finance_forecast_override")
    op.drop_table("finance_forecast_override")
    op.drop_table("finance_expense_forecast_setting")
    op.drop_index("ix_finance_transaction_category_category", table_name="finance_transaction_category")
    op.drop_table("finance_transaction_category")
    op.drop_index("ix_finance_transaction_date", table_name="finance_transaction")
    op.drop_table("finance_transaction")
    op.drop_index("ix_commerce_subscription_status", table_name="commerce_subscription")
    op.drop_index("ix_commerce_subscription_user_id", table_name="commerce_subscription")
    op.drop_table("commerce_subscription")
    op.drop_index("ix_commerce_order_status_created_at", table_name="commerce_order")
    op.drop_index("ix_commerce_order_user_id", table_name="commerce_order")
    op.drop_table("commerce_order")
    op.drop_table("commerce_product")
