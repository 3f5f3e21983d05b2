"""initial route sales schema

Revision ID: k6f7g8h9i0j1
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "k6f7g8h9i0j1"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("route", sa.Text(), nullable=True),
        sa.Column("opening_balance", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("outstanding_amount", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("product_prices", JSON_TYPE, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_customers_route", "customers", ["route"])

    op.create_table(
        "products",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("default_price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "route_infos",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("areas", JSON_TYPE, nullable=True),
        sa.Column("pincodes", JSON_TYPE, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "route_sheets",
        sa.Column("id", sa.String(length=120), nullable=False),
        sa.Column("route_id", sa.String(length=50), nullable=False),
        sa.Column("route_name", sa.Text(), nullable=False),
        sa.Column("customers", JSON_TYPE, nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False),
        sa.Column("delivery_data", JSON_TYPE, nullable=False),
        sa.Column("amount_received", JSON_TYPE, nullable=False),
        sa.Column("route_outstanding", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('active', 'closed')", name="ck_route_sheets_status"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_route_sheets_route_id", "route_sheets", ["route_id"])
    op.create_index("ix_route_sheets_status", "route_sheets", ["status"])
    op.create_index("ix_route_sheets_created_at", "route_sheets", ["created_at"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("invoice_number", sa.String(length=120), nullable=False),
        sa.Column("customer_id", sa.String(length=20), nullable=False),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("items", JSON_TYPE, nullable=False),
        sa.Column("subtotal", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("amount_received", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("balance_change", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False),
        sa.Column("route_id", sa.String(length=50), nullable=True),
        sa.Column("route_name", sa.Text(), nullable=True),
        sa.Column("sheet_id", sa.String(length=120), nullable=True),
        sa.Column("cash_amount", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("upi_amount", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("customer_final_balance", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.CheckConstraint("status IN ('paid', 'partial', 'pending')", name="ck_invoices_status"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_invoices_invoice_number", "invoices", ["invoice_number"], unique=True)
    op.create_index("ix_invoices_customer_id", "invoices", ["customer_id"])
    op.create_index("ix_invoices_sheet_id", "invoices", ["sheet_id"])
    op.create_index("ix_invoices_date", "invoices", ["date"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=20), nullable=False),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=12), nullable=False),
        sa.Column("items", JSON_TYPE, nullable=True),
        sa.Column("total_amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("amount_received", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("balance_change", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("invoice_number", sa.String(length=120), nullable=False),
        sa.Column("cash_amount", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("upi_amount", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("route_id", sa.String(length=50), nullable=True),
        sa.Column("route_name", sa.Text(), nullable=True),
        sa.Column("sheet_id", sa.String(length=120), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.CheckConstraint("type IN ('sale', 'payment', 'adjustment')", name="ck_transactions_type"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("invoice_number"),
    )
    op.create_index("ix_transactions_customer_id", "transactions", ["customer_id"])
    op.create_index("ix_transactions_type", "transactions", ["type"])
    op.create_index("ix_transactions_sheet_id", "transactions", ["sheet_id"])
    op.create_index("ix_transactions_date", "transactions", ["date"])

    op.create_table(
        "company_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_name", sa.Text(), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("company_settings")

    op.drop_index("ix_transactions_date", table_name="transactions")
    op.drop_index("ix_transactions_sheet_id", table_name="transactions")
    op.drop_index("ix_transactions_type", table_name="transactions")
    op.drop_index("ix_transactions_customer_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_invoices_date", table_name="invoices")
    op.drop_index("ix_invoices_sheet_id", table_name="invoices")
    op.drop_index("ix_invoices_customer_id", table_name="invoices")
    op.drop_index("ix_invoices_invoice_number", table_name="invoices")
    op.drop_table("invoices")

    op.drop_index("ix_route_sheets_created_at", table_name="route_sheets")
    op.drop_index("ix_route_sheets_status", table_name="route_sheets")
    op.drop_index("ix_route_sheets_route_id", table_name="route_sheets")
    op.drop_table("route_sheets")

    op.drop_table("route_infos")
    op.drop_table("products")

    op.drop_index("ix_customers_route", table_name="customers")
    op.drop_table("customers")
