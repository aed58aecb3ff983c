"""cash registers and transactions

Revision ID: 0002_cash_registers_transactions
Revises: 0001_catalog
Create Date: 2026-10-06 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_cash_registers_transactions"
down_revision = "0001_catalog"
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


def upgrade() -> None:
    op.create_table(
        "cash_registers",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("business_date", sa.Date(), nullable=False),
        sa.Column("starting_capital", sa.Numeric(10, 2), nullable=False),
        sa.Column("cash_sales_total", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("expected_cash", sa.Numeric(10, 2), nullable=False),
        sa.Column("actual_cash_counted", sa.Numeric(10, 2), nullable=True),
        sa.Column("surplus_shortage", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_closed", sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column("opened_at", sa.DateTime(), nullable=False),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("business_date", name="uq_cash_registers_business_date"),
    )
    op.create_table(
        "transactions",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("receipt_id", sa.String(length=50), nullable=False, unique=True),
        sa.Column("cash_register_id", GUID(), sa.ForeignKey("cash_registers.id"), nullable=False, index=True),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("payment_charge", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("final_total", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method_id", GUID(), sa.ForeignKey("payment_methods.id"), nullable=False),
        sa.Column("amount_received", sa.Numeric(10, 2), nullable=True),
        sa.Column("change_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("transaction_time", sa.DateTime(), nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "transaction_items",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("transaction_id", GUID(), sa.ForeignKey("transactions.id"), nullable=False, index=True),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_transaction_items_quantity_positive"),
    )


def downgrade() -> None:
    op.drop_table("transaction_items")
    op.drop_table("transactions")
    op.drop_table("cash_registers")
