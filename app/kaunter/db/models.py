import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator, CHAR

from app.kaunter.core.clock import utcnow


class GUID(TypeDecorator):
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(value))

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


Money = Numeric(10, 2, asdecimal=True)
Percentage = Numeric(5, 2, asdecimal=True)


class Base(DeclarativeBase):
    pass


class ProductCategory(Base):
    __tablename__ = "product_categories"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    product_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("product_categories.id"), index=True, nullable=False
    )
    original_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount_percentage: Mapped[Decimal] = mapped_column(Percentage, default=Decimal("0"), nullable=False)
    price_after_discount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship("ProductCategory", back_populates="products")


class PaymentMethod(Base):
    __tablename__ = "payment_methods"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    transaction_charge_percentage: Mapped[Decimal] = mapped_column(
        Percentage, default=Decimal("0"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class AutomaticDiscount(Base):
    __tablename__ = "automatic_discounts"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    minimum_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount_percentage: Mapped[Decimal] = mapped_column(Percentage, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class CashRegister(Base):
    __tablename__ = "cash_registers"
    __table_args__ = (UniqueConstraint("business_date", name="uq_cash_registers_business_date"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    business_date: Mapped[date] = mapped_column(Date, nullable=False)
    starting_capital: Mapped[Decimal] = mapped_column(Money, nullable=False)
    cash_sales_total: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    expected_cash: Mapped[Decimal] = mapped_column(Money, nullable=False)
    actual_cash_counted: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    surplus_shortage: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    opened_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    receipt_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    cash_register_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("cash_registers.id"), index=True, nullable=False
    )
    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    payment_charge: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    final_total: Mapped[Decimal] = mapped_column(Money, nullable=False)
    payment_method_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("payment_methods.id"), nullable=False)
    amount_received: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    change_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    transaction_time: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    items = relationship("TransactionItem", back_populates="transaction", order_by="TransactionItem.line_number")
    payment_method = relationship("PaymentMethod")


class TransactionItem(Base):
    __tablename__ = "transaction_items"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_transaction_items_quantity_positive"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("transactions.id"), index=True, nullable=False
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("products.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    transaction = relationship("Transaction", back_populates="items")
    product = relationship("Product")
