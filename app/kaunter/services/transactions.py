from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from app.kaunter.core.clock import utcnow
from app.kaunter.core.config import settings
from app.kaunter.core.error_catalog import AppError, ErrorCatalog
from app.kaunter.core.logging import log_json
from app.kaunter.core.metrics import metrics
from app.kaunter.db.models import PaymentMethod, Transaction, TransactionItem
from app.kaunter.repos.cash_registers import CashRegisterRepository
from app.kaunter.repos.catalog import CatalogRepository
from app.kaunter.repos.transactions import TransactionRepository
from app.kaunter.services import pricing
from app.kaunter.services.business_day import DateRange, business_today, day_range, resolve_timezone
from app.kaunter.services.receipts import generate_receipt_id

logger = logging.getLogger("kaunter.transactions")


@dataclass(frozen=True)
class CartItemInput:
    product_id: object
    quantity: int


def is_cash_method(method: PaymentMethod) -> bool:
    return method.name.strip().lower() == settings.CASH_PAYMENT_METHOD_NAME.strip().lower()


def merge_cart_items(items: Iterable[CartItemInput]) -> dict:
    quantities: dict = {}
    for item in items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


class TransactionService:
    def __init__(self, db):
        self.db = db
        self.catalog = CatalogRepository(db)
        self.registers = CashRegisterRepository(db)
        self.repo = TransactionRepository(db)

    def create(
        self,
        *,
        items: list[CartItemInput],
        payment_method_id,
        amount_received: Decimal | None = None,
    ) -> Transaction:
        register = self.registers.get_open_for_date(business_today(resolve_timezone()))
        if register is None:
            raise AppError(ErrorCatalog.NO_ACTIVE_CASH_REGISTER)

        quantities = merge_cart_items(items)
        products = self.catalog.get_active_products(quantities.keys())
        missing = [str(product_id) for product_id in quantities if product_id not in products]
        if missing:
            raise AppError(ErrorCatalog.PRODUCT_NOT_FOUND_OR_INACTIVE, details={"product_ids": missing})

        method = self.catalog.get_active_payment_method(payment_method_id)
        if method is None:
            raise AppError(
                ErrorCatalog.PAYMENT_METHOD_NOT_FOUND_OR_INACTIVE,
                details={"payment_method_id": str(payment_method_id)},
            )

        cart = [
            pricing.CartLine(
                product_id=product_id,
                quantity=quantity,
                unit_price=products[product_id].price_after_discount,
            )
            for product_id, quantity in quantities.items()
        ]
        subtotal = sum((pricing.line_total(line.unit_price, line.quantity) for line in cart), pricing.ZERO)
        result = pricing.price_cart(
            cart,
            discount_tiers=self.catalog.list_qualifying_discounts(subtotal),
            charge_percentage=method.transaction_charge_percentage,
            amount_received=amount_received,
        )
        cash_payment = is_cash_method(method)

        now = utcnow()
        transaction = Transaction(
            receipt_id=generate_receipt_id(now),
            cash_register_id=register.id,
            subtotal=result.subtotal,
            discount_amount=result.discount_amount,
            payment_charge=result.payment_charge,
            final_total=result.final_total,
            payment_method_id=method.id,
            amount_received=result.amount_received,
            change_amount=result.change_amount,
            transaction_time=now,
            created_at=now,
        )
        try:
            # Re-read under a row lock; the register may have closed since validation.
            locked = self.registers.get_by_id(register.id, for_update=True)
            if locked is None or locked.is_closed:
                raise AppError(ErrorCatalog.NO_ACTIVE_CASH_REGISTER, details={"cash_register_id": str(register.id)})
            self.db.add(transaction)
            self.db.flush()
            self.db.add_all(
                [
                    TransactionItem(
                        transaction_id=transaction.id,
                        line_number=index,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                        total_price=line.line_total,
                        created_at=now,
                    )
                    for index, line in enumerate(result.lines, start=1)
                ]
            )
            self.db.flush()
            if cash_payment and not self.registers.apply_cash_sale(register.id, result.final_total):
                raise AppError(ErrorCatalog.NO_ACTIVE_CASH_REGISTER, details={"cash_register_id": str(register.id)})
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        metrics.record_transaction(is_cash=cash_payment)
        log_json(
            logger,
            {
                "event": "transaction_created",
                "transaction_id": str(transaction.id),
                "receipt_id": transaction.receipt_id,
                "cash_register_id": str(register.id),
                "payment_method": method.name,
                "item_count": len(result.lines),
                "subtotal": str(result.subtotal),
                "discount_amount": str(result.discount_amount),
                "payment_charge": str(result.payment_charge),
                "final_total": str(result.final_total),
            },
        )
        return self.repo.get_by_id(transaction.id)

    def get_by_id(self, transaction_id) -> Transaction | None:
        return self.repo.get_by_id(transaction_id)

    def get_by_receipt_id(self, receipt_id: str) -> Transaction | None:
        return self.repo.get_by_receipt_id(receipt_id)

    def list_today(self) -> list[Transaction]:
        tz = resolve_timezone()
        return self.list_in_range(day_range(business_today(tz), tz))

    def list_in_range(self, date_range: DateRange) -> list[Transaction]:
        return self.repo.list_between(date_range.start_utc, date_range.end_utc)
