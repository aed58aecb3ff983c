from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select

from app.kaunter.db.models import AutomaticDiscount, PaymentMethod, Product


class CatalogRepository:
    def __init__(self, db):
        self.db = db

    def get_active_products(self, product_ids) -> dict:
        if not product_ids:
            return {}
        rows = (
            self.db.execute(select(Product).where(Product.id.in_(list(product_ids)), Product.is_active.is_(True)))
            .scalars()
            .all()
        )
        return {row.id: row for row in rows}

    def get_active_payment_method(self, payment_method_id) -> PaymentMethod | None:
        return (
            self.db.execute(
                select(PaymentMethod).where(
                    PaymentMethod.id == payment_method_id,
                    PaymentMethod.is_active.is_(True),
                )
            )
            .scalars()
            .first()
        )

    def list_qualifying_discounts(self, subtotal: Decimal) -> list[AutomaticDiscount]:
        return (
            self.db.execute(
                select(AutomaticDiscount).where(
                    AutomaticDiscount.is_active.is_(True),
                    AutomaticDiscount.minimum_amount <= subtotal,
                )
            )
            .scalars()
            .all()
        )
