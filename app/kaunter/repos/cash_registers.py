from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select, update

from app.kaunter.db.models import CashRegister


class CashRegisterRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, register_id, *, for_update: bool = False) -> CashRegister | None:
        query = select(CashRegister).where(CashRegister.id == register_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(query).scalars().first()

    def get_for_date(self, business_date: date) -> CashRegister | None:
        return (
            self.db.execute(select(CashRegister).where(CashRegister.business_date == business_date))
            .scalars()
            .first()
        )

    def get_open_for_date(self, business_date: date, *, for_update: bool = False) -> CashRegister | None:
        query = select(CashRegister).where(
            CashRegister.business_date == business_date,
            CashRegister.is_closed.is_(False),
        )
        if for_update:
            query = query.with_for_update()
        return self.db.execute(query).scalars().first()

    def list_open(self) -> list[CashRegister]:
        return (
            self.db.execute(
                select(CashRegister).where(CashRegister.is_closed.is_(False)).order_by(CashRegister.business_date)
            )
            .scalars()
            .all()
        )

    def list_history(self) -> list[CashRegister]:
        return (
            self.db.execute(select(CashRegister).order_by(CashRegister.business_date.desc()))
            .scalars()
            .all()
        )

    def apply_cash_sale(self, register_id, amount: Decimal) -> bool:
        """Atomically add a cash sale to an open register.

        Both columns are derived from the row's current values inside the
        UPDATE itself, so concurrent sales never overwrite each other.
        Returns False when the register is no longer open.
        """
        result = self.db.execute(
            update(CashRegister)
            .where(CashRegister.id == register_id, CashRegister.is_closed.is_(False))
            .values(
                cash_sales_total=CashRegister.cash_sales_total + amount,
                expected_cash=CashRegister.starting_capital + CashRegister.cash_sales_total + amount,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
