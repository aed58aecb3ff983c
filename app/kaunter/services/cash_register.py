from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from app.kaunter.core.clock import utcnow
from app.kaunter.core.error_catalog import AppError, ErrorCatalog
from app.kaunter.core.logging import log_json
from app.kaunter.core.metrics import metrics
from app.kaunter.db.models import CashRegister
from app.kaunter.repos.cash_registers import CashRegisterRepository
from app.kaunter.services.business_day import business_today, resolve_timezone
from app.kaunter.services.pricing import ZERO, to_money

logger = logging.getLogger("kaunter.cash_register")


class CashRegisterService:
    """Daily cash drawer lifecycle: NONE -> OPEN -> CLOSED, one register per business date."""

    def __init__(self, db):
        self.db = db
        self.repo = CashRegisterRepository(db)

    def today(self):
        return business_today(resolve_timezone())

    def current(self) -> CashRegister | None:
        return self.repo.get_open_for_date(self.today())

    def for_today(self) -> CashRegister | None:
        return self.repo.get_for_date(self.today())

    def history(self) -> list[CashRegister]:
        return self.repo.list_history()

    def open(self, starting_capital: Decimal) -> CashRegister:
        business_date = self.today()
        open_registers = self.repo.list_open()
        if open_registers:
            raise AppError(
                ErrorCatalog.CASH_REGISTER_ALREADY_OPEN,
                details={
                    "message": "close the open cash register first",
                    "cash_register_id": str(open_registers[0].id),
                    "business_date": open_registers[0].business_date.isoformat(),
                },
            )
        if self.repo.get_for_date(business_date) is not None:
            raise AppError(
                ErrorCatalog.CASH_REGISTER_ALREADY_CLOSED,
                details={"message": "cash register for today is already closed", "business_date": business_date.isoformat()},
            )

        starting_capital = to_money(starting_capital)
        register = CashRegister(
            business_date=business_date,
            starting_capital=starting_capital,
            cash_sales_total=ZERO,
            expected_cash=starting_capital,
            actual_cash_counted=None,
            surplus_shortage=None,
            is_closed=False,
            opened_at=utcnow(),
        )
        self.db.add(register)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # another request opened today's register between the check and the insert
            self.db.rollback()
            raise AppError(
                ErrorCatalog.CASH_REGISTER_ALREADY_OPEN,
                details={"message": "cash register for today already exists", "business_date": business_date.isoformat()},
            ) from exc
        self.db.refresh(register)
        metrics.record_cash_register_event("open")
        log_json(
            logger,
            {
                "event": "cash_register_opened",
                "cash_register_id": str(register.id),
                "business_date": register.business_date.isoformat(),
                "starting_capital": str(register.starting_capital),
            },
        )
        return register

    def close(self, register_id, actual_cash_counted: Decimal) -> CashRegister:
        register = self.repo.get_by_id(register_id, for_update=True)
        if register is None:
            raise AppError(ErrorCatalog.CASH_REGISTER_NOT_FOUND, details={"cash_register_id": str(register_id)})
        if register.is_closed:
            raise AppError(ErrorCatalog.CASH_REGISTER_ALREADY_CLOSED, details={"cash_register_id": str(register.id)})

        counted = to_money(actual_cash_counted)
        expected = Decimal(register.starting_capital) + Decimal(register.cash_sales_total)
        register.expected_cash = expected
        register.actual_cash_counted = counted
        register.surplus_shortage = counted - expected
        register.is_closed = True
        register.closed_at = utcnow()
        self.db.commit()
        self.db.refresh(register)
        metrics.record_cash_register_event("close")
        log_json(
            logger,
            {
                "event": "cash_register_closed",
                "cash_register_id": str(register.id),
                "business_date": register.business_date.isoformat(),
                "expected_cash": str(register.expected_cash),
                "actual_cash_counted": str(register.actual_cash_counted),
                "surplus_shortage": str(register.surplus_shortage),
            },
        )
        return register
