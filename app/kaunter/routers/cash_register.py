from __future__ import annotations

from fastapi import APIRouter, Depends

from app.kaunter.db.models import CashRegister
from app.kaunter.db.session import get_db
from app.kaunter.schemas.cash_register import (
    CashRegisterActionRequest,
    CashRegisterCurrentResponse,
    CashRegisterHistoryResponse,
    CashRegisterSummary,
)
from app.kaunter.services.cash_register import CashRegisterService


router = APIRouter()


def _money(value) -> float | None:
    return float(value) if value is not None else None


def _register_summary(register: CashRegister) -> CashRegisterSummary:
    return CashRegisterSummary(
        id=str(register.id),
        business_date=register.business_date,
        status="CLOSED" if register.is_closed else "OPEN",
        starting_capital=_money(register.starting_capital),
        cash_sales_total=_money(register.cash_sales_total),
        expected_cash=_money(register.expected_cash),
        actual_cash_counted=_money(register.actual_cash_counted),
        surplus_shortage=_money(register.surplus_shortage),
        is_closed=register.is_closed,
        opened_at=register.opened_at,
        closed_at=register.closed_at,
    )


@router.get("/kaunter/cash-register/current", response_model=CashRegisterCurrentResponse)
def get_current_cash_register(db=Depends(get_db)):
    register = CashRegisterService(db).current()
    return CashRegisterCurrentResponse(cash_register=_register_summary(register) if register else None)


@router.get("/kaunter/cash-register/today", response_model=CashRegisterCurrentResponse)
def get_today_cash_register(db=Depends(get_db)):
    register = CashRegisterService(db).for_today()
    return CashRegisterCurrentResponse(cash_register=_register_summary(register) if register else None)


@router.get("/kaunter/cash-register/history", response_model=CashRegisterHistoryResponse)
def get_cash_register_history(db=Depends(get_db)):
    rows = [_register_summary(register) for register in CashRegisterService(db).history()]
    return CashRegisterHistoryResponse(rows=rows, total=len(rows))


@router.post("/kaunter/cash-register/actions", response_model=CashRegisterSummary)
def cash_register_action(payload: CashRegisterActionRequest, db=Depends(get_db)):
    service = CashRegisterService(db)
    if payload.action == "OPEN":
        register = service.open(payload.starting_capital)
    else:
        register = service.close(payload.cash_register_id, payload.actual_cash_counted)
    return _register_summary(register)
