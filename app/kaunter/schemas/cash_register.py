from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class CashRegisterActionRequest(BaseModel):
    action: Literal["OPEN", "CLOSE"]
    starting_capital: Decimal | None = Field(default=None, ge=0)
    cash_register_id: UUID | None = None
    actual_cash_counted: Decimal | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _require_action_fields(self):
        if self.action == "OPEN" and self.starting_capital is None:
            raise ValueError("starting_capital is required for OPEN")
        if self.action == "CLOSE":
            if self.cash_register_id is None:
                raise ValueError("cash_register_id is required for CLOSE")
            if self.actual_cash_counted is None:
                raise ValueError("actual_cash_counted is required for CLOSE")
        return self


class CashRegisterSummary(BaseModel):
    id: str
    business_date: date
    status: Literal["OPEN", "CLOSED"]
    starting_capital: float
    cash_sales_total: float
    expected_cash: float
    actual_cash_counted: float | None
    surplus_shortage: float | None
    is_closed: bool
    opened_at: datetime
    closed_at: datetime | None


class CashRegisterCurrentResponse(BaseModel):
    cash_register: CashRegisterSummary | None


class CashRegisterHistoryResponse(BaseModel):
    rows: list[CashRegisterSummary]
    total: int
