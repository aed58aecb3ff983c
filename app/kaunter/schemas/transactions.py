from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class TransactionItemRequest(BaseModel):
    product_id: UUID
    quantity: int = Field(gt=0)


class TransactionCreateRequest(BaseModel):
    items: list[TransactionItemRequest] = Field(min_length=1)
    payment_method_id: UUID
    amount_received: Decimal | None = Field(default=None, ge=0)


class TransactionItemResponse(BaseModel):
    id: str
    line_number: int
    product_id: str
    product_code: str | None
    product_name: str | None
    quantity: int
    unit_price: float
    total_price: float


class TransactionResponse(BaseModel):
    id: str
    receipt_id: str
    cash_register_id: str
    subtotal: float
    discount_amount: float
    payment_charge: float
    final_total: float
    payment_method_id: str
    payment_method_name: str | None
    amount_received: float | None
    change_amount: float | None
    transaction_time: datetime
    created_at: datetime


class TransactionDetailResponse(TransactionResponse):
    items: list[TransactionItemResponse]


class TransactionCreateResponse(BaseModel):
    receipt_id: str
    transaction: TransactionDetailResponse


class TransactionLookupResponse(BaseModel):
    transaction: TransactionDetailResponse | None


class TransactionListResponse(BaseModel):
    rows: list[TransactionResponse]
    total: int
