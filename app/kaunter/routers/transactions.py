from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.kaunter.db.models import Transaction
from app.kaunter.db.session import get_db
from app.kaunter.schemas.transactions import (
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionDetailResponse,
    TransactionItemResponse,
    TransactionListResponse,
    TransactionLookupResponse,
    TransactionResponse,
)
from app.kaunter.services.business_day import resolve_date_range, resolve_timezone
from app.kaunter.services.transactions import CartItemInput, TransactionService


router = APIRouter()


def _money(value) -> float | None:
    return float(value) if value is not None else None


def _transaction_fields(transaction: Transaction) -> dict:
    method = transaction.payment_method
    return {
        "id": str(transaction.id),
        "receipt_id": transaction.receipt_id,
        "cash_register_id": str(transaction.cash_register_id),
        "subtotal": _money(transaction.subtotal),
        "discount_amount": _money(transaction.discount_amount),
        "payment_charge": _money(transaction.payment_charge),
        "final_total": _money(transaction.final_total),
        "payment_method_id": str(transaction.payment_method_id),
        "payment_method_name": method.name if method is not None else None,
        "amount_received": _money(transaction.amount_received),
        "change_amount": _money(transaction.change_amount),
        "transaction_time": transaction.transaction_time,
        "created_at": transaction.created_at,
    }


def _transaction_summary(transaction: Transaction) -> TransactionResponse:
    return TransactionResponse(**_transaction_fields(transaction))


def _transaction_detail(transaction: Transaction) -> TransactionDetailResponse:
    items = [
        TransactionItemResponse(
            id=str(item.id),
            line_number=item.line_number,
            product_id=str(item.product_id),
            product_code=item.product.product_code if item.product is not None else None,
            product_name=item.product.name if item.product is not None else None,
            quantity=item.quantity,
            unit_price=_money(item.unit_price),
            total_price=_money(item.total_price),
        )
        for item in transaction.items
    ]
    return TransactionDetailResponse(**_transaction_fields(transaction), items=items)


def _list_response(transactions: list[Transaction]) -> TransactionListResponse:
    rows = [_transaction_summary(transaction) for transaction in transactions]
    return TransactionListResponse(rows=rows, total=len(rows))


@router.post(
    "/kaunter/transactions",
    response_model=TransactionCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_transaction(payload: TransactionCreateRequest, db=Depends(get_db)):
    transaction = TransactionService(db).create(
        items=[CartItemInput(product_id=item.product_id, quantity=item.quantity) for item in payload.items],
        payment_method_id=payload.payment_method_id,
        amount_received=payload.amount_received,
    )
    return TransactionCreateResponse(receipt_id=transaction.receipt_id, transaction=_transaction_detail(transaction))


@router.get("/kaunter/transactions/today", response_model=TransactionListResponse)
def list_today_transactions(db=Depends(get_db)):
    return _list_response(TransactionService(db).list_today())


@router.get("/kaunter/transactions/receipt/{receipt_id}", response_model=TransactionLookupResponse)
def get_transaction_by_receipt(receipt_id: str, db=Depends(get_db)):
    transaction = TransactionService(db).get_by_receipt_id(receipt_id)
    return TransactionLookupResponse(transaction=_transaction_detail(transaction) if transaction else None)


@router.get("/kaunter/transactions/{transaction_id}", response_model=TransactionLookupResponse)
def get_transaction(transaction_id: UUID, db=Depends(get_db)):
    transaction = TransactionService(db).get_by_id(transaction_id)
    return TransactionLookupResponse(transaction=_transaction_detail(transaction) if transaction else None)


@router.get("/kaunter/transactions", response_model=TransactionListResponse)
def list_transactions(
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    timezone: str | None = Query(default=None),
    db=Depends(get_db),
):
    date_range = resolve_date_range(start_date, end_date, resolve_timezone(timezone))
    return _list_response(TransactionService(db).list_in_range(date_range))
