from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.kaunter.db.models import Transaction, TransactionItem


class TransactionRepository:
    def __init__(self, db):
        self.db = db

    def _detail_query(self):
        return select(Transaction).options(
            selectinload(Transaction.items).selectinload(TransactionItem.product),
            selectinload(Transaction.payment_method),
        )

    def get_by_id(self, transaction_id) -> Transaction | None:
        return self.db.execute(self._detail_query().where(Transaction.id == transaction_id)).scalars().first()

    def get_by_receipt_id(self, receipt_id: str) -> Transaction | None:
        return self.db.execute(self._detail_query().where(Transaction.receipt_id == receipt_id)).scalars().first()

    def list_between(self, start: datetime, end: datetime) -> list[Transaction]:
        return (
            self.db.execute(
                select(Transaction)
                .options(selectinload(Transaction.payment_method))
                .where(Transaction.transaction_time >= start, Transaction.transaction_time <= end)
                .order_by(Transaction.transaction_time.desc(), Transaction.created_at.desc())
            )
            .scalars()
            .all()
        )
