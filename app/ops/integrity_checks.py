from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select

from app.kaunter.core.config import settings
from app.kaunter.core.metrics import metrics
from app.kaunter.db.models import CashRegister, PaymentMethod, Transaction, TransactionItem


SEVERITY_CRITICAL = "CRITICAL"
SEVERITY_WARN = "WARN"
TOLERANCE = Decimal("0.005")
# Stored discount and final total are each rounded once from exact values.
TOTAL_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class IntegrityFinding:
    check_id: str
    severity: str
    message: str
    entity: str
    entity_id: str | None
    details: dict


def _amount(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _differs(left: Decimal, right: Decimal, tolerance: Decimal = TOLERANCE) -> bool:
    return abs(left - right) > tolerance


def _record(check_id: str, findings: list[IntegrityFinding]) -> list[IntegrityFinding]:
    if findings:
        metrics.increment_invariant_violation(check_id, len(findings))
    return findings


def check_multiple_open_registers(db) -> list[IntegrityFinding]:
    rows = db.execute(
        select(CashRegister.id, CashRegister.business_date)
        .where(CashRegister.is_closed.is_(False))
        .order_by(CashRegister.business_date)
    ).all()
    if len(rows) <= 1:
        return []
    finding = IntegrityFinding(
        check_id="multiple_open_cash_registers",
        severity=SEVERITY_CRITICAL,
        message="More than one cash register is open.",
        entity="cash_registers",
        entity_id=None,
        details={
            "open_count": len(rows),
            "cash_register_ids": [str(row.id) for row in rows],
            "business_dates": [row.business_date.isoformat() for row in rows],
        },
    )
    return _record("multiple_open_cash_registers", [finding])


def check_expected_cash(db) -> list[IntegrityFinding]:
    rows = db.execute(
        select(
            CashRegister.id,
            CashRegister.starting_capital,
            CashRegister.cash_sales_total,
            CashRegister.expected_cash,
        )
    ).all()
    findings = []
    for row in rows:
        derived = _amount(row.starting_capital) + _amount(row.cash_sales_total)
        if _differs(derived, _amount(row.expected_cash)):
            findings.append(
                IntegrityFinding(
                    check_id="cash_register_expected_cash",
                    severity=SEVERITY_CRITICAL,
                    message="Expected cash does not equal starting capital plus cash sales.",
                    entity="cash_registers",
                    entity_id=str(row.id),
                    details={
                        "starting_capital": str(row.starting_capital),
                        "cash_sales_total": str(row.cash_sales_total),
                        "expected_cash": str(row.expected_cash),
                    },
                )
            )
    return _record("cash_register_expected_cash", findings)


def check_cash_sales_total(db) -> list[IntegrityFinding]:
    cash_name = settings.CASH_PAYMENT_METHOD_NAME.strip().lower()
    sales = db.execute(
        select(Transaction.cash_register_id, Transaction.final_total)
        .join(PaymentMethod, PaymentMethod.id == Transaction.payment_method_id)
        .where(func.lower(PaymentMethod.name) == cash_name)
    ).all()
    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0.00"))
    for register_id, final_total in sales:
        totals[str(register_id)] += _amount(final_total)

    findings = []
    for row in db.execute(select(CashRegister.id, CashRegister.cash_sales_total)).all():
        recorded = _amount(row.cash_sales_total)
        derived = totals.get(str(row.id), Decimal("0.00"))
        if _differs(recorded, derived):
            findings.append(
                IntegrityFinding(
                    check_id="cash_register_cash_sales",
                    severity=SEVERITY_CRITICAL,
                    message="Cash sales total differs from the sum of cash transactions.",
                    entity="cash_registers",
                    entity_id=str(row.id),
                    details={"cash_sales_total": str(recorded), "transactions_total": str(derived)},
                )
            )
    return _record("cash_register_cash_sales", findings)


def check_closed_register_surplus(db) -> list[IntegrityFinding]:
    rows = db.execute(
        select(
            CashRegister.id,
            CashRegister.expected_cash,
            CashRegister.actual_cash_counted,
            CashRegister.surplus_shortage,
            CashRegister.closed_at,
        ).where(CashRegister.is_closed.is_(True))
    ).all()
    findings = []
    for row in rows:
        incomplete = row.actual_cash_counted is None or row.surplus_shortage is None or row.closed_at is None
        if not incomplete:
            derived = _amount(row.actual_cash_counted) - _amount(row.expected_cash)
            if not _differs(derived, _amount(row.surplus_shortage)):
                continue
        findings.append(
            IntegrityFinding(
                check_id="cash_register_surplus",
                severity=SEVERITY_WARN,
                message="Closed register reconciliation inconsistent.",
                entity="cash_registers",
                entity_id=str(row.id),
                details={
                    "expected_cash": str(row.expected_cash),
                    "actual_cash_counted": str(row.actual_cash_counted),
                    "surplus_shortage": str(row.surplus_shortage),
                    "closed_at": row.closed_at.isoformat() if row.closed_at else None,
                },
            )
        )
    return _record("cash_register_surplus", findings)


def check_transaction_totals(db) -> list[IntegrityFinding]:
    item_totals: dict[str, Decimal] = {
        str(transaction_id): _amount(total)
        for transaction_id, total in db.execute(
            select(TransactionItem.transaction_id, func.sum(TransactionItem.total_price)).group_by(
                TransactionItem.transaction_id
            )
        ).all()
    }
    rows = db.execute(
        select(
            Transaction.id,
            Transaction.receipt_id,
            Transaction.subtotal,
            Transaction.discount_amount,
            Transaction.payment_charge,
            Transaction.final_total,
        )
    ).all()
    findings = []
    for row in rows:
        subtotal = _amount(row.subtotal)
        derived_total = subtotal - _amount(row.discount_amount) + _amount(row.payment_charge)
        lines_total = item_totals.get(str(row.id), Decimal("0.00"))
        if _differs(derived_total, _amount(row.final_total), TOTAL_TOLERANCE) or _differs(subtotal, lines_total):
            findings.append(
                IntegrityFinding(
                    check_id="transaction_totals",
                    severity=SEVERITY_CRITICAL,
                    message="Transaction totals inconsistent.",
                    entity="transactions",
                    entity_id=str(row.id),
                    details={
                        "receipt_id": row.receipt_id,
                        "subtotal": str(row.subtotal),
                        "discount_amount": str(row.discount_amount),
                        "payment_charge": str(row.payment_charge),
                        "final_total": str(row.final_total),
                        "items_total": str(lines_total),
                    },
                )
            )
    return _record("transaction_totals", findings)


def check_transaction_item_totals(db) -> list[IntegrityFinding]:
    rows = db.execute(
        select(
            TransactionItem.id,
            TransactionItem.transaction_id,
            TransactionItem.quantity,
            TransactionItem.unit_price,
            TransactionItem.total_price,
        )
    ).all()
    findings = []
    for row in rows:
        derived = _amount(row.unit_price) * row.quantity
        if row.quantity <= 0 or _differs(derived, _amount(row.total_price)):
            findings.append(
                IntegrityFinding(
                    check_id="transaction_item_totals",
                    severity=SEVERITY_WARN,
                    message="Transaction item total does not equal unit price times quantity.",
                    entity="transaction_items",
                    entity_id=str(row.id),
                    details={
                        "transaction_id": str(row.transaction_id),
                        "quantity": row.quantity,
                        "unit_price": str(row.unit_price),
                        "total_price": str(row.total_price),
                    },
                )
            )
    return _record("transaction_item_totals", findings)


def run_integrity_checks(db) -> list[IntegrityFinding]:
    findings: list[IntegrityFinding] = []
    findings.extend(check_multiple_open_registers(db))
    findings.extend(check_expected_cash(db))
    findings.extend(check_cash_sales_total(db))
    findings.extend(check_closed_register_surplus(db))
    findings.extend(check_transaction_totals(db))
    findings.extend(check_transaction_item_totals(db))
    return findings
