import re
import uuid
from decimal import Decimal

from sqlalchemy import func, select

from app.kaunter.core.error_catalog import ErrorCatalog
from app.kaunter.db.models import CashRegister, Transaction, TransactionItem
from tests.pos_helpers import (
    create_discount,
    create_payment_method,
    create_product,
    open_register,
    sale_payload,
)


def _count(db_session, model) -> int:
    return db_session.scalar(select(func.count()).select_from(model))


def _register_totals(db_session, register_id):
    db_session.expire_all()
    register = db_session.get(CashRegister, register_id)
    return register.cash_sales_total, register.expected_cash


def test_cash_sale_computes_change_and_updates_register(client, db_session):
    register = open_register(db_session, starting_capital="100.00")
    cash = create_payment_method(db_session, "Cash")
    coffee = create_product(db_session, price="10.00", name="Coffee")
    cake = create_product(db_session, price="22.50", name="Cake")

    response = client.post(
        "/kaunter/transactions",
        json=sale_payload(cash, [(coffee, 2), (cake, 1)], amount_received=50),
    )
    assert response.status_code == 201
    payload = response.json()
    transaction = payload["transaction"]
    assert re.fullmatch(r"RCP\d{14}[0-9A-F]{6}", payload["receipt_id"])
    assert transaction["receipt_id"] == payload["receipt_id"]
    assert transaction["cash_register_id"] == str(register.id)
    assert transaction["subtotal"] == 42.5
    assert transaction["discount_amount"] == 0.0
    assert transaction["payment_charge"] == 0.0
    assert transaction["final_total"] == 42.5
    assert transaction["amount_received"] == 50.0
    assert transaction["change_amount"] == 7.5
    assert transaction["payment_method_name"] == "Cash"
    assert [(item["product_name"], item["quantity"], item["total_price"]) for item in transaction["items"]] == [
        ("Coffee", 2, 20.0),
        ("Cake", 1, 22.5),
    ]

    assert _register_totals(db_session, register.id) == (Decimal("42.50"), Decimal("142.50"))


def test_card_sale_applies_discount_and_surcharge_without_touching_register(client, db_session):
    register = open_register(db_session, starting_capital="100.00")
    card = create_payment_method(db_session, "Card", charge="2.50")
    create_discount(db_session, minimum="50", percentage="10")
    product = create_product(db_session, price="10.00")

    response = client.post("/kaunter/transactions", json=sale_payload(card, [(product, 5)]))
    assert response.status_code == 201
    transaction = response.json()["transaction"]
    assert transaction["subtotal"] == 50.0
    assert transaction["discount_amount"] == 5.0
    assert transaction["payment_charge"] == 1.13
    assert transaction["final_total"] == 46.13
    assert transaction["amount_received"] is None
    assert transaction["change_amount"] is None

    assert _register_totals(db_session, register.id) == (Decimal("0.00"), Decimal("100.00"))


def test_best_discount_tier_applies(client, db_session):
    open_register(db_session)
    cash = create_payment_method(db_session, "Cash")
    create_discount(db_session, minimum="50", percentage="10")
    create_discount(db_session, minimum="100", percentage="15")
    create_discount(db_session, minimum="10", percentage="40", is_active=False)
    product = create_product(db_session, price="10.00")

    expectations = [(12, 18.0, 102.0), (6, 6.0, 54.0), (4, 0.0, 40.0)]
    for quantity, discount, final_total in expectations:
        response = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, quantity)]))
        assert response.status_code == 201
        transaction = response.json()["transaction"]
        assert transaction["discount_amount"] == discount
        assert transaction["final_total"] == final_total


def test_unit_price_uses_price_after_discount(client, db_session):
    open_register(db_session)
    cash = create_payment_method(db_session, "Cash")
    product = create_product(db_session, price="8.00", original_price="10.00")

    response = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, 3)]))
    assert response.status_code == 201
    item = response.json()["transaction"]["items"][0]
    assert item["unit_price"] == 8.0
    assert item["total_price"] == 24.0


def test_underpayment_gives_zero_change(client, db_session):
    open_register(db_session)
    cash = create_payment_method(db_session, "Cash")
    product = create_product(db_session, price="30.00")

    response = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, 1)], amount_received=20))
    assert response.status_code == 201
    assert response.json()["transaction"]["change_amount"] == 0.0


def test_cash_method_matched_case_insensitively(client, db_session):
    register = open_register(db_session, starting_capital="10.00")
    cash = create_payment_method(db_session, "CASH")
    product = create_product(db_session, price="4.00")

    response = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, 1)], amount_received=5))
    assert response.status_code == 201
    assert _register_totals(db_session, register.id) == (Decimal("4.00"), Decimal("14.00"))


def test_duplicate_cart_lines_are_merged(client, db_session):
    open_register(db_session)
    cash = create_payment_method(db_session, "Cash")
    tea = create_product(db_session, price="3.00")
    bun = create_product(db_session, price="2.00")

    response = client.post("/kaunter/transactions", json=sale_payload(cash, [(tea, 1), (bun, 2), (tea, 2)]))
    assert response.status_code == 201
    items = response.json()["transaction"]["items"]
    assert [(item["product_id"], item["quantity"], item["line_number"]) for item in items] == [
        (str(tea.id), 3, 1),
        (str(bun.id), 2, 2),
    ]
    assert response.json()["transaction"]["subtotal"] == 13.0


def test_no_active_register(client, db_session):
    cash = create_payment_method(db_session, "Cash")
    product = create_product(db_session, price="10.00")

    response = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, 1)]))
    assert response.status_code == 409
    assert response.json()["code"] == ErrorCatalog.NO_ACTIVE_CASH_REGISTER.code
    assert _count(db_session, Transaction) == 0
    assert _count(db_session, TransactionItem) == 0


def test_inactive_product_persists_nothing(client, db_session):
    register = open_register(db_session)
    cash = create_payment_method(db_session, "Cash")
    active = create_product(db_session, price="10.00")
    inactive = create_product(db_session, price="5.00", is_active=False)
    unknown_id = uuid.uuid4()

    payload = sale_payload(cash, [(active, 1), (inactive, 1)], amount_received=20)
    payload["items"].append({"product_id": str(unknown_id), "quantity": 1})
    response = client.post("/kaunter/transactions", json=payload)
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == ErrorCatalog.PRODUCT_NOT_FOUND_OR_INACTIVE.code
    assert body["details"]["product_ids"] == [str(inactive.id), str(unknown_id)]
    assert _count(db_session, Transaction) == 0
    assert _count(db_session, TransactionItem) == 0
    assert _register_totals(db_session, register.id) == (Decimal("0.00"), Decimal("100.00"))


def test_inactive_payment_method(client, db_session):
    open_register(db_session)
    retired = create_payment_method(db_session, "Voucher", is_active=False)
    product = create_product(db_session, price="10.00")

    response = client.post("/kaunter/transactions", json=sale_payload(retired, [(product, 1)]))
    assert response.status_code == 422
    assert response.json()["code"] == ErrorCatalog.PAYMENT_METHOD_NOT_FOUND_OR_INACTIVE.code
    assert _count(db_session, Transaction) == 0


def test_product_checked_before_payment_method(client, db_session):
    open_register(db_session)
    retired = create_payment_method(db_session, "Voucher", is_active=False)
    inactive = create_product(db_session, price="5.00", is_active=False)

    response = client.post("/kaunter/transactions", json=sale_payload(retired, [(inactive, 1)]))
    assert response.json()["code"] == ErrorCatalog.PRODUCT_NOT_FOUND_OR_INACTIVE.code


def test_request_validation(client, db_session):
    open_register(db_session)
    cash = create_payment_method(db_session, "Cash")
    product = create_product(db_session, price="10.00")

    empty = client.post("/kaunter/transactions", json={"items": [], "payment_method_id": str(cash.id)})
    assert empty.status_code == 422
    assert empty.json()["code"] == ErrorCatalog.VALIDATION_ERROR.code

    zero_quantity = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, 0)]))
    assert zero_quantity.status_code == 422

    fractional = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, 1.5)]))
    assert fractional.status_code == 422

    negative_received = client.post("/kaunter/transactions", json=sale_payload(cash, [(product, 1)], amount_received=-1))
    assert negative_received.status_code == 422
    assert _count(db_session, Transaction) == 0
