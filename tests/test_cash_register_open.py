from datetime import timedelta

from app.kaunter.core.error_catalog import ErrorCatalog
from tests.pos_helpers import open_register, today


def test_open_initializes_totals(client):
    response = client.post("/kaunter/cash-register/actions", json={"action": "OPEN", "starting_capital": 150.0})
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "OPEN"
    assert payload["business_date"] == today().isoformat()
    assert payload["starting_capital"] == 150.0
    assert payload["cash_sales_total"] == 0.0
    assert payload["expected_cash"] == 150.0
    assert payload["actual_cash_counted"] is None
    assert payload["surplus_shortage"] is None
    assert payload["is_closed"] is False
    assert payload["closed_at"] is None


def test_open_twice_same_day_is_rejected(client):
    first = client.post("/kaunter/cash-register/actions", json={"action": "OPEN", "starting_capital": 100})
    assert first.status_code == 200

    second = client.post("/kaunter/cash-register/actions", json={"action": "OPEN", "starting_capital": 100})
    assert second.status_code == 409
    assert second.json()["code"] == ErrorCatalog.CASH_REGISTER_ALREADY_OPEN.code
    assert second.json()["details"]["cash_register_id"] == first.json()["id"]


def test_open_rejected_while_previous_day_register_is_open(client, db_session):
    stale = open_register(db_session, business_date=today() - timedelta(days=1))

    response = client.post("/kaunter/cash-register/actions", json={"action": "OPEN", "starting_capital": 100})
    assert response.status_code == 409
    assert response.json()["code"] == ErrorCatalog.CASH_REGISTER_ALREADY_OPEN.code
    assert response.json()["details"]["business_date"] == stale.business_date.isoformat()


def test_open_after_todays_register_closed_is_rejected(client, db_session):
    open_register(db_session, is_closed=True)

    response = client.post("/kaunter/cash-register/actions", json={"action": "OPEN", "starting_capital": 100})
    assert response.status_code == 409
    assert response.json()["code"] == ErrorCatalog.CASH_REGISTER_ALREADY_CLOSED.code


def test_open_requires_non_negative_starting_capital(client):
    missing = client.post("/kaunter/cash-register/actions", json={"action": "OPEN"})
    assert missing.status_code == 422
    assert missing.json()["code"] == ErrorCatalog.VALIDATION_ERROR.code

    negative = client.post("/kaunter/cash-register/actions", json={"action": "OPEN", "starting_capital": -1})
    assert negative.status_code == 422
    assert negative.json()["code"] == ErrorCatalog.VALIDATION_ERROR.code


def test_open_with_zero_starting_capital(client):
    response = client.post("/kaunter/cash-register/actions", json={"action": "OPEN", "starting_capital": 0})
    assert response.status_code == 200
    assert response.json()["expected_cash"] == 0.0
