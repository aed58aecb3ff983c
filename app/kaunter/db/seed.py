import logging
from decimal import Decimal

from sqlalchemy import func, select

from app.kaunter.core.config import settings
from app.kaunter.core.logging import configure_logging, log_json
from app.kaunter.db.models import PaymentMethod
from app.kaunter.db.session import SessionLocal

logger = logging.getLogger("kaunter.seed")


def _get_or_create_payment_method(db, name: str, charge_percentage) -> tuple[PaymentMethod, bool]:
    method = (
        db.execute(select(PaymentMethod).where(func.lower(PaymentMethod.name) == name.lower()))
        .scalars()
        .first()
    )
    if method:
        return method, False
    method = PaymentMethod(
        name=name,
        transaction_charge_percentage=Decimal(str(charge_percentage)),
        is_active=True,
    )
    db.add(method)
    db.flush()
    return method, True


def run_seed(db) -> list[PaymentMethod]:
    methods = []
    for name, charge_percentage in settings.DEFAULT_PAYMENT_METHODS:
        method, created = _get_or_create_payment_method(db, name, charge_percentage)
        if created:
            log_json(logger, {"event": "payment_method_seeded", "name": name})
        methods.append(method)
    db.commit()
    return methods


def main() -> None:
    configure_logging()
    db = SessionLocal()
    try:
        run_seed(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
