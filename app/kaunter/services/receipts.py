from __future__ import annotations

import secrets
from datetime import datetime

from app.kaunter.core.clock import utcnow
from app.kaunter.core.config import settings


def generate_receipt_id(now: datetime | None = None) -> str:
    """Prefix, UTC timestamp to the second, then 6 random hex digits.

    The random suffix separates sales made within the same second; the
    unique constraint on ``transactions.receipt_id`` is the final guard.
    """
    now = now or utcnow()
    return f"{settings.RECEIPT_PREFIX}{now:%Y%m%d%H%M%S}{secrets.token_hex(3).upper()}"
