"""Cart pricing.

Every function here is pure and works on ``Decimal`` values. Line totals
are exact cents. The discount is carried at full precision into the
surcharge base; only the surcharge itself is rounded half-up. The stored
discount and final total are quantized to cents last, so the stored
identity holds to within one cent.

The rules:

* line total = unit price (the product's price after its own catalog
  discount) x quantity
* subtotal = sum of line totals
* discount = subtotal x best qualifying tier percentage / 100
* payment charge = (subtotal - discount) x method percentage / 100
* final total = subtotal - discount + payment charge
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol, Sequence

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


class DiscountTier(Protocol):
    minimum_amount: Decimal
    discount_percentage: Decimal


@dataclass(frozen=True)
class CartLine:
    product_id: object
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class PricedLine:
    product_id: object
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class PricingResult:
    lines: list[PricedLine]
    subtotal: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    charge_percentage: Decimal
    payment_charge: Decimal
    final_total: Decimal
    amount_received: Decimal | None
    change_amount: Decimal | None


def to_money(value) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


def compute_subtotal(lines: Iterable[PricedLine]) -> Decimal:
    return sum((line.line_total for line in lines), ZERO)


def select_discount_tier(tiers: Iterable[DiscountTier], subtotal: Decimal) -> DiscountTier | None:
    """Best tier wins: highest percentage among tiers whose threshold is met.

    Ties keep the first tier in iteration order.
    """
    best = None
    for tier in tiers:
        if Decimal(tier.minimum_amount) > subtotal:
            continue
        if best is None or Decimal(tier.discount_percentage) > Decimal(best.discount_percentage):
            best = tier
    return best


def discount_amount(subtotal: Decimal, percentage: Decimal) -> Decimal:
    """Unrounded discount; callers quantize it only when storing."""
    if not percentage:
        return ZERO
    return subtotal * Decimal(percentage) / HUNDRED


def payment_charge(amount: Decimal, percentage: Decimal) -> Decimal:
    if not percentage:
        return ZERO
    return to_money(amount * Decimal(percentage) / HUNDRED)


def change_due(amount_received: Decimal | None, final_total: Decimal) -> Decimal | None:
    if amount_received is None:
        return None
    return max(ZERO, to_money(amount_received) - final_total)


def price_cart(
    cart: Sequence[CartLine],
    *,
    discount_tiers: Iterable[DiscountTier],
    charge_percentage: Decimal,
    amount_received: Decimal | None = None,
) -> PricingResult:
    lines = [
        PricedLine(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=to_money(item.unit_price),
            line_total=line_total(item.unit_price, item.quantity),
        )
        for item in cart
    ]
    subtotal = compute_subtotal(lines)
    tier = select_discount_tier(discount_tiers, subtotal)
    discount_percentage = Decimal(tier.discount_percentage) if tier is not None else ZERO
    discount = discount_amount(subtotal, discount_percentage)
    charge_percentage = Decimal(charge_percentage or 0)
    charge = payment_charge(subtotal - discount, charge_percentage)
    final_total = to_money(subtotal - discount + charge)
    return PricingResult(
        lines=lines,
        subtotal=subtotal,
        discount_percentage=discount_percentage,
        discount_amount=to_money(discount),
        charge_percentage=charge_percentage,
        payment_charge=charge,
        final_total=final_total,
        amount_received=to_money(amount_received) if amount_received is not None else None,
        change_amount=change_due(amount_received, final_total),
    )
