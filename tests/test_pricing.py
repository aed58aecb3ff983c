from decimal import Decimal
from types import SimpleNamespace

from app.kaunter.services.pricing import (
    CartLine,
    change_due,
    discount_amount,
    line_total,
    payment_charge,
    price_cart,
    select_discount_tier,
)


def _tier(minimum: str, percentage: str):
    return SimpleNamespace(minimum_amount=Decimal(minimum), discount_percentage=Decimal(percentage))


TIERS = [_tier("50", "10"), _tier("100", "15")]


def test_line_total_multiplies_unit_price():
    assert line_total(Decimal("22.50"), 3) == Decimal("67.50")


def test_best_tier_wins():
    assert select_discount_tier(TIERS, Decimal("120")).discount_percentage == Decimal("15")
    assert select_discount_tier(TIERS, Decimal("60")).discount_percentage == Decimal("10")
    assert select_discount_tier(TIERS, Decimal("40")) is None


def test_threshold_is_inclusive():
    assert select_discount_tier(TIERS, Decimal("50.00")).minimum_amount == Decimal("50")


def test_equal_percentages_keep_first_tier():
    first = _tier("20", "5")
    second = _tier("10", "5")
    assert select_discount_tier([first, second], Decimal("30")) is first


def test_higher_threshold_with_lower_percentage_does_not_win():
    tiers = [_tier("50", "12"), _tier("100", "8")]
    assert select_discount_tier(tiers, Decimal("150")).discount_percentage == Decimal("12")


def test_discount_amounts():
    assert discount_amount(Decimal("120"), Decimal("15")) == Decimal("18.00")
    assert discount_amount(Decimal("60"), Decimal("10")) == Decimal("6.00")
    assert discount_amount(Decimal("40"), Decimal("0")) == Decimal("0.00")
    assert discount_amount(Decimal("10.26"), Decimal("5")) == Decimal("0.513")


def test_payment_charge_rounds_half_up():
    assert payment_charge(Decimal("45.00"), Decimal("2.5")) == Decimal("1.13")


def test_change_due():
    assert change_due(Decimal("50.00"), Decimal("42.50")) == Decimal("7.50")
    assert change_due(Decimal("40.00"), Decimal("42.50")) == Decimal("0.00")
    assert change_due(None, Decimal("42.50")) is None


def test_price_cart_cash_sale():
    result = price_cart(
        [
            CartLine(product_id="a", quantity=2, unit_price=Decimal("10.00")),
            CartLine(product_id="b", quantity=1, unit_price=Decimal("22.50")),
        ],
        discount_tiers=[],
        charge_percentage=Decimal("0"),
        amount_received=Decimal("50"),
    )
    assert result.subtotal == Decimal("42.50")
    assert result.discount_amount == Decimal("0.00")
    assert result.payment_charge == Decimal("0.00")
    assert result.final_total == Decimal("42.50")
    assert result.change_amount == Decimal("7.50")
    assert [line.line_total for line in result.lines] == [Decimal("20.00"), Decimal("22.50")]


def test_price_cart_card_with_discount_and_surcharge():
    result = price_cart(
        [CartLine(product_id="a", quantity=5, unit_price=Decimal("10.00"))],
        discount_tiers=TIERS,
        charge_percentage=Decimal("2.50"),
    )
    assert result.subtotal == Decimal("50.00")
    assert result.discount_amount == Decimal("5.00")
    assert result.payment_charge == Decimal("1.13")
    assert result.final_total == Decimal("46.13")
    assert result.amount_received is None
    assert result.change_amount is None


def test_final_total_identity_holds_for_awkward_amounts():
    tiers = [_tier("10", "7.5")]
    for quantity, price in [(3, "3.33"), (7, "1.99"), (11, "0.07"), (2, "49.95")]:
        result = price_cart(
            [CartLine(product_id="x", quantity=quantity, unit_price=Decimal(price))],
            discount_tiers=tiers,
            charge_percentage=Decimal("2.9"),
        )
        assert result.subtotal == Decimal(price) * quantity
        derived = result.subtotal - result.discount_amount + result.payment_charge
        assert abs(result.final_total - derived) <= Decimal("0.01")
        assert result.final_total == result.final_total.quantize(Decimal("0.01"))


def test_surcharge_base_keeps_unrounded_discount():
    cases = [
        ("10.26", "5", "2", "0.51", "0.19", "9.94"),
        ("10.16", "7.5", "2.5", "0.76", "0.23", "9.63"),
        ("10.27", "7.5", "3", "0.77", "0.28", "9.78"),
    ]
    for price, tier_percentage, charge, discount, surcharge, final_total in cases:
        result = price_cart(
            [CartLine(product_id="x", quantity=1, unit_price=Decimal(price))],
            discount_tiers=[_tier("10", tier_percentage)],
            charge_percentage=Decimal(charge),
        )
        assert result.discount_amount == Decimal(discount)
        assert result.payment_charge == Decimal(surcharge)
        assert result.final_total == Decimal(final_total)


def test_half_cent_discount_rounds_final_total_once():
    result = price_cart(
        [CartLine(product_id="x", quantity=1, unit_price=Decimal("10.10"))],
        discount_tiers=[_tier("10", "5")],
        charge_percentage=Decimal("0"),
        amount_received=Decimal("20"),
    )
    assert result.discount_amount == Decimal("0.51")
    assert result.final_total == Decimal("9.60")
    assert result.change_amount == Decimal("10.40")
