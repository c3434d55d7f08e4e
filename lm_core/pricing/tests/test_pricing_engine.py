# lm_core/pricing/tests/test_pricing_engine.py
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from lm_core.common.exceptions import InvalidAmount, InvalidQuantity, InvalidRate, NonIntegerQuantity
from lm_core.pricing.engine import (
    calculate_addon_pricing,
    calculate_bulk_discount,
    calculate_express_charge,
    calculate_loyalty_discount,
    calculate_price,
    calculate_price_with_express,
    calculate_price_with_variant,
    line_amount,
    price_line,
)
from lm_core.pricing.types import AddonQuantity, ServiceDefinition, ServiceVariant, UnitType


def test_below_minimum_bills_the_minimum(wash_fold):
    r = calculate_price(wash_fold, Decimal("2"))

    assert r.quantity == Decimal("2")
    assert r.billed_quantity == Decimal("3")
    assert r.rate == Decimal("100.00")
    assert r.line_total == Decimal("300.00")
    assert r.meets_minimum is False
    assert r.minimum_charge == Decimal("100.00")


def test_above_minimum_bills_actual_weight(wash_fold):
    r = calculate_price(wash_fold, Decimal("4.5"))

    assert r.billed_quantity == Decimal("4.5")
    assert r.line_total == Decimal("450.00")
    assert r.meets_minimum is True
    assert r.minimum_charge == Decimal("0.00")


def test_weight_shortfall_bills_the_minimum():
    service = ServiceDefinition(
        id=5, name="Blanket", unit_type=UnitType.WEIGHT, base_price=Decimal("59"), minimum_quantity=Decimal("5")
    )
    r = calculate_price(service, 3)

    assert r.line_total == Decimal("295.00")
    assert r.meets_minimum is False
    assert r.minimum_charge == Decimal("118.00")


@pytest.mark.parametrize("unit_type", [UnitType.WEIGHT, UnitType.AREA])
def test_quantity_equal_to_minimum(unit_type):
    service = ServiceDefinition(
        id=5, name="Rug", unit_type=unit_type, base_price=Decimal("59"), minimum_quantity=Decimal("5")
    )
    r = calculate_price(service, Decimal("5"))

    assert r.line_total == Decimal("295.00")
    assert r.billed_quantity == Decimal("5")
    assert r.meets_minimum is True
    assert r.minimum_charge == Decimal("0.00")


def test_piece_price_is_rate_times_count():
    shirt = ServiceDefinition(id=6, name="Shirt", unit_type=UnitType.PIECE, base_price=Decimal("49"))

    assert calculate_price(shirt, 3).line_total == Decimal("147.00")
    with pytest.raises(NonIntegerQuantity):
        calculate_price(shirt, Decimal("2.5"))


def test_piece_services_need_whole_numbers(ironing):
    with pytest.raises(NonIntegerQuantity):
        calculate_price(ironing, Decimal("1.5"))

    r = calculate_price(ironing, Decimal("2.0"))
    assert r.line_total == Decimal("100.00")


def test_set_services_need_whole_numbers():
    curtains = ServiceDefinition(id=9, name="Curtains", unit_type=UnitType.SET, base_price=Decimal("300.00"))
    with pytest.raises(NonIntegerQuantity):
        calculate_price(curtains, "0.5")


@pytest.mark.parametrize("qty", [Decimal("0"), Decimal("-1")])
def test_non_positive_quantity_rejected(wash_fold, qty):
    with pytest.raises(InvalidQuantity):
        calculate_price(wash_fold, qty)


def test_rate_must_be_a_configured_slab():
    odd = ServiceDefinition(id=9, name="Odd", unit_type=UnitType.PIECE, base_price=Decimal("10.00"), gst_rate=Decimal("15"))
    with pytest.raises(InvalidRate):
        calculate_price(odd, 1)


def test_unknown_unit_type_rejected():
    odd = ServiceDefinition(id=9, name="Odd", unit_type="LITRE", base_price=Decimal("10.00"))
    with pytest.raises(ValidationError):
        calculate_price(odd, 1)


def test_variant_overrides_price_and_rate(dry_clean, silk_variant):
    r = calculate_price_with_variant(dry_clean, silk_variant, 2)

    assert r.variant == silk_variant
    assert r.rate == Decimal("250.00")
    assert r.gst_rate == Decimal("5")
    assert r.line_total == Decimal("500.00")


def test_variant_keeps_service_minimum(wash_fold):
    heavy = ServiceVariant(id=11, service_id=wash_fold.id, name="Heavy", base_price=Decimal("150.00"))
    r = calculate_price_with_variant(wash_fold, heavy, 1)

    assert r.billed_quantity == Decimal("3")
    assert r.line_total == Decimal("450.00")


def test_variant_from_another_service_rejected(ironing, silk_variant):
    with pytest.raises(ValidationError):
        calculate_price_with_variant(ironing, silk_variant, 1)


def test_dynamic_service_requires_variant(dry_clean, silk_variant):
    with pytest.raises(ValidationError):
        price_line(dry_clean, 1)

    assert price_line(dry_clean, 1, silk_variant).line_total == Decimal("250.00")


def test_addon_pricing(addons, addon_quantities):
    results = calculate_addon_pricing(addons, addon_quantities)

    assert [r.total for r in results] == [Decimal("60.00"), Decimal("50.00"), Decimal("25.00")]
    assert sum(r.total for r in results) == Decimal("135.00")


def test_unknown_addon_is_skipped(addons):
    results = calculate_addon_pricing(addons, [AddonQuantity(addon_id=99, quantity=Decimal("1"))])
    assert results == []


def test_addon_quantity_must_be_positive(addons):
    with pytest.raises(InvalidQuantity):
        calculate_addon_pricing(addons, [AddonQuantity(addon_id=1, quantity=Decimal("0"))])


def test_line_amount_includes_addons(ironing, addons, addon_quantities):
    pricing = calculate_price(ironing, 2)
    assert line_amount(pricing, calculate_addon_pricing(addons, addon_quantities)) == Decimal("235.00")


def test_express_charge_defaults_to_fifty_percent():
    assert calculate_express_charge(Decimal("200.00")) == Decimal("100.00")
    assert calculate_express_charge(Decimal("200.00"), Decimal("25")) == Decimal("50.00")


def test_express_charge_rejects_negatives():
    with pytest.raises(InvalidAmount):
        calculate_express_charge(Decimal("-1.00"))
    with pytest.raises(InvalidRate):
        calculate_express_charge(Decimal("10.00"), Decimal("-5"))


def test_express_applies_to_minimum_adjusted_total(wash_fold):
    r = calculate_price_with_express(wash_fold, 2)

    assert r.base_amount == Decimal("300.00")
    assert r.express_charge == Decimal("150.00")
    assert r.line_total == Decimal("450.00")


@pytest.mark.parametrize(
    "amount, percent, discount, final",
    [
        ("999.99", "0", "0.00", "999.99"),
        ("1000.00", "5", "50.00", "950.00"),
        ("1999.99", "5", "100.00", "1899.99"),
        ("2000.00", "10", "200.00", "1800.00"),
    ],
)
def test_bulk_discount_tiers(amount, percent, discount, final):
    r = calculate_bulk_discount(Decimal(amount))

    assert r.discount_percent == Decimal(percent)
    assert r.discount_amount == Decimal(discount)
    assert r.final_amount == Decimal(final)


def test_bulk_discount_rejects_negative():
    with pytest.raises(InvalidAmount):
        calculate_bulk_discount(Decimal("-0.01"))


def test_loyalty_discount():
    r = calculate_loyalty_discount(Decimal("1000.00"), " gold ")

    assert r.customer_tier == "GOLD"
    assert r.discount_percent == Decimal("7.5")
    assert r.discount_amount == Decimal("75.00")
    assert r.final_amount == Decimal("925.00")


def test_unknown_loyalty_tier_gets_nothing():
    r = calculate_loyalty_discount(Decimal("1000.00"), "PLATINUM")
    assert r.discount_amount == Decimal("0.00")
    assert r.final_amount == Decimal("1000.00")


def test_bulk_tier_uses_unrounded_amount():
    # 1999.995 rounds to 2000.00 but has not reached the 10% tier
    r = calculate_bulk_discount(Decimal("1999.995"))

    assert r.discount_percent == Decimal("5")
    assert r.discount_amount == Decimal("100.00")
    assert r.final_amount == Decimal("1900.00")
