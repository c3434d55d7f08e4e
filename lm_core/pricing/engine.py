# lm_core/pricing/engine.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Sequence

from rest_framework.exceptions import ValidationError

from lm_core.common.exceptions import (
    InvalidAmount,
    InvalidQuantity,
    InvalidRate,
    NonIntegerQuantity,
)
from lm_core.common.money import ZERO, percent_of, round_paisa, to_decimal
from lm_core.pricing.rules import DEFAULT_PRICING_RULES, PricingRules
from lm_core.pricing.types import (
    Addon,
    AddonPricingResult,
    AddonQuantity,
    BulkDiscountResult,
    ExpressPricingResult,
    LoyaltyDiscountResult,
    PricingResult,
    ServiceDefinition,
    ServiceVariant,
    UnitType,
)

logger = logging.getLogger(__name__)


def _validate_quantity(quantity, unit_type: str) -> Decimal:
    qty = to_decimal(quantity, "quantity")
    if qty <= ZERO:
        raise InvalidQuantity()

    if unit_type not in UnitType.ALL:
        raise ValidationError({"unit_type": f"Unknown unit type '{unit_type}'."})

    if unit_type in UnitType.WHOLE_NUMBER and qty != qty.to_integral_value():
        raise NonIntegerQuantity()
    return qty


def _validate_slab(gst_rate, rules: PricingRules) -> Decimal:
    rate = to_decimal(gst_rate, "gst_rate")
    if not rules.is_valid_slab(rate):
        slabs = ", ".join(str(s) for s in rules.gst_slabs)
        raise InvalidRate(f"GST rate {rate} is not one of the allowed slabs ({slabs}).")
    return rate


def _price(
    service: ServiceDefinition,
    variant: ServiceVariant | None,
    quantity,
    unit_price,
    gst_rate,
    rules: PricingRules,
) -> PricingResult:
    qty = _validate_quantity(quantity, service.unit_type)
    rate = to_decimal(unit_price, "base_price")
    if rate < ZERO:
        raise ValidationError({"base_price": "Must be >= 0."})
    tax_rate = _validate_slab(gst_rate, rules)

    minimum = to_decimal(service.minimum_quantity or ZERO, "minimum_quantity")
    if minimum < ZERO:
        raise ValidationError({"minimum_quantity": "Must be >= 0."})

    # The minimum only changes the billed quantity, never the unit rate.
    billed = max(qty, minimum)
    meets_minimum = qty >= minimum
    minimum_charge = ZERO if meets_minimum else round_paisa(rate * (minimum - qty))

    return PricingResult(
        service=service,
        variant=variant,
        quantity=qty,
        billed_quantity=billed,
        rate=rate,
        gst_rate=tax_rate,
        line_total=round_paisa(rate * billed),
        meets_minimum=meets_minimum,
        minimum_charge=minimum_charge,
    )


def calculate_price(
    service: ServiceDefinition,
    quantity,
    *,
    rules: PricingRules = DEFAULT_PRICING_RULES,
) -> PricingResult:
    return _price(service, None, quantity, service.base_price, service.gst_rate, rules)


def calculate_price_with_variant(
    service: ServiceDefinition,
    variant: ServiceVariant,
    quantity,
    *,
    rules: PricingRules = DEFAULT_PRICING_RULES,
) -> PricingResult:
    """
    Variant price and GST rate replace the service's.
    The service minimum quantity still applies; variants never override it.
    """
    if variant.service_id != service.id:
        raise ValidationError({"variant": f"Variant {variant.id} does not belong to service {service.id}."})
    return _price(service, variant, quantity, variant.base_price, variant.gst_rate, rules)


def price_line(
    service: ServiceDefinition,
    quantity,
    variant: ServiceVariant | None = None,
    *,
    rules: PricingRules = DEFAULT_PRICING_RULES,
) -> PricingResult:
    if variant is not None:
        return calculate_price_with_variant(service, variant, quantity, rules=rules)
    if service.is_dynamic:
        raise ValidationError({"variant": f"Select a variant for '{service.name}'."})
    return calculate_price(service, quantity, rules=rules)


def calculate_express_charge(base_amount, express_rate=None, *, rules: PricingRules = DEFAULT_PRICING_RULES) -> Decimal:
    base = to_decimal(base_amount, "base_amount")
    if base < ZERO:
        raise InvalidAmount("Amount cannot be negative.")

    rate = rules.express_uplift_percent if express_rate is None else to_decimal(express_rate, "express_rate")
    if rate < ZERO:
        raise InvalidRate("Express rate cannot be negative.")
    return percent_of(base, rate)


def calculate_price_with_express(
    service: ServiceDefinition,
    quantity,
    variant: ServiceVariant | None = None,
    *,
    rules: PricingRules = DEFAULT_PRICING_RULES,
) -> ExpressPricingResult:
    """Express uplift is applied to the minimum-adjusted line total."""
    pricing = price_line(service, quantity, variant, rules=rules)
    express_charge = calculate_express_charge(pricing.line_total, rules=rules)
    return ExpressPricingResult(
        pricing=pricing,
        base_amount=pricing.line_total,
        express_charge=express_charge,
        line_total=pricing.line_total + express_charge,
    )


def calculate_addon_pricing(
    addons: Iterable[Addon],
    addon_quantities: Sequence[AddonQuantity],
    *,
    rules: PricingRules = DEFAULT_PRICING_RULES,
) -> list[AddonPricingResult]:
    """
    One result per requested add-on, in request order.
    Unknown addon ids are skipped; callers validate existence beforehand.
    """
    by_id = {a.id: a for a in addons}
    results = []

    for requested in addon_quantities:
        addon = by_id.get(requested.addon_id)
        if addon is None:
            logger.debug("skipping unknown addon id=%s", requested.addon_id)
            continue

        qty = to_decimal(requested.quantity, "quantity")
        if qty <= ZERO:
            raise InvalidQuantity(f"Addon quantity for {addon.name} must be greater than 0.")

        price = to_decimal(addon.price, "price")
        if price < ZERO:
            raise ValidationError({"price": "Must be >= 0."})
        _validate_slab(addon.gst_rate, rules)

        results.append(AddonPricingResult(addon=addon, quantity=qty, total=round_paisa(price * qty)))

    return results


def calculate_bulk_discount(total_amount, *, rules: PricingRules = DEFAULT_PRICING_RULES) -> BulkDiscountResult:
    amount = to_decimal(total_amount, "total_amount")
    if amount < ZERO:
        raise InvalidAmount("Amount cannot be negative.")

    # Tier lookup on the unrounded amount; only the money outputs are rounded.
    percent = rules.bulk_discount_percent(amount)
    discount = percent_of(amount, percent)
    return BulkDiscountResult(
        discount_percent=percent,
        discount_amount=discount,
        final_amount=round_paisa(amount) - discount,
    )


def calculate_loyalty_discount(
    base_amount,
    customer_tier: str,
    *,
    rules: PricingRules = DEFAULT_PRICING_RULES,
) -> LoyaltyDiscountResult:
    amount = round_paisa(to_decimal(base_amount, "base_amount"))
    if amount < ZERO:
        raise InvalidAmount("Amount cannot be negative.")

    percent = rules.loyalty_percent(customer_tier)
    discount = percent_of(amount, percent)
    return LoyaltyDiscountResult(
        customer_tier=(customer_tier or "").strip().upper(),
        discount_percent=percent,
        discount_amount=discount,
        final_amount=amount - discount,
    )


def line_amount(pricing: PricingResult, addon_results: Sequence[AddonPricingResult]) -> Decimal:
    return pricing.line_total + sum((a.total for a in addon_results), ZERO)
