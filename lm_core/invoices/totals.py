# lm_core/invoices/totals.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from rest_framework.exceptions import ValidationError

from lm_core.common.exceptions import InvalidAmount, InvalidDiscount
from lm_core.common.money import HUNDRED, ZERO, round_paisa, to_decimal
from lm_core.gst.calculator import (
    GSTBreakdown,
    TaxMode,
    calculate_exclusive,
    calculate_inclusive,
    resolve_discount,
    validate_gst_rate,
    zero_breakdown,
)
from lm_core.pricing.engine import (
    calculate_addon_pricing,
    calculate_bulk_discount,
    calculate_express_charge,
    line_amount,
    price_line,
)
from lm_core.pricing.rules import DEFAULT_PRICING_RULES, PricingRules, TaxStrategy
from lm_core.pricing.types import (
    Addon,
    AddonPricingResult,
    AddonQuantity,
    PricingResult,
    ServiceDefinition,
    ServiceVariant,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceLineInput:
    service: ServiceDefinition
    quantity: Decimal
    variant: ServiceVariant | None = None
    addons: tuple[Addon, ...] = ()
    addon_quantities: tuple[AddonQuantity, ...] = ()


@dataclass(frozen=True)
class LineTotals:
    pricing: PricingResult
    addons: tuple[AddonPricingResult, ...]
    line_total: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    lines: tuple[LineTotals, ...]
    subtotal: Decimal
    discount_amount: Decimal
    discount_percent: Decimal | None
    express_charge: Decimal
    taxable_amount: Decimal     # subtotal - discount + express, before tax extraction
    base_amount: Decimal        # pre-tax base (recovered from taxable_amount when inclusive)
    sgst: Decimal
    cgst: Decimal
    igst: Decimal
    total_gst: Decimal
    tax_mode: str
    gst_rate: Decimal | None    # None for PER_LINE (several rates)
    gst_inclusive: bool
    tax_strategy: str
    round_off: Decimal
    grand_total: Decimal
    tax_breakdowns: tuple[GSTBreakdown, ...]


def price_lines(lines: Sequence[InvoiceLineInput], *, rules: PricingRules) -> list[LineTotals]:
    if not lines:
        raise ValidationError({"lines": "At least one line is required."})

    priced = []
    for line in lines:
        pricing = price_line(line.service, line.quantity, line.variant, rules=rules)
        addon_results = tuple(calculate_addon_pricing(line.addons, line.addon_quantities, rules=rules))
        priced.append(LineTotals(pricing=pricing, addons=addon_results, line_total=line_amount(pricing, addon_results)))
    return priced


def _amounts_by_rate(priced: Sequence[LineTotals]) -> dict[Decimal, Decimal]:
    groups: dict[Decimal, Decimal] = {}
    for line in priced:
        rate = line.pricing.gst_rate
        groups[rate] = groups.get(rate, ZERO) + line.pricing.line_total
        for addon in line.addons:
            addon_rate = to_decimal(addon.addon.gst_rate, "gst_rate")
            groups[addon_rate] = groups.get(addon_rate, ZERO) + addon.total
    return groups


def blended_rate(priced: Sequence[LineTotals]) -> Decimal:
    """Taxable-value weighted average of the line and add-on rates."""
    groups = _amounts_by_rate(priced)
    total = sum(groups.values(), ZERO)
    if total == ZERO:
        return priced[0].pricing.gst_rate
    weighted = sum((rate * amount for rate, amount in groups.items()), ZERO)
    return round_paisa(weighted / total)


def _tax(amount: Decimal, rate: Decimal, gst_inclusive: bool, inter_state: bool) -> GSTBreakdown:
    if amount == ZERO:
        return zero_breakdown(rate, inter_state, gst_inclusive)
    if gst_inclusive:
        return calculate_inclusive(amount, rate, inter_state)
    return calculate_exclusive(amount, rate, inter_state)


def _allocate(groups: dict[Decimal, Decimal], taxable: Decimal) -> list[tuple[Decimal, Decimal]]:
    """
    Spreads taxable (subtotal after discount and express) over the rate groups
    in proportion to their amounts. The largest group takes the rounding remainder.
    """
    ordered = sorted(groups.items(), key=lambda item: (item[1], item[0]))
    subtotal = sum(groups.values(), ZERO)

    allocated = []
    running = ZERO
    for rate, amount in ordered[:-1]:
        share = round_paisa(taxable * amount / subtotal) if subtotal else ZERO
        allocated.append((rate, share))
        running += share

    last_rate = ordered[-1][0]
    allocated.append((last_rate, taxable - running))
    return allocated


def _resolve_invoice_discount(
    subtotal: Decimal,
    *,
    discount_amount,
    discount_percent,
    apply_bulk_discount: bool,
    rules: PricingRules,
) -> tuple[Decimal, Decimal | None]:
    given = sum(1 for v in (discount_amount, discount_percent) if v is not None) + int(bool(apply_bulk_discount))
    if given > 1:
        raise InvalidDiscount("Use only one of discount amount, discount percent or bulk discount.")

    if apply_bulk_discount:
        bulk = calculate_bulk_discount(subtotal, rules=rules)
        return bulk.discount_amount, bulk.discount_percent

    discount = resolve_discount(subtotal, discount_amount, discount_percent)
    if discount > subtotal:
        raise InvalidDiscount("Discount cannot exceed the subtotal.")

    percent = to_decimal(discount_percent, "discount_percent") if discount_percent is not None else None
    return discount, percent


def assemble_invoice_totals(
    lines: Sequence[InvoiceLineInput],
    *,
    discount_amount=None,
    discount_percent=None,
    apply_bulk_discount: bool = False,
    express_charge=None,
    is_express: bool = False,
    gst_inclusive: bool = False,
    inter_state: bool = False,
    tax_strategy: str | None = None,
    gst_rate=None,
    rules: PricingRules = DEFAULT_PRICING_RULES,
) -> InvoiceTotals:
    """
    Prices every line from scratch, applies the invoice discount and express
    charge to the pre-tax subtotal, then computes GST on what is left.

    - BLENDED: a single calculator call at gst_rate (or the weighted line rate).
    - PER_LINE: one calculator call per GST rate present on the invoice.
    - Exclusive: grand_total = taxable + GST.
    - Inclusive: grand_total = taxable; GST is carved out of it and any paisa
      difference from rounding is reported as round_off.
    """
    strategy = (tax_strategy or rules.tax_strategy).upper()
    if strategy not in TaxStrategy.ALL:
        raise ValidationError({"tax_strategy": f"Must be one of {', '.join(TaxStrategy.ALL)}."})

    priced = price_lines(lines, rules=rules)
    subtotal = sum((line.line_total for line in priced), ZERO)

    discount, percent = _resolve_invoice_discount(
        subtotal,
        discount_amount=discount_amount,
        discount_percent=discount_percent,
        apply_bulk_discount=apply_bulk_discount,
        rules=rules,
    )

    if express_charge is not None and is_express:
        raise ValidationError({"express_charge": "Give an express charge or request express uplift, not both."})
    if is_express:
        express = sum((calculate_express_charge(line.pricing.line_total, rules=rules) for line in priced), ZERO)
    else:
        express = round_paisa(to_decimal(express_charge if express_charge is not None else ZERO, "express_charge"))
        if express < ZERO:
            raise InvalidAmount("Express charge cannot be negative.")

    taxable = subtotal - discount + express

    if strategy == TaxStrategy.BLENDED:
        rate = validate_gst_rate(gst_rate) if gst_rate is not None else blended_rate(priced)
        breakdowns = [_tax(taxable, rate, gst_inclusive, inter_state)]
    else:
        rate = None
        breakdowns = [
            _tax(amount, group_rate, gst_inclusive, inter_state)
            for group_rate, amount in _allocate(_amounts_by_rate(priced), taxable)
        ]

    base = sum((b.base_amount for b in breakdowns), ZERO)
    sgst = sum((b.sgst for b in breakdowns), ZERO)
    cgst = sum((b.cgst for b in breakdowns), ZERO)
    igst = sum((b.igst for b in breakdowns), ZERO)
    total_gst = sgst + cgst + igst

    if gst_inclusive:
        grand_total = taxable
        round_off = taxable - (base + total_gst)
    else:
        grand_total = base + total_gst
        round_off = ZERO

    totals = InvoiceTotals(
        lines=tuple(priced),
        subtotal=round_paisa(subtotal),
        discount_amount=round_paisa(discount),
        discount_percent=percent,
        express_charge=round_paisa(express),
        taxable_amount=round_paisa(taxable),
        base_amount=round_paisa(base),
        sgst=round_paisa(sgst),
        cgst=round_paisa(cgst),
        igst=round_paisa(igst),
        total_gst=round_paisa(total_gst),
        tax_mode=TaxMode.IGST if inter_state else TaxMode.SGST_CGST,
        gst_rate=rate,
        gst_inclusive=gst_inclusive,
        tax_strategy=strategy,
        round_off=round_paisa(round_off),
        grand_total=round_paisa(grand_total),
        tax_breakdowns=tuple(breakdowns),
    )
    logger.debug(
        "assembled invoice lines=%s strategy=%s taxable=%s gst=%s total=%s",
        len(priced), strategy, totals.taxable_amount, totals.total_gst, totals.grand_total,
    )
    return totals


def effective_rate(totals: InvoiceTotals) -> Decimal:
    """Overall GST as a percent of the pre-tax base (useful for PER_LINE summaries)."""
    if totals.base_amount == ZERO:
        return ZERO
    return round_paisa(totals.total_gst * HUNDRED / totals.base_amount)
