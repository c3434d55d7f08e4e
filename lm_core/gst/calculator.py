# lm_core/gst/calculator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from lm_core.common.exceptions import InvalidAmount, InvalidDiscount, InvalidRate
from lm_core.common.money import HUNDRED, ZERO, percent_of, round_paisa, to_decimal

logger = logging.getLogger(__name__)

TWO = Decimal("2")
MAX_GST_RATE = Decimal("100")


class TaxMode:
    """
    SGST + CGST for intra-state supply, IGST for inter-state supply.
    Exactly one applies per invoice.
    """
    SGST_CGST = "SGST_CGST"
    IGST = "IGST"


@dataclass(frozen=True)
class GSTBreakdown:
    base_amount: Decimal
    gst_rate: Decimal
    sgst: Decimal
    cgst: Decimal
    igst: Decimal
    total_gst: Decimal
    total_amount: Decimal
    tax_mode: str
    is_inclusive: bool = False

    @property
    def sgst_rate(self) -> Decimal:
        return self.gst_rate / TWO if self.tax_mode == TaxMode.SGST_CGST else ZERO

    @property
    def cgst_rate(self) -> Decimal:
        return self.sgst_rate

    @property
    def igst_rate(self) -> Decimal:
        return self.gst_rate if self.tax_mode == TaxMode.IGST else ZERO


def validate_gst_rate(gst_rate) -> Decimal:
    rate = to_decimal(gst_rate, "gst_rate")
    if rate < ZERO or rate > MAX_GST_RATE:
        raise InvalidRate()
    return rate


def _validate_amount(amount, field_name: str) -> Decimal:
    value = to_decimal(amount, field_name)
    if value <= ZERO:
        raise InvalidAmount()
    return value


def _split(base_amount: Decimal, rate: Decimal, inter_state: bool, is_inclusive: bool) -> GSTBreakdown:
    # IGST is the full tax rounded once. SGST and CGST are each rounded from the
    # exact half so they stay equal; their sum can differ from IGST by a paisa.
    if inter_state:
        total_gst = round_paisa(base_amount * rate / HUNDRED)
        sgst, cgst, igst = ZERO, ZERO, total_gst
        mode = TaxMode.IGST
    else:
        half = round_paisa(base_amount * rate / HUNDRED / TWO)
        total_gst = half + half
        sgst, cgst, igst = half, half, ZERO
        mode = TaxMode.SGST_CGST

    return GSTBreakdown(
        base_amount=base_amount,
        gst_rate=rate,
        sgst=sgst,
        cgst=cgst,
        igst=igst,
        total_gst=total_gst,
        total_amount=base_amount + total_gst,
        tax_mode=mode,
        is_inclusive=is_inclusive,
    )


def calculate_exclusive(base_amount, gst_rate, inter_state: bool = False) -> GSTBreakdown:
    """GST charged on top of a pre-tax amount."""
    base = round_paisa(_validate_amount(base_amount, "base_amount"))
    rate = validate_gst_rate(gst_rate)
    if base <= ZERO:
        raise InvalidAmount()
    return _split(base, rate, inter_state, is_inclusive=False)


def calculate_inclusive(gross_amount, gst_rate, inter_state: bool = False) -> GSTBreakdown:
    """
    Back-calculates the pre-tax base from a tax-inclusive amount, then splits tax
    exactly like the exclusive path.

    total_amount on the result is base + tax, which can differ from the gross
    input by at most one paisa because base and each tax half are rounded.
    """
    gross = _validate_amount(gross_amount, "gross_amount")
    rate = validate_gst_rate(gst_rate)

    base = round_paisa(gross * HUNDRED / (HUNDRED + rate))
    if base <= ZERO:
        raise InvalidAmount()

    result = _split(base, rate, inter_state, is_inclusive=True)
    logger.debug("inclusive gst gross=%s base=%s tax=%s", gross, base, result.total_gst)
    return result


def zero_breakdown(gst_rate, inter_state: bool = False, is_inclusive: bool = False) -> GSTBreakdown:
    """Breakdown for a taxable amount that was discounted down to nothing."""
    rate = validate_gst_rate(gst_rate)
    return GSTBreakdown(
        base_amount=ZERO,
        gst_rate=rate,
        sgst=ZERO,
        cgst=ZERO,
        igst=ZERO,
        total_gst=ZERO,
        total_amount=ZERO,
        tax_mode=TaxMode.IGST if inter_state else TaxMode.SGST_CGST,
        is_inclusive=is_inclusive,
    )


def resolve_discount(base_amount: Decimal, discount_amount=None, discount_percent=None) -> Decimal:
    """
    Flat or percent discount against base_amount, rounded to paisa.
    Both forms at once, a negative value or a percent above 100 is rejected.
    """
    if discount_amount is not None and discount_percent is not None:
        raise InvalidDiscount("Provide either a discount amount or a discount percent, not both.")

    if discount_percent is not None:
        percent = to_decimal(discount_percent, "discount_percent")
        if percent < ZERO:
            raise InvalidDiscount("Discount percent cannot be negative.")
        if percent > HUNDRED:
            raise InvalidDiscount("Discount percent cannot exceed 100%.")
        return percent_of(base_amount, percent)

    if discount_amount is not None:
        amount = to_decimal(discount_amount, "discount_amount")
        if amount < ZERO:
            raise InvalidDiscount("Discount cannot be negative.")
        return round_paisa(amount)

    return ZERO


def calculate_with_discount_and_charges(
    *,
    base_amount,
    gst_rate,
    discount_amount=None,
    discount_percent=None,
    express_charges=ZERO,
    is_inclusive: bool = False,
    inter_state: bool = False,
) -> GSTBreakdown:
    """
    Discount comes off the pre-tax amount, express charges are added to it, and
    GST is computed once on what is left.
    """
    base = to_decimal(base_amount, "base_amount")
    discount = resolve_discount(base, discount_amount, discount_percent)

    express = to_decimal(express_charges if express_charges is not None else ZERO, "express_charges")
    if express < ZERO:
        raise InvalidAmount("Express charges cannot be negative.")

    net = round_paisa(base - discount + express)

    if is_inclusive:
        return calculate_inclusive(net, gst_rate, inter_state)
    return calculate_exclusive(net, gst_rate, inter_state)
