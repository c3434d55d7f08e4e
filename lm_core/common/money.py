# lm_core/common/money.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rest_framework.exceptions import ValidationError

PAISA = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value, field_name: str) -> Decimal:
    """
    Accepts Decimal / str / int / float and converts to Decimal safely.
    Raises ValidationError for invalid or non-finite values.
    """
    if isinstance(value, bool):
        raise ValidationError({field_name: "Invalid decimal value."})
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            # str() handles int/float/str uniformly
            d = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError({field_name: "Invalid decimal value."})

    if not d.is_finite():
        raise ValidationError({field_name: "Invalid decimal value."})
    return d


def round_paisa(value: Decimal) -> Decimal:
    """Half-up rounding to the nearest paisa."""
    return value.quantize(PAISA, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return round_paisa(amount * percent / HUNDRED)
