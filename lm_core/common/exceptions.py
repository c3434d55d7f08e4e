# lm_core/common/exceptions.py
from __future__ import annotations

from rest_framework.exceptions import ValidationError


class PricingError(ValidationError):
    """
    Base for calculation input errors.

    Still a 400 ValidationError so it flows through the global exception handler,
    but carries its own code so clients can tell the failures apart.
    """
    default_detail = "Invalid pricing input."
    default_code = "pricing_error"
    field_name = "non_field_errors"

    def __init__(self, detail=None, code=None):
        detail = detail or self.default_detail
        if isinstance(detail, str):
            detail = {self.field_name: [detail]}
        super().__init__(detail=detail, code=code or self.default_code)
        self.message = self._message_from(detail)

    @staticmethod
    def _message_from(detail) -> str:
        if isinstance(detail, dict):
            first = next(iter(detail.values()), "")
            if isinstance(first, (list, tuple)):
                first = first[0] if first else ""
            return str(first)
        return str(detail)

    def __str__(self) -> str:
        return self.message


class InvalidAmount(PricingError):
    default_detail = "Amount must be positive."
    default_code = "invalid_amount"
    field_name = "amount"


class InvalidRate(PricingError):
    default_detail = "GST rate must be between 0 and 100."
    default_code = "invalid_rate"
    field_name = "gst_rate"


class InvalidQuantity(PricingError):
    default_detail = "Quantity must be greater than 0."
    default_code = "invalid_quantity"
    field_name = "quantity"


class NonIntegerQuantity(PricingError):
    default_detail = "Quantity must be a whole number for piece and set based services."
    default_code = "non_integer_quantity"
    field_name = "quantity"


class InvalidDiscount(PricingError):
    default_detail = "Invalid discount."
    default_code = "invalid_discount"
    field_name = "discount"
