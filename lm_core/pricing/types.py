# lm_core/pricing/types.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from lm_core.common.money import ZERO


class UnitType:
    """
    How a service is measured.
    WEIGHT/AREA accept fractional quantities, PIECE/SET must be whole numbers.
    """
    WEIGHT = "WEIGHT"
    PIECE = "PIECE"
    SET = "SET"
    AREA = "AREA"

    ALL = (WEIGHT, PIECE, SET, AREA)
    WHOLE_NUMBER = (PIECE, SET)


# -------------------------------------------------------------------
# Catalog snapshot (read-only, supplied by the caller)
# -------------------------------------------------------------------

@dataclass(frozen=True)
class ServiceDefinition:
    id: int
    name: str
    unit_type: str
    base_price: Decimal
    minimum_quantity: Decimal = ZERO  # 0 = no minimum
    gst_rate: Decimal = Decimal("18")
    is_dynamic: bool = False
    unit_label: str = ""


@dataclass(frozen=True)
class ServiceVariant:
    """Material/size price override for a dynamic service."""
    id: int
    service_id: int
    name: str
    base_price: Decimal
    gst_rate: Decimal = Decimal("18")


@dataclass(frozen=True)
class Addon:
    id: int
    name: str
    price: Decimal
    gst_rate: Decimal = Decimal("18")
    unit_label: str = ""


@dataclass(frozen=True)
class AddonQuantity:
    addon_id: int
    quantity: Decimal


# -------------------------------------------------------------------
# Results (transient; recomputed on every draft edit)
# -------------------------------------------------------------------

@dataclass(frozen=True)
class PricingResult:
    service: ServiceDefinition
    variant: ServiceVariant | None
    quantity: Decimal          # as entered, kept for display
    billed_quantity: Decimal   # max(quantity, minimum_quantity)
    rate: Decimal
    gst_rate: Decimal
    line_total: Decimal
    meets_minimum: bool
    minimum_charge: Decimal    # informational shortfall, already inside line_total


@dataclass(frozen=True)
class ExpressPricingResult:
    pricing: PricingResult
    base_amount: Decimal
    express_charge: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class AddonPricingResult:
    addon: Addon
    quantity: Decimal
    total: Decimal


@dataclass(frozen=True)
class BulkDiscountResult:
    discount_percent: Decimal
    discount_amount: Decimal
    final_amount: Decimal


@dataclass(frozen=True)
class LoyaltyDiscountResult:
    customer_tier: str
    discount_percent: Decimal
    discount_amount: Decimal
    final_amount: Decimal
