# lm_core/pricing/rules.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from rest_framework.exceptions import ValidationError

from lm_core.common.money import HUNDRED, ZERO, to_decimal


class TaxStrategy:
    """
    How invoice-level GST is computed.

    - BLENDED: one rate for the whole invoice (single calculator call).
    - PER_LINE: tax grouped by each line's own rate; correct for mixed-rate catalogs.
    """
    BLENDED = "BLENDED"
    PER_LINE = "PER_LINE"

    ALL = (BLENDED, PER_LINE)


@dataclass(frozen=True)
class DiscountTier:
    threshold: Decimal
    percent: Decimal


def _d(value: str) -> Decimal:
    return Decimal(value)


@dataclass(frozen=True)
class PricingRules:
    """
    Business constants for pricing and tax.
    Passed to every entry point so jurisdiction/business changes need no code change.
    """
    gst_slabs: tuple[Decimal, ...] = (_d("0"), _d("5"), _d("12"), _d("18"), _d("28"))
    # Highest threshold first.
    bulk_discount_tiers: tuple[DiscountTier, ...] = (
        DiscountTier(threshold=_d("2000"), percent=_d("10")),
        DiscountTier(threshold=_d("1000"), percent=_d("5")),
    )
    express_uplift_percent: Decimal = _d("50")
    # (tier name, percent) pairs
    loyalty_tiers: tuple[tuple[str, Decimal], ...] = (
        ("PREMIUM", _d("10")),
        ("GOLD", _d("7.5")),
        ("SILVER", _d("5")),
        ("BRONZE", _d("2.5")),
    )
    tax_strategy: str = TaxStrategy.BLENDED

    def is_valid_slab(self, rate: Decimal) -> bool:
        return any(rate == slab for slab in self.gst_slabs)

    def bulk_discount_percent(self, amount: Decimal) -> Decimal:
        for tier in self.bulk_discount_tiers:
            if amount >= tier.threshold:
                return tier.percent
        return ZERO

    def loyalty_percent(self, customer_tier: str | None) -> Decimal:
        return self.loyalty_tier_map.get((customer_tier or "").strip().upper(), ZERO)

    @property
    def loyalty_tier_map(self) -> dict[str, Decimal]:
        return dict(self.loyalty_tiers)


DEFAULT_PRICING_RULES = PricingRules()


def _percent(value, field_name: str) -> Decimal:
    pct = to_decimal(value, field_name)
    if pct < ZERO or pct > HUNDRED:
        raise ValidationError({field_name: "Must be between 0 and 100."})
    return pct


def build_pricing_rules(raw: dict | None) -> PricingRules:
    """
    Builds PricingRules from a settings-style dict, e.g.

        LM_PRICING = {
            "GST_SLABS": ["0", "5", "12", "18", "28"],
            "BULK_DISCOUNT_TIERS": [["2000", "10"], ["1000", "5"]],
            "EXPRESS_UPLIFT_PERCENT": "50",
            "LOYALTY_TIERS": {"PREMIUM": "10", "GOLD": "7.5"},
            "TAX_STRATEGY": "BLENDED",
        }

    Missing keys keep the defaults.
    """
    raw = raw or {}
    defaults = DEFAULT_PRICING_RULES
    kwargs = {}

    if "GST_SLABS" in raw:
        kwargs["gst_slabs"] = tuple(_percent(v, "GST_SLABS") for v in raw["GST_SLABS"])

    if "BULK_DISCOUNT_TIERS" in raw:
        tiers = [
            DiscountTier(
                threshold=to_decimal(threshold, "BULK_DISCOUNT_TIERS"),
                percent=_percent(percent, "BULK_DISCOUNT_TIERS"),
            )
            for threshold, percent in raw["BULK_DISCOUNT_TIERS"]
        ]
        kwargs["bulk_discount_tiers"] = tuple(sorted(tiers, key=lambda t: t.threshold, reverse=True))

    if "EXPRESS_UPLIFT_PERCENT" in raw:
        uplift = to_decimal(raw["EXPRESS_UPLIFT_PERCENT"], "EXPRESS_UPLIFT_PERCENT")
        if uplift < ZERO:
            raise ValidationError({"EXPRESS_UPLIFT_PERCENT": "Must be >= 0."})
        kwargs["express_uplift_percent"] = uplift

    if "LOYALTY_TIERS" in raw:
        kwargs["loyalty_tiers"] = tuple(
            (str(name).upper(), _percent(pct, "LOYALTY_TIERS")) for name, pct in raw["LOYALTY_TIERS"].items()
        )

    if "TAX_STRATEGY" in raw:
        strategy = str(raw["TAX_STRATEGY"]).upper()
        if strategy not in TaxStrategy.ALL:
            raise ValidationError({"TAX_STRATEGY": f"Must be one of {', '.join(TaxStrategy.ALL)}."})
        kwargs["tax_strategy"] = strategy

    if not kwargs:
        return defaults
    return PricingRules(**kwargs)


def pricing_rules_from_settings() -> PricingRules:
    from django.conf import settings

    return build_pricing_rules(getattr(settings, "LM_PRICING", None))
