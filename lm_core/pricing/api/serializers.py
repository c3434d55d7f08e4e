# lm_core/pricing/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from lm_core.pricing.types import (
    Addon,
    AddonQuantity,
    ServiceDefinition,
    ServiceVariant,
    UnitType,
)


def money_field(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


def rate_field(**kwargs):
    return serializers.DecimalField(max_digits=5, decimal_places=2, **kwargs)


def quantity_field(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=3, **kwargs)


# -------------------------------------------------------------------
# Catalog snapshot (input + output)
# -------------------------------------------------------------------

class ServiceDefinitionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(max_length=255)
    unit_type = serializers.ChoiceField(choices=UnitType.ALL)
    base_price = money_field(min_value=Decimal("0.00"))
    minimum_quantity = quantity_field(required=False, default=Decimal("0"), min_value=Decimal("0"))
    gst_rate = rate_field(required=False, default=Decimal("18.00"))
    is_dynamic = serializers.BooleanField(required=False, default=False)
    unit_label = serializers.CharField(required=False, allow_blank=True, default="")


class ServiceVariantSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    service_id = serializers.IntegerField()
    name = serializers.CharField(max_length=255)
    base_price = money_field(min_value=Decimal("0.00"))
    gst_rate = rate_field(required=False, default=Decimal("18.00"))


class AddonSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(max_length=255)
    price = money_field(min_value=Decimal("0.00"))
    gst_rate = rate_field(required=False, default=Decimal("18.00"))
    unit_label = serializers.CharField(required=False, allow_blank=True, default="")


class AddonQuantitySerializer(serializers.Serializer):
    addon_id = serializers.IntegerField()
    quantity = quantity_field()


def service_from(data: dict) -> ServiceDefinition:
    return ServiceDefinition(**data)


def variant_from(data: dict | None) -> ServiceVariant | None:
    return ServiceVariant(**data) if data else None


def addons_from(items) -> tuple[Addon, ...]:
    return tuple(Addon(**item) for item in items or [])


def addon_quantities_from(items) -> tuple[AddonQuantity, ...]:
    return tuple(AddonQuantity(**item) for item in items or [])


class LineInputSerializer(serializers.Serializer):
    """
    One invoice line with its catalog snapshot.

    Quantity rules (positive, whole numbers for PIECE/SET) are enforced by the
    pricing engine so clients get the specific error codes.
    """
    service = ServiceDefinitionSerializer()
    variant = ServiceVariantSerializer(required=False, allow_null=True)
    quantity = quantity_field()
    addons = AddonSerializer(many=True, required=False)
    addon_quantities = AddonQuantitySerializer(many=True, required=False)

    def validate(self, attrs):
        known = {a["id"] for a in attrs.get("addons", [])}
        missing = [q["addon_id"] for q in attrs.get("addon_quantities", []) if q["addon_id"] not in known]
        if missing:
            raise serializers.ValidationError(
                {"addon_quantities": f"Addon with ID {', '.join(str(m) for m in missing)} not found."}
            )
        return attrs


class LinePriceRequestSerializer(LineInputSerializer):
    express = serializers.BooleanField(required=False, default=False)
    inter_state = serializers.BooleanField(required=False, default=False)


class GSTRequestSerializer(serializers.Serializer):
    amount = money_field()
    gst_rate = rate_field()
    is_inclusive = serializers.BooleanField(required=False, default=False)
    inter_state = serializers.BooleanField(required=False, default=False)
    discount_amount = money_field(required=False, allow_null=True)
    discount_percent = rate_field(required=False, allow_null=True)
    express_charges = money_field(required=False, allow_null=True)


class ExpressChargeRequestSerializer(serializers.Serializer):
    base_amount = money_field()
    express_rate = rate_field(required=False, allow_null=True)


class BulkDiscountRequestSerializer(serializers.Serializer):
    total_amount = money_field()


class LoyaltyDiscountRequestSerializer(serializers.Serializer):
    base_amount = money_field()
    customer_tier = serializers.CharField(max_length=32, allow_blank=True)


# -------------------------------------------------------------------
# Results (read-only)
# -------------------------------------------------------------------

class GSTBreakdownSerializer(serializers.Serializer):
    base_amount = money_field(read_only=True)
    gst_rate = rate_field(read_only=True)
    sgst_rate = rate_field(read_only=True)
    cgst_rate = rate_field(read_only=True)
    igst_rate = rate_field(read_only=True)
    sgst = money_field(read_only=True)
    cgst = money_field(read_only=True)
    igst = money_field(read_only=True)
    total_gst = money_field(read_only=True)
    total_amount = money_field(read_only=True)
    tax_mode = serializers.CharField(read_only=True)
    is_inclusive = serializers.BooleanField(read_only=True)


class PricingResultSerializer(serializers.Serializer):
    service = ServiceDefinitionSerializer(read_only=True)
    variant = ServiceVariantSerializer(read_only=True, allow_null=True)
    quantity = quantity_field(read_only=True)
    billed_quantity = quantity_field(read_only=True)
    rate = money_field(read_only=True)
    gst_rate = rate_field(read_only=True)
    line_total = money_field(read_only=True)
    meets_minimum = serializers.BooleanField(read_only=True)
    minimum_charge = money_field(read_only=True)


class AddonPricingResultSerializer(serializers.Serializer):
    addon = AddonSerializer(read_only=True)
    quantity = quantity_field(read_only=True)
    total = money_field(read_only=True)


class ExpressPricingResultSerializer(serializers.Serializer):
    base_amount = money_field(read_only=True)
    express_charge = money_field(read_only=True)
    line_total = money_field(read_only=True)


class LineQuoteSerializer(serializers.Serializer):
    pricing = PricingResultSerializer(read_only=True)
    addons = AddonPricingResultSerializer(many=True, read_only=True)
    addon_total = money_field(read_only=True)
    express = ExpressPricingResultSerializer(read_only=True, allow_null=True)
    line_total = money_field(read_only=True)
    gst_preview = GSTBreakdownSerializer(many=True, read_only=True)
    preview_gst = money_field(read_only=True)


class BulkDiscountResultSerializer(serializers.Serializer):
    discount_percent = rate_field(read_only=True)
    discount_amount = money_field(read_only=True)
    final_amount = money_field(read_only=True)


class LoyaltyDiscountResultSerializer(BulkDiscountResultSerializer):
    customer_tier = serializers.CharField(read_only=True)


class DiscountTierSerializer(serializers.Serializer):
    threshold = money_field(read_only=True)
    percent = rate_field(read_only=True)


class PricingRulesSerializer(serializers.Serializer):
    gst_slabs = serializers.ListField(child=rate_field(), read_only=True)
    bulk_discount_tiers = DiscountTierSerializer(many=True, read_only=True)
    express_uplift_percent = rate_field(read_only=True)
    loyalty_tiers = serializers.DictField(child=rate_field(), source="loyalty_tier_map", read_only=True)
    tax_strategy = serializers.CharField(read_only=True)
