# lm_core/pricing/api/views.py
from __future__ import annotations

import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from lm_core.common.money import ZERO
from lm_core.gst.calculator import (
    calculate_exclusive,
    calculate_inclusive,
    calculate_with_discount_and_charges,
    zero_breakdown,
)
from lm_core.pricing.api.serializers import (
    BulkDiscountRequestSerializer,
    BulkDiscountResultSerializer,
    ExpressChargeRequestSerializer,
    GSTBreakdownSerializer,
    GSTRequestSerializer,
    LinePriceRequestSerializer,
    LineQuoteSerializer,
    LoyaltyDiscountRequestSerializer,
    LoyaltyDiscountResultSerializer,
    PricingRulesSerializer,
    addon_quantities_from,
    addons_from,
    service_from,
    variant_from,
)
from lm_core.pricing.engine import (
    calculate_addon_pricing,
    calculate_bulk_discount,
    calculate_express_charge,
    calculate_loyalty_discount,
    calculate_price_with_express,
    line_amount,
    price_line,
)
from lm_core.pricing.rules import pricing_rules_from_settings

logger = logging.getLogger(__name__)


class PricingRulesView(APIView):
    """
    /pricing/rules/
    Active GST slabs, discount tiers and express uplift, for UI hints.
    """

    @extend_schema(tags=["Pricing"], responses={200: PricingRulesSerializer})
    def get(self, request):
        rules = pricing_rules_from_settings()
        return Response(PricingRulesSerializer(rules).data, status=status.HTTP_200_OK)


class GSTCalculationView(APIView):
    """
    /pricing/gst/
    - plain exclusive/inclusive split when no discount or express charge is given
    - otherwise discount -> express -> GST on the net amount
    """

    @extend_schema(tags=["Pricing"], request=GSTRequestSerializer, responses={200: GSTBreakdownSerializer})
    def post(self, request):
        ser = GSTRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        adjustments = (data.get("discount_amount"), data.get("discount_percent"), data.get("express_charges"))
        if any(v is not None for v in adjustments):
            result = calculate_with_discount_and_charges(
                base_amount=data["amount"],
                gst_rate=data["gst_rate"],
                discount_amount=data.get("discount_amount"),
                discount_percent=data.get("discount_percent"),
                express_charges=data.get("express_charges"),
                is_inclusive=data["is_inclusive"],
                inter_state=data["inter_state"],
            )
        elif data["is_inclusive"]:
            result = calculate_inclusive(data["amount"], data["gst_rate"], data["inter_state"])
        else:
            result = calculate_exclusive(data["amount"], data["gst_rate"], data["inter_state"])

        return Response(GSTBreakdownSerializer(result).data, status=status.HTTP_200_OK)


class LinePriceView(APIView):
    """
    /pricing/line/
    Prices a single line while it is being edited: minimum quantity, variant,
    add-ons, optional express uplift and an exclusive GST preview per rate
    (service rate for the service and express, each add-on's own rate otherwise).
    """

    @extend_schema(tags=["Pricing"], request=LinePriceRequestSerializer, responses={200: LineQuoteSerializer})
    def post(self, request):
        ser = LinePriceRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        rules = pricing_rules_from_settings()

        service = service_from(data["service"])
        variant = variant_from(data.get("variant"))

        express = None
        if data["express"]:
            express = calculate_price_with_express(service, data["quantity"], variant, rules=rules)
            pricing = express.pricing
        else:
            pricing = price_line(service, data["quantity"], variant, rules=rules)

        addon_results = calculate_addon_pricing(
            addons_from(data.get("addons")),
            addon_quantities_from(data.get("addon_quantities")),
            rules=rules,
        )
        addon_total = sum((a.total for a in addon_results), ZERO)
        line_total = line_amount(pricing, addon_results)
        if express is not None:
            line_total += express.express_charge

        # Service (plus express) at the service rate, each add-on at its own rate.
        by_rate = {pricing.gst_rate: line_total - addon_total}
        for a in addon_results:
            by_rate[a.addon.gst_rate] = by_rate.get(a.addon.gst_rate, ZERO) + a.total

        gst_preview = [
            calculate_exclusive(amount, rate, data["inter_state"]) if amount > ZERO
            else zero_breakdown(rate, data["inter_state"])
            for rate, amount in by_rate.items()
        ]
        preview_gst = sum((b.total_gst for b in gst_preview), ZERO)

        logger.debug("line priced service=%s qty=%s total=%s", service.id, pricing.quantity, line_total)

        payload = {
            "pricing": pricing,
            "addons": addon_results,
            "addon_total": addon_total,
            "express": express,
            "line_total": line_total,
            "gst_preview": gst_preview,
            "preview_gst": preview_gst,
        }
        return Response(LineQuoteSerializer(payload).data, status=status.HTTP_200_OK)


class ExpressChargeView(APIView):
    """
    /pricing/express-charge/
    Express delivery surcharge; express_rate defaults to the configured uplift.
    """

    @extend_schema(tags=["Pricing"], request=ExpressChargeRequestSerializer, responses={200: OpenApiTypes.OBJECT})
    def post(self, request):
        ser = ExpressChargeRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        rules = pricing_rules_from_settings()

        rate = ser.validated_data.get("express_rate")
        charge = calculate_express_charge(ser.validated_data["base_amount"], rate, rules=rules)
        return Response(
            {
                "express_rate": str(rate if rate is not None else rules.express_uplift_percent),
                "express_charge": str(charge),
            },
            status=status.HTTP_200_OK,
        )


class BulkDiscountView(APIView):
    @extend_schema(tags=["Pricing"], request=BulkDiscountRequestSerializer, responses={200: BulkDiscountResultSerializer})
    def post(self, request):
        ser = BulkDiscountRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = calculate_bulk_discount(ser.validated_data["total_amount"], rules=pricing_rules_from_settings())
        return Response(BulkDiscountResultSerializer(result).data, status=status.HTTP_200_OK)


class LoyaltyDiscountView(APIView):
    @extend_schema(
        tags=["Pricing"],
        request=LoyaltyDiscountRequestSerializer,
        responses={200: LoyaltyDiscountResultSerializer},
    )
    def post(self, request):
        ser = LoyaltyDiscountRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = calculate_loyalty_discount(
            ser.validated_data["base_amount"],
            ser.validated_data["customer_tier"],
            rules=pricing_rules_from_settings(),
        )
        return Response(LoyaltyDiscountResultSerializer(result).data, status=status.HTTP_200_OK)
