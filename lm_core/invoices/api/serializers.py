# lm_core/invoices/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from lm_core.invoices.totals import InvoiceLineInput, effective_rate
from lm_core.pricing.api.serializers import (
    AddonPricingResultSerializer,
    GSTBreakdownSerializer,
    LineInputSerializer,
    PricingResultSerializer,
    addon_quantities_from,
    addons_from,
    money_field,
    rate_field,
    service_from,
    variant_from,
)
from lm_core.pricing.rules import TaxStrategy


class InvoiceQuoteRequestSerializer(serializers.Serializer):
    """
    Draft invoice: lines with their catalog snapshot plus invoice-level adjustments.
    At most one of discount_amount / discount_percent / apply_bulk_discount.
    """
    lines = LineInputSerializer(many=True, allow_empty=False)

    discount_amount = money_field(required=False, allow_null=True, min_value=Decimal("0.00"))
    discount_percent = rate_field(required=False, allow_null=True, min_value=Decimal("0"))
    apply_bulk_discount = serializers.BooleanField(required=False, default=False)

    express_charge = money_field(required=False, allow_null=True, min_value=Decimal("0.00"))
    is_express = serializers.BooleanField(required=False, default=False)

    gst_inclusive = serializers.BooleanField(required=False, default=False)
    inter_state = serializers.BooleanField(required=False, default=False)
    tax_strategy = serializers.ChoiceField(choices=TaxStrategy.ALL, required=False, allow_null=True)
    gst_rate = rate_field(required=False, allow_null=True)

    def to_line_inputs(self) -> list[InvoiceLineInput]:
        return [
            InvoiceLineInput(
                service=service_from(line["service"]),
                quantity=line["quantity"],
                variant=variant_from(line.get("variant")),
                addons=addons_from(line.get("addons")),
                addon_quantities=addon_quantities_from(line.get("addon_quantities")),
            )
            for line in self.validated_data["lines"]
        ]


class LineTotalsSerializer(serializers.Serializer):
    pricing = PricingResultSerializer(read_only=True)
    addons = AddonPricingResultSerializer(many=True, read_only=True)
    line_total = money_field(read_only=True)


class InvoiceTotalsSerializer(serializers.Serializer):
    lines = LineTotalsSerializer(many=True, read_only=True)

    subtotal = money_field(read_only=True)
    discount_amount = money_field(read_only=True)
    discount_percent = rate_field(read_only=True, allow_null=True)
    express_charge = money_field(read_only=True)
    taxable_amount = money_field(read_only=True)

    base_amount = money_field(read_only=True)
    sgst = money_field(read_only=True)
    cgst = money_field(read_only=True)
    igst = money_field(read_only=True)
    total_gst = money_field(read_only=True)
    tax_mode = serializers.CharField(read_only=True)
    gst_rate = rate_field(read_only=True, allow_null=True)
    effective_gst_rate = serializers.SerializerMethodField()
    gst_inclusive = serializers.BooleanField(read_only=True)
    tax_strategy = serializers.CharField(read_only=True)

    round_off = money_field(read_only=True)
    grand_total = money_field(read_only=True)
    tax_breakdowns = GSTBreakdownSerializer(many=True, read_only=True)

    def get_effective_gst_rate(self, obj) -> str:
        return str(effective_rate(obj))
