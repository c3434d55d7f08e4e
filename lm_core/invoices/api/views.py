# lm_core/invoices/api/views.py
from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from lm_core.invoices.api.serializers import InvoiceQuoteRequestSerializer, InvoiceTotalsSerializer
from lm_core.invoices.totals import assemble_invoice_totals
from lm_core.pricing.rules import pricing_rules_from_settings

logger = logging.getLogger(__name__)


class InvoiceQuoteView(APIView):
    """
    /invoices/quote/
    Recomputes draft invoice totals from scratch on every call. Nothing is persisted.
    """

    @extend_schema(tags=["Invoices"], request=InvoiceQuoteRequestSerializer, responses={200: InvoiceTotalsSerializer})
    def post(self, request):
        ser = InvoiceQuoteRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        totals = assemble_invoice_totals(
            ser.to_line_inputs(),
            discount_amount=data.get("discount_amount"),
            discount_percent=data.get("discount_percent"),
            apply_bulk_discount=data["apply_bulk_discount"],
            express_charge=data.get("express_charge"),
            is_express=data["is_express"],
            gst_inclusive=data["gst_inclusive"],
            inter_state=data["inter_state"],
            tax_strategy=data.get("tax_strategy"),
            gst_rate=data.get("gst_rate"),
            rules=pricing_rules_from_settings(),
        )

        logger.info(
            "invoice quote request_id=%s lines=%s strategy=%s taxable=%s gst=%s total=%s",
            getattr(request, "request_id", None),
            len(totals.lines),
            totals.tax_strategy,
            totals.taxable_amount,
            totals.total_gst,
            totals.grand_total,
        )
        return Response(InvoiceTotalsSerializer(totals).data, status=status.HTTP_200_OK)
