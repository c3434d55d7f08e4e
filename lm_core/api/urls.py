# lm_core/api/urls.py
from __future__ import annotations

from django.urls import path

from lm_core.invoices.api.views import InvoiceQuoteView
from lm_core.pricing.api.views import (
    BulkDiscountView,
    ExpressChargeView,
    GSTCalculationView,
    LinePriceView,
    LoyaltyDiscountView,
    PricingRulesView,
)

urlpatterns = [
    path("pricing/rules/", PricingRulesView.as_view(), name="pricing-rules"),
    path("pricing/gst/", GSTCalculationView.as_view(), name="pricing-gst"),
    path("pricing/line/", LinePriceView.as_view(), name="pricing-line"),
    path("pricing/express-charge/", ExpressChargeView.as_view(), name="pricing-express-charge"),
    path("pricing/bulk-discount/", BulkDiscountView.as_view(), name="pricing-bulk-discount"),
    path("pricing/loyalty-discount/", LoyaltyDiscountView.as_view(), name="pricing-loyalty-discount"),
    path("invoices/quote/", InvoiceQuoteView.as_view(), name="invoices-quote"),
]
