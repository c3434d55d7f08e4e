# lm_core/pricing/apps.py
from __future__ import annotations

from django.apps import AppConfig


class PricingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lm_core.pricing"

    def ready(self) -> None:
        # Fail at startup, not on the first request, if LM_PRICING is malformed.
        from lm_core.pricing.rules import pricing_rules_from_settings

        pricing_rules_from_settings()
