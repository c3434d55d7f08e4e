# lm_core/invoices/apps.py
from django.apps import AppConfig


class InvoicesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lm_core.invoices"
