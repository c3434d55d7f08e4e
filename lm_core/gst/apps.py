# lm_core/gst/apps.py
from django.apps import AppConfig


class GstConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lm_core.gst"
