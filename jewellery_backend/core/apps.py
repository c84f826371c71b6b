# core/apps.py

"""
CORE APP CONFIG

Shared building blocks for the financial engine:
- Error taxonomy (core.exceptions)
- Money helpers (core.money)
- Configuration store (AppSetting) + atomic sequence counters
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Core (settings + sequences)"
