"""
PATH: core/models/app_setting.py

APP SETTING (CONFIGURATION STORE ROW)

Business tunables (tax rates, loyalty limits, referral percentages, ...).
Read at call time through core.services.settings_store so admin edits apply
immediately; nothing is cached in-process.
"""

from __future__ import annotations

from django.db import models


class AppSetting(models.Model):
    CATEGORY_REFERRAL = "referral"
    CATEGORY_MEMBERSHIP = "membership"
    CATEGORY_GENERAL = "general"
    CATEGORY_DISPLAY = "display"
    CATEGORY_LOYALTY = "loyalty"
    CATEGORY_BILLING = "billing"
    CATEGORY_CHECKOUT = "checkout"

    CATEGORY_CHOICES = [
        (CATEGORY_REFERRAL, "Referral"),
        (CATEGORY_MEMBERSHIP, "Membership"),
        (CATEGORY_GENERAL, "General"),
        (CATEGORY_DISPLAY, "Display"),
        (CATEGORY_LOYALTY, "Loyalty"),
        (CATEGORY_BILLING, "Billing"),
        (CATEGORY_CHECKOUT, "Checkout"),
    ]

    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(null=True, blank=True)
    description = models.CharField(max_length=255, blank=True, default="")
    category = models.CharField(
        max_length=20,
        choices=CATEGORY_CHOICES,
        default=CATEGORY_GENERAL,
        db_index=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category", "key"]

    def __str__(self):
        return f"{self.key}={self.value!r}"
