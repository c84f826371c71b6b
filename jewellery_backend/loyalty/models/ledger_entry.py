# loyalty/models/ledger_entry.py

"""
======================================================
PATH: loyalty/models/ledger_entry.py
======================================================
POINTS LEDGER ENTRY

One credit or debit of loyalty points on one account.

Guarantees:
- Immutable once created (no updates, no deletes)
- points is always positive; direction carries the sign
- balance_after is the account balance right after this entry
- Replaying an account's entries in id order reproduces User.loyalty_points

Corrections are new offsetting entries (e.g. a "refund" credit), never edits.
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class LedgerEntry(models.Model):
    CREDIT = "credit"
    DEBIT = "debit"

    DIRECTIONS = [
        (CREDIT, "Credit"),
        (DEBIT, "Debit"),
    ]

    SOURCE_REFERRAL_REWARD = "referral_reward"
    SOURCE_CASHBACK = "cashback"
    SOURCE_REFUND = "refund"
    SOURCE_ORDER_PAYMENT = "order_payment"
    SOURCE_PACKAGE_PAYMENT = "package_payment"
    SOURCE_ADMIN_ADJUSTMENT = "admin_adjustment"
    SOURCE_WELCOME_BONUS = "welcome_bonus"
    SOURCE_EXPIRED = "expired"

    SOURCES = [
        (SOURCE_REFERRAL_REWARD, "Referral reward"),
        (SOURCE_CASHBACK, "Cashback"),
        (SOURCE_REFUND, "Refund"),
        (SOURCE_ORDER_PAYMENT, "Order payment"),
        (SOURCE_PACKAGE_PAYMENT, "Package payment"),
        (SOURCE_ADMIN_ADJUSTMENT, "Admin adjustment"),
        (SOURCE_WELCOME_BONUS, "Welcome bonus"),
        (SOURCE_EXPIRED, "Expired"),
    ]

    REF_ORDER = "Order"
    REF_REFERRAL = "Referral"
    REF_PACKAGE_PURCHASE = "PackagePurchase"
    REF_ADMIN = "Admin"

    REFERENCE_TYPES = [
        (REF_ORDER, "Order"),
        (REF_REFERRAL, "Referral"),
        (REF_PACKAGE_PURCHASE, "Package purchase"),
        (REF_ADMIN, "Admin"),
    ]

    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )

    direction = models.CharField(max_length=6, choices=DIRECTIONS)

    points = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Positive number of points",
    )
    balance_after = models.PositiveIntegerField()

    source = models.CharField(max_length=32, choices=SOURCES)
    description = models.CharField(max_length=255, blank=True, default="")

    reference_type = models.CharField(max_length=32, choices=REFERENCE_TYPES, blank=True, default="")
    reference_id = models.CharField(max_length=64, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_adjustments",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["account", "id"], name="loyalty_entry_account_idx"),
            models.Index(fields=["source"], name="loyalty_entry_source_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="loyalty_entry_ref_idx"),
        ]

    def __str__(self):
        sign = "+" if self.direction == self.CREDIT else "-"
        return f"{sign}{self.points} ({self.source}) → {self.account_id}"

    @property
    def signed_points(self) -> int:
        return self.points if self.direction == self.CREDIT else -self.points

    def clean(self):
        if self.direction not in (self.CREDIT, self.DEBIT):
            raise ValidationError("Invalid direction")

        if self.points is None or self.points <= 0:
            raise ValidationError("Ledger points must be > 0")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("LedgerEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are immutable and cannot be deleted")
