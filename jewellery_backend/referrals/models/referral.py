# referrals/models/referral.py

"""
REFERRAL

referrer invited referee (who applied referrer's code).

Lifecycle:
    pending -> rewarded   (first qualifying purchase by the referee)
    pending -> expired

A referee has at most ONE rewarded referral, ever. The conditional unique
constraint below is what makes concurrent settlement attempts safe: the
second writer gets an IntegrityError and backs off.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class Referral(models.Model):
    STATUS_PENDING = "pending"
    STATUS_QUALIFIED = "qualified"
    STATUS_REWARDED = "rewarded"
    STATUS_EXPIRED = "expired"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_QUALIFIED, "Qualified"),
        (STATUS_REWARDED, "Rewarded"),
        (STATUS_EXPIRED, "Expired"),
    ]

    PURCHASE_ORDER = "Order"
    PURCHASE_PACKAGE = "PackagePurchase"

    PURCHASE_TYPES = [
        (PURCHASE_ORDER, "Order"),
        (PURCHASE_PACKAGE, "Package purchase"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    referrer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="referrals_made",
    )
    referee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="referrals_received",
    )
    code = models.CharField(max_length=16)

    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_PENDING)

    reward_amount = models.PositiveIntegerField(default=0, help_text="Points credited to the referrer")
    reward_credited_at = models.DateTimeField(null=True, blank=True)
    ledger_entry = models.ForeignKey(
        "loyalty.LedgerEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    purchase_type = models.CharField(max_length=20, choices=PURCHASE_TYPES, blank=True, default="")
    purchase_id = models.CharField(max_length=64, blank=True, default="")
    purchase_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["referee"],
                condition=Q(status="rewarded"),
                name="unique_rewarded_referral_per_referee",
            ),
        ]
        indexes = [
            models.Index(fields=["referrer", "status"], name="referral_referrer_status_idx"),
            models.Index(fields=["code"], name="referral_code_idx"),
        ]

    def __str__(self):
        return f"{self.code}: {self.referrer_id} -> {self.referee_id} ({self.status})"
