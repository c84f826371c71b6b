# memberships/models/package_purchase.py

"""
PACKAGE PURCHASE

pending -> completed | failed   (refunded is set by back office only)

Loyalty points are reserved by amount at initiation and debited only when
the payment is verified. If the balance has dropped in between, the debit
is clamped to what is left and the gap is kept in loyalty_points_shortfall.
membership_* fields record what was granted.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

from .package import Package


class PackagePurchase(models.Model):
    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    METHOD_ONLINE = "online"
    METHOD_CASH = "cash"
    METHOD_WALLET = "wallet"

    PAYMENT_METHODS = [
        (METHOD_ONLINE, "Online"),
        (METHOD_CASH, "Cash"),
        (METHOD_WALLET, "Wallet"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="package_purchases",
    )
    package = models.ForeignKey(Package, on_delete=models.PROTECT, related_name="purchases")

    amount_paid = models.DecimalField(max_digits=12, decimal_places=2)
    loyalty_points_used = models.PositiveIntegerField(default=0)
    # points reserved at initiation but no longer available at verification
    loyalty_points_shortfall = models.PositiveIntegerField(default=0)

    gateway_order_id = models.CharField(max_length=64, unique=True)
    gateway_payment_id = models.CharField(max_length=64, blank=True, default="")
    gateway_signature = models.CharField(max_length=128, blank=True, default="")

    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHODS, default=METHOD_ONLINE)
    payment_status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)

    membership_granted = models.BooleanField(default=False)
    membership_granted_at = models.DateTimeField(null=True, blank=True)
    membership_expires_at = models.DateTimeField(null=True, blank=True)
    membership_discount_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    referral_rewarded = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="pkg_purchase_user_created_idx"),
            models.Index(fields=["payment_status"], name="pkg_purchase_status_idx"),
            models.Index(fields=["gateway_payment_id"], name="pkg_purchase_payment_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_paid__gte=Decimal("0")),
                name="pkg_purchase_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.package} for {self.user_id} ({self.payment_status})"
