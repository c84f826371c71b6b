# payments/models/payment_attempt.py

"""
One gateway payment attempt against an order.

created -> paid | failed. An attempt is confirmed at most once; a new
attempt is opened for every retry, so history is never rewritten.
"""

import uuid
from decimal import Decimal

from django.db import models


class PaymentAttempt(models.Model):
    STATUS_CREATED = "created"
    STATUS_PAID = "paid"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_CREATED, "Created"),
        (STATUS_PAID, "Paid"),
        (STATUS_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payment_attempts",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="INR")

    gateway_order_id = models.CharField(max_length=64, unique=True)
    gateway_payment_id = models.CharField(max_length=64, blank=True, default="")
    gateway_signature = models.CharField(max_length=128, blank=True, default="")

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_CREATED)
    failure_reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    verified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="payment_attempt_order_idx"),
            models.Index(fields=["status"], name="payment_attempt_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0")),
                name="payment_attempt_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.gateway_order_id} ({self.status})"

    def client_payload(self) -> dict:
        return {
            "attempt_id": str(self.pk),
            "gateway_order_id": self.gateway_order_id,
            "amount": str(self.amount),
            "currency": self.currency,
            "status": self.status,
        }
