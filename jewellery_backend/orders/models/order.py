# orders/models/order.py

"""
======================================================
PATH: orders/models/order.py
======================================================
CUSTOMER ORDER

Lifecycle (see orders.services.order_lifecycle):
    pending -> processing -> shipped -> delivered
    pending | processing -> cancelled

Money:
- Pricing fields are a snapshot taken at creation; catalog edits never touch them.
- payment_* fields are the payment sub-record. Only the payment resolver
  (orders.services.payment_resolver) changes them.

Invariant (partial payments):
    amount_paid + remaining_amount == total_amount
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from core.money import money, to_decimal

from .installment_plan import InstallmentPlan


class Order(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    METHOD_ONLINE = "online"
    METHOD_CASH = "cash"

    PAYMENT_METHODS = [
        (METHOD_ONLINE, "Online"),
        (METHOD_CASH, "Cash"),
    ]

    TYPE_FULL = "full"
    TYPE_PARTIAL = "partial"
    TYPE_EMI = "emi"

    PAYMENT_TYPES = [
        (TYPE_FULL, "Full"),
        (TYPE_PARTIAL, "Partial"),
        (TYPE_EMI, "EMI"),
    ]

    # payment sub-record status
    PAYMENT_PENDING = "pending"
    PAYMENT_COMPLETED = "completed"
    PAYMENT_FAILED = "failed"

    PAYMENT_STATES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_COMPLETED, "Completed"),
        (PAYMENT_FAILED, "Failed"),
    ]

    # order-level payment status
    PAID_PENDING = "pending"
    PAID = "paid"
    PAID_FAILED = "failed"

    PAYMENT_STATUS_CHOICES = [
        (PAID_PENDING, "Pending"),
        (PAID, "Paid"),
        (PAID_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_id = models.CharField(
        max_length=16,
        unique=True,
        help_text="Human-readable id: YYYYMMDD + daily sequence",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # -------- pricing snapshot --------
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    making_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    voucher_code = models.CharField(max_length=32, blank=True, default="")
    voucher_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    loyalty_points_used = models.PositiveIntegerField(default=0)
    loyalty_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    shipping_address = models.JSONField(default=dict, blank=True)

    # -------- payment sub-record --------
    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHODS, default=METHOD_CASH)
    payment_type = models.CharField(max_length=10, choices=PAYMENT_TYPES, default=TYPE_FULL)
    payment_state = models.CharField(max_length=10, choices=PAYMENT_STATES, default=PAYMENT_PENDING)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount_to_pay = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    partial_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    remaining_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    emi_plan = models.ForeignKey(
        InstallmentPlan,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    emi_plan_ref = models.CharField(max_length=64, blank=True, default="")
    emi_months = models.PositiveSmallIntegerField(null=True, blank=True)
    emi_interest_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    emi_total_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    emi_monthly_installment = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    emi_installments_paid = models.PositiveSmallIntegerField(default=0)

    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAID_PENDING)

    # -------- tracking --------
    tracking_carrier = models.CharField(max_length=100, blank=True, default="")
    tracking_number = models.CharField(max_length=100, blank=True, default="")

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="order_user_created_idx"),
            models.Index(fields=["status"], name="order_status_idx"),
            models.Index(fields=["payment_status"], name="order_payment_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_paid__gte=0),
                name="order_amount_paid_non_negative",
            ),
        ]

    def __str__(self):
        return f"Order {self.order_id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.STATUS_DELIVERED, self.STATUS_CANCELLED)

    @property
    def emi_outstanding(self) -> Decimal | None:
        if self.payment_type != self.TYPE_EMI or self.emi_total_amount is None:
            return None
        if self.payment_state == self.PAYMENT_COMPLETED:
            return money(0)
        return money(max(to_decimal(self.emi_total_amount) - to_decimal(self.amount_paid), Decimal("0")))

    def clean(self):
        if self.remaining_amount is not None:
            if money(to_decimal(self.amount_paid) + to_decimal(self.remaining_amount)) != money(self.total_amount):
                raise ValidationError("amount_paid + remaining_amount must equal total_amount")
        if self.payment_type == self.TYPE_FULL and self.payment_state == self.PAYMENT_PENDING:
            if money(self.amount_to_pay) != money(to_decimal(self.total_amount) - to_decimal(self.amount_paid)):
                raise ValidationError("Full payment must ask for the whole outstanding total")

    def payment_snapshot(self) -> dict:
        out = {
            "method": self.payment_method,
            "type": self.payment_type,
            "status": self.payment_state,
            "amount_paid": str(self.amount_paid),
            "amount_to_pay": str(self.amount_to_pay),
        }
        if self.payment_type == self.TYPE_PARTIAL:
            out["partial_amount"] = str(self.partial_amount) if self.partial_amount is not None else None
            out["remaining_amount"] = str(self.remaining_amount) if self.remaining_amount is not None else None
        if self.payment_type == self.TYPE_EMI:
            out["emi_plan"] = {
                "plan_id": self.emi_plan_ref,
                "months": self.emi_months,
                "interest_rate": str(self.emi_interest_rate),
                "total_amount": str(self.emi_total_amount),
                "monthly_installment": str(self.emi_monthly_installment),
                "installments_paid": self.emi_installments_paid,
                "outstanding": str(self.emi_outstanding),
            }
        return out
