# billing/models/invoice.py

"""
======================================================
PATH: billing/models/invoice.py
======================================================
TAX INVOICE (BILL) FOR AN ORDER

Invariants:
- invoice_number is globally unique: INV-<year>-<5 digit sequence>
- at most one non-cancelled invoice per order (conditional unique constraint)
- grand_total == taxable_amount + total_tax + round_off
  grand_total is a whole rupee amount; round_off may be negative
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from core.money import money, to_decimal


class Invoice(models.Model):
    TYPE_WITH_GST = "with_gst"
    TYPE_WITHOUT_GST = "without_gst"

    BILLING_TYPES = [
        (TYPE_WITH_GST, "With GST"),
        (TYPE_WITHOUT_GST, "Without GST"),
    ]

    STATUS_DRAFT = "draft"
    STATUS_GENERATED = "generated"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_GENERATED, "Generated"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PAID = "paid"
    PAYMENT_PENDING = "pending"
    PAYMENT_PARTIAL = "partial"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PARTIAL, "Partial"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey("orders.Order", on_delete=models.PROTECT, related_name="invoices")

    invoice_number = models.CharField(max_length=20, unique=True)
    invoice_date = models.DateTimeField()
    billing_type = models.CharField(max_length=12, choices=BILLING_TYPES, default=TYPE_WITH_GST)
    is_inter_state = models.BooleanField(default=False)

    # -------- business --------
    business_name = models.CharField(max_length=255)
    business_address = models.CharField(max_length=500)
    business_phone = models.CharField(max_length=30, blank=True, default="")
    business_email = models.CharField(max_length=255, blank=True, default="")
    business_gstin = models.CharField(max_length=20, blank=True, default="")

    # -------- customer --------
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=30, blank=True, default="")
    customer_email = models.CharField(max_length=255, blank=True, default="")
    customer_gstin = models.CharField(max_length=20, blank=True, default="")
    billing_address = models.CharField(max_length=500)
    shipping_address = models.CharField(max_length=500, blank=True, default="")

    # -------- totals --------
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    total_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    taxable_amount = models.DecimalField(max_digits=12, decimal_places=2)
    total_cgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_sgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_igst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    round_off = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0.00"))
    grand_total = models.DecimalField(max_digits=12, decimal_places=2)
    amount_in_words = models.CharField(max_length=500, blank=True, default="")

    # -------- payment --------
    payment_method = models.CharField(max_length=20, blank=True, default="")
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_GENERATED)

    document_url = models.CharField(max_length=500, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    terms_and_conditions = models.JSONField(default=list, blank=True)

    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="generated_invoices",
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="invoice_created_idx"),
            models.Index(fields=["status", "billing_type"], name="invoice_status_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=~Q(status="cancelled"),
                name="unique_live_invoice_per_order",
            ),
        ]

    def __str__(self):
        return self.invoice_number

    @property
    def is_gst(self) -> bool:
        return self.billing_type == self.TYPE_WITH_GST

    def clean(self):
        expected = money(to_decimal(self.taxable_amount) + to_decimal(self.total_tax) + to_decimal(self.round_off))
        if money(self.grand_total) != expected:
            raise ValidationError("grand_total must equal taxable_amount + total_tax + round_off")
