"""
======================================================
PATH: billing/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Invoice + InvoiceLineItem
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _money(**kwargs):
    return models.DecimalField(decimal_places=2, max_digits=12, **kwargs)


def _rate():
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("catalog", "0001_initial"),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("invoice_number", models.CharField(max_length=20, unique=True)),
                ("invoice_date", models.DateTimeField()),
                (
                    "billing_type",
                    models.CharField(
                        choices=[("with_gst", "With GST"), ("without_gst", "Without GST")],
                        default="with_gst",
                        max_length=12,
                    ),
                ),
                ("is_inter_state", models.BooleanField(default=False)),
                ("business_name", models.CharField(max_length=255)),
                ("business_address", models.CharField(max_length=500)),
                ("business_phone", models.CharField(blank=True, default="", max_length=30)),
                ("business_email", models.CharField(blank=True, default="", max_length=255)),
                ("business_gstin", models.CharField(blank=True, default="", max_length=20)),
                ("customer_name", models.CharField(max_length=255)),
                ("customer_phone", models.CharField(blank=True, default="", max_length=30)),
                ("customer_email", models.CharField(blank=True, default="", max_length=255)),
                ("customer_gstin", models.CharField(blank=True, default="", max_length=20)),
                ("billing_address", models.CharField(max_length=500)),
                ("shipping_address", models.CharField(blank=True, default="", max_length=500)),
                ("subtotal", _money()),
                ("total_discount", _money(default=Decimal("0.00"))),
                ("taxable_amount", _money()),
                ("total_cgst", _money(default=Decimal("0.00"))),
                ("total_sgst", _money(default=Decimal("0.00"))),
                ("total_igst", _money(default=Decimal("0.00"))),
                ("total_tax", _money(default=Decimal("0.00"))),
                ("round_off", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=6)),
                ("grand_total", _money()),
                ("amount_in_words", models.CharField(blank=True, default="", max_length=500)),
                ("payment_method", models.CharField(blank=True, default="", max_length=20)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("paid", "Paid"), ("pending", "Pending"), ("partial", "Partial")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("generated", "Generated"), ("cancelled", "Cancelled")],
                        default="generated",
                        max_length=10,
                    ),
                ),
                ("document_url", models.CharField(blank=True, default="", max_length=500)),
                ("notes", models.TextField(blank=True, default="")),
                ("terms_and_conditions", models.JSONField(blank=True, default=list)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="orders.order",
                    ),
                ),
                (
                    "generated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="generated_invoices",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="invoice_created_idx"),
                    models.Index(fields=["status", "billing_type"], name="invoice_status_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "cancelled"), _negated=True),
                        fields=("order",),
                        name="unique_live_invoice_per_order",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceLineItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("hsn_code", models.CharField(default="7113", max_length=10)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", _money()),
                ("discount", _money(default=Decimal("0.00"))),
                ("taxable_amount", _money()),
                ("cgst_rate", _rate()),
                ("cgst_amount", _money(default=Decimal("0.00"))),
                ("sgst_rate", _rate()),
                ("sgst_amount", _money(default=Decimal("0.00"))),
                ("igst_rate", _rate()),
                ("igst_amount", _money(default=Decimal("0.00"))),
                ("total_amount", _money()),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="line_items",
                        to="billing.invoice",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoice_lines",
                        to="catalog.product",
                    ),
                ),
            ],
            options={"ordering": ["id"]},
        ),
    ]
