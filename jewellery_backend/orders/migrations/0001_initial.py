"""
======================================================
PATH: orders/migrations/0001_initial.py
======================================================
MIGRATION: CREATE InstallmentPlan + Order + OrderItem + TrackingEvent
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="InstallmentPlan",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(blank=True, default="", max_length=100)),
                (
                    "months",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                (
                    "interest_rate_percent",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                ("min_amount", models.DecimalField(decimal_places=2, default=Decimal("1000.00"), max_digits=12)),
                ("max_amount", models.DecimalField(decimal_places=2, default=Decimal("100000.00"), max_digits=12)),
                ("processing_fee", models.DecimalField(decimal_places=2, default=Decimal("50.00"), max_digits=10)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["months"],
                "indexes": [
                    models.Index(fields=["is_active", "months"], name="emi_plan_active_months_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "order_id",
                    models.CharField(
                        help_text="Human-readable id: YYYYMMDD + daily sequence",
                        max_length=16,
                        unique=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("shipped", "Shipped"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=12,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("making_charges", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("tax_percent", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("shipping_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("voucher_code", models.CharField(blank=True, default="", max_length=32)),
                ("voucher_discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("loyalty_points_used", models.PositiveIntegerField(default=0)),
                ("loyalty_discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("shipping_address", models.JSONField(blank=True, default=dict)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("online", "Online"), ("cash", "Cash")],
                        default="cash",
                        max_length=10,
                    ),
                ),
                (
                    "payment_type",
                    models.CharField(
                        choices=[("full", "Full"), ("partial", "Partial"), ("emi", "EMI")],
                        default="full",
                        max_length=10,
                    ),
                ),
                (
                    "payment_state",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_to_pay", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("partial_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("remaining_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("emi_plan_ref", models.CharField(blank=True, default="", max_length=64)),
                ("emi_months", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("emi_interest_rate", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("emi_total_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                (
                    "emi_monthly_installment",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True),
                ),
                ("emi_installments_paid", models.PositiveSmallIntegerField(default=0)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("paid", "Paid"), ("failed", "Failed")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("tracking_carrier", models.CharField(blank=True, default="", max_length=100)),
                ("tracking_number", models.CharField(blank=True, default="", max_length=100)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "emi_plan",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="orders.installmentplan",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "created_at"], name="order_user_created_idx"),
                    models.Index(fields=["status"], name="order_status_idx"),
                    models.Index(fields=["payment_status"], name="order_payment_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount_paid__gte=0),
                        name="order_amount_paid_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_name", models.CharField(max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("making_charge", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("size", models.CharField(blank=True, default="", max_length=20)),
                ("hsn_code", models.CharField(default="7113", max_length=10)),
                ("line_subtotal", models.DecimalField(decimal_places=2, max_digits=12)),
                ("line_making_charges", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("line_total", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_items",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="TrackingEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(max_length=12)),
                ("carrier", models.CharField(blank=True, default="", max_length=100)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tracking_events",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
    ]
