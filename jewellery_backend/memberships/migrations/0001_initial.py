"""
======================================================
PATH: memberships/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Package + PackagePurchase
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
    ]

    operations = [
        migrations.CreateModel(
            name="Package",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField()),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "original_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "membership_duration_days",
                    models.PositiveIntegerField(
                        default=365,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "discount_percent",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("20"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                ("savings_text", models.CharField(blank=True, default="", max_length=120)),
                ("benefits", models.JSONField(blank=True, default=list)),
                ("badge", models.CharField(blank=True, default="", max_length=40)),
                ("is_active", models.BooleanField(default=True)),
                ("display_order", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["display_order", "price"],
                "indexes": [
                    models.Index(fields=["is_active", "display_order"], name="package_active_order_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PackagePurchase",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount_paid", models.DecimalField(decimal_places=2, max_digits=12)),
                ("loyalty_points_used", models.PositiveIntegerField(default=0)),
                ("gateway_order_id", models.CharField(max_length=64, unique=True)),
                ("gateway_payment_id", models.CharField(blank=True, default="", max_length=64)),
                ("gateway_signature", models.CharField(blank=True, default="", max_length=128)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("online", "Online"), ("cash", "Cash"), ("wallet", "Wallet")],
                        default="online",
                        max_length=10,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("membership_granted", models.BooleanField(default=False)),
                ("membership_granted_at", models.DateTimeField(blank=True, null=True)),
                ("membership_expires_at", models.DateTimeField(blank=True, null=True)),
                (
                    "membership_discount_percent",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True),
                ),
                ("referral_rewarded", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "package",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="memberships.package",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="package_purchases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "created_at"], name="pkg_purchase_user_created_idx"),
                    models.Index(fields=["payment_status"], name="pkg_purchase_status_idx"),
                    models.Index(fields=["gateway_payment_id"], name="pkg_purchase_payment_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount_paid__gte=Decimal("0")),
                        name="pkg_purchase_amount_non_negative",
                    ),
                ],
            },
        ),
    ]
