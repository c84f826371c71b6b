"""
======================================================
PATH: referrals/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Referral

Conditional unique constraint: one rewarded referral per referee.
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("loyalty", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Referral",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=16)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("qualified", "Qualified"),
                            ("rewarded", "Rewarded"),
                            ("expired", "Expired"),
                        ],
                        default="pending",
                        max_length=12,
                    ),
                ),
                (
                    "reward_amount",
                    models.PositiveIntegerField(default=0, help_text="Points credited to the referrer"),
                ),
                ("reward_credited_at", models.DateTimeField(blank=True, null=True)),
                (
                    "purchase_type",
                    models.CharField(
                        blank=True,
                        choices=[("Order", "Order"), ("PackagePurchase", "Package purchase")],
                        default="",
                        max_length=20,
                    ),
                ),
                ("purchase_id", models.CharField(blank=True, default="", max_length=64)),
                ("purchase_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "ledger_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="loyalty.ledgerentry",
                    ),
                ),
                (
                    "referee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="referrals_received",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "referrer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="referrals_made",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["referrer", "status"], name="referral_referrer_status_idx"),
                    models.Index(fields=["code"], name="referral_code_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="referral",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status", "rewarded")),
                fields=("referee",),
                name="unique_rewarded_referral_per_referee",
            ),
        ),
    ]
