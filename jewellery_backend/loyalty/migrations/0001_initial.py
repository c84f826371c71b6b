"""
======================================================
PATH: loyalty/migrations/0001_initial.py
======================================================
MIGRATION: CREATE LedgerEntry (loyalty points)
"""

from __future__ import annotations

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
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("direction", models.CharField(choices=[("credit", "Credit"), ("debit", "Debit")], max_length=6)),
                (
                    "points",
                    models.PositiveIntegerField(
                        help_text="Positive number of points",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("balance_after", models.PositiveIntegerField()),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("referral_reward", "Referral reward"),
                            ("cashback", "Cashback"),
                            ("refund", "Refund"),
                            ("order_payment", "Order payment"),
                            ("package_payment", "Package payment"),
                            ("admin_adjustment", "Admin adjustment"),
                            ("welcome_bonus", "Welcome bonus"),
                            ("expired", "Expired"),
                        ],
                        max_length=32,
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "reference_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("Order", "Order"),
                            ("Referral", "Referral"),
                            ("PackagePurchase", "Package purchase"),
                            ("Admin", "Admin"),
                        ],
                        default="",
                        max_length=32,
                    ),
                ),
                ("reference_id", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ledger_adjustments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["account", "id"], name="loyalty_entry_account_idx"),
                    models.Index(fields=["source"], name="loyalty_entry_source_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="loyalty_entry_ref_idx"),
                ],
            },
        ),
    ]
