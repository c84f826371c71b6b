# orders/models/installment_plan.py

import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.money import HUNDRED, money, to_decimal


class InstallmentPlan(models.Model):
    """
    EMI plan (admin-managed reference data).

    total payable       = principal * (1 + rate / 100)
    monthly installment = total payable / months
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=100, blank=True, default="")
    months = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    interest_rate_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    min_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("1000.00"))
    max_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("100000.00"))
    processing_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("50.00"))

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["months"]
        indexes = [
            models.Index(fields=["is_active", "months"], name="emi_plan_active_months_idx"),
        ]

    def __str__(self):
        return self.name or f"{self.months} months @ {self.interest_rate_percent}%"

    def covers(self, amount) -> bool:
        value = to_decimal(amount)
        return to_decimal(self.min_amount) <= value <= to_decimal(self.max_amount)

    def total_payable(self, principal) -> Decimal:
        return money(to_decimal(principal) * (1 + to_decimal(self.interest_rate_percent) / HUNDRED))

    def monthly_installment(self, principal) -> Decimal:
        total = to_decimal(principal) * (1 + to_decimal(self.interest_rate_percent) / HUNDRED)
        return money(total / self.months)
