# vouchers/models/voucher.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Voucher(models.Model):
    """
    Discount code.

    Usable iff:
    - is_active
    - now inside [start_date, end_date] (either bound optional)
    - used_count < usage_limit (when a limit is set)

    used_count only ever goes up, once per successful application
    (vouchers.services.voucher_evaluator.apply).
    """

    TYPE_PERCENTAGE = "percentage"
    TYPE_FIXED = "fixed"

    DISCOUNT_TYPES = [
        (TYPE_PERCENTAGE, "Percentage"),
        (TYPE_FIXED, "Fixed amount"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)

    discount_type = models.CharField(max_length=12, choices=DISCOUNT_TYPES, default=TYPE_PERCENTAGE)
    discount_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    min_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    max_discount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    is_active = models.BooleanField(default=True)

    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.code

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def clean(self):
        self.code = (self.code or "").strip().upper()
        if not self.code:
            raise ValidationError({"code": "Voucher code is required."})
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be after start_date."})
        if self.discount_type == self.TYPE_PERCENTAGE and self.discount_value > 100:
            raise ValidationError({"discount_value": "Percentage discount cannot exceed 100."})

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)
