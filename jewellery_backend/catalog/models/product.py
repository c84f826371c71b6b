# catalog/models/product.py

import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.money import money

from .category import Category


class Product(models.Model):
    """
    Sellable jewellery item.

    PRICING MODEL:
    - price: base metal/stone price per unit
    - making_charges_percent: explicit override; when NULL the category
      configuration decides (see catalog.services.making_charges)
    - making_charges: per-unit charge, refreshed on every save (display snapshot;
      order pricing recomputes from the percent)

    Orders snapshot prices at order time; editing a product never changes
    an existing order.
    """

    MATERIAL_GOLD = "Gold"
    MATERIAL_SILVER = "Silver"
    MATERIAL_PLATINUM = "Platinum"
    MATERIAL_DIAMOND = "Diamond"
    MATERIAL_PEARL = "Pearl"
    MATERIAL_GEMSTONE = "Gemstone"
    MATERIAL_MIXED = "Mixed"

    MATERIAL_CHOICES = [
        (MATERIAL_GOLD, "Gold"),
        (MATERIAL_SILVER, "Silver"),
        (MATERIAL_PLATINUM, "Platinum"),
        (MATERIAL_DIAMOND, "Diamond"),
        (MATERIAL_PEARL, "Pearl"),
        (MATERIAL_GEMSTONE, "Gemstone"),
        (MATERIAL_MIXED, "Mixed"),
    ]

    DEFAULT_HSN_CODE = "7113"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    making_charges_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    making_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    material = models.CharField(max_length=20, choices=MATERIAL_CHOICES, blank=True, default="")
    weight_grams = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    hsn_code = models.CharField(max_length=10, default=DEFAULT_HSN_CODE)

    stock = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        from catalog.services.making_charges import making_charge_per_unit

        self.making_charges = money(making_charge_per_unit(self))
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "making_charges" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "making_charges"]
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.sku})"
