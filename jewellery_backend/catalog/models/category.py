# catalog/models/category.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from core.money import to_decimal


class Category(models.Model):
    """
    Product category with making-charge configuration.

    making_charges_percent_by_material: {"Gold": 12, "Silver": 8, ...}
    making_charges_percent_default: used when the material has no entry.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True, default="")

    making_charges_percent_default = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
    )
    making_charges_percent_by_material = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def clean(self):
        if not isinstance(self.making_charges_percent_by_material, dict):
            raise ValidationError({"making_charges_percent_by_material": "Must be an object of material -> percent."})
        for material, pct in self.making_charges_percent_by_material.items():
            try:
                value = to_decimal(pct)
            except ValueError:
                raise ValidationError({"making_charges_percent_by_material": f"Invalid percent for {material}."})
            if value < 0 or value > 100:
                raise ValidationError({"making_charges_percent_by_material": f"Percent for {material} must be 0-100."})

    def __str__(self):
        return self.name
