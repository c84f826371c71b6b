# orders/models/order_item.py

from django.core.exceptions import ValidationError
from django.db import models

from .order import Order


class OrderItem(models.Model):
    """
    Immutable snapshot of one ordered line at order time.
    unit_price / making_charge are per unit; line_total = (unit_price + making_charge) * quantity.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )

    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    making_charge = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    size = models.CharField(max_length=20, blank=True, default="")
    hsn_code = models.CharField(max_length=10, default="7113")

    line_subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    line_making_charges = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    def clean(self):
        if self.quantity is None or self.quantity < 1:
            raise ValidationError("quantity must be at least 1")
        if self.unit_price is None or self.unit_price < 0:
            raise ValidationError("unit_price cannot be negative")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("OrderItem records are immutable and cannot be modified")
        self.full_clean()
        return super().save(*args, **kwargs)
