"""
PATH: cart/models/cart.py

CART MODEL

Purpose:
- The customer's shopping cart (mutable, one per account).
- Lines hold product + quantity + size only. Prices are NOT snapshotted here:
  the order snapshots prices at order time.

Rules:
- Cleared (items deleted) when an order is created from it.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Sum

User = settings.AUTH_USER_MODEL


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def item_count(self) -> int:
        total = self.items.aggregate(total=Sum("quantity")).get("total")
        return int(total or 0)

    @property
    def is_empty(self) -> bool:
        return not self.items.exists()

    def __str__(self):
        return f"Cart {self.id} | {self.user}"
