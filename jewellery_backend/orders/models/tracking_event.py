# orders/models/tracking_event.py

from django.core.exceptions import ValidationError
from django.db import models

from .order import Order


class TrackingEvent(models.Model):
    """Append-only tracking history entry."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="tracking_events")
    status = models.CharField(max_length=12)
    carrier = models.CharField(max_length=100, blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    note = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.order_id}: {self.status}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Tracking history is append-only")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Tracking history is append-only")
