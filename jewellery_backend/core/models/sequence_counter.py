"""
PATH: core/models/sequence_counter.py

SEQUENCE COUNTER

One row per named sequence, e.g.:
- "order:20260115"  -> daily order id suffix
- "invoice:2026"    -> yearly invoice number suffix

Values are reserved under a row lock (select_for_update) so two requests
never receive the same value from the counter itself.
"""

from __future__ import annotations

from django.db import models


class SequenceCounter(models.Model):
    name = models.CharField(max_length=64, unique=True)
    last_value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name}@{self.last_value}"
