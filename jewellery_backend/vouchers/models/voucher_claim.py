# vouchers/models/voucher_claim.py

from django.conf import settings
from django.db import models

from .voucher import Voucher


class VoucherClaim(models.Model):
    """One successful application of a voucher by an account."""

    voucher = models.ForeignKey(Voucher, on_delete=models.PROTECT, related_name="claims")
    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="voucher_claims",
    )
    discount = models.DecimalField(max_digits=12, decimal_places=2)
    order_ref = models.CharField(max_length=32, blank=True, default="")
    claimed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-claimed_at"]
        indexes = [
            models.Index(fields=["account", "claimed_at"], name="voucher_claim_account_idx"),
        ]

    def __str__(self):
        return f"{self.voucher.code} by {self.account_id}"
