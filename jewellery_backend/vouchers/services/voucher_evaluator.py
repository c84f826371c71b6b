# vouchers/services/voucher_evaluator.py

"""
======================================================
PATH: vouchers/services/voucher_evaluator.py
======================================================
VOUCHER EVALUATOR

Purpose:
- Decide whether a code can be used against a cart total and how much it
  takes off.
- apply(): the one place a voucher is consumed (used_count + claim record).

Hard rules:
- Failures are distinct: missing (404), inactive / not yet valid / expired /
  below minimum (400), usage limit reached (409).
- percentage: value% of the cart total, capped by max_discount.
  fixed: value, capped by max_discount when set.
  Either way the discount never exceeds the cart total.
- apply() locks the voucher row and increments used_count with F(), so two
  concurrent applications cannot both take the last use.

Notes:
- Orders call apply() exactly once, at creation. preview() has no side effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import HUNDRED, ZERO, money, to_decimal
from vouchers.models import Voucher, VoucherClaim

logger = logging.getLogger(__name__)


class VoucherExhaustedError(ConflictError):
    default_message = "Voucher usage limit reached"


@dataclass(frozen=True)
class VoucherApplication:
    voucher: Voucher
    cart_total: Decimal
    discount: Decimal

    @property
    def total(self) -> Decimal:
        return money(self.cart_total - self.discount)

    def as_dict(self) -> dict:
        v = self.voucher
        return {
            "voucher": {
                "id": str(v.id),
                "code": v.code,
                "description": v.description,
                "discount_type": v.discount_type,
                "discount_value": str(v.discount_value),
                "min_amount": str(v.min_amount),
                "max_discount": str(v.max_discount) if v.max_discount is not None else None,
            },
            "subtotal": str(money(self.cart_total)),
            "discount": str(self.discount),
            "total": str(self.total),
        }


def normalize_code(code) -> str:
    return str(code or "").strip().upper()


def get_by_code(code) -> Voucher:
    normalized = normalize_code(code)
    if not normalized:
        raise ValidationError("code is required", field="code")

    voucher = Voucher.objects.filter(code=normalized).first()
    if voucher is None:
        raise NotFoundError("Voucher not found", field="code", entity_id=normalized)
    return voucher


def ensure_usable(voucher: Voucher, *, now=None) -> None:
    now = now or timezone.now()

    if not voucher.is_active:
        raise ValidationError("Voucher is not active", field="code", entity_id=voucher.code)
    if voucher.start_date and voucher.start_date > now:
        raise ValidationError("Voucher is not yet valid", field="code", entity_id=voucher.code)
    if voucher.end_date and voucher.end_date < now:
        raise ValidationError("Voucher has expired", field="code", entity_id=voucher.code)
    if voucher.is_exhausted:
        raise VoucherExhaustedError(field="code", entity_id=voucher.code)


def compute_discount(voucher: Voucher, cart_total) -> Decimal:
    total = to_decimal(cart_total)

    if voucher.discount_type == Voucher.TYPE_PERCENTAGE:
        discount = to_decimal(voucher.discount_value) / HUNDRED * total
    else:
        discount = to_decimal(voucher.discount_value)

    if voucher.max_discount is not None:
        discount = min(discount, to_decimal(voucher.max_discount))

    discount = min(discount, total)
    return money(max(discount, ZERO))


def _evaluate(voucher: Voucher, cart_total, *, now=None) -> VoucherApplication:
    total = to_decimal(cart_total)
    if total <= 0:
        raise ValidationError("Invalid cart total", field="cart_total")

    ensure_usable(voucher, now=now)

    if total < to_decimal(voucher.min_amount):
        raise ValidationError(
            f"Minimum amount not met: cart total must be at least {money(voucher.min_amount)}",
            field="cart_total",
            entity_id=voucher.code,
        )

    return VoucherApplication(voucher=voucher, cart_total=total, discount=compute_discount(voucher, total))


# =====================================================
# PUBLIC API
# =====================================================

def preview(code, cart_total) -> VoucherApplication:
    """Same checks and discount as apply(); consumes nothing."""
    return _evaluate(get_by_code(code), cart_total)


@transaction.atomic
def apply(*, code, cart_total, account, order_ref: str = "") -> VoucherApplication:
    normalized = normalize_code(code)
    if not normalized:
        raise ValidationError("code is required", field="code")

    voucher = Voucher.objects.select_for_update().filter(code=normalized).first()
    if voucher is None:
        raise NotFoundError("Voucher not found", field="code", entity_id=normalized)

    application = _evaluate(voucher, cart_total)

    usage_ok = Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit"))
    updated = Voucher.objects.filter(usage_ok, pk=voucher.pk).update(
        used_count=F("used_count") + 1,
        updated_at=timezone.now(),
    )
    if updated != 1:
        raise VoucherExhaustedError(field="code", entity_id=voucher.code)

    voucher.refresh_from_db(fields=["used_count", "updated_at"])

    VoucherClaim.objects.create(
        voucher=voucher,
        account=account,
        discount=application.discount,
        order_ref=order_ref or "",
    )

    logger.info(
        "Voucher applied",
        extra={
            "voucher": voucher.code,
            "account_id": str(account.pk),
            "discount": str(application.discount),
            "order_ref": order_ref,
            "used_count": voucher.used_count,
        },
    )
    return VoucherApplication(voucher=voucher, cart_total=application.cart_total, discount=application.discount)


def list_usable(*, now=None):
    now = now or timezone.now()
    return (
        Voucher.objects.filter(is_active=True)
        .filter(Q(start_date__isnull=True) | Q(start_date__lte=now))
        .filter(Q(end_date__isnull=True) | Q(end_date__gte=now))
        .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit")))
        .order_by("-created_at")
    )


def claims_for(account):
    return VoucherClaim.objects.filter(account=account).select_related("voucher")


# =====================================================
# SEED DATA
# =====================================================

def _default_vouchers(now):
    start = now - timedelta(days=1)
    return [
        {
            "code": "WELCOME10",
            "description": "10% off on orders above 1000",
            "start_date": start,
            "end_date": now + timedelta(days=30),
            "discount_type": Voucher.TYPE_PERCENTAGE,
            "discount_value": Decimal("10"),
            "min_amount": Decimal("1000"),
            "max_discount": Decimal("500"),
            "usage_limit": 100,
        },
        {
            "code": "FESTIVE20",
            "description": "20% festival discount on orders above 5000",
            "start_date": start,
            "end_date": now + timedelta(days=60),
            "discount_type": Voucher.TYPE_PERCENTAGE,
            "discount_value": Decimal("20"),
            "min_amount": Decimal("5000"),
            "max_discount": Decimal("2000"),
            "usage_limit": 50,
        },
        {
            "code": "FLAT500",
            "description": "Flat 500 off on orders above 3000",
            "start_date": start,
            "end_date": now + timedelta(days=30),
            "discount_type": Voucher.TYPE_FIXED,
            "discount_value": Decimal("500"),
            "min_amount": Decimal("3000"),
            "max_discount": Decimal("500"),
            "usage_limit": 50,
        },
        {
            "code": "NEWUSER15",
            "description": "15% off for new users on orders above 1500",
            "start_date": start,
            "end_date": now + timedelta(days=30),
            "discount_type": Voucher.TYPE_PERCENTAGE,
            "discount_value": Decimal("15"),
            "min_amount": Decimal("1500"),
            "max_discount": Decimal("750"),
            "usage_limit": 100,
        },
    ]


@transaction.atomic
def seed_default_vouchers(*, now=None) -> int:
    """Creates the standard codes that do not exist yet. Returns how many were created."""
    now = now or timezone.now()
    created_count = 0
    for row in _default_vouchers(now):
        code = row.pop("code")
        _, created = Voucher.objects.get_or_create(code=code, defaults=row)
        if created:
            created_count += 1
    return created_count
