# users/services/payment_settings.py

"""
PER-CUSTOMER PAYMENT SETTINGS

Stored as JSON on User.payment_settings, handled in code as a typed value:

- PaymentSettings        -> full value (every field has a default)
- PaymentSettingsUpdate  -> partial update (None means "leave unchanged")
- merge()                -> field-by-field merge, then validation

The partial-payment band (min/max percent) is read by the payment resolver.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from core.exceptions import ValidationError
from core.money import to_decimal
from users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentSettings:
    emi_enabled: bool = False
    partial_payment_enabled: bool = False
    allowed_emi_tenures: tuple[int, ...] = ()
    min_partial_payment_percent: Decimal = Decimal("10")
    max_partial_payment_percent: Decimal = Decimal("90")
    can_convert_partial_to_emi: bool = False
    credit_limit: Decimal = Decimal("0")
    trust_score: int = 50
    notes: str = ""
    updated_at: str | None = None
    updated_by: str | None = None

    @classmethod
    def from_json(cls, data: dict | None) -> "PaymentSettings":
        data = data or {}
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known and v is not None}

        if "allowed_emi_tenures" in kwargs:
            kwargs["allowed_emi_tenures"] = tuple(int(m) for m in kwargs["allowed_emi_tenures"])
        for name in ("min_partial_payment_percent", "max_partial_payment_percent", "credit_limit"):
            if name in kwargs:
                kwargs[name] = to_decimal(kwargs[name])
        if "trust_score" in kwargs:
            kwargs["trust_score"] = int(kwargs["trust_score"])

        return cls(**kwargs)

    def to_json(self) -> dict:
        out = asdict(self)
        out["allowed_emi_tenures"] = list(self.allowed_emi_tenures)
        for name in ("min_partial_payment_percent", "max_partial_payment_percent", "credit_limit"):
            out[name] = str(out[name])
        return out


@dataclass(frozen=True)
class PaymentSettingsUpdate:
    emi_enabled: bool | None = None
    partial_payment_enabled: bool | None = None
    allowed_emi_tenures: tuple[int, ...] | None = None
    min_partial_payment_percent: Decimal | None = None
    max_partial_payment_percent: Decimal | None = None
    can_convert_partial_to_emi: bool | None = None
    credit_limit: Decimal | None = None
    trust_score: int | None = None
    notes: str | None = None


def merge(current: PaymentSettings, update: PaymentSettingsUpdate) -> PaymentSettings:
    changes = {}
    for f in fields(PaymentSettingsUpdate):
        value = getattr(update, f.name)
        if value is None:
            continue
        if f.name == "allowed_emi_tenures":
            value = tuple(int(m) for m in value)
        elif f.name in ("min_partial_payment_percent", "max_partial_payment_percent", "credit_limit"):
            value = to_decimal(value)
        changes[f.name] = value

    merged = replace(current, **changes)
    _validate(merged)
    return merged


def _validate(s: PaymentSettings) -> None:
    if not (Decimal("0") <= s.min_partial_payment_percent <= Decimal("100")):
        raise ValidationError(
            "min_partial_payment_percent must be between 0 and 100",
            field="min_partial_payment_percent",
        )
    if not (Decimal("0") <= s.max_partial_payment_percent <= Decimal("100")):
        raise ValidationError(
            "max_partial_payment_percent must be between 0 and 100",
            field="max_partial_payment_percent",
        )
    if s.min_partial_payment_percent > s.max_partial_payment_percent:
        raise ValidationError(
            "min_partial_payment_percent cannot exceed max_partial_payment_percent",
            field="min_partial_payment_percent",
        )
    if not (0 <= s.trust_score <= 100):
        raise ValidationError("trust_score must be between 0 and 100", field="trust_score")
    if s.credit_limit < 0:
        raise ValidationError("credit_limit cannot be negative", field="credit_limit")
    if any(m < 1 for m in s.allowed_emi_tenures):
        raise ValidationError("EMI tenures must be at least 1 month", field="allowed_emi_tenures")


def get_payment_settings(account: User) -> PaymentSettings:
    return PaymentSettings.from_json(account.payment_settings)


@transaction.atomic
def update_payment_settings(*, account: User, update: PaymentSettingsUpdate, updated_by=None) -> PaymentSettings:
    locked = User.objects.select_for_update().get(pk=account.pk)
    merged = merge(get_payment_settings(locked), update)
    merged = replace(
        merged,
        updated_at=timezone.now().isoformat(),
        updated_by=str(updated_by.pk) if updated_by is not None else None,
    )

    locked.payment_settings = merged.to_json()
    locked.save(update_fields=["payment_settings", "updated_at"])
    account.payment_settings = locked.payment_settings

    logger.info(
        "Payment settings updated",
        extra={"account_id": str(locked.pk), "updated_by": merged.updated_by},
    )
    return merged


def bulk_update_payment_settings(*, accounts, update: PaymentSettingsUpdate, updated_by=None) -> int:
    count = 0
    for account in accounts:
        update_payment_settings(account=account, update=update, updated_by=updated_by)
        count += 1
    return count
