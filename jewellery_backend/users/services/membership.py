# users/services/membership.py

"""
MEMBERSHIP STATE

- is_membership_active: status active AND not past expiry
- membership_discount_percent: 0 unless active
- refresh_membership_status: flips an active-but-expired record to "expired"
- activate_membership: grant / extend (used by package purchases)
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from core.money import to_decimal
from users.models import User

logger = logging.getLogger(__name__)


def is_membership_active(account: User, *, now=None) -> bool:
    now = now or timezone.now()
    if account.membership_status != User.MEMBERSHIP_ACTIVE:
        return False
    if account.membership_expires_at and account.membership_expires_at <= now:
        return False
    return True


def membership_discount_percent(account: User, *, now=None) -> Decimal:
    if not is_membership_active(account, now=now):
        return Decimal("0")
    return to_decimal(account.membership_discount_percent)


def refresh_membership_status(account: User, *, now=None) -> User:
    now = now or timezone.now()
    if (
        account.membership_status == User.MEMBERSHIP_ACTIVE
        and account.membership_expires_at
        and account.membership_expires_at <= now
    ):
        account.membership_status = User.MEMBERSHIP_EXPIRED
        account.save(update_fields=["membership_status", "updated_at"])
        logger.info("Membership expired", extra={"account_id": str(account.id)})
    return account


def activate_membership(account: User, *, duration_days: int, discount_percent, now=None) -> User:
    """Caller holds the account row lock (select_for_update)."""
    now = now or timezone.now()
    account.membership_status = User.MEMBERSHIP_ACTIVE
    account.membership_activated_at = now
    account.membership_expires_at = now + timedelta(days=int(duration_days))
    account.membership_discount_percent = to_decimal(discount_percent)
    account.save(
        update_fields=[
            "membership_status",
            "membership_activated_at",
            "membership_expires_at",
            "membership_discount_percent",
            "updated_at",
        ]
    )
    logger.info(
        "Membership activated",
        extra={
            "account_id": str(account.id),
            "expires_at": account.membership_expires_at.isoformat(),
        },
    )
    return account


def membership_snapshot(account: User) -> dict:
    return {
        "status": account.membership_status,
        "is_active": is_membership_active(account),
        "activated_at": account.membership_activated_at,
        "expires_at": account.membership_expires_at,
        "discount_percent": str(membership_discount_percent(account)),
    }
