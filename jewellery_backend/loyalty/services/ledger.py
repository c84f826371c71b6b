# loyalty/services/ledger.py

"""
======================================================
PATH: loyalty/services/ledger.py
======================================================
POINTS LEDGER SERVICE

This module is the ONLY place allowed to:
- Create loyalty LedgerEntry rows
- Change User.loyalty_points

Every mutation:
- locks the account row (select_for_update)
- validates against the locked balance
- writes the new balance and appends the entry in one transaction

Replaying an account's entries (credits minus debits) always equals the
cached User.loyalty_points. verify_balance() checks exactly that.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Count, Q, Sum

from core.exceptions import InsufficientBalanceError, ValidationError
from loyalty.models import LedgerEntry
from users.models import User

logger = logging.getLogger(__name__)


def _clean_points(points) -> int:
    try:
        value = int(points)
    except (TypeError, ValueError) as exc:
        raise ValidationError("points must be a whole number", field="points") from exc

    if value != points and str(value) != str(points).strip():
        raise ValidationError("points must be a whole number", field="points")
    if value <= 0:
        raise ValidationError("points must be greater than zero", field="points")
    return value


def _lock_account(account) -> User:
    account_id = getattr(account, "pk", account)
    return User.objects.select_for_update().get(pk=account_id)


def _sync_instance(account, locked: User) -> None:
    if isinstance(account, User):
        account.loyalty_points = locked.loyalty_points


def _post(
    *,
    account,
    direction: str,
    points,
    source: str,
    description: str,
    reference_type: str | None,
    reference_id,
    created_by,
) -> LedgerEntry:
    pts = _clean_points(points)
    locked = _lock_account(account)

    if direction == LedgerEntry.DEBIT:
        if pts > locked.loyalty_points:
            raise InsufficientBalanceError(
                f"Insufficient loyalty points. Available: {locked.loyalty_points}, requested: {pts}",
                field="points",
                entity_id=locked.pk,
            )
        new_balance = locked.loyalty_points - pts
    else:
        new_balance = locked.loyalty_points + pts

    locked.loyalty_points = new_balance
    locked.save(update_fields=["loyalty_points", "updated_at"])

    entry = LedgerEntry.objects.create(
        account=locked,
        direction=direction,
        points=pts,
        balance_after=new_balance,
        source=source,
        description=(description or "")[:255],
        reference_type=reference_type or "",
        reference_id=str(reference_id) if reference_id is not None else "",
        created_by=created_by,
    )

    _sync_instance(account, locked)

    logger.info(
        "Loyalty points posted",
        extra={
            "account_id": str(locked.pk),
            "direction": direction,
            "points": pts,
            "balance_after": new_balance,
            "source": source,
            "reference_type": entry.reference_type,
            "reference_id": entry.reference_id,
        },
    )
    return entry


# =====================================================
# PUBLIC API
# =====================================================

@transaction.atomic
def credit(
    *,
    account,
    points,
    source: str,
    description: str = "",
    reference_type: str | None = None,
    reference_id=None,
    created_by=None,
) -> LedgerEntry:
    return _post(
        account=account,
        direction=LedgerEntry.CREDIT,
        points=points,
        source=source,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        created_by=created_by,
    )


@transaction.atomic
def debit(
    *,
    account,
    points,
    source: str,
    description: str = "",
    reference_type: str | None = None,
    reference_id=None,
    created_by=None,
) -> LedgerEntry:
    """Raises InsufficientBalanceError when points exceed the locked balance."""
    return _post(
        account=account,
        direction=LedgerEntry.DEBIT,
        points=points,
        source=source,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        created_by=created_by,
    )


@transaction.atomic
def adjust(*, account, points, direction: str, reason: str = "", admin=None) -> LedgerEntry:
    """Admin correction. Always a new entry with source admin_adjustment."""
    if direction not in (LedgerEntry.CREDIT, LedgerEntry.DEBIT):
        raise ValidationError("direction must be 'credit' or 'debit'", field="direction")

    post = credit if direction == LedgerEntry.CREDIT else debit
    return post(
        account=account,
        points=points,
        source=LedgerEntry.SOURCE_ADMIN_ADJUSTMENT,
        description=reason or "Admin adjustment",
        reference_type=LedgerEntry.REF_ADMIN,
        reference_id=getattr(admin, "pk", None),
        created_by=admin,
    )


# =====================================================
# READ SIDE
# =====================================================

def replayed_balance(account) -> int:
    totals = LedgerEntry.objects.filter(account=account).aggregate(
        credited=Sum("points", filter=Q(direction=LedgerEntry.CREDIT)),
        debited=Sum("points", filter=Q(direction=LedgerEntry.DEBIT)),
    )
    return (totals["credited"] or 0) - (totals["debited"] or 0)


def verify_balance(account) -> dict:
    account.refresh_from_db(fields=["loyalty_points"])
    replayed = replayed_balance(account)
    drift = account.loyalty_points - replayed
    if drift:
        logger.warning(
            "Loyalty balance drift detected",
            extra={"account_id": str(account.pk), "cached": account.loyalty_points, "replayed": replayed},
        )
    return {
        "cached_balance": account.loyalty_points,
        "replayed_balance": replayed,
        "drift": drift,
        "consistent": drift == 0,
    }


def transactions_for(account, *, direction: str | None = None, source: str | None = None):
    qs = LedgerEntry.objects.filter(account=account).order_by("-id")
    if direction:
        qs = qs.filter(direction=direction)
    if source:
        qs = qs.filter(source=source)
    return qs


def ledger_stats() -> dict:
    totals = LedgerEntry.objects.aggregate(
        credited=Sum("points", filter=Q(direction=LedgerEntry.CREDIT)),
        debited=Sum("points", filter=Q(direction=LedgerEntry.DEBIT)),
        entries=Count("id"),
    )
    credited = totals["credited"] or 0
    debited = totals["debited"] or 0
    return {
        "total_credited": credited,
        "total_debited": debited,
        "net_points": credited - debited,
        "entries": totals["entries"] or 0,
    }
