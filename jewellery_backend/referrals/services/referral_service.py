# referrals/services/referral_service.py

"""
======================================================
PATH: referrals/services/referral_service.py
======================================================
REFERRAL SERVICE

Purpose:
- Hand out referral codes and record who referred whom.
- Settle a referral (credit the referrer) once the referee completes a
  qualifying purchase (paid order or membership package).

Settlement hard rules:
- A referee is rewarded at most once, ever.
- Re-entrant calls short-circuit when a rewarded referral already exists.
- The rewarded transition and the ledger credit share one savepoint; if a
  concurrent settlement wins the unique (referee, rewarded) race the whole
  savepoint rolls back and this call returns None.
- reward points = round(purchase_amount * referral_reward_percent / 100)
"""

from __future__ import annotations

import logging
import re
import secrets

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.exceptions import ConflictError, IntegrityRaceError, NotFoundError, ValidationError
from core.money import money, percent_of, round_whole
from core.services.settings_store import get_decimal_setting, get_int_setting
from loyalty.models import LedgerEntry
from loyalty.services import ledger
from referrals.models import Referral
from users.models import User

logger = logging.getLogger(__name__)

CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 10


def normalize_code(code) -> str:
    return str(code or "").strip().upper()


# =====================================================
# CODES
# =====================================================

def _code_prefix(account: User) -> str:
    source = account.first_name or account.email.split("@")[0]
    letters = re.sub(r"[^A-Za-z]", "", source or "")
    return (letters[:3] or "REF").upper()


def get_or_create_referral_code(account: User) -> str:
    if account.referral_code:
        return account.referral_code

    prefix = _code_prefix(account)
    for _ in range(MAX_CODE_ATTEMPTS):
        code = f"{prefix}{secrets.token_hex(4).upper()}"[:CODE_LENGTH]
        if User.objects.filter(referral_code=code).exists():
            continue
        try:
            with transaction.atomic():
                updated = User.objects.filter(pk=account.pk, referral_code__isnull=True).update(
                    referral_code=code,
                    updated_at=timezone.now(),
                )
        except IntegrityError:
            continue

        if not updated:
            # Someone else generated it first.
            account.refresh_from_db(fields=["referral_code"])
            return account.referral_code

        account.referral_code = code
        return code

    raise IntegrityRaceError("Could not generate a unique referral code", entity_id=account.pk)


def validate_referral_code(code) -> dict:
    normalized = normalize_code(code)
    if not normalized:
        return {"valid": False, "message": "Code is required"}

    referrer = User.objects.filter(referral_code=normalized, is_active=True).first()
    if referrer is None:
        return {"valid": False, "message": "Invalid referral code"}

    first_name = (referrer.first_name or referrer.full_name).split(" ")[0]
    return {"valid": True, "referrer_name": first_name}


@transaction.atomic
def apply_referral_code(*, account: User, code, now=None) -> Referral:
    normalized = normalize_code(code)
    if not normalized:
        raise ValidationError("Referral code is required", field="code")

    locked = User.objects.select_for_update().get(pk=account.pk)

    if locked.referred_by_id:
        raise ConflictError("You have already applied a referral code", field="code")

    referrer = User.objects.filter(referral_code=normalized).first()
    if referrer is None:
        raise NotFoundError("Invalid referral code", field="code", entity_id=normalized)

    if referrer.pk == locked.pk:
        raise ValidationError("Cannot use your own referral code", field="code")

    validity_days = get_int_setting("referral_validity_days")
    now = now or timezone.now()
    days_since_signup = (now - locked.created_at).days
    if days_since_signup > validity_days:
        raise ValidationError(
            f"Referral code can only be applied within {validity_days} days of signup",
            field="code",
        )

    locked.referred_by = referrer
    locked.referred_by_code = normalized
    locked.save(update_fields=["referred_by", "referred_by_code", "updated_at"])

    account.referred_by = referrer
    account.referred_by_code = normalized

    referral = Referral.objects.create(
        referrer=referrer,
        referee=locked,
        code=normalized,
        status=Referral.STATUS_PENDING,
    )

    logger.info(
        "Referral code applied",
        extra={"referee_id": str(locked.pk), "referrer_id": str(referrer.pk), "code": normalized},
    )
    return referral


# =====================================================
# SETTLEMENT
# =====================================================

def reward_points_for(purchase_amount) -> int:
    percent = get_decimal_setting("referral_reward_percent")
    return int(round_whole(percent_of(purchase_amount, percent)))


def settle_referral(*, account: User, purchase_amount, purchase_type: str, purchase_id) -> Referral | None:
    """
    Returns the rewarded Referral, or None when there is nothing (more) to do.
    Safe to call inside or outside an outer transaction.
    """
    if not account.referred_by_id:
        return None

    if Referral.objects.filter(referee=account, status=Referral.STATUS_REWARDED).exists():
        logger.info(
            "Referral already rewarded, skipping",
            extra={"referee_id": str(account.pk), "purchase_id": str(purchase_id)},
        )
        return None

    try:
        with transaction.atomic():
            referral = (
                Referral.objects.select_for_update()
                .filter(referee=account, status=Referral.STATUS_PENDING)
                .order_by("created_at")
                .first()
            )
            if referral is None:
                referral = Referral.objects.create(
                    referrer_id=account.referred_by_id,
                    referee=account,
                    code=account.referred_by_code or "",
                    status=Referral.STATUS_PENDING,
                )

            points = reward_points_for(purchase_amount)

            referral.status = Referral.STATUS_REWARDED
            referral.reward_amount = max(points, 0)
            referral.reward_credited_at = timezone.now()
            referral.purchase_type = purchase_type
            referral.purchase_id = str(purchase_id)
            referral.purchase_amount = money(purchase_amount)
            referral.save()

            if points > 0:
                entry = ledger.credit(
                    account=referral.referrer_id,
                    points=points,
                    source=LedgerEntry.SOURCE_REFERRAL_REWARD,
                    description=f"Referral reward for {account.full_name}'s purchase",
                    reference_type=LedgerEntry.REF_REFERRAL,
                    reference_id=referral.pk,
                )
                referral.ledger_entry = entry
                referral.save(update_fields=["ledger_entry", "updated_at"])
    except IntegrityError:
        logger.warning(
            "Concurrent referral settlement lost the race",
            extra={"referee_id": str(account.pk), "purchase_id": str(purchase_id)},
        )
        return None

    logger.info(
        "Referral rewarded",
        extra={
            "referral_id": str(referral.pk),
            "referrer_id": str(referral.referrer_id),
            "referee_id": str(account.pk),
            "points": referral.reward_amount,
            "purchase_type": purchase_type,
            "purchase_id": str(purchase_id),
        },
    )
    return referral


# =====================================================
# READ SIDE
# =====================================================

def referral_history(account: User):
    return Referral.objects.filter(referrer=account).select_related("referee").order_by("-created_at")


def referral_stats(account: User) -> dict:
    totals = Referral.objects.filter(referrer=account).aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=Referral.STATUS_PENDING)),
        rewarded=Count("id", filter=Q(status=Referral.STATUS_REWARDED)),
        earned=Sum("reward_amount", filter=Q(status=Referral.STATUS_REWARDED)),
    )
    return {
        "referral_code": get_or_create_referral_code(account),
        "total_referrals": totals["total"] or 0,
        "pending_referrals": totals["pending"] or 0,
        "successful_referrals": totals["rewarded"] or 0,
        "total_earned": totals["earned"] or 0,
        "reward_percent": str(get_decimal_setting("referral_reward_percent")),
    }


def referral_overview() -> dict:
    totals = Referral.objects.aggregate(
        total=Count("id"),
        rewarded=Count("id", filter=Q(status=Referral.STATUS_REWARDED)),
        paid=Sum("reward_amount", filter=Q(status=Referral.STATUS_REWARDED)),
    )
    total = totals["total"] or 0
    rewarded = totals["rewarded"] or 0
    rate = round(rewarded / total * 100, 1) if total else 0
    return {
        "total_referred": total,
        "total_rewarded": rewarded,
        "conversion_rate": rate,
        "total_rewards_paid": totals["paid"] or 0,
    }
