# memberships/services/package_purchase.py

"""
======================================================
PATH: memberships/services/package_purchase.py
======================================================
MEMBERSHIP PACKAGE PURCHASE

initiate_package_purchase(account, package, points, gateway)
    points used = min(requested, floor(price * max_loyalty_usage_percent / 100), balance)
    amount      = price - value(points)
    -> gateway remote order (paise) + pending PackagePurchase

verify_package_purchase(account, purchase_id, gateway_order_id, payment_id, signature, gateway)
    -> signature check; on success, ONE transaction:
       purchase completed + points debit (package_payment, clamped to the
       balance left; any gap lands in loyalty_points_shortfall) + membership
       activation + referral settlement for the referrer

Hard rules:
- Gateway call happens outside any DB transaction.
- A purchase is verified at most once (ConflictError "Payment already verified").
- An invalid signature marks the purchase failed, commits, then raises.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import money, to_decimal
from loyalty.models import LedgerEntry
from loyalty.services import ledger
from loyalty.services.redemption import RedemptionPolicy
from memberships.models import Package, PackagePurchase
from payments.services.order_payments import payment_currency
from referrals.models import Referral
from referrals.services.referral_service import settle_referral
from users.models import User
from users.services.membership import activate_membership, membership_snapshot, refresh_membership_status

logger = logging.getLogger(__name__)


# =====================================================
# PACKAGES
# =====================================================

def active_packages():
    return Package.objects.filter(is_active=True).order_by("display_order", "price")


def get_package(package_id, *, active_only: bool = True) -> Package:
    qs = active_packages() if active_only else Package.objects.all()
    try:
        return qs.get(pk=package_id)
    except (Package.DoesNotExist, ValueError):
        raise NotFoundError("Package not found or inactive", field="package_id", entity_id=package_id)


def points_for_package(*, package: Package, requested: int, available: int, policy: RedemptionPolicy | None = None) -> int:
    requested = int(requested or 0)
    if requested <= 0:
        return 0
    policy = policy or RedemptionPolicy.load()
    return max(0, min(requested, policy.max_points_for(package.price), int(available or 0)))


# =====================================================
# INITIATE
# =====================================================

def initiate_package_purchase(*, account: User, package: Package, points: int = 0, gateway) -> PackagePurchase:
    if not package.is_active:
        raise NotFoundError("Package not found or inactive", field="package_id", entity_id=package.pk)

    account.refresh_from_db(fields=["loyalty_points"])
    policy = RedemptionPolicy.load()
    points_used = points_for_package(
        package=package,
        requested=points,
        available=account.loyalty_points,
        policy=policy,
    )
    amount = money(to_decimal(package.price) - policy.value_of(points_used))
    if amount <= 0:
        raise ValidationError("Package amount must be greater than zero", field="package_id", entity_id=package.pk)

    remote = gateway.create_remote_order(
        amount,
        payment_currency(),
        {
            "receipt": f"pkg_{int(timezone.now().timestamp())}",
            "package_id": str(package.pk),
            "user_id": str(account.pk),
            "loyalty_points_used": points_used,
        },
    )

    purchase = PackagePurchase.objects.create(
        user=account,
        package=package,
        amount_paid=amount,
        loyalty_points_used=points_used,
        gateway_order_id=remote["gateway_order_id"],
        payment_method=PackagePurchase.METHOD_ONLINE,
    )

    logger.info(
        "Package purchase initiated",
        extra={
            "purchase_id": str(purchase.pk),
            "account_id": str(account.pk),
            "package_id": str(package.pk),
            "amount": str(amount),
            "points": points_used,
        },
    )
    return purchase


# =====================================================
# VERIFY
# =====================================================

def verify_package_purchase(
    *,
    account: User,
    purchase_id,
    gateway_order_id: str,
    payment_id: str,
    signature: str,
    gateway,
) -> PackagePurchase:
    try:
        purchase = PackagePurchase.objects.get(pk=purchase_id, user=account, gateway_order_id=gateway_order_id)
    except (PackagePurchase.DoesNotExist, ValueError):
        raise NotFoundError("Purchase not found", entity_id=purchase_id)

    if purchase.payment_status == PackagePurchase.STATUS_COMPLETED:
        raise ConflictError("Payment already verified", entity_id=purchase.pk)

    if not gateway.verify_signature(gateway_order_id, payment_id, signature):
        PackagePurchase.objects.filter(pk=purchase.pk).exclude(
            payment_status=PackagePurchase.STATUS_COMPLETED
        ).update(payment_status=PackagePurchase.STATUS_FAILED, updated_at=timezone.now())
        logger.warning(
            "Package payment signature rejected",
            extra={"purchase_id": str(purchase.pk), "account_id": str(account.pk)},
        )
        raise ValidationError("Invalid payment signature", field="signature", entity_id=purchase.pk)

    return _complete_purchase(purchase_pk=purchase.pk, payment_id=payment_id, signature=signature)


@transaction.atomic
def _complete_purchase(*, purchase_pk, payment_id: str, signature: str) -> PackagePurchase:
    purchase = PackagePurchase.objects.select_for_update().select_related("package").get(pk=purchase_pk)
    if purchase.payment_status == PackagePurchase.STATUS_COMPLETED:
        raise ConflictError("Payment already verified", entity_id=purchase.pk)

    account = User.objects.select_for_update().get(pk=purchase.user_id)
    package = purchase.package
    now = timezone.now()

    # The gateway has already captured the money, so a balance that dropped
    # since initiation must not block the membership.
    reserved = purchase.loyalty_points_used
    debited = min(reserved, max(account.loyalty_points, 0))
    if debited < reserved:
        purchase.loyalty_points_used = debited
        purchase.loyalty_points_shortfall = reserved - debited
        logger.warning(
            "Package points no longer available, debit clamped",
            extra={
                "purchase_id": str(purchase.pk),
                "account_id": str(account.pk),
                "reserved": reserved,
                "debited": debited,
                "shortfall": reserved - debited,
            },
        )

    if debited:
        ledger.debit(
            account=account,
            points=debited,
            source=LedgerEntry.SOURCE_PACKAGE_PAYMENT,
            description=f"Used for {package.name} purchase",
            reference_type=LedgerEntry.REF_PACKAGE_PURCHASE,
            reference_id=purchase.pk,
        )
        account.refresh_from_db(fields=["loyalty_points"])

    activate_membership(
        account,
        duration_days=package.membership_duration_days,
        discount_percent=package.discount_percent,
        now=now,
    )

    purchase.gateway_payment_id = (payment_id or "")[:64]
    purchase.gateway_signature = (signature or "")[:128]
    purchase.payment_status = PackagePurchase.STATUS_COMPLETED
    purchase.membership_granted = True
    purchase.membership_granted_at = now
    purchase.membership_expires_at = account.membership_expires_at
    purchase.membership_discount_percent = package.discount_percent
    purchase.save()

    referral = settle_referral(
        account=account,
        purchase_amount=purchase.amount_paid,
        purchase_type=Referral.PURCHASE_PACKAGE,
        purchase_id=purchase.pk,
    )
    if referral is not None:
        purchase.referral_rewarded = True
        purchase.save(update_fields=["referral_rewarded", "updated_at"])

    logger.info(
        "Package purchase completed",
        extra={
            "purchase_id": str(purchase.pk),
            "account_id": str(account.pk),
            "package_id": str(package.pk),
            "expires_at": account.membership_expires_at.isoformat(),
            "referral_rewarded": purchase.referral_rewarded,
        },
    )
    return purchase


# =====================================================
# READ SIDE
# =====================================================

def purchase_history(account: User):
    return PackagePurchase.objects.filter(user=account).select_related("package").order_by("-created_at")


def membership_status(account: User) -> dict:
    refresh_membership_status(account)
    return membership_snapshot(account)
