# payments/services/order_payments.py

"""
======================================================
PATH: payments/services/order_payments.py
======================================================
ORDER PAYMENT FLOW (GATEWAY)

initiate_order_payment(order, gateway)
    -> remote order for order.amount_to_pay, recorded as a PaymentAttempt

confirm_order_payment(attempt, payment_id, signature, gateway)
    -> signature checked, payment recorded on the order through the payment
       resolver, rewards settled once the order is fully paid

Hard rules:
- The gateway call happens OUTSIDE any DB transaction.
- An attempt is confirmed at most once (second call -> ConflictError).
- A bad signature marks the attempt and the order payment failed, COMMITS
  that, and only then raises ValidationError. The order stays unpaid.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import money
from orders.models import Order
from orders.services.order_service import on_order_paid
from orders.services.payment_resolver import apply_payment, mark_payment_failed
from payments.models import PaymentAttempt

logger = logging.getLogger(__name__)


def payment_currency() -> str:
    return (getattr(settings, "PAYMENTS", {}) or {}).get("CURRENCY", "INR")


# =====================================================
# INITIATE
# =====================================================

def initiate_order_payment(*, order: Order, gateway) -> PaymentAttempt:
    if order.status == Order.STATUS_CANCELLED:
        raise ConflictError("Cannot pay for a cancelled order", entity_id=order.order_id)
    if order.payment_state == Order.PAYMENT_COMPLETED:
        raise ConflictError("Payment already completed", entity_id=order.order_id)

    amount = money(order.amount_to_pay)
    if amount <= 0:
        raise ValidationError("Nothing to pay for this order", field="amount", entity_id=order.order_id)

    currency = payment_currency()
    remote = gateway.create_remote_order(
        amount,
        currency,
        {
            "receipt": f"order_{order.order_id}",
            "order_id": order.order_id,
            "user_id": str(order.user_id),
            "payment_type": order.payment_type,
        },
    )

    attempt = PaymentAttempt.objects.create(
        order=order,
        amount=amount,
        currency=currency,
        gateway_order_id=remote["gateway_order_id"],
    )

    logger.info(
        "Order payment initiated",
        extra={
            "order_id": order.order_id,
            "attempt_id": str(attempt.pk),
            "gateway_order_id": attempt.gateway_order_id,
            "amount": str(amount),
        },
    )
    return attempt


# =====================================================
# CONFIRM
# =====================================================

def get_attempt_for(account, *, attempt_id=None, gateway_order_id=None) -> PaymentAttempt:
    qs = PaymentAttempt.objects.select_related("order").filter(order__user=account)
    try:
        if attempt_id:
            return qs.get(pk=attempt_id)
        return qs.get(gateway_order_id=gateway_order_id or "")
    except (PaymentAttempt.DoesNotExist, ValueError):
        raise NotFoundError("Payment attempt not found", entity_id=attempt_id or gateway_order_id)


def confirm_order_payment(*, attempt: PaymentAttempt, payment_id: str, signature: str, gateway) -> Order:
    verified = gateway.verify_signature(attempt.gateway_order_id, payment_id, signature)
    order = _record_confirmation(attempt_pk=attempt.pk, payment_id=payment_id, signature=signature, verified=verified)

    if not verified:
        raise ValidationError("Invalid payment signature", field="signature", entity_id=attempt.gateway_order_id)
    return order


@transaction.atomic
def _record_confirmation(*, attempt_pk, payment_id: str, signature: str, verified: bool) -> Order:
    attempt = PaymentAttempt.objects.select_for_update().get(pk=attempt_pk)
    if attempt.status == PaymentAttempt.STATUS_PAID:
        raise ConflictError("Payment already verified", entity_id=attempt.gateway_order_id)

    order = Order.objects.select_for_update().select_related("user").get(pk=attempt.order_id)

    attempt.gateway_payment_id = (payment_id or "")[:64]
    attempt.gateway_signature = (signature or "")[:128]
    attempt.verified_at = timezone.now()

    if not verified:
        attempt.status = PaymentAttempt.STATUS_FAILED
        attempt.failure_reason = "Invalid payment signature"
        attempt.save()
        order.save(update_fields=mark_payment_failed(order))
        logger.warning(
            "Payment signature rejected",
            extra={
                "order_id": order.order_id,
                "attempt_id": str(attempt.pk),
                "gateway_order_id": attempt.gateway_order_id,
            },
        )
        return order

    changed = apply_payment(order, attempt.amount)
    order.save(update_fields=changed)

    attempt.status = PaymentAttempt.STATUS_PAID
    attempt.failure_reason = ""
    attempt.save()

    if order.payment_state == Order.PAYMENT_COMPLETED:
        on_order_paid(order)

    logger.info(
        "Order payment confirmed",
        extra={
            "order_id": order.order_id,
            "attempt_id": str(attempt.pk),
            "amount": str(attempt.amount),
            "payment_state": order.payment_state,
        },
    )
    return order


def attempts_for(order: Order):
    return order.payment_attempts.order_by("-created_at")
