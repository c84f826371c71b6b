# orders/services/order_service.py

"""
======================================================
PATH: orders/services/order_service.py
======================================================
ORDER SERVICE (APPLICATION SERVICE)

Purpose:
- Turn a cart (or an explicit item list) into an immutable Order.
- Cancel, advance and track orders.

Hard rules:
- Prices come from the catalog at order time; the client never sends money.
- Everything in create_order() happens in ONE transaction:
  stock check + order id + items + voucher use + points debit + stock
  decrement + cart clear succeed together or roll back together.
- Voucher base is the goods value (items incl. making charges, before tax
  and shipping). Points are then capped against the post-voucher total.
- The order id is YYYYMMDD + a 4-digit daily sequence from an atomic
  counter; a collision on insert retries with the next value.

Notes:
- Payment-gateway initiation (online orders) runs AFTER the order commits,
  so a gateway failure never loses the order; it stays payment-pending.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from cart.services.cart_service import cart_lines, clear_cart, get_or_create_cart
from catalog.models import Product
from catalog.services.pricing_engine import (
    PricingConfig,
    get_product,
    line_from_product,
    price_lines,
    validate_stock,
)
from core.exceptions import NotFoundError, ValidationError
from core.money import ZERO, money
from core.services.sequences import allocate_with_retry
from core.services.settings_store import get_bool_setting
from loyalty.services.redemption import (
    calculate_usage,
    credit_cashback,
    redeem_for_order,
    refund_for_order,
)
from orders.models import Order, OrderItem, TrackingEvent
from orders.services.order_lifecycle import (
    InvalidOrderTransitionError,
    can_cancel,
    validate_transition,
)
from orders.services.payment_resolver import resolve_payment, settle_in_full
from referrals.models import Referral
from referrals.services.referral_service import settle_referral
from users.models import User
from users.services.payment_settings import get_payment_settings
from vouchers.services import voucher_evaluator

logger = logging.getLogger(__name__)

ORDER_SEQUENCE_PREFIX = "order"


# =====================================================
# HELPERS
# =====================================================

def _lines_from_items(items) -> list:
    lines = []
    for raw in items:
        product = get_product(raw.get("product_id"))
        quantity = raw.get("quantity", 1)
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise ValidationError("quantity must be a whole number", field="quantity", entity_id=product.pk)
        lines.append(line_from_product(product, quantity, raw.get("size") or ""))
    return lines


def _requested_quantities(lines) -> dict:
    requested: dict = {}
    for line in lines:
        requested[line.product_id] = requested.get(line.product_id, 0) + int(line.quantity)
    return requested


def _order_sequence_name(day: str) -> str:
    return f"{ORDER_SEQUENCE_PREFIX}:{day}"


def _highest_suffix_for(day: str) -> int:
    highest = 0
    for order_id in Order.objects.filter(order_id__startswith=day).values_list("order_id", flat=True):
        suffix = order_id[len(day):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def format_order_id(day: str, seq: int) -> str:
    return f"{day}{seq:04d}"


def on_order_paid(order: Order) -> None:
    """Rewards that follow a fully settled order. Each step is idempotent."""
    settle_referral(
        account=order.user,
        purchase_amount=order.total_amount,
        purchase_type=Referral.PURCHASE_ORDER,
        purchase_id=order.order_id,
    )
    credit_cashback(account=order.user, order_total=order.total_amount, order_ref=order.order_id)


# =====================================================
# CREATE
# =====================================================

def create_order(
    *,
    account: User,
    shipping_address: dict,
    payment_method: str = Order.METHOD_CASH,
    payment_type: str = Order.TYPE_FULL,
    items=None,
    partial_amount=None,
    emi_plan_id=None,
    voucher_code: str | None = None,
    loyalty_points: int = 0,
    gateway=None,
) -> Order:
    order = _create_order_atomic(
        account=account,
        shipping_address=shipping_address,
        payment_method=payment_method,
        payment_type=payment_type,
        items=items,
        partial_amount=partial_amount,
        emi_plan_id=emi_plan_id,
        voucher_code=voucher_code,
        loyalty_points=loyalty_points,
    )

    if gateway is not None and order.payment_method == Order.METHOD_ONLINE and order.amount_to_pay > 0:
        from payments.services.order_payments import initiate_order_payment

        initiate_order_payment(order=order, gateway=gateway)

    return order


@transaction.atomic
def _create_order_atomic(
    *,
    account: User,
    shipping_address: dict,
    payment_method: str,
    payment_type: str,
    items,
    partial_amount,
    emi_plan_id,
    voucher_code,
    loyalty_points,
) -> Order:
    if not isinstance(shipping_address, dict) or not shipping_address:
        raise ValidationError("Shipping address is required", field="shipping_address")

    from_cart = not items
    cart = None
    if from_cart:
        cart = get_or_create_cart(account)
        lines = cart_lines(cart)
    else:
        lines = _lines_from_items(items)

    if not lines:
        raise ValidationError("No items to create order", field="items")

    # Lock product rows, then check stock against the locked values.
    requested = _requested_quantities(lines)
    list(Product.objects.select_for_update().filter(pk__in=list(requested.keys())))
    validate_stock(requested)

    config = PricingConfig.load()
    gross = price_lines(lines, config)

    # ---------------- voucher ----------------
    voucher_discount = ZERO
    code = voucher_evaluator.normalize_code(voucher_code)
    if code:
        voucher_discount = voucher_evaluator.preview(code, gross.taxable_amount).discount

    # ---------------- loyalty points ----------------
    points_used = 0
    loyalty_discount = ZERO
    requested_points = int(loyalty_points or 0)
    if requested_points > 0:
        locked_account = User.objects.select_for_update().get(pk=account.pk)
        quote = calculate_usage(
            available_points=locked_account.loyalty_points,
            order_total=gross.total_before_discount - voucher_discount,
            points_to_use=requested_points,
        )
        points_used = quote.points_to_use
        loyalty_discount = quote.discount

    breakdown = price_lines(lines, config, discount=voucher_discount + loyalty_discount)

    terms = resolve_payment(
        total=breakdown.total,
        payment_type=payment_type,
        payment_method=payment_method,
        partial_amount=partial_amount,
        emi_plan_id=emi_plan_id,
        payment_settings=get_payment_settings(account),
    )

    order_fields = {
        "user": account,
        "status": Order.STATUS_PENDING,
        "subtotal": breakdown.subtotal,
        "making_charges": breakdown.making_charges,
        "tax_percent": breakdown.tax_percent,
        "tax_amount": breakdown.tax_amount,
        "shipping_fee": breakdown.shipping_fee,
        "voucher_code": code,
        "voucher_discount": voucher_discount,
        "loyalty_points_used": points_used,
        "loyalty_discount": loyalty_discount,
        "total_amount": breakdown.total,
        "shipping_address": shipping_address,
        **terms.as_order_fields(),
    }
    if breakdown.total == ZERO:
        order_fields["payment_state"] = Order.PAYMENT_COMPLETED
        order_fields["payment_status"] = Order.PAID

    day = timezone.localdate().strftime("%Y%m%d")
    order = allocate_with_retry(
        _order_sequence_name(day),
        persist=lambda seq: Order.objects.create(order_id=format_order_id(day, seq), **order_fields),
        resync=lambda: _highest_suffix_for(day),
    )

    for priced in breakdown.lines:
        line = priced.line
        OrderItem.objects.create(
            order=order,
            product_id=line.product_id,
            product_name=line.name,
            quantity=line.quantity,
            unit_price=money(line.unit_price),
            making_charge=money(line.making_charge),
            size=line.size,
            hsn_code=line.hsn_code,
            line_subtotal=priced.line_subtotal,
            line_making_charges=priced.line_making_charges,
            line_total=priced.line_total,
        )

    if code:
        voucher_evaluator.apply(
            code=code,
            cart_total=gross.taxable_amount,
            account=account,
            order_ref=order.order_id,
        )

    if points_used:
        redeem_for_order(account=account, points=points_used, order_ref=order.order_id)

    for product_id, qty in requested.items():
        Product.objects.filter(pk=product_id).update(stock=F("stock") - qty)

    if from_cart and cart is not None:
        clear_cart(cart)

    logger.info(
        "Order created",
        extra={
            "order_id": order.order_id,
            "account_id": str(account.pk),
            "total": str(order.total_amount),
            "payment_type": order.payment_type,
            "voucher": code or None,
            "points_used": points_used,
        },
    )
    return order


# =====================================================
# READ
# =====================================================

def orders_for(account: User):
    return Order.objects.filter(user=account).prefetch_related("items").order_by("-created_at")


def get_order_for(account: User, order_pk) -> Order:
    try:
        return Order.objects.prefetch_related("items", "tracking_events").get(pk=order_pk, user=account)
    except (Order.DoesNotExist, ValueError):
        raise NotFoundError("Order not found", entity_id=order_pk)


def get_order(order_pk) -> Order:
    try:
        return Order.objects.select_related("user").get(pk=order_pk)
    except (Order.DoesNotExist, ValueError):
        raise NotFoundError("Order not found", entity_id=order_pk)


def track_order(order: Order) -> dict:
    return {
        "order_id": order.order_id,
        "status": order.status,
        "tracking": {
            "carrier": order.tracking_carrier,
            "tracking_number": order.tracking_number,
            "history": [
                {
                    "status": e.status,
                    "carrier": e.carrier,
                    "location": e.location,
                    "note": e.note,
                    "at": e.created_at,
                }
                for e in order.tracking_events.all()
            ],
        },
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


# =====================================================
# CANCEL
# =====================================================

@transaction.atomic
def cancel_order(*, order: Order, account: User | None = None, reason: str = "") -> Order:
    """account given -> customer cancelling their own order."""
    qs = Order.objects.select_for_update()
    if account is not None:
        qs = qs.filter(user=account)
    try:
        locked = qs.get(pk=order.pk)
    except Order.DoesNotExist:
        raise NotFoundError("Order not found", entity_id=order.pk)

    if locked.status == Order.STATUS_CANCELLED:
        raise InvalidOrderTransitionError("Order already cancelled", entity_id=locked.order_id)
    if not can_cancel(locked.status):
        raise InvalidOrderTransitionError("Order cannot be cancelled at this stage", entity_id=locked.order_id)

    locked.status = Order.STATUS_CANCELLED
    locked.cancelled_at = timezone.now()
    locked.cancel_reason = (reason or "")[:255]
    locked.save(update_fields=["status", "cancelled_at", "cancel_reason", "updated_at"])

    for item in locked.items.exclude(product__isnull=True):
        Product.objects.filter(pk=item.product_id).update(stock=F("stock") + item.quantity)

    if locked.loyalty_points_used:
        refund_for_order(account=locked.user, points=locked.loyalty_points_used, order_ref=locked.order_id)

    TrackingEvent.objects.create(order=locked, status=Order.STATUS_CANCELLED, note=locked.cancel_reason)

    logger.info(
        "Order cancelled",
        extra={
            "order_id": locked.order_id,
            "by_customer": account is not None,
            "points_refunded": locked.loyalty_points_used,
        },
    )
    return locked


# =====================================================
# STATUS / TRACKING (ADMIN)
# =====================================================

@transaction.atomic
def update_order_status(
    *,
    order: Order,
    status: str,
    carrier: str = "",
    tracking_number: str = "",
    location: str = "",
    note: str = "",
) -> Order:
    if status not in dict(Order.STATUS_CHOICES):
        raise ValidationError("Invalid status", field="status", entity_id=order.order_id)

    if status == Order.STATUS_CANCELLED:
        return cancel_order(order=order, reason=note)

    locked = Order.objects.select_for_update().get(pk=order.pk)
    validate_transition(order=locked, target_status=status)

    locked.status = status
    changed = ["status", "updated_at"]

    if carrier:
        locked.tracking_carrier = carrier
        changed.append("tracking_carrier")
    if tracking_number:
        locked.tracking_number = tracking_number
        changed.append("tracking_number")

    settled = False
    if status == Order.STATUS_DELIVERED and locked.payment_state != Order.PAYMENT_COMPLETED:
        if get_bool_setting("delivery_settles_payment"):
            changed.extend(settle_in_full(locked))
            settled = True

    locked.save(update_fields=list(dict.fromkeys(changed)))

    if status == Order.STATUS_SHIPPED or carrier or tracking_number:
        TrackingEvent.objects.create(
            order=locked,
            status=status,
            carrier=locked.tracking_carrier,
            location=location,
            note=note,
        )

    if settled:
        on_order_paid(locked)

    logger.info(
        "Order status updated",
        extra={"order_id": locked.order_id, "status": status, "payment_settled": settled},
    )
    return locked


@transaction.atomic
def add_tracking_event(
    *,
    order: Order,
    status: str | None = None,
    location: str = "",
    note: str = "",
    carrier: str = "",
    tracking_number: str = "",
) -> TrackingEvent:
    """Allowed in every state. Carrier / number are only updated on open orders."""
    locked = Order.objects.select_for_update().get(pk=order.pk)

    if not locked.is_terminal and (carrier or tracking_number):
        changed = ["updated_at"]
        if carrier:
            locked.tracking_carrier = carrier
            changed.append("tracking_carrier")
        if tracking_number:
            locked.tracking_number = tracking_number
            changed.append("tracking_number")
        locked.save(update_fields=changed)

    return TrackingEvent.objects.create(
        order=locked,
        status=status or locked.status,
        carrier=carrier or locked.tracking_carrier,
        location=location,
        note=note,
    )
