# orders/services/payment_resolver.py

"""
======================================================
PATH: orders/services/payment_resolver.py
======================================================
PAYMENT RESOLVER

Turns (order total, payment type, options) into payment terms, and records
confirmed payments against an order.

Types:
- full     amount_to_pay = total
- partial  min% * total <= partial_amount <= max% * total
           (band from the customer's payment settings, default 10 / 90)
           remaining_amount tracks total - amount_paid
- emi      an InstallmentPlan (by id, must cover the total) or an ad-hoc
           plan "adhoc_<months>" priced from ADHOC_INTEREST_RATES.
           total payable = total * (1 + rate/100); installment = payable / months
           amount_to_pay = one installment

Invariant:
    amount_paid + remaining_amount == total_amount   (whenever remaining is set)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import HUNDRED, ZERO, money, percent_of, to_decimal
from orders.models import InstallmentPlan, Order

logger = logging.getLogger(__name__)

ADHOC_INTEREST_RATES = {3: 12, 6: 13, 9: 14, 12: 15, 15: 16, 18: 17, 24: 18}
DEFAULT_ADHOC_INTEREST_RATE = 15
ADHOC_PREFIXES = ("adhoc_", "dummy_")

MIN_EMI_AMOUNT = Decimal("1000")

DEFAULT_MIN_PARTIAL_PERCENT = Decimal("10")
DEFAULT_MAX_PARTIAL_PERCENT = Decimal("90")


# =====================================================
# VALUE TYPES
# =====================================================

@dataclass(frozen=True)
class EmiSchedule:
    months: int
    interest_rate: Decimal
    total_amount: Decimal
    monthly_installment: Decimal
    plan_ref: str
    plan: InstallmentPlan | None = None


@dataclass(frozen=True)
class PaymentTerms:
    method: str
    type: str
    amount_to_pay: Decimal
    amount_paid: Decimal = ZERO
    partial_amount: Decimal | None = None
    remaining_amount: Decimal | None = None
    emi: EmiSchedule | None = None

    def as_order_fields(self) -> dict:
        out = {
            "payment_method": self.method,
            "payment_type": self.type,
            "payment_state": Order.PAYMENT_PENDING,
            "amount_paid": self.amount_paid,
            "amount_to_pay": self.amount_to_pay,
            "partial_amount": self.partial_amount,
            "remaining_amount": self.remaining_amount,
        }
        if self.emi is not None:
            out.update(
                {
                    "emi_plan": self.emi.plan,
                    "emi_plan_ref": self.emi.plan_ref,
                    "emi_months": self.emi.months,
                    "emi_interest_rate": self.emi.interest_rate,
                    "emi_total_amount": self.emi.total_amount,
                    "emi_monthly_installment": self.emi.monthly_installment,
                    "emi_installments_paid": 0,
                }
            )
        return out


# =====================================================
# EMI
# =====================================================

def emi_figures(principal, interest_rate, months: int) -> tuple[Decimal, Decimal]:
    """(total payable, monthly installment), both rounded once at the end."""
    if int(months) < 1:
        raise ValidationError("EMI months must be at least 1", field="emi_plan_id")
    payable = to_decimal(principal) * (1 + to_decimal(interest_rate) / HUNDRED)
    return money(payable), money(payable / int(months))


def adhoc_months(plan_id: str) -> int | None:
    """Months for an ad-hoc plan id, None when plan_id is not ad-hoc."""
    for prefix in ADHOC_PREFIXES:
        if plan_id.startswith(prefix):
            try:
                months = int(plan_id[len(prefix):])
            except ValueError:
                raise ValidationError("Invalid EMI plan", field="emi_plan_id", entity_id=plan_id)
            if months < 1:
                raise ValidationError("Invalid EMI plan", field="emi_plan_id", entity_id=plan_id)
            return months
    return None


def resolve_emi(total, emi_plan_id) -> EmiSchedule:
    plan_id = str(emi_plan_id or "").strip()
    if not plan_id:
        raise ValidationError("EMI plan is required", field="emi_plan_id")

    months = adhoc_months(plan_id)
    if months is not None:
        rate = Decimal(ADHOC_INTEREST_RATES.get(months, DEFAULT_ADHOC_INTEREST_RATE))
        payable, installment = emi_figures(total, rate, months)
        return EmiSchedule(
            months=months,
            interest_rate=rate,
            total_amount=payable,
            monthly_installment=installment,
            plan_ref=f"adhoc_{months}",
        )

    try:
        plan = InstallmentPlan.objects.get(pk=uuid.UUID(plan_id), is_active=True)
    except (ValueError, InstallmentPlan.DoesNotExist):
        raise NotFoundError("EMI plan not found", field="emi_plan_id", entity_id=plan_id)

    if not plan.covers(total):
        raise ValidationError(
            f"EMI not available for this amount. Range: {money(plan.min_amount)}-{money(plan.max_amount)}",
            field="emi_plan_id",
            entity_id=plan.pk,
        )

    return EmiSchedule(
        months=plan.months,
        interest_rate=to_decimal(plan.interest_rate_percent),
        total_amount=plan.total_payable(total),
        monthly_installment=plan.monthly_installment(total),
        plan_ref=str(plan.pk),
        plan=plan,
    )


def quote_installments(amount) -> list[dict]:
    value = to_decimal(amount)
    if value < MIN_EMI_AMOUNT:
        raise ValidationError(
            f"EMI is available only for amounts of {money(MIN_EMI_AMOUNT)} and above",
            field="amount",
        )

    plans = InstallmentPlan.objects.filter(
        is_active=True,
        min_amount__lte=value,
        max_amount__gte=value,
    ).order_by("months")

    return [
        {
            "id": str(plan.pk),
            "name": plan.name,
            "months": plan.months,
            "interest_rate": str(plan.interest_rate_percent),
            "monthly_installment": str(plan.monthly_installment(value)),
            "total_amount": str(plan.total_payable(value)),
            "processing_fee": str(plan.processing_fee),
        }
        for plan in plans
    ]


@transaction.atomic
def seed_installment_plans() -> int:
    created_count = 0
    for months, rate in sorted(ADHOC_INTEREST_RATES.items()):
        _, created = InstallmentPlan.objects.get_or_create(
            months=months,
            interest_rate_percent=Decimal(rate),
            defaults={"name": f"{months} months @ {rate}%"},
        )
        if created:
            created_count += 1
    return created_count


# =====================================================
# RESOLUTION
# =====================================================

def resolve_payment(
    *,
    total,
    payment_type: str = Order.TYPE_FULL,
    payment_method: str = Order.METHOD_CASH,
    partial_amount=None,
    emi_plan_id=None,
    payment_settings=None,
) -> PaymentTerms:
    total = money(total)
    method = (payment_method or Order.METHOD_CASH).strip().lower()
    ptype = (payment_type or Order.TYPE_FULL).strip().lower()

    if method not in dict(Order.PAYMENT_METHODS):
        raise ValidationError(f"Unsupported payment method '{payment_method}'", field="payment_method")

    if ptype == Order.TYPE_FULL:
        return PaymentTerms(method=method, type=ptype, amount_to_pay=total)

    if ptype == Order.TYPE_PARTIAL:
        min_pct = DEFAULT_MIN_PARTIAL_PERCENT
        max_pct = DEFAULT_MAX_PARTIAL_PERCENT
        if payment_settings is not None:
            min_pct = to_decimal(payment_settings.min_partial_payment_percent)
            max_pct = to_decimal(payment_settings.max_partial_payment_percent)

        if partial_amount in (None, ""):
            raise ValidationError(
                f"Partial payment must be at least {min_pct.normalize():f}% of total amount",
                field="partial_amount",
            )
        amount = money(partial_amount)

        if amount <= 0 or amount < percent_of(total, min_pct):
            raise ValidationError(
                f"Partial payment must be at least {min_pct.normalize():f}% of total amount",
                field="partial_amount",
            )
        if amount > percent_of(total, max_pct):
            raise ValidationError(
                f"Partial payment cannot exceed {max_pct.normalize():f}% of total amount",
                field="partial_amount",
            )

        return PaymentTerms(
            method=method,
            type=ptype,
            amount_to_pay=amount,
            partial_amount=amount,
            # Nothing is paid yet, so remaining starts at the full total; once the
            # partial payment is confirmed apply_payment() brings it to total - partial.
            remaining_amount=total,
        )

    if ptype == Order.TYPE_EMI:
        emi = resolve_emi(total, emi_plan_id)
        return PaymentTerms(method=method, type=ptype, amount_to_pay=emi.monthly_installment, emi=emi)

    raise ValidationError(f"Unsupported payment type '{payment_type}'", field="payment_type")


# =====================================================
# RECORDING PAYMENTS
# =====================================================

PAYMENT_FIELDS = [
    "amount_paid",
    "amount_to_pay",
    "remaining_amount",
    "emi_installments_paid",
    "payment_state",
    "payment_status",
    "updated_at",
]


def apply_payment(order: Order, amount) -> list[str]:
    """
    Record a confirmed payment on the order (caller holds the row lock and saves).
    Returns the fields changed.
    """
    amount = money(amount)
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than zero", field="amount", entity_id=order.order_id)
    if order.payment_state == Order.PAYMENT_COMPLETED:
        raise ConflictError("Payment already completed", entity_id=order.order_id)

    total = money(order.total_amount)
    order.amount_paid = money(to_decimal(order.amount_paid) + amount)

    if order.payment_type == Order.TYPE_EMI:
        order.emi_installments_paid = (order.emi_installments_paid or 0) + 1
        months = order.emi_months or 1
        done = order.emi_installments_paid >= months
        order.amount_to_pay = ZERO if done else money(order.emi_monthly_installment)
    else:
        outstanding = max(total - order.amount_paid, ZERO)
        if order.payment_type == Order.TYPE_PARTIAL:
            order.remaining_amount = outstanding
            # Overpayment is clamped so the invariant holds.
            if order.amount_paid > total:
                order.amount_paid = total
        order.amount_to_pay = outstanding
        done = outstanding == ZERO

    if done:
        order.payment_state = Order.PAYMENT_COMPLETED
        order.payment_status = Order.PAID
    elif order.payment_state == Order.PAYMENT_FAILED:
        order.payment_state = Order.PAYMENT_PENDING
        order.payment_status = Order.PAID_PENDING

    logger.info(
        "Order payment recorded",
        extra={
            "order_id": order.order_id,
            "amount": str(amount),
            "amount_paid": str(order.amount_paid),
            "payment_type": order.payment_type,
            "completed": done,
        },
    )
    return PAYMENT_FIELDS


def settle_in_full(order: Order) -> list[str]:
    """Mark the order fully paid (delivery settlement)."""
    total = money(order.total_amount)
    order.amount_paid = total
    order.amount_to_pay = ZERO
    if order.payment_type == Order.TYPE_PARTIAL:
        order.remaining_amount = ZERO
    if order.payment_type == Order.TYPE_EMI and order.emi_months:
        order.emi_installments_paid = order.emi_months
    order.payment_state = Order.PAYMENT_COMPLETED
    order.payment_status = Order.PAID
    return PAYMENT_FIELDS


def mark_payment_failed(order: Order) -> list[str]:
    if order.payment_state != Order.PAYMENT_COMPLETED:
        order.payment_state = Order.PAYMENT_FAILED
        order.payment_status = Order.PAID_FAILED
    return ["payment_state", "payment_status", "updated_at"]
