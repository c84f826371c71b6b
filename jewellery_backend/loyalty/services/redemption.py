# loyalty/services/redemption.py

"""
REDEMPTION RULES

Points usable on an order:
    max_for_order = floor(order_total * max_usage_percent / 100 / point_value)
    max_usable    = min(available, max_for_order)

A minimum redemption applies unless the customer redeems their whole balance.
point_value, max_usage_percent and min_redemption are read from the settings
store on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from core.exceptions import ValidationError
from core.money import HUNDRED, floor_int, money, to_decimal
from core.services.settings_store import get_decimal_setting, get_int_setting
from loyalty.models import LedgerEntry
from loyalty.services import ledger


@dataclass(frozen=True)
class RedemptionPolicy:
    point_value: Decimal
    max_usage_percent: Decimal
    min_redemption: int

    @classmethod
    def load(cls) -> "RedemptionPolicy":
        point_value = get_decimal_setting("loyalty_point_value")
        if point_value <= 0:
            point_value = Decimal("1")
        return cls(
            point_value=point_value,
            max_usage_percent=get_decimal_setting("max_loyalty_usage_percent"),
            min_redemption=get_int_setting("min_loyalty_redemption"),
        )

    def max_points_for(self, order_total) -> int:
        total = to_decimal(order_total)
        return max(0, floor_int(total * self.max_usage_percent / HUNDRED / self.point_value))

    def value_of(self, points: int) -> Decimal:
        return money(Decimal(int(points)) * self.point_value)


def balance_summary(account, policy: RedemptionPolicy | None = None) -> dict:
    policy = policy or RedemptionPolicy.load()
    points = int(account.loyalty_points or 0)
    return {
        "points": points,
        "point_value": str(policy.point_value),
        "value_in_rupees": str(policy.value_of(points)),
        "min_redemption": policy.min_redemption,
        "max_usage_percent": str(policy.max_usage_percent),
        "can_redeem": points >= policy.min_redemption,
    }


@dataclass(frozen=True)
class RedemptionQuote:
    available_points: int
    max_usable_points: int
    points_to_use: int
    discount: Decimal
    new_total: Decimal
    point_value: Decimal

    def as_dict(self) -> dict:
        return {
            "available_points": self.available_points,
            "max_usable_points": self.max_usable_points,
            "points_to_use": self.points_to_use,
            "discount": str(self.discount),
            "new_total": str(self.new_total),
            "savings": str(self.discount),
            "point_value": str(self.point_value),
        }


def calculate_usage(
    *,
    available_points: int,
    order_total,
    points_to_use: int = 0,
    policy: RedemptionPolicy | None = None,
) -> RedemptionQuote:
    policy = policy or RedemptionPolicy.load()
    total = to_decimal(order_total)
    if total <= 0:
        raise ValidationError("Valid order total required", field="order_total")

    requested = int(points_to_use or 0)
    if requested < 0:
        raise ValidationError("points_to_use cannot be negative", field="points_to_use")

    available = max(0, int(available_points or 0))
    max_usable = min(available, policy.max_points_for(total))

    actual = 0
    if requested > 0:
        if requested < policy.min_redemption and requested != available:
            raise ValidationError(
                f"Minimum {policy.min_redemption} points required for redemption",
                field="points_to_use",
            )
        actual = min(requested, max_usable)

    discount = policy.value_of(actual)
    return RedemptionQuote(
        available_points=available,
        max_usable_points=max_usable,
        points_to_use=actual,
        discount=discount,
        new_total=money(total - discount),
        point_value=policy.point_value,
    )


def calculate_usage_for(account, *, order_total, points_to_use: int = 0) -> RedemptionQuote:
    return calculate_usage(
        available_points=account.loyalty_points,
        order_total=order_total,
        points_to_use=points_to_use,
    )


# =====================================================
# ORDER HOOKS
# =====================================================

def redeem_for_order(*, account, points: int, order_ref: str) -> LedgerEntry:
    """Caller runs inside the order-creation transaction."""
    return ledger.debit(
        account=account,
        points=points,
        source=LedgerEntry.SOURCE_ORDER_PAYMENT,
        description=f"Redeemed on order {order_ref}",
        reference_type=LedgerEntry.REF_ORDER,
        reference_id=order_ref,
    )


def refund_for_order(*, account, points: int, order_ref: str) -> LedgerEntry | None:
    if not points:
        return None
    return ledger.credit(
        account=account,
        points=points,
        source=LedgerEntry.SOURCE_REFUND,
        description=f"Refund for cancelled order {order_ref}",
        reference_type=LedgerEntry.REF_ORDER,
        reference_id=order_ref,
    )


def cashback_points(order_total, policy: RedemptionPolicy | None = None) -> int:
    policy = policy or RedemptionPolicy.load()
    percent = get_decimal_setting("loyalty_cashback_percent")
    if percent <= 0:
        return 0
    return max(0, floor_int(to_decimal(order_total) * percent / HUNDRED / policy.point_value))


def credit_cashback(*, account, order_total, order_ref: str) -> LedgerEntry | None:
    points = cashback_points(order_total)
    if points <= 0:
        return None

    already = LedgerEntry.objects.filter(
        account=account,
        source=LedgerEntry.SOURCE_CASHBACK,
        reference_type=LedgerEntry.REF_ORDER,
        reference_id=order_ref,
    ).exists()
    if already:
        return None

    return ledger.credit(
        account=account,
        points=points,
        source=LedgerEntry.SOURCE_CASHBACK,
        description=f"Cashback on order {order_ref}",
        reference_type=LedgerEntry.REF_ORDER,
        reference_id=order_ref,
    )
