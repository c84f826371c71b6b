"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Order entities.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth

Forward only: pending -> processing -> shipped -> delivered.
Steps may be skipped going forward (pending -> shipped), never backwards.
Cancellation only from pending / processing.
"""

from core.exceptions import ConflictError
from orders.models import Order

# ============================================================
# DOMAIN ERRORS
# ============================================================


class InvalidOrderTransitionError(ConflictError):
    default_message = "Invalid order status transition."


# ============================================================
# STATE DEFINITIONS
# ============================================================

FORWARD_SEQUENCE = [
    Order.STATUS_PENDING,
    Order.STATUS_PROCESSING,
    Order.STATUS_SHIPPED,
    Order.STATUS_DELIVERED,
]

TERMINAL_STATES = {
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

CANCELLABLE_STATES = {
    Order.STATUS_PENDING,
    Order.STATUS_PROCESSING,
}

ALLOWED_TRANSITIONS = {
    status: set(FORWARD_SEQUENCE[i + 1:]) | ({Order.STATUS_CANCELLED} if status in CANCELLABLE_STATES else set())
    for i, status in enumerate(FORWARD_SEQUENCE)
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def can_cancel(status: str) -> bool:
    return status in CANCELLABLE_STATES


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(
        from_status=order.status,
        to_status=target_status,
    ):
        raise InvalidOrderTransitionError(
            f"Order {order.order_id} cannot transition from "
            f"'{order.status}' to '{target_status}'",
            field="status",
            entity_id=order.order_id,
        )
