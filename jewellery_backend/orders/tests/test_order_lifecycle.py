# orders/tests/test_order_lifecycle.py

from django.test import SimpleTestCase

from orders.models import Order
from orders.services.order_lifecycle import (
    InvalidOrderTransitionError,
    can_cancel,
    can_transition,
    validate_transition,
)


class OrderLifecycleTests(SimpleTestCase):
    """
    GUARANTEES:
    - status only moves forward; skipping ahead is allowed
    - cancellation only from pending / processing
    - delivered and cancelled are terminal
    """

    def test_forward_chain(self):
        chain = [Order.STATUS_PENDING, Order.STATUS_PROCESSING, Order.STATUS_SHIPPED, Order.STATUS_DELIVERED]
        for current, nxt in zip(chain, chain[1:]):
            self.assertTrue(can_transition(from_status=current, to_status=nxt))

    def test_forward_skip(self):
        self.assertTrue(can_transition(from_status=Order.STATUS_PENDING, to_status=Order.STATUS_SHIPPED))

    def test_backwards_rejected(self):
        self.assertFalse(can_transition(from_status=Order.STATUS_SHIPPED, to_status=Order.STATUS_PROCESSING))
        self.assertFalse(can_transition(from_status=Order.STATUS_DELIVERED, to_status=Order.STATUS_PENDING))

    def test_cancel_window(self):
        self.assertTrue(can_cancel(Order.STATUS_PENDING))
        self.assertTrue(can_cancel(Order.STATUS_PROCESSING))
        self.assertFalse(can_cancel(Order.STATUS_SHIPPED))
        self.assertFalse(can_transition(from_status=Order.STATUS_SHIPPED, to_status=Order.STATUS_CANCELLED))

    def test_terminal_states(self):
        for status in (Order.STATUS_DELIVERED, Order.STATUS_CANCELLED):
            for target in (Order.STATUS_PENDING, Order.STATUS_SHIPPED, Order.STATUS_CANCELLED):
                self.assertFalse(can_transition(from_status=status, to_status=target))

    def test_validate_transition_raises(self):
        order = Order(order_id="202601010001", status=Order.STATUS_DELIVERED)
        with self.assertRaises(InvalidOrderTransitionError):
            validate_transition(order=order, target_status=Order.STATUS_PENDING)
