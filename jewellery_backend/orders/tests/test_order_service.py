# orders/tests/test_order_service.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from cart.services.cart_service import add_item, cart_lines, get_or_create_cart
from catalog.models import Product
from core.exceptions import ValidationError
from loyalty.models import LedgerEntry
from loyalty.services import ledger
from orders.models import Order, TrackingEvent
from orders.services.order_lifecycle import InvalidOrderTransitionError
from orders.services.order_service import (
    add_tracking_event,
    cancel_order,
    create_order,
    format_order_id,
    update_order_status,
)
from referrals.models import Referral
from referrals.services.referral_service import apply_referral_code, get_or_create_referral_code
from vouchers.models import Voucher, VoucherClaim
from vouchers.services.voucher_evaluator import seed_default_vouchers

User = get_user_model()

ADDRESS = {"line1": "12 Zaveri Bazaar", "city": "Mumbai", "pincode": "400002"}


# --------------------------------------------------
# Helpers
# --------------------------------------------------

def make_product(**overrides) -> Product:
    fields = {
        "sku": "RING-001",
        "name": "Gold Ring",
        "price": Decimal("10000.00"),
        "making_charges_percent": Decimal("10"),
        "material": Product.MATERIAL_GOLD,
        "stock": 5,
    }
    fields.update(overrides)
    return Product.objects.create(**fields)


class CreateOrderTests(TestCase):
    """
    GUARANTEES:
    - order totals come from catalog prices, making charges, tax and discounts
    - voucher use, points debit, stock decrement and cart clear happen with the order
    - any failure leaves stock, points and voucher usage untouched
    - order ids are YYYYMMDD + a 4-digit daily sequence
    """

    def setUp(self):
        self.account = User.objects.create_user(email="meera@example.com", password="pass", first_name="Meera")
        self.product = make_product()
        seed_default_vouchers()
        ledger.credit(account=self.account, points=1000, source=LedgerEntry.SOURCE_WELCOME_BONUS)

    def test_create_from_cart_with_voucher_and_points(self):
        add_item(user=self.account, product_id=self.product.pk, quantity=1)

        order = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            voucher_code="flat500",
            loyalty_points=300,
        )

        # 10000 + 1000 making = 11000; tax 1980; free shipping; -500 voucher; -300 points
        self.assertEqual(order.subtotal, Decimal("10000.00"))
        self.assertEqual(order.making_charges, Decimal("1000.00"))
        self.assertEqual(order.tax_amount, Decimal("1980.00"))
        self.assertEqual(order.shipping_fee, Decimal("0.00"))
        self.assertEqual(order.voucher_discount, Decimal("500.00"))
        self.assertEqual(order.loyalty_discount, Decimal("300.00"))
        self.assertEqual(order.total_amount, Decimal("12180.00"))
        self.assertEqual(order.amount_to_pay, Decimal("12180.00"))
        self.assertEqual(order.voucher_code, "FLAT500")

        item = order.items.get()
        self.assertEqual(item.line_total, Decimal("11000.00"))

        self.product.refresh_from_db()
        self.account.refresh_from_db()
        self.assertEqual(self.product.stock, 4)
        self.assertEqual(self.account.loyalty_points, 700)
        self.assertEqual(Voucher.objects.get(code="FLAT500").used_count, 1)
        self.assertTrue(VoucherClaim.objects.filter(order_ref=order.order_id).exists())
        self.assertEqual(cart_lines(get_or_create_cart(self.account)), [])

    def test_explicit_items_use_catalog_prices(self):
        order = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            items=[{"product_id": self.product.pk, "quantity": 2}],
        )
        self.assertEqual(order.subtotal, Decimal("20000.00"))
        self.assertEqual(order.items.get().quantity, 2)

    def test_insufficient_stock_changes_nothing(self):
        with self.assertRaises(ValidationError):
            create_order(
                account=self.account,
                shipping_address=ADDRESS,
                items=[{"product_id": self.product.pk, "quantity": 6}],
                loyalty_points=300,
            )

        self.product.refresh_from_db()
        self.account.refresh_from_db()
        self.assertEqual(self.product.stock, 5)
        self.assertEqual(self.account.loyalty_points, 1000)
        self.assertFalse(Order.objects.exists())

    def test_bad_partial_amount_rolls_back_voucher(self):
        add_item(user=self.account, product_id=self.product.pk, quantity=1)

        with self.assertRaises(ValidationError):
            create_order(
                account=self.account,
                shipping_address=ADDRESS,
                payment_type=Order.TYPE_PARTIAL,
                partial_amount=Decimal("1"),
                voucher_code="FLAT500",
            )

        self.assertEqual(Voucher.objects.get(code="FLAT500").used_count, 0)
        self.assertEqual(len(cart_lines(get_or_create_cart(self.account))), 1)

    def test_empty_cart_rejected(self):
        with self.assertRaisesMessage(ValidationError, "No items to create order"):
            create_order(account=self.account, shipping_address=ADDRESS)

    def test_missing_address_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(account=self.account, shipping_address={}, items=[{"product_id": self.product.pk}])

    def test_order_ids_follow_daily_sequence(self):
        first = create_order(account=self.account, shipping_address=ADDRESS, items=[{"product_id": self.product.pk}])
        second = create_order(account=self.account, shipping_address=ADDRESS, items=[{"product_id": self.product.pk}])

        day = timezone.localdate().strftime("%Y%m%d")
        self.assertEqual(first.order_id, format_order_id(day, 1))
        self.assertEqual(second.order_id, format_order_id(day, 2))
        self.assertEqual(len(first.order_id), 12)

    def test_sequence_skips_ids_already_taken(self):
        day = timezone.localdate().strftime("%Y%m%d")
        Order.objects.create(order_id=format_order_id(day, 1), user=self.account, total_amount=Decimal("1"))

        order = create_order(account=self.account, shipping_address=ADDRESS, items=[{"product_id": self.product.pk}])
        self.assertEqual(order.order_id, format_order_id(day, 2))

    def test_partial_order_tracks_remaining(self):
        order = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            items=[{"product_id": self.product.pk}],
            payment_type=Order.TYPE_PARTIAL,
            partial_amount=Decimal("5000"),
        )
        self.assertEqual(order.amount_to_pay, Decimal("5000.00"))
        self.assertEqual(order.remaining_amount, order.total_amount)
        self.assertEqual(order.amount_paid, Decimal("0.00"))


class CancelAndStatusTests(TestCase):
    """
    GUARANTEES:
    - cancelling restocks items and refunds redeemed points
    - shipped / delivered orders cannot be cancelled
    - delivery settles the payment and rewards the referrer once
    - a settled EMI order reports nothing outstanding
    """

    def setUp(self):
        self.referrer = User.objects.create_user(email="ravi@example.com", password="pass", first_name="Ravi")
        self.account = User.objects.create_user(email="kavya@example.com", password="pass", first_name="Kavya")
        apply_referral_code(account=self.account, code=get_or_create_referral_code(self.referrer))
        self.account.refresh_from_db()

        self.product = make_product(price=Decimal("1000.00"), making_charges_percent=Decimal("0"))
        ledger.credit(account=self.account, points=500, source=LedgerEntry.SOURCE_WELCOME_BONUS)

        self.order = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            items=[{"product_id": self.product.pk, "quantity": 2}],
            loyalty_points=200,
        )

    def test_cancel_restocks_and_refunds(self):
        cancel_order(order=self.order, account=self.account, reason="changed mind")

        self.order.refresh_from_db()
        self.product.refresh_from_db()
        self.account.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)
        self.assertEqual(self.product.stock, 5)
        self.assertEqual(self.account.loyalty_points, 500)
        self.assertTrue(
            LedgerEntry.objects.filter(
                account=self.account,
                source=LedgerEntry.SOURCE_REFUND,
                reference_id=self.order.order_id,
            ).exists()
        )

    def test_cancel_twice_rejected(self):
        cancel_order(order=self.order, account=self.account)
        with self.assertRaisesMessage(InvalidOrderTransitionError, "Order already cancelled"):
            cancel_order(order=self.order, account=self.account)

    def test_shipped_order_cannot_be_cancelled(self):
        update_order_status(order=self.order, status=Order.STATUS_SHIPPED, carrier="BlueDart", tracking_number="BD1")

        with self.assertRaisesMessage(InvalidOrderTransitionError, "cannot be cancelled at this stage"):
            cancel_order(order=self.order, account=self.account)

        self.assertEqual(TrackingEvent.objects.filter(order=self.order).count(), 1)

    def test_delivered_settles_payment_and_rewards_referrer(self):
        update_order_status(order=self.order, status=Order.STATUS_DELIVERED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_state, Order.PAYMENT_COMPLETED)
        self.assertEqual(self.order.payment_status, Order.PAID)
        self.assertEqual(self.order.amount_paid, self.order.total_amount)

        referral = Referral.objects.get(referee=self.account)
        self.assertEqual(referral.status, Referral.STATUS_REWARDED)
        self.assertEqual(referral.purchase_id, self.order.order_id)

    def test_delivered_emi_order_owes_nothing(self):
        order = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            items=[{"product_id": self.product.pk, "quantity": 1}],
            payment_type=Order.TYPE_EMI,
            emi_plan_id="adhoc_12",
        )
        self.assertGreater(order.emi_outstanding, 0)

        update_order_status(order=order, status=Order.STATUS_SHIPPED, carrier="BlueDart", tracking_number="BD2")
        update_order_status(order=order, status=Order.STATUS_DELIVERED)

        order.refresh_from_db()
        self.assertEqual(order.payment_state, Order.PAYMENT_COMPLETED)
        self.assertEqual(order.emi_installments_paid, 12)
        self.assertEqual(order.emi_outstanding, Decimal("0.00"))

        snapshot = order.payment_snapshot()
        self.assertEqual(snapshot["status"], Order.PAYMENT_COMPLETED)
        self.assertEqual(snapshot["emi_plan"]["outstanding"], "0.00")

    def test_backwards_status_rejected(self):
        update_order_status(order=self.order, status=Order.STATUS_DELIVERED)
        with self.assertRaises(InvalidOrderTransitionError):
            update_order_status(order=self.order, status=Order.STATUS_PENDING)

    def test_tracking_event_on_terminal_order(self):
        update_order_status(order=self.order, status=Order.STATUS_DELIVERED)
        event = add_tracking_event(order=self.order, note="Signed by customer")
        self.assertEqual(event.status, Order.STATUS_DELIVERED)


class OrderApiTests(TestCase):
    """
    GUARANTEES:
    - customers only see their own orders
    - staff can advance status; customers cannot
    - the EMI quote answers 400 for amounts that are not finite numbers
    """

    def setUp(self):
        self.client = APIClient()
        self.account = User.objects.create_user(email="nisha@example.com", password="pass")
        self.other = User.objects.create_user(email="other@example.com", password="pass")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.product = make_product()

    def test_create_and_fetch(self):
        self.client.force_authenticate(self.account)
        res = self.client.post(
            reverse("orders:list-create"),
            {"items": [{"product_id": str(self.product.pk), "quantity": 1}], "shipping_address": ADDRESS},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["payment"]["type"], "full")

        detail = self.client.get(reverse("orders:detail", kwargs={"pk": res.data["id"]}))
        self.assertEqual(detail.status_code, 200)

        self.client.force_authenticate(self.other)
        hidden = self.client.get(reverse("orders:detail", kwargs={"pk": res.data["id"]}))
        self.assertEqual(hidden.status_code, 404)

    def test_status_update_requires_staff(self):
        order = create_order(account=self.account, shipping_address=ADDRESS, items=[{"product_id": self.product.pk}])
        url = reverse("orders:status", kwargs={"pk": order.pk})

        self.client.force_authenticate(self.account)
        self.assertEqual(self.client.post(url, {"status": "processing"}, format="json").status_code, 403)

        self.client.force_authenticate(self.staff)
        res = self.client.post(url, {"status": "processing"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "processing")

    def test_emi_quote(self):
        self.client.force_authenticate(self.account)
        res = self.client.get(reverse("orders:emi-quote"), {"amount": "abc"})
        self.assertEqual(res.status_code, 400)

    def test_emi_quote_rejects_non_finite_amounts(self):
        self.client.force_authenticate(self.account)
        for raw in ("NaN", "Infinity", "sNaN"):
            with self.subTest(amount=raw):
                res = self.client.get(reverse("orders:emi-quote"), {"amount": raw})
                self.assertEqual(res.status_code, 400)
                self.assertEqual(res.data["field"], "amount")
