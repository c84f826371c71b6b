# orders/tests/test_payment_resolver.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from core.exceptions import ConflictError, NotFoundError, ValidationError
from orders.models import InstallmentPlan, Order
from orders.services.payment_resolver import (
    apply_payment,
    emi_figures,
    quote_installments,
    resolve_payment,
    seed_installment_plans,
)
from users.services.payment_settings import PaymentSettings


class EmiFigureTests(TestCase):
    """
    GUARANTEES:
    - payable = principal * (1 + rate/100), installment = payable / months
    - rounding happens once, on the final figures
    """

    def test_twelve_months_at_fifteen_percent(self):
        payable, installment = emi_figures(Decimal("10000"), Decimal("15"), 12)
        self.assertEqual(payable, Decimal("11500.00"))
        self.assertEqual(installment, Decimal("958.33"))

    def test_zero_months_is_rejected(self):
        with self.assertRaises(ValidationError):
            emi_figures(Decimal("10000"), Decimal("15"), 0)


class ResolvePaymentTests(TestCase):
    """
    GUARANTEES:
    - full asks for the whole total
    - partial must sit inside the customer's percent band
    - partial starts with remaining == total and nothing paid
    - emi resolves stored plans (range-checked) and ad-hoc plan ids
    """

    def test_full(self):
        terms = resolve_payment(total=Decimal("2500.00"))
        self.assertEqual(terms.amount_to_pay, Decimal("2500.00"))
        self.assertIsNone(terms.remaining_amount)

    def test_partial_inside_band(self):
        terms = resolve_payment(
            total=Decimal("10000"),
            payment_type=Order.TYPE_PARTIAL,
            partial_amount=Decimal("3000"),
        )
        self.assertEqual(terms.amount_to_pay, Decimal("3000.00"))
        self.assertEqual(terms.remaining_amount, Decimal("10000.00"))
        self.assertEqual(terms.amount_paid, Decimal("0.00"))

    def test_partial_below_band(self):
        with self.assertRaisesMessage(ValidationError, "at least 10% of total amount"):
            resolve_payment(total=Decimal("10000"), payment_type=Order.TYPE_PARTIAL, partial_amount=Decimal("999"))

    def test_partial_above_band(self):
        with self.assertRaisesMessage(ValidationError, "cannot exceed 90% of total amount"):
            resolve_payment(total=Decimal("10000"), payment_type=Order.TYPE_PARTIAL, partial_amount=Decimal("9001"))

    def test_partial_band_boundaries_are_inclusive(self):
        low = resolve_payment(total=Decimal("10000"), payment_type=Order.TYPE_PARTIAL, partial_amount=Decimal("1000"))
        high = resolve_payment(total=Decimal("10000"), payment_type=Order.TYPE_PARTIAL, partial_amount=Decimal("9000"))
        self.assertEqual(low.partial_amount, Decimal("1000.00"))
        self.assertEqual(high.partial_amount, Decimal("9000.00"))

    def test_partial_band_follows_customer_settings(self):
        settings = PaymentSettings(min_partial_payment_percent=Decimal("25"), max_partial_payment_percent=Decimal("50"))
        with self.assertRaises(ValidationError):
            resolve_payment(
                total=Decimal("1000"),
                payment_type=Order.TYPE_PARTIAL,
                partial_amount=Decimal("200"),
                payment_settings=settings,
            )

    def test_emi_with_stored_plan(self):
        plan = InstallmentPlan.objects.create(months=12, interest_rate_percent=Decimal("15"))
        terms = resolve_payment(total=Decimal("10000"), payment_type=Order.TYPE_EMI, emi_plan_id=str(plan.pk))

        self.assertEqual(terms.emi.total_amount, Decimal("11500.00"))
        self.assertEqual(terms.emi.monthly_installment, Decimal("958.33"))
        self.assertEqual(terms.amount_to_pay, Decimal("958.33"))
        self.assertEqual(terms.emi.plan, plan)

    def test_emi_amount_outside_plan_range(self):
        plan = InstallmentPlan.objects.create(months=6, interest_rate_percent=Decimal("13"))
        with self.assertRaisesMessage(ValidationError, "EMI not available for this amount"):
            resolve_payment(total=Decimal("500"), payment_type=Order.TYPE_EMI, emi_plan_id=str(plan.pk))

    def test_emi_adhoc_plan(self):
        terms = resolve_payment(total=Decimal("6000"), payment_type=Order.TYPE_EMI, emi_plan_id="dummy_6")
        self.assertEqual(terms.emi.months, 6)
        self.assertEqual(terms.emi.interest_rate, Decimal("13"))
        self.assertEqual(terms.emi.plan_ref, "adhoc_6")
        self.assertEqual(terms.emi.total_amount, Decimal("6780.00"))
        self.assertEqual(terms.emi.monthly_installment, Decimal("1130.00"))

    def test_emi_requires_plan(self):
        with self.assertRaisesMessage(ValidationError, "EMI plan is required"):
            resolve_payment(total=Decimal("6000"), payment_type=Order.TYPE_EMI)

    def test_emi_unknown_plan(self):
        with self.assertRaises(NotFoundError):
            resolve_payment(
                total=Decimal("6000"),
                payment_type=Order.TYPE_EMI,
                emi_plan_id="2b1f2c56-7a2d-4d55-9f1e-000000000000",
            )

    def test_unknown_payment_type(self):
        with self.assertRaises(ValidationError):
            resolve_payment(total=Decimal("100"), payment_type="barter")


class InstallmentQuoteTests(TestCase):
    def test_quotes_only_covering_plans(self):
        seed_installment_plans()
        InstallmentPlan.objects.create(months=36, interest_rate_percent=Decimal("20"), min_amount=Decimal("50000"))

        quotes = quote_installments("10000")

        self.assertEqual([q["months"] for q in quotes], [3, 6, 9, 12, 15, 18, 24])
        twelve = next(q for q in quotes if q["months"] == 12)
        self.assertEqual(twelve["monthly_installment"], "958.33")

    def test_seed_is_idempotent(self):
        self.assertEqual(seed_installment_plans(), 7)
        self.assertEqual(seed_installment_plans(), 0)

    def test_small_amount_rejected(self):
        with self.assertRaises(ValidationError):
            quote_installments("999")


class ApplyPaymentTests(TestCase):
    """
    GUARANTEES:
    - partial payments keep amount_paid + remaining_amount == total
    - the payment completes when the outstanding amount reaches zero
    - EMI completes after the last installment
    """

    def _order(self, **overrides):
        fields = {
            "total_amount": Decimal("10000.00"),
            "payment_type": Order.TYPE_PARTIAL,
            "amount_to_pay": Decimal("3000.00"),
            "partial_amount": Decimal("3000.00"),
            "remaining_amount": Decimal("10000.00"),
        }
        fields.update(overrides)
        return Order(**fields)

    def test_partial_payments_hold_invariant(self):
        order = self._order()

        apply_payment(order, Decimal("3000"))
        self.assertEqual(order.amount_paid + order.remaining_amount, order.total_amount)
        self.assertEqual(order.remaining_amount, Decimal("7000.00"))
        self.assertEqual(order.payment_state, Order.PAYMENT_PENDING)

        apply_payment(order, Decimal("7000"))
        self.assertEqual(order.remaining_amount, Decimal("0.00"))
        self.assertEqual(order.payment_state, Order.PAYMENT_COMPLETED)
        self.assertEqual(order.payment_status, Order.PAID)

    def test_confirmed_partial_leaves_total_minus_partial(self):
        terms = resolve_payment(total=Decimal("10000"), payment_type=Order.TYPE_PARTIAL, partial_amount=Decimal("2500"))
        order = Order(total_amount=Decimal("10000.00"), **terms.as_order_fields())
        self.assertEqual(order.amount_paid + order.remaining_amount, order.total_amount)

        apply_payment(order, terms.amount_to_pay)

        self.assertEqual(order.amount_paid, Decimal("2500.00"))
        self.assertEqual(order.remaining_amount, Decimal("7500.00"))
        self.assertEqual(order.amount_to_pay, Decimal("7500.00"))

    def test_completed_payment_rejects_more(self):
        order = self._order(payment_type=Order.TYPE_FULL, remaining_amount=None, amount_to_pay=Decimal("10000"))
        apply_payment(order, Decimal("10000"))
        with self.assertRaises(ConflictError):
            apply_payment(order, Decimal("1"))

    def test_emi_completes_after_last_installment(self):
        order = self._order(
            payment_type=Order.TYPE_EMI,
            remaining_amount=None,
            partial_amount=None,
            emi_months=2,
            emi_monthly_installment=Decimal("5100.00"),
            emi_total_amount=Decimal("10200.00"),
            amount_to_pay=Decimal("5100.00"),
        )

        apply_payment(order, Decimal("5100"))
        self.assertEqual(order.emi_installments_paid, 1)
        self.assertEqual(order.emi_outstanding, Decimal("5100.00"))
        self.assertEqual(order.payment_state, Order.PAYMENT_PENDING)

        apply_payment(order, Decimal("5100"))
        self.assertEqual(order.payment_state, Order.PAYMENT_COMPLETED)
        self.assertEqual(order.amount_to_pay, Decimal("0.00"))
