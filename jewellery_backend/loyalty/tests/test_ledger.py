# loyalty/tests/test_ledger.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import TestCase

from core.exceptions import InsufficientBalanceError, ValidationError
from core.services.settings_store import set_setting
from loyalty.models import LedgerEntry
from loyalty.services import ledger
from loyalty.services.redemption import (
    balance_summary,
    calculate_usage,
    credit_cashback,
    redeem_for_order,
    refund_for_order,
)

User = get_user_model()


class LedgerPostingTests(TestCase):
    """
    GUARANTEES:
    - credit/debit move the cached balance and append one entry each
    - a debit above the balance is rejected and changes nothing
    - replaying entries always equals the cached balance
    - entries cannot be edited or deleted
    """

    def setUp(self):
        self.account = User.objects.create_user(email="asha@example.com", password="pass", first_name="Asha")
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")

    # --------------------------------------------------
    # Posting
    # --------------------------------------------------

    def test_credit_then_debit_updates_balance(self):
        ledger.credit(account=self.account, points=100, source=LedgerEntry.SOURCE_WELCOME_BONUS)
        entry = ledger.debit(account=self.account, points=30, source=LedgerEntry.SOURCE_ORDER_PAYMENT)

        self.account.refresh_from_db()
        self.assertEqual(self.account.loyalty_points, 70)
        self.assertEqual(entry.balance_after, 70)
        self.assertEqual(LedgerEntry.objects.filter(account=self.account).count(), 2)

    def test_debit_above_balance_is_rejected(self):
        ledger.credit(account=self.account, points=50, source=LedgerEntry.SOURCE_CASHBACK)

        with self.assertRaises(InsufficientBalanceError):
            ledger.debit(account=self.account, points=51, source=LedgerEntry.SOURCE_ORDER_PAYMENT)

        self.account.refresh_from_db()
        self.assertEqual(self.account.loyalty_points, 50)
        self.assertEqual(LedgerEntry.objects.filter(account=self.account).count(), 1)

    def test_non_positive_points_rejected(self):
        with self.assertRaises(ValidationError):
            ledger.credit(account=self.account, points=0, source=LedgerEntry.SOURCE_CASHBACK)
        with self.assertRaises(ValidationError):
            ledger.debit(account=self.account, points=-5, source=LedgerEntry.SOURCE_ORDER_PAYMENT)

    def test_replay_matches_cached_balance(self):
        ledger.credit(account=self.account, points=500, source=LedgerEntry.SOURCE_REFERRAL_REWARD)
        ledger.debit(account=self.account, points=120, source=LedgerEntry.SOURCE_ORDER_PAYMENT)
        ledger.credit(account=self.account, points=120, source=LedgerEntry.SOURCE_REFUND)
        ledger.debit(account=self.account, points=80, source=LedgerEntry.SOURCE_PACKAGE_PAYMENT)

        report = ledger.verify_balance(self.account)
        self.assertTrue(report["consistent"])
        self.assertEqual(report["cached_balance"], 420)
        self.assertEqual(report["replayed_balance"], 420)

    def test_entries_are_immutable(self):
        entry = ledger.credit(account=self.account, points=10, source=LedgerEntry.SOURCE_CASHBACK)

        entry.description = "edited"
        with self.assertRaises(DjangoValidationError):
            entry.save()
        with self.assertRaises(DjangoValidationError):
            entry.delete()

    # --------------------------------------------------
    # Admin
    # --------------------------------------------------

    def test_admin_adjustment_records_admin_reference(self):
        entry = ledger.adjust(
            account=self.account,
            points=25,
            direction=LedgerEntry.CREDIT,
            reason="Goodwill",
            admin=self.admin,
        )
        self.assertEqual(entry.source, LedgerEntry.SOURCE_ADMIN_ADJUSTMENT)
        self.assertEqual(entry.reference_type, LedgerEntry.REF_ADMIN)
        self.assertEqual(entry.created_by, self.admin)
        self.assertEqual(entry.description, "Goodwill")

    def test_adjust_rejects_unknown_direction(self):
        with self.assertRaises(ValidationError):
            ledger.adjust(account=self.account, points=5, direction="sideways", admin=self.admin)

    def test_ledger_stats(self):
        ledger.credit(account=self.account, points=300, source=LedgerEntry.SOURCE_CASHBACK)
        ledger.debit(account=self.account, points=100, source=LedgerEntry.SOURCE_ORDER_PAYMENT)

        stats = ledger.ledger_stats()
        self.assertEqual(stats["total_credited"], 300)
        self.assertEqual(stats["total_debited"], 100)
        self.assertEqual(stats["net_points"], 200)


class RedemptionRuleTests(TestCase):
    """
    GUARANTEES:
    - usable points are capped by the balance and by max_loyalty_usage_percent
    - the minimum redemption applies unless the full balance is redeemed
    - policy values are read at call time
    """

    def setUp(self):
        self.account = User.objects.create_user(email="ravi@example.com", password="pass")

    def test_usage_within_caps(self):
        quote = calculate_usage(available_points=500, order_total=Decimal("1000"), points_to_use=300)
        self.assertEqual(quote.max_usable_points, 500)
        self.assertEqual(quote.points_to_use, 300)
        self.assertEqual(quote.discount, Decimal("300.00"))
        self.assertEqual(quote.new_total, Decimal("700.00"))

    def test_usage_capped_by_order_percent(self):
        quote = calculate_usage(available_points=2000, order_total=Decimal("1000"), points_to_use=2000)
        self.assertEqual(quote.max_usable_points, 500)
        self.assertEqual(quote.points_to_use, 500)

    def test_below_minimum_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            calculate_usage(available_points=500, order_total=Decimal("1000"), points_to_use=50)
        self.assertIn("Minimum 100 points", ctx.exception.message)

    def test_full_balance_below_minimum_is_allowed(self):
        quote = calculate_usage(available_points=40, order_total=Decimal("1000"), points_to_use=40)
        self.assertEqual(quote.points_to_use, 40)
        self.assertEqual(quote.discount, Decimal("40.00"))

    def test_zero_total_rejected(self):
        with self.assertRaises(ValidationError):
            calculate_usage(available_points=100, order_total=Decimal("0"), points_to_use=0)

    def test_setting_change_applies_immediately(self):
        set_setting("max_loyalty_usage_percent", 10)
        quote = calculate_usage(available_points=2000, order_total=Decimal("1000"), points_to_use=0)
        self.assertEqual(quote.max_usable_points, 100)

    def test_balance_summary(self):
        ledger.credit(account=self.account, points=150, source=LedgerEntry.SOURCE_WELCOME_BONUS)
        self.account.refresh_from_db()

        summary = balance_summary(self.account)
        self.assertEqual(summary["points"], 150)
        self.assertEqual(summary["value_in_rupees"], "150.00")
        self.assertTrue(summary["can_redeem"])

    def test_redeem_and_refund_round_trip(self):
        ledger.credit(account=self.account, points=200, source=LedgerEntry.SOURCE_WELCOME_BONUS)

        redeem_for_order(account=self.account, points=150, order_ref="202601010001")
        refund_for_order(account=self.account, points=150, order_ref="202601010001")

        self.account.refresh_from_db()
        self.assertEqual(self.account.loyalty_points, 200)
        sources = list(
            LedgerEntry.objects.filter(reference_id="202601010001").values_list("source", flat=True)
        )
        self.assertEqual(sources, [LedgerEntry.SOURCE_ORDER_PAYMENT, LedgerEntry.SOURCE_REFUND])

    def test_cashback_disabled_by_default(self):
        self.assertIsNone(credit_cashback(account=self.account, order_total=Decimal("5000"), order_ref="X1"))

    def test_cashback_credited_once_per_order(self):
        set_setting("loyalty_cashback_percent", 2)

        first = credit_cashback(account=self.account, order_total=Decimal("5000"), order_ref="X1")
        second = credit_cashback(account=self.account, order_total=Decimal("5000"), order_ref="X1")

        self.assertEqual(first.points, 100)
        self.assertIsNone(second)
