# referrals/tests/test_referrals.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.services.settings_store import set_setting
from loyalty.models import LedgerEntry
from referrals.models import Referral
from referrals.services.referral_service import (
    apply_referral_code,
    get_or_create_referral_code,
    referral_stats,
    settle_referral,
    validate_referral_code,
)

User = get_user_model()


class ReferralCodeTests(TestCase):
    """
    GUARANTEES:
    - codes are generated once and reused
    - applying a code links referee to referrer with a pending referral
    - self-referral, unknown codes, repeat application and late application are rejected
    """

    def setUp(self):
        self.referrer = User.objects.create_user(email="priya@example.com", password="pass", first_name="Priya")
        self.referee = User.objects.create_user(email="arjun@example.com", password="pass", first_name="Arjun")
        self.code = get_or_create_referral_code(self.referrer)

    def test_code_is_stable(self):
        self.assertTrue(self.code.startswith("PRI"))
        self.assertEqual(len(self.code), 8)
        self.assertEqual(get_or_create_referral_code(self.referrer), self.code)

    def test_apply_creates_pending_referral(self):
        referral = apply_referral_code(account=self.referee, code=self.code.lower())

        self.referee.refresh_from_db()
        self.assertEqual(self.referee.referred_by, self.referrer)
        self.assertEqual(self.referee.referred_by_code, self.code)
        self.assertEqual(referral.status, Referral.STATUS_PENDING)

    def test_apply_twice_conflicts(self):
        apply_referral_code(account=self.referee, code=self.code)
        with self.assertRaises(ConflictError):
            apply_referral_code(account=self.referee, code=self.code)

    def test_unknown_code(self):
        with self.assertRaises(NotFoundError):
            apply_referral_code(account=self.referee, code="NOPE0000")

    def test_self_referral(self):
        with self.assertRaises(ValidationError):
            apply_referral_code(account=self.referrer, code=self.code)

    def test_outside_validity_window(self):
        late = timezone.now() + timedelta(days=31)
        with self.assertRaises(ValidationError):
            apply_referral_code(account=self.referee, code=self.code, now=late)

    def test_validate_returns_first_name_only(self):
        self.referrer.last_name = "Sharma"
        self.referrer.save()

        self.assertEqual(validate_referral_code(self.code), {"valid": True, "referrer_name": "Priya"})
        self.assertFalse(validate_referral_code("XXXX")["valid"])


class ReferralSettlementTests(TestCase):
    """
    GUARANTEES:
    - the referrer is credited round(amount * percent / 100) points once
    - settling twice for the same referee yields one rewarded referral
    - the store refuses a second rewarded referral for a referee
    """

    def setUp(self):
        self.referrer = User.objects.create_user(email="dev@example.com", password="pass", first_name="Dev")
        self.referee = User.objects.create_user(email="isha@example.com", password="pass", first_name="Isha")
        code = get_or_create_referral_code(self.referrer)
        apply_referral_code(account=self.referee, code=code)
        self.referee.refresh_from_db()

    def test_settlement_credits_referrer(self):
        referral = settle_referral(
            account=self.referee,
            purchase_amount=Decimal("1000.00"),
            purchase_type=Referral.PURCHASE_ORDER,
            purchase_id="202601150001",
        )

        self.assertEqual(referral.status, Referral.STATUS_REWARDED)
        self.assertEqual(referral.reward_amount, 500)
        self.assertIsNotNone(referral.ledger_entry)
        self.assertEqual(referral.ledger_entry.source, LedgerEntry.SOURCE_REFERRAL_REWARD)

        self.referrer.refresh_from_db()
        self.assertEqual(self.referrer.loyalty_points, 500)

    def test_reward_percent_is_configurable(self):
        set_setting("referral_reward_percent", 10)
        referral = settle_referral(
            account=self.referee,
            purchase_amount=Decimal("1234.00"),
            purchase_type=Referral.PURCHASE_ORDER,
            purchase_id="X",
        )
        self.assertEqual(referral.reward_amount, 123)

    def test_double_settlement_rewards_once(self):
        first = settle_referral(
            account=self.referee,
            purchase_amount=Decimal("1000.00"),
            purchase_type=Referral.PURCHASE_ORDER,
            purchase_id="A",
        )
        second = settle_referral(
            account=self.referee,
            purchase_amount=Decimal("1000.00"),
            purchase_type=Referral.PURCHASE_ORDER,
            purchase_id="A",
        )

        self.assertIsNotNone(first)
        self.assertIsNone(second)
        self.assertEqual(
            Referral.objects.filter(referee=self.referee, status=Referral.STATUS_REWARDED).count(), 1
        )
        self.referrer.refresh_from_db()
        self.assertEqual(self.referrer.loyalty_points, 500)

    def test_unreferred_account_is_noop(self):
        loner = User.objects.create_user(email="solo@example.com", password="pass")
        self.assertIsNone(
            settle_referral(
                account=loner,
                purchase_amount=Decimal("1000"),
                purchase_type=Referral.PURCHASE_ORDER,
                purchase_id="B",
            )
        )

    def test_store_rejects_second_rewarded_referral(self):
        settle_referral(
            account=self.referee,
            purchase_amount=Decimal("100"),
            purchase_type=Referral.PURCHASE_ORDER,
            purchase_id="C",
        )
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Referral.objects.create(
                    referrer=self.referrer,
                    referee=self.referee,
                    code="DUP",
                    status=Referral.STATUS_REWARDED,
                )

    def test_stats(self):
        settle_referral(
            account=self.referee,
            purchase_amount=Decimal("200"),
            purchase_type=Referral.PURCHASE_PACKAGE,
            purchase_id="P1",
        )
        stats = referral_stats(self.referrer)
        self.assertEqual(stats["total_referrals"], 1)
        self.assertEqual(stats["successful_referrals"], 1)
        self.assertEqual(stats["pending_referrals"], 0)
        self.assertEqual(stats["total_earned"], 100)


class ReferralApiTests(TestCase):
    """
    GUARANTEES:
    - registration with a referral code links the new account
    - validate/ is public
    """

    def setUp(self):
        self.client = APIClient()
        self.referrer = User.objects.create_user(email="lata@example.com", password="pass", first_name="Lata")
        self.code = get_or_create_referral_code(self.referrer)

    def test_register_with_referral_code(self):
        res = self.client.post(
            reverse("users:register"),
            {
                "email": "new@example.com",
                "password": "Str0ng-Passw0rd!",
                "first_name": "Neel",
                "referral_code": self.code,
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201)

        new_user = User.objects.get(email="new@example.com")
        self.assertEqual(new_user.referred_by, self.referrer)
        self.assertTrue(new_user.referral_code)

    def test_validate_is_public(self):
        res = self.client.get(reverse("referrals:validate", kwargs={"code": self.code}))
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["valid"])

    def test_stats_endpoint(self):
        self.client.force_authenticate(self.referrer)
        res = self.client.get(reverse("referrals:stats"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["referral_code"], self.code)
