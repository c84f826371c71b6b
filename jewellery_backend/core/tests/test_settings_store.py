# core/tests/test_settings_store.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.models import AppSetting
from core.services.settings_store import (
    DEFAULT_SETTINGS,
    get_bool_setting,
    get_decimal_setting,
    get_int_setting,
    get_setting,
    seed_default_settings,
    set_setting,
)

User = get_user_model()


class SettingsStoreTests(TestCase):
    """
    GUARANTEES:
    - stored rows win over caller defaults, which win over built-in defaults
    - writes are visible on the next read
    - seeding is idempotent and never overwrites admin values
    """

    def test_builtin_default(self):
        self.assertEqual(get_setting("referral_reward_percent"), 50)
        self.assertIsNone(get_setting("no_such_key"))

    def test_caller_default_and_stored_value(self):
        self.assertEqual(get_setting("no_such_key", "x"), "x")

        set_setting("max_loyalty_usage_percent", 30)
        self.assertEqual(get_int_setting("max_loyalty_usage_percent"), 30)
        self.assertEqual(AppSetting.objects.get(key="max_loyalty_usage_percent").category, "loyalty")

    def test_typed_reads(self):
        self.assertEqual(get_decimal_setting("cgst_rate"), Decimal("1.5"))
        set_setting("delivery_settles_payment", "false")
        self.assertFalse(get_bool_setting("delivery_settles_payment"))

    def test_non_numeric_falls_back_to_default(self):
        set_setting("checkout_tax_percent", "eighteen")
        self.assertEqual(get_decimal_setting("checkout_tax_percent"), Decimal("18"))

    def test_seed_is_idempotent(self):
        set_setting("referral_reward_percent", 10)

        created = seed_default_settings()
        self.assertEqual(created, len(DEFAULT_SETTINGS) - 1)
        self.assertEqual(seed_default_settings(), 0)
        self.assertEqual(get_setting("referral_reward_percent"), 10)


class SettingsApiTests(TestCase):
    """
    GUARANTEES:
    - only admins read and write settings
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="root@example.com", password="pass", role="admin")
        self.customer = User.objects.create_user(email="c@example.com", password="pass")

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get(reverse("core:settings")).status_code, 403)

    def test_admin_bulk_update(self):
        self.client.force_authenticate(self.admin)
        res = self.client.put(
            reverse("core:settings"),
            {"settings": [{"key": "referral_reward_percent", "value": 25}]},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["referral_reward_percent"], 25)

        res = self.client.get(reverse("core:setting-detail", kwargs={"key": "referral_reward_percent"}))
        self.assertEqual(res.data["value"], 25)

    def test_unknown_setting_404(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("core:setting-detail", kwargs={"key": "nope"}))
        self.assertEqual(res.status_code, 404)
