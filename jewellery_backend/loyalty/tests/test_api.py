# loyalty/tests/test_api.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from loyalty.models import LedgerEntry
from loyalty.services import ledger

User = get_user_model()


class LoyaltyApiTests(TestCase):
    """
    GUARANTEES:
    - customers see only their own ledger
    - transactions are filterable by direction
    - only admins can adjust balances
    """

    def setUp(self):
        self.client = APIClient()
        self.customer = User.objects.create_user(email="meera@example.com", password="pass")
        self.other = User.objects.create_user(email="other@example.com", password="pass")
        self.admin = User.objects.create_user(email="boss@example.com", password="pass", role="admin")

        ledger.credit(account=self.customer, points=300, source=LedgerEntry.SOURCE_WELCOME_BONUS)
        ledger.debit(account=self.customer, points=100, source=LedgerEntry.SOURCE_ORDER_PAYMENT)
        ledger.credit(account=self.other, points=999, source=LedgerEntry.SOURCE_WELCOME_BONUS)

    def test_balance(self):
        self.client.force_authenticate(self.customer)
        res = self.client.get(reverse("loyalty:balance"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["points"], 200)

    def test_calculate_below_minimum_returns_400(self):
        self.client.force_authenticate(self.customer)
        res = self.client.post(
            reverse("loyalty:calculate"),
            {"order_total": "1000.00", "points_to_use": 50},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("Minimum", res.data["detail"])

    def test_transactions_scoped_and_filtered(self):
        self.client.force_authenticate(self.customer)

        res = self.client.get(reverse("loyalty:transactions"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 2)

        res = self.client.get(reverse("loyalty:transactions"), {"direction": "debit"})
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["points"], 100)

    def test_adjust_requires_admin(self):
        self.client.force_authenticate(self.customer)
        payload = {"user_id": str(self.customer.id), "points": 10, "direction": "credit"}
        res = self.client.post(reverse("loyalty:adjust"), payload, format="json")
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.admin)
        res = self.client.post(reverse("loyalty:adjust"), payload, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["new_balance"], 210)

    def test_admin_debit_above_balance_returns_400(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("loyalty:adjust"),
            {"user_id": str(self.customer.id), "points": 5000, "direction": "debit"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_admin_transactions_include_stats(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("loyalty:admin-transactions"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["stats"]["total_credited"], 1299)
        self.assertEqual(res.data["stats"]["total_debited"], 100)
