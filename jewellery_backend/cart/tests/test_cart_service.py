# cart/tests/test_cart_service.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from cart.services.cart_service import (
    add_item,
    cart_goods_value,
    cart_lines,
    cart_summary,
    clear_cart,
    get_or_create_cart,
    remove_item,
    update_item,
)
from catalog.models import Product
from core.exceptions import NotFoundError, ValidationError

User = get_user_model()


class CartServiceTests(TestCase):
    """
    GUARANTEES:
    - same product + size merges quantities
    - stock bounds the merged quantity
    - items belong to one account
    - cart lines are priced at live catalog prices
    """

    def setUp(self):
        self.account = User.objects.create_user(email="anu@example.com", password="pass")
        self.product = Product.objects.create(
            sku="EAR-001",
            name="Gold Earrings",
            price=Decimal("2000.00"),
            making_charges_percent=Decimal("10"),
            stock=3,
        )

    def test_add_merges_same_size(self):
        add_item(user=self.account, product_id=self.product.pk, quantity=1, size="M")
        item = add_item(user=self.account, product_id=self.product.pk, quantity=1, size="M")
        add_item(user=self.account, product_id=self.product.pk, quantity=1, size="L")

        self.assertEqual(item.quantity, 2)
        self.assertEqual(get_or_create_cart(self.account).items.count(), 2)

    def test_stock_bounds_quantity(self):
        add_item(user=self.account, product_id=self.product.pk, quantity=2)
        with self.assertRaises(ValidationError):
            add_item(user=self.account, product_id=self.product.pk, quantity=2)

    def test_update_and_remove(self):
        item = add_item(user=self.account, product_id=self.product.pk, quantity=1)

        self.assertEqual(update_item(user=self.account, item_id=item.pk, quantity=3).quantity, 3)
        with self.assertRaises(ValidationError):
            update_item(user=self.account, item_id=item.pk, quantity=0)

        remove_item(user=self.account, item_id=item.pk)
        self.assertEqual(cart_lines(get_or_create_cart(self.account)), [])

    def test_foreign_item_not_found(self):
        item = add_item(user=self.account, product_id=self.product.pk, quantity=1)
        other = User.objects.create_user(email="other@example.com", password="pass")

        with self.assertRaises(NotFoundError):
            remove_item(user=other, item_id=item.pk)

    def test_goods_value_and_summary(self):
        add_item(user=self.account, product_id=self.product.pk, quantity=2)
        cart = get_or_create_cart(self.account)

        # 2 x (2000 + 200 making)
        self.assertEqual(cart_goods_value(cart), Decimal("4400.00"))

        summary = cart_summary(cart)
        self.assertEqual(summary["item_count"], 2)
        self.assertEqual(summary["taxable_amount"], "4400.00")
        self.assertEqual(summary["tax_amount"], "792.00")
        self.assertEqual(summary["total"], "5192.00")

    def test_live_prices_and_inactive_products(self):
        add_item(user=self.account, product_id=self.product.pk, quantity=1)
        self.product.price = Decimal("2500.00")
        self.product.save()

        cart = get_or_create_cart(self.account)
        self.assertEqual(cart_lines(cart)[0].unit_price, Decimal("2500.00"))

        self.product.is_active = False
        self.product.save()
        self.assertEqual(cart_lines(cart), [])

        clear_cart(cart)
        self.assertEqual(cart.items.count(), 0)


class CartApiTests(TestCase):
    """
    GUARANTEES:
    - authenticated customers add items and read a priced summary
    """

    def setUp(self):
        self.client = APIClient()
        self.account = User.objects.create_user(email="rahul@example.com", password="pass")
        self.product = Product.objects.create(sku="PEND-1", name="Pendant", price=Decimal("100.00"), stock=5)

    def test_requires_auth(self):
        self.assertEqual(self.client.get(reverse("cart:cart")).status_code, 401)

    def test_add_then_read(self):
        self.client.force_authenticate(self.account)
        res = self.client.post(
            reverse("cart:cart"),
            {"product_id": str(self.product.pk), "quantity": 2},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["item_count"], 2)
        self.assertEqual(res.data["subtotal"], "200.00")

        res = self.client.post(
            reverse("cart:cart"),
            {"product_id": str(self.product.pk), "quantity": 10},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
