# catalog/tests/test_pricing_engine.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from catalog.models import Category, Product
from catalog.services.making_charges import resolve_making_charge_percent
from catalog.services.pricing_engine import (
    PricingConfig,
    PricingLine,
    get_product,
    line_from_product,
    price_lines,
    validate_stock,
)
from core.exceptions import NotFoundError, ValidationError

CONFIG = PricingConfig(
    tax_percent=Decimal("18"),
    shipping_free_threshold=Decimal("50"),
    shipping_flat_fee=Decimal("5"),
)


class PriceLinesTests(SimpleTestCase):
    """
    GUARANTEES:
    - making charges round once per line (unit charge x quantity)
    - tax applies to goods + making; shipping is free above the threshold
    - discount applies last and never takes the total below zero
    """

    def test_breakdown(self):
        line = PricingLine(
            product_id="p1",
            name="Necklace",
            quantity=3,
            unit_price=Decimal("999.99"),
            making_charge=Decimal("99.999"),
        )
        breakdown = price_lines([line], CONFIG)

        self.assertEqual(breakdown.subtotal, Decimal("2999.97"))
        self.assertEqual(breakdown.making_charges, Decimal("300.00"))
        self.assertEqual(breakdown.taxable_amount, Decimal("3299.97"))
        self.assertEqual(breakdown.tax_amount, Decimal("593.99"))
        self.assertEqual(breakdown.shipping_fee, Decimal("0.00"))
        self.assertEqual(breakdown.total, Decimal("3893.96"))

    def test_shipping_below_threshold(self):
        line = PricingLine(product_id="p2", name="Stud", quantity=1, unit_price=Decimal("40"))
        breakdown = price_lines([line], CONFIG)

        self.assertEqual(breakdown.shipping_fee, Decimal("5.00"))
        self.assertEqual(breakdown.total, Decimal("52.20"))

    def test_discount_is_capped(self):
        line = PricingLine(product_id="p3", name="Ring", quantity=1, unit_price=Decimal("100"))
        breakdown = price_lines([line], CONFIG, discount=Decimal("5000"))

        self.assertEqual(breakdown.discount, Decimal("118.00"))
        self.assertEqual(breakdown.total, Decimal("0.00"))

    def test_rejects_bad_lines(self):
        with self.assertRaises(ValidationError):
            price_lines([], CONFIG)
        with self.assertRaises(ValidationError):
            price_lines([PricingLine(product_id="x", name="x", quantity=0, unit_price=Decimal("1"))], CONFIG)
        with self.assertRaises(ValidationError):
            price_lines(
                [PricingLine(product_id="x", name="x", quantity=1, unit_price=Decimal("1"))],
                CONFIG,
                discount=Decimal("-1"),
            )


class MakingChargeResolutionTests(TestCase):
    """
    GUARANTEES:
    - product override > category per-material (case-insensitive) > category default > zero
    - the product's making_charges snapshot follows the resolved percent
    - malformed per-material entries are skipped in favour of the category default
    """

    def setUp(self):
        self.category = Category.objects.create(
            name="Rings",
            making_charges_percent_default=Decimal("8"),
            making_charges_percent_by_material={"gold": 12},
        )

    def _product(self, sku, **fields):
        defaults = {"sku": sku, "name": sku, "price": Decimal("1000.00"), "stock": 3}
        defaults.update(fields)
        return Product.objects.create(**defaults)

    def test_resolution_order(self):
        override = self._product("A", category=self.category, material="Gold", making_charges_percent=Decimal("5"))
        by_material = self._product("B", category=self.category, material="Gold")
        by_default = self._product("C", category=self.category, material="Silver")
        bare = self._product("D")

        self.assertEqual(resolve_making_charge_percent(override), Decimal("5"))
        self.assertEqual(resolve_making_charge_percent(by_material), Decimal("12"))
        self.assertEqual(resolve_making_charge_percent(by_default), Decimal("8"))
        self.assertEqual(resolve_making_charge_percent(bare), Decimal("0"))

        self.assertEqual(by_material.making_charges, Decimal("120.00"))

    def test_invalid_material_entries_fall_back_to_default(self):
        messy = Category.objects.create(
            name="Necklaces",
            making_charges_percent_default=Decimal("8"),
            making_charges_percent_by_material={"Gold": "twelve", "Silver": "NaN", "Platinum": 150},
        )

        for material in ("Gold", "Silver", "Platinum"):
            with self.subTest(material=material):
                product = self._product(f"N-{material}", category=messy, material=material)
                self.assertEqual(resolve_making_charge_percent(product), Decimal("8"))
                self.assertEqual(product.making_charges, Decimal("80.00"))

    def test_category_clean_rejects_non_numeric_percent(self):
        for bad in ("twelve", "NaN", 150):
            with self.subTest(value=bad):
                category = Category(name=f"Bad {bad}", making_charges_percent_by_material={"Gold": bad})
                with self.assertRaises(DjangoValidationError):
                    category.clean()

    def test_line_from_product(self):
        product = self._product("E", category=self.category, material="Gold")
        line = line_from_product(product, 2, "12")

        self.assertEqual(line.unit_price, Decimal("1000.00"))
        self.assertEqual(line.making_charge, Decimal("120"))
        self.assertEqual(line.size, "12")

    def test_lookup_and_stock(self):
        product = self._product("F")
        self.assertEqual(get_product(product.pk), product)

        product.is_active = False
        product.save()
        with self.assertRaises(NotFoundError):
            get_product(product.pk)

        other = self._product("G", stock=1)
        with self.assertRaises(ValidationError):
            validate_stock({other.pk: 2})
        validate_stock({other.pk: 1})


class CatalogApiTests(TestCase):
    """
    GUARANTEES:
    - the storefront lists only active products, without authentication
    """

    def test_public_list(self):
        Product.objects.create(sku="ON", name="Visible", price=Decimal("10"), stock=1)
        Product.objects.create(sku="OFF", name="Hidden", price=Decimal("10"), stock=1, is_active=False)

        res = APIClient().get(reverse("catalog:product-list"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual([p["sku"] for p in res.data["results"]], ["ON"])
