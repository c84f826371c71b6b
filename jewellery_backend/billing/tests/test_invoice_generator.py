# billing/tests/test_invoice_generator.py

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from billing.models import Invoice
from billing.renderer import JsonInvoiceRenderer
from billing.services.invoice_generator import (
    cancel_invoice,
    generate_invoice,
    get_invoice_for_order,
    list_invoices,
    render_invoice,
)
from catalog.models import Product
from core.exceptions import ConflictError, NotFoundError
from core.models import SequenceCounter
from loyalty.models import LedgerEntry
from loyalty.services import ledger
from orders.models import Order, OrderItem
from orders.services.order_service import cancel_order, create_order, update_order_status
from vouchers.services.voucher_evaluator import seed_default_vouchers

User = get_user_model()

ADDRESS = {"line1": "12 Zaveri Bazaar", "city": "Mumbai", "pincode": "400002"}


def make_product(**overrides) -> Product:
    fields = {
        "sku": "BANGLE-001",
        "name": "Gold Bangle",
        "price": Decimal("10000.00"),
        "making_charges_percent": Decimal("10"),
        "material": Product.MATERIAL_GOLD,
        "stock": 10,
    }
    fields.update(overrides)
    return Product.objects.create(**fields)


class UrlRenderer:
    content_type = "text/plain"
    extension = "txt"

    def render(self, document):
        return f"https://files.example.com/{document['invoice_number']}.pdf"


class GenerateInvoiceTests(TestCase):
    """
    GUARANTEES:
    - lines carry unit price incl. making charge and the order's discounts
    - GST totals and amount in words follow the configured rates
    - one live invoice per order; cancelling frees the order
    - invoice numbers are INV-<year>-<5 digits>
    """

    def setUp(self):
        self.account = User.objects.create_user(email="kavya@example.com", password="pass", first_name="Kavya")
        self.product = make_product()
        seed_default_vouchers()
        ledger.credit(account=self.account, points=1000, source=LedgerEntry.SOURCE_WELCOME_BONUS)
        self.order = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            items=[{"product_id": self.product.pk, "quantity": 1}],
            voucher_code="FLAT500",
            loyalty_points=300,
        )
        self.year = timezone.localdate().year

    def test_gst_invoice_from_order(self):
        invoice = generate_invoice(order=self.order)

        self.assertEqual(invoice.invoice_number, f"INV-{self.year}-00001")
        self.assertEqual(invoice.status, Invoice.STATUS_GENERATED)
        self.assertEqual(invoice.customer_name, "Kavya")
        self.assertEqual(invoice.billing_address, "12 Zaveri Bazaar, Mumbai - 400002")

        # 11000 goods, 800 discount (500 voucher + 300 points), 3% GST on 10200
        self.assertEqual(invoice.subtotal, Decimal("11000.00"))
        self.assertEqual(invoice.total_discount, Decimal("800.00"))
        self.assertEqual(invoice.taxable_amount, Decimal("10200.00"))
        self.assertEqual(invoice.total_cgst, Decimal("153.00"))
        self.assertEqual(invoice.total_sgst, Decimal("153.00"))
        self.assertEqual(invoice.grand_total, Decimal("10506.00"))
        self.assertEqual(invoice.round_off, Decimal("0.00"))
        self.assertEqual(invoice.amount_in_words, "Ten Thousand Five Hundred Six Rupees Only")
        self.assertEqual(invoice.payment_status, Invoice.PAYMENT_PENDING)
        self.assertEqual(invoice.terms_and_conditions[-1], "E. & O.E. (Errors and Omissions Excepted)")

        line = invoice.line_items.get()
        self.assertEqual(line.unit_price, Decimal("11000.00"))
        self.assertEqual(line.discount, Decimal("800.00"))
        self.assertEqual(line.hsn_code, "7113")

    def test_without_gst_has_no_tax(self):
        invoice = generate_invoice(order=self.order, billing_type=Invoice.TYPE_WITHOUT_GST, customer_gstin="27ABCDE")

        self.assertEqual(invoice.total_tax, Decimal("0.00"))
        self.assertEqual(invoice.grand_total, Decimal("10200.00"))
        self.assertEqual(invoice.customer_gstin, "")
        self.assertEqual(invoice.terms_and_conditions[-1], "Please retain this invoice for warranty claims.")

    def test_duplicate_conflicts_until_cancelled(self):
        first = generate_invoice(order=self.order)

        with self.assertRaises(ConflictError):
            generate_invoice(order=self.order)

        cancelled = cancel_invoice(invoice=first, reason="Wrong GSTIN")
        self.assertEqual(cancelled.status, Invoice.STATUS_CANCELLED)
        self.assertIsNotNone(cancelled.cancelled_at)

        second = generate_invoice(order=self.order)
        self.assertEqual(second.invoice_number, f"INV-{self.year}-00002")
        self.assertEqual(get_invoice_for_order(self.order), second)

    def test_cancel_twice_conflicts(self):
        invoice = generate_invoice(order=self.order)
        cancel_invoice(invoice=invoice)
        with self.assertRaises(ConflictError):
            cancel_invoice(invoice=invoice)

    def test_cancelled_order_cannot_be_billed(self):
        cancel_order(order=self.order, account=self.account, reason="Changed mind")
        with self.assertRaises(ConflictError):
            generate_invoice(order=self.order)

    def test_missing_invoice_for_order(self):
        with self.assertRaises(NotFoundError):
            get_invoice_for_order(self.order)

    def test_paid_order_gives_paid_invoice(self):
        update_order_status(order=self.order, status=Order.STATUS_DELIVERED)
        self.order.refresh_from_db()

        invoice = generate_invoice(order=self.order)
        self.assertEqual(invoice.payment_status, Invoice.PAYMENT_PAID)

    def test_lagging_counter_skips_used_numbers(self):
        generate_invoice(order=self.order)
        SequenceCounter.objects.filter(name=f"invoice:{self.year}").update(last_value=0)

        other = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            items=[{"product_id": self.product.pk, "quantity": 1}],
        )
        invoice = generate_invoice(order=other)
        self.assertEqual(invoice.invoice_number, f"INV-{self.year}-00002")

    def test_list_filters(self):
        generate_invoice(order=self.order, billing_type=Invoice.TYPE_WITHOUT_GST)

        self.assertEqual(list_invoices(billing_type=Invoice.TYPE_WITHOUT_GST).count(), 1)
        self.assertEqual(list_invoices(billing_type=Invoice.TYPE_WITH_GST).count(), 0)
        self.assertEqual(list_invoices(status=Invoice.STATUS_CANCELLED).count(), 0)

    def test_json_render(self):
        invoice = generate_invoice(order=self.order)
        document = json.loads(render_invoice(invoice, JsonInvoiceRenderer()))

        self.assertEqual(document["invoice_number"], invoice.invoice_number)
        self.assertEqual(document["order_id"], self.order.order_id)
        self.assertEqual(document["totals"]["grand_total"], "10506.00")
        self.assertEqual(len(document["items"]), 1)

    def test_url_renderer_sets_document_url(self):
        invoice = generate_invoice(order=self.order)
        url = render_invoice(invoice, UrlRenderer())

        invoice.refresh_from_db()
        self.assertEqual(invoice.document_url, url)

    def test_cancelled_invoice_is_not_rendered(self):
        invoice = cancel_invoice(invoice=generate_invoice(order=self.order))
        with self.assertRaises(ConflictError):
            render_invoice(invoice, JsonInvoiceRenderer())


class InvoiceNumberSequenceTests(TransactionTestCase):
    """
    GUARANTEES:
    - repeated generation yields unique, strictly increasing numbers
    """

    def test_fifty_invoices_are_strictly_increasing(self):
        account = User.objects.create_user(email="bulk@example.com", password="pass", first_name="Bulk")
        product = make_product(sku="COIN-001", name="Gold Coin", price=Decimal("500.00"), stock=100)

        numbers = []
        for i in range(50):
            order = Order.objects.create(
                order_id=f"BULK{i:04d}",
                user=account,
                subtotal=Decimal("500.00"),
                total_amount=Decimal("500.00"),
                amount_to_pay=Decimal("500.00"),
                shipping_address=ADDRESS,
            )
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                quantity=1,
                unit_price=Decimal("500.00"),
                line_subtotal=Decimal("500.00"),
                line_total=Decimal("500.00"),
            )
            numbers.append(generate_invoice(order=order).invoice_number)

        suffixes = [int(n.rsplit("-", 1)[1]) for n in numbers]
        self.assertEqual(len(set(numbers)), 50)
        self.assertEqual(suffixes, sorted(suffixes))
        self.assertEqual(suffixes, list(range(1, 51)))


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentInvoiceNumberTests(TransactionTestCase):
    """
    GUARANTEES:
    - 50 invoices generated from parallel connections get 50 distinct numbers
    - the numbers form the gap-free run 1..50 for the year

    Needs a backend with row locks (run with TEST_DATABASE_URL set to PostgreSQL).
    """

    WORKERS = 8

    def setUp(self):
        account = User.objects.create_user(email="rush@example.com", password="pass", first_name="Rush")
        product = make_product(sku="COIN-002", name="Silver Coin", price=Decimal("300.00"), stock=100)

        self.order_pks = []
        for i in range(50):
            order = Order.objects.create(
                order_id=f"RUSH{i:04d}",
                user=account,
                subtotal=Decimal("300.00"),
                total_amount=Decimal("300.00"),
                amount_to_pay=Decimal("300.00"),
                shipping_address=ADDRESS,
            )
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                quantity=1,
                unit_price=Decimal("300.00"),
                line_subtotal=Decimal("300.00"),
                line_total=Decimal("300.00"),
            )
            self.order_pks.append(order.pk)

    def _generate(self, order_pk):
        try:
            return generate_invoice(order=Order.objects.get(pk=order_pk)).invoice_number
        finally:
            connection.close()

    def test_parallel_generation_yields_gap_free_numbers(self):
        with ThreadPoolExecutor(max_workers=self.WORKERS) as executor:
            numbers = list(executor.map(self._generate, self.order_pks))

        suffixes = sorted(int(n.rsplit("-", 1)[1]) for n in numbers)
        self.assertEqual(len(set(numbers)), 50)
        self.assertEqual(suffixes, list(range(1, 51)))
        self.assertEqual(Invoice.objects.count(), 50)

class InvoiceApiTests(TestCase):
    """
    GUARANTEES:
    - only staff / admin generate, list and cancel
    - customers read invoices for their own orders only
    """

    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="desk@example.com", password="pass", role="staff")
        self.account = User.objects.create_user(email="ria@example.com", password="pass", first_name="Ria")
        self.stranger = User.objects.create_user(email="other@example.com", password="pass")
        product = make_product()
        self.order = create_order(
            account=self.account,
            shipping_address=ADDRESS,
            items=[{"product_id": product.pk, "quantity": 1}],
        )

    def _generate(self):
        self.client.force_authenticate(self.staff)
        res = self.client.post(
            reverse("billing:invoices"),
            {"order_id": str(self.order.pk), "billing_type": "with_gst"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        return res.data

    def test_staff_generates_and_lists(self):
        data = self._generate()
        self.assertTrue(data["invoice_number"].startswith("INV-"))
        self.assertEqual(data["order_id"], self.order.order_id)

        res = self.client.get(reverse("billing:invoices"), {"status": "generated"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

    def test_duplicate_generation_is_409(self):
        self._generate()
        res = self.client.post(
            reverse("billing:invoices"),
            {"order_id": str(self.order.pk)},
            format="json",
        )
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["detail"], "Bill already exists for this order")

    def test_customer_cannot_generate(self):
        self.client.force_authenticate(self.account)
        res = self.client.post(reverse("billing:invoices"), {"order_id": str(self.order.pk)}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_customer_reads_own_invoice(self):
        data = self._generate()

        self.client.force_authenticate(self.account)
        res = self.client.get(reverse("billing:order-invoice", kwargs={"order_pk": self.order.pk}))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["invoice_number"], data["invoice_number"])

        res = self.client.get(reverse("billing:invoice-render", kwargs={"pk": data["id"]}))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res["Content-Type"], "application/json")

    def test_stranger_gets_404(self):
        data = self._generate()

        self.client.force_authenticate(self.stranger)
        res = self.client.get(reverse("billing:invoice-detail", kwargs={"pk": data["id"]}))
        self.assertEqual(res.status_code, 404)
        res = self.client.get(reverse("billing:order-invoice", kwargs={"order_pk": self.order.pk}))
        self.assertEqual(res.status_code, 404)

    def test_staff_cancels(self):
        data = self._generate()
        res = self.client.post(
            reverse("billing:invoice-cancel", kwargs={"pk": data["id"]}),
            {"reason": "Duplicate"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "cancelled")
        self.assertEqual(res.data["cancel_reason"], "Duplicate")
