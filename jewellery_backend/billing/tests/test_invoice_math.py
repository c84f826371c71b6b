# billing/tests/test_invoice_math.py

from decimal import Decimal

from django.test import SimpleTestCase

from billing.services.invoice_generator import LineFigures, allocate_discount, compute_invoice


def line(value, quantity=1) -> LineFigures:
    value = Decimal(value)
    return LineFigures(
        product_id=None,
        name="Chain",
        description="",
        hsn_code="7113",
        quantity=quantity,
        unit_price=value / quantity,
        value=value,
    )


class DiscountAllocationTests(SimpleTestCase):
    """
    GUARANTEES:
    - shares are proportional to line value
    - shares always sum to the discount (last line takes the remainder)
    - a discount larger than the goods is capped
    """

    def test_proportional_with_remainder_on_last_line(self):
        shares = allocate_discount([Decimal("100.00"), Decimal("200.00"), Decimal("300.00")], Decimal("100"))
        self.assertEqual(shares, [Decimal("16.67"), Decimal("33.33"), Decimal("50.00")])
        self.assertEqual(sum(shares), Decimal("100.00"))

    def test_discount_capped_at_goods_value(self):
        self.assertEqual(allocate_discount([Decimal("100.00")], Decimal("150")), [Decimal("100.00")])

    def test_no_discount(self):
        self.assertEqual(allocate_discount([Decimal("10.00"), Decimal("20.00")], 0), [Decimal("0"), Decimal("0")])


class ComputeInvoiceTests(SimpleTestCase):
    """
    GUARANTEES:
    - GST bills split tax into CGST + SGST at the configured rates
    - inter-state bills charge IGST at the combined rate
    - grand total is whole rupees; round_off carries the difference
    """

    def test_gst_round_off(self):
        figures = compute_invoice([line("1234.56")], cgst_rate=Decimal("1.5"), sgst_rate=Decimal("1.5"))

        self.assertEqual(figures.total_cgst, Decimal("18.52"))
        self.assertEqual(figures.total_sgst, Decimal("18.52"))
        self.assertEqual(figures.total_tax, Decimal("37.04"))
        self.assertEqual(figures.grand_total, Decimal("1272.00"))
        self.assertEqual(figures.round_off, Decimal("0.40"))
        self.assertEqual(figures.grand_total, figures.taxable_amount + figures.total_tax + figures.round_off)

    def test_without_gst(self):
        figures = compute_invoice([line("1234.56")], with_gst=False)

        self.assertEqual(figures.total_tax, Decimal("0"))
        self.assertEqual(figures.grand_total, Decimal("1235.00"))
        self.assertEqual(figures.round_off, Decimal("0.44"))
        self.assertEqual(figures.lines[0].cgst_rate, Decimal("0"))

    def test_inter_state_uses_igst(self):
        figures = compute_invoice([line("1234.56")], inter_state=True)

        self.assertEqual(figures.total_cgst, Decimal("0"))
        self.assertEqual(figures.total_sgst, Decimal("0"))
        self.assertEqual(figures.lines[0].igst_rate, Decimal("3.0"))
        self.assertEqual(figures.total_igst, Decimal("37.04"))

    def test_discount_reduces_taxable(self):
        figures = compute_invoice([line("600.00"), line("400.00")], discount=Decimal("100"))

        self.assertEqual(figures.subtotal, Decimal("1000.00"))
        self.assertEqual(figures.total_discount, Decimal("100.00"))
        self.assertEqual(figures.taxable_amount, Decimal("900.00"))
        self.assertEqual([ln.taxable for ln in figures.lines], [Decimal("540.00"), Decimal("360.00")])
        # 900 * 3% = 27
        self.assertEqual(figures.grand_total, Decimal("927.00"))
        self.assertEqual(figures.round_off, Decimal("0.00"))
