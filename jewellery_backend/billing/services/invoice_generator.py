# billing/services/invoice_generator.py

"""
======================================================
PATH: billing/services/invoice_generator.py
======================================================
INVOICE GENERATOR

Builds a tax invoice from an order snapshot.

Line math (per order item):
    unit_price  = item unit price + item making charge
    value       = unit_price * quantity
    discount    = share of (voucher_discount + loyalty_discount), allocated
                  proportionally to line value; the last line absorbs the
                  rounding remainder
    taxable     = value - discount
    GST bill:   cgst = taxable * cgst_rate / 100, sgst likewise
                (inter-state: igst = taxable * (cgst_rate + sgst_rate) / 100)
    total       = taxable + taxes

Totals:
    grand_total = taxable + tax rounded to whole rupees
    round_off   = grand_total - (taxable + tax)

Hard rules:
- One live (non-cancelled) invoice per order.
- Invoice numbers: INV-<year>-<5 digit yearly sequence>, allocated atomically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from billing.models import Invoice, InvoiceLineItem
from billing.renderer import InvoiceRenderer
from billing.services.amount_in_words import amount_in_words
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import HUNDRED, ZERO, money, round_whole, to_decimal
from core.services.sequences import allocate_with_retry
from core.services.settings_store import get_decimal_setting, get_setting
from orders.models import Order
from users.models import User
from users.permissions import is_back_office

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE_PREFIX = "invoice"

BASE_TERMS = [
    "Goods once sold will not be taken back or exchanged.",
    "All disputes are subject to local jurisdiction only.",
    "Interest @18% p.a. will be charged on delayed payments.",
]
GST_TERM = "E. & O.E. (Errors and Omissions Excepted)"
NON_GST_TERM = "Please retain this invoice for warranty claims."

DEFAULT_NOTES = "Thank you for your purchase! We appreciate your business."


# =====================================================
# VALUE TYPES
# =====================================================

@dataclass
class LineFigures:
    product_id: object
    name: str
    description: str
    hsn_code: str
    quantity: int
    unit_price: Decimal
    value: Decimal
    discount: Decimal = ZERO
    taxable: Decimal = ZERO
    cgst_rate: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst_rate: Decimal = ZERO
    sgst: Decimal = ZERO
    igst_rate: Decimal = ZERO
    igst: Decimal = ZERO
    total: Decimal = ZERO


@dataclass
class InvoiceFigures:
    lines: list = field(default_factory=list)
    subtotal: Decimal = ZERO
    total_discount: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    total_cgst: Decimal = ZERO
    total_sgst: Decimal = ZERO
    total_igst: Decimal = ZERO
    total_tax: Decimal = ZERO
    round_off: Decimal = ZERO
    grand_total: Decimal = ZERO


# =====================================================
# PURE CALCULATION
# =====================================================

def allocate_discount(values: list, discount) -> list:
    """
    Split `discount` across `values` proportionally. The last non-zero line
    takes the remainder so the shares sum exactly to the (capped) discount.
    """
    total_value = money(sum(values, ZERO))
    discount = min(money(discount), total_value)
    if discount <= 0 or total_value <= 0:
        return [ZERO for _ in values]

    shares = [ZERO for _ in values]
    last = max(i for i, v in enumerate(values) if v > 0)
    allocated = ZERO
    for i, value in enumerate(values):
        if i == last:
            shares[i] = discount - allocated
            break
        share = money(discount * value / total_value)
        shares[i] = share
        allocated += share
    return shares


def compute_invoice(
    lines: list,
    *,
    discount=ZERO,
    with_gst: bool = True,
    inter_state: bool = False,
    cgst_rate=Decimal("1.5"),
    sgst_rate=Decimal("1.5"),
) -> InvoiceFigures:
    cgst_rate = to_decimal(cgst_rate)
    sgst_rate = to_decimal(sgst_rate)
    shares = allocate_discount([line.value for line in lines], discount)

    figures = InvoiceFigures(lines=lines)
    for line, share in zip(lines, shares):
        line.discount = share
        line.taxable = money(line.value - share)

        if with_gst and inter_state:
            line.igst_rate = cgst_rate + sgst_rate
            line.igst = money(line.taxable * line.igst_rate / HUNDRED)
        elif with_gst:
            line.cgst_rate = cgst_rate
            line.sgst_rate = sgst_rate
            line.cgst = money(line.taxable * cgst_rate / HUNDRED)
            line.sgst = money(line.taxable * sgst_rate / HUNDRED)

        line.total = money(line.taxable + line.cgst + line.sgst + line.igst)

        figures.subtotal += line.value
        figures.total_discount += line.discount
        figures.taxable_amount += line.taxable
        figures.total_cgst += line.cgst
        figures.total_sgst += line.sgst
        figures.total_igst += line.igst

    figures.total_tax = figures.total_cgst + figures.total_sgst + figures.total_igst
    exact = figures.taxable_amount + figures.total_tax
    figures.grand_total = money(round_whole(exact))
    figures.round_off = money(figures.grand_total - exact)
    return figures


def lines_from_order(order: Order) -> list:
    lines = []
    for item in order.items.all().order_by("id"):
        unit_price = money(to_decimal(item.unit_price) + to_decimal(item.making_charge))
        description = f"Size {item.size}" if item.size else ""
        lines.append(
            LineFigures(
                product_id=item.product_id,
                name=item.product_name,
                description=description,
                hsn_code=item.hsn_code or "7113",
                quantity=item.quantity,
                unit_price=unit_price,
                value=money(item.line_total),
            )
        )
    return lines


# =====================================================
# ORDER SNAPSHOT HELPERS
# =====================================================

def _format_address(address) -> str:
    if not isinstance(address, dict) or not address:
        return "N/A"
    street = address.get("address") or address.get("line1") or ""
    if address.get("line2"):
        street = f"{street}, {address['line2']}" if street else address["line2"]
    city = address.get("city") or ""
    pincode = address.get("pincode") or address.get("postal_code") or ""

    parts = [p for p in (street, city) if p]
    text = ", ".join(parts)
    if pincode:
        text = f"{text} - {pincode}" if text else pincode
    return text or "N/A"


def _customer_name(order: Order) -> str:
    name = f"{order.user.first_name} {order.user.last_name}".strip()
    return name or (order.shipping_address or {}).get("name") or "Customer"


def invoice_payment_status(order: Order) -> str:
    if order.payment_status == Order.PAID:
        return Invoice.PAYMENT_PAID
    if order.payment_type in (Order.TYPE_PARTIAL, Order.TYPE_EMI) and to_decimal(order.amount_paid) > 0:
        return Invoice.PAYMENT_PARTIAL
    return Invoice.PAYMENT_PENDING


def _invoice_sequence_name(year: int) -> str:
    return f"{INVOICE_SEQUENCE_PREFIX}:{year}"


def format_invoice_number(year: int, seq: int) -> str:
    return f"INV-{year}-{seq:05d}"


def _highest_suffix_for(year: int) -> int:
    prefix = f"INV-{year}-"
    highest = 0
    for number in Invoice.objects.filter(invoice_number__startswith=prefix).values_list("invoice_number", flat=True):
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def _live_invoice_exists(order: Order) -> bool:
    return Invoice.objects.filter(order=order).exclude(status=Invoice.STATUS_CANCELLED).exists()


# =====================================================
# GENERATE
# =====================================================

@transaction.atomic
def generate_invoice(
    *,
    order: Order,
    billing_type: str = Invoice.TYPE_WITH_GST,
    customer_gstin: str = "",
    notes: str = "",
    inter_state: bool = False,
    generated_by: User | None = None,
) -> Invoice:
    if billing_type not in dict(Invoice.BILLING_TYPES):
        raise ValidationError(f"Unsupported billing type '{billing_type}'", field="billing_type")

    order = Order.objects.select_for_update().select_related("user").get(pk=order.pk)

    if order.status == Order.STATUS_CANCELLED:
        raise ConflictError("Cannot bill a cancelled order", entity_id=order.order_id)

    if _live_invoice_exists(order):
        raise ConflictError("Bill already exists for this order", entity_id=order.order_id)

    lines = lines_from_order(order)
    if not lines:
        raise ValidationError("Order has no items to bill", entity_id=order.order_id)

    with_gst = billing_type == Invoice.TYPE_WITH_GST
    inter_state = bool(inter_state) and with_gst
    figures = compute_invoice(
        lines,
        discount=to_decimal(order.voucher_discount) + to_decimal(order.loyalty_discount),
        with_gst=with_gst,
        inter_state=inter_state,
        cgst_rate=get_decimal_setting("cgst_rate"),
        sgst_rate=get_decimal_setting("sgst_rate"),
    )

    now = timezone.now()
    year = timezone.localdate(now).year
    invoice_fields = {
        "order": order,
        "invoice_date": now,
        "billing_type": billing_type,
        "is_inter_state": inter_state,
        "business_name": str(get_setting("business_name")),
        "business_address": str(get_setting("business_address")),
        "business_phone": str(get_setting("business_phone") or ""),
        "business_email": str(get_setting("business_email") or ""),
        "business_gstin": str(get_setting("business_gstin") or "") if with_gst else "",
        "customer_name": _customer_name(order),
        "customer_phone": order.user.phone or (order.shipping_address or {}).get("phone", "") or "",
        "customer_email": order.user.email,
        "customer_gstin": (customer_gstin or "").strip().upper() if with_gst else "",
        "billing_address": _format_address(order.shipping_address),
        "shipping_address": _format_address(order.shipping_address),
        "subtotal": money(figures.subtotal),
        "total_discount": money(figures.total_discount),
        "taxable_amount": money(figures.taxable_amount),
        "total_cgst": money(figures.total_cgst),
        "total_sgst": money(figures.total_sgst),
        "total_igst": money(figures.total_igst),
        "total_tax": money(figures.total_tax),
        "round_off": figures.round_off,
        "grand_total": figures.grand_total,
        "amount_in_words": amount_in_words(figures.grand_total),
        "payment_method": order.payment_method.title() if order.payment_method else "Online",
        "payment_status": invoice_payment_status(order),
        "status": Invoice.STATUS_GENERATED,
        "notes": notes or DEFAULT_NOTES,
        "terms_and_conditions": [*BASE_TERMS, GST_TERM if with_gst else NON_GST_TERM],
        "generated_by": generated_by,
    }

    def resync() -> int:
        # The collision may be the live-invoice constraint rather than the number.
        if _live_invoice_exists(order):
            raise ConflictError("Bill already exists for this order", entity_id=order.order_id)
        return _highest_suffix_for(year)

    invoice = allocate_with_retry(
        _invoice_sequence_name(year),
        persist=lambda seq: Invoice.objects.create(
            invoice_number=format_invoice_number(year, seq),
            **invoice_fields,
        ),
        resync=resync,
    )

    InvoiceLineItem.objects.bulk_create(
        [
            InvoiceLineItem(
                invoice=invoice,
                product_id=line.product_id,
                name=line.name,
                description=line.description,
                hsn_code=line.hsn_code,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount=money(line.discount),
                taxable_amount=line.taxable,
                cgst_rate=line.cgst_rate,
                cgst_amount=line.cgst,
                sgst_rate=line.sgst_rate,
                sgst_amount=line.sgst,
                igst_rate=line.igst_rate,
                igst_amount=line.igst,
                total_amount=line.total,
            )
            for line in figures.lines
        ]
    )

    logger.info(
        "Invoice generated",
        extra={
            "invoice_number": invoice.invoice_number,
            "order_id": order.order_id,
            "billing_type": billing_type,
            "grand_total": str(invoice.grand_total),
            "generated_by": str(generated_by.pk) if generated_by else None,
        },
    )
    return invoice


# =====================================================
# READ / CANCEL
# =====================================================

def _invoices():
    return Invoice.objects.select_related("order", "generated_by").prefetch_related("line_items")


def get_invoice(invoice_pk) -> Invoice:
    try:
        return _invoices().get(pk=invoice_pk)
    except Invoice.DoesNotExist:
        raise NotFoundError("Bill not found", entity_id=invoice_pk)


def get_invoice_for(account: User, invoice_pk) -> Invoice:
    """Customers may only read invoices for their own orders."""
    invoice = get_invoice(invoice_pk)
    if invoice.order.user_id != account.pk and not is_back_office(account):
        raise NotFoundError("Bill not found", entity_id=invoice_pk)
    return invoice


def get_invoice_for_order(order: Order) -> Invoice:
    invoice = (
        _invoices()
        .filter(order=order)
        .filter(~Q(status=Invoice.STATUS_CANCELLED))
        .first()
    )
    if invoice is None:
        raise NotFoundError("Bill not found for this order", entity_id=order.order_id)
    return invoice


def list_invoices(*, status: str | None = None, billing_type: str | None = None):
    qs = _invoices().order_by("-created_at")
    if status:
        qs = qs.filter(status=status)
    if billing_type:
        qs = qs.filter(billing_type=billing_type)
    return qs


@transaction.atomic
def cancel_invoice(*, invoice: Invoice, reason: str = "") -> Invoice:
    locked = Invoice.objects.select_for_update().get(pk=invoice.pk)
    if locked.status == Invoice.STATUS_CANCELLED:
        raise ConflictError("Bill is already cancelled", entity_id=locked.invoice_number)

    locked.status = Invoice.STATUS_CANCELLED
    locked.cancelled_at = timezone.now()
    locked.cancel_reason = (reason or "")[:255]
    locked.save(update_fields=["status", "cancelled_at", "cancel_reason", "updated_at"])

    logger.info(
        "Invoice cancelled",
        extra={"invoice_number": locked.invoice_number, "order_id": locked.order.order_id, "reason": reason},
    )
    return locked


# =====================================================
# RENDER
# =====================================================

def invoice_document(invoice: Invoice) -> dict:
    return {
        "invoice_number": invoice.invoice_number,
        "invoice_date": invoice.invoice_date,
        "billing_type": invoice.billing_type,
        "is_inter_state": invoice.is_inter_state,
        "status": invoice.status,
        "order_id": invoice.order.order_id,
        "business": {
            "name": invoice.business_name,
            "address": invoice.business_address,
            "phone": invoice.business_phone,
            "email": invoice.business_email,
            "gstin": invoice.business_gstin,
        },
        "customer": {
            "name": invoice.customer_name,
            "phone": invoice.customer_phone,
            "email": invoice.customer_email,
            "gstin": invoice.customer_gstin,
            "billing_address": invoice.billing_address,
            "shipping_address": invoice.shipping_address,
        },
        "items": [
            {
                "name": line.name,
                "description": line.description,
                "hsn_code": line.hsn_code,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "discount": line.discount,
                "taxable_amount": line.taxable_amount,
                "cgst_rate": line.cgst_rate,
                "cgst_amount": line.cgst_amount,
                "sgst_rate": line.sgst_rate,
                "sgst_amount": line.sgst_amount,
                "igst_rate": line.igst_rate,
                "igst_amount": line.igst_amount,
                "total_amount": line.total_amount,
            }
            for line in invoice.line_items.all()
        ],
        "totals": {
            "subtotal": invoice.subtotal,
            "total_discount": invoice.total_discount,
            "taxable_amount": invoice.taxable_amount,
            "total_cgst": invoice.total_cgst,
            "total_sgst": invoice.total_sgst,
            "total_igst": invoice.total_igst,
            "total_tax": invoice.total_tax,
            "round_off": invoice.round_off,
            "grand_total": invoice.grand_total,
            "amount_in_words": invoice.amount_in_words,
        },
        "payment": {"method": invoice.payment_method, "status": invoice.payment_status},
        "notes": invoice.notes,
        "terms_and_conditions": list(invoice.terms_and_conditions or []),
    }


def render_invoice(invoice: Invoice, renderer: InvoiceRenderer):
    """Returns whatever the renderer produced; URL results are stored as document_url."""
    if invoice.status == Invoice.STATUS_CANCELLED:
        raise ConflictError("Cannot render a cancelled bill", entity_id=invoice.invoice_number)

    output = renderer.render(invoice_document(invoice))

    if isinstance(output, str):
        Invoice.objects.filter(pk=invoice.pk).update(document_url=output, updated_at=timezone.now())
        invoice.document_url = output

    return output
