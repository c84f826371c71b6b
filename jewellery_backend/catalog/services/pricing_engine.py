# catalog/services/pricing_engine.py

"""
PRICING ENGINE

Purpose:
- Turn cart/order lines into a full price breakdown:
  line subtotal, making charges, taxable amount, tax, shipping, discount, grand total.

Hard rules:
- price_lines() is pure: no DB access, no side effects. Configuration is
  passed in as a PricingConfig (PricingConfig.load() reads the settings store).
- Making charges are rounded to 2dp once per line (unit charge x quantity),
  never on intermediate per-unit values.
- Discount is applied last and never drives the total below zero.

Catalog lookup contract:
- get_product(id) -> Product (NotFoundError when missing/inactive)
- validate_stock(lines) -> raises ValidationError naming the product
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from catalog.models import Product
from catalog.services.making_charges import making_charge_per_unit
from core.exceptions import NotFoundError, ValidationError
from core.money import ZERO, money, percent_of, to_decimal
from core.services.settings_store import get_decimal_setting


@dataclass(frozen=True)
class PricingConfig:
    tax_percent: Decimal = Decimal("18")
    shipping_free_threshold: Decimal = Decimal("50")
    shipping_flat_fee: Decimal = Decimal("5")

    @classmethod
    def load(cls) -> "PricingConfig":
        return cls(
            tax_percent=get_decimal_setting("checkout_tax_percent"),
            shipping_free_threshold=get_decimal_setting("shipping_free_threshold"),
            shipping_flat_fee=get_decimal_setting("shipping_flat_fee"),
        )


@dataclass(frozen=True)
class PricingLine:
    """One priced input line. unit_price / making_charge are per unit, unrounded."""

    product_id: object
    name: str
    quantity: int
    unit_price: Decimal
    making_charge: Decimal = Decimal("0")
    size: str = ""
    hsn_code: str = Product.DEFAULT_HSN_CODE


@dataclass(frozen=True)
class PricedLine:
    line: PricingLine
    line_subtotal: Decimal
    line_making_charges: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.line_subtotal + self.line_making_charges

    @property
    def unit_price_with_making(self) -> Decimal:
        return money(to_decimal(self.line.unit_price) + to_decimal(self.line.making_charge))


@dataclass(frozen=True)
class PriceBreakdown:
    lines: list[PricedLine] = field(default_factory=list)
    subtotal: Decimal = ZERO
    making_charges: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    tax_percent: Decimal = ZERO
    tax_amount: Decimal = ZERO
    shipping_fee: Decimal = ZERO
    discount: Decimal = ZERO
    total: Decimal = ZERO

    @property
    def total_before_discount(self) -> Decimal:
        return self.taxable_amount + self.tax_amount + self.shipping_fee

    def as_dict(self) -> dict:
        return {
            "items": [
                {
                    "product_id": str(p.line.product_id),
                    "name": p.line.name,
                    "quantity": p.line.quantity,
                    "size": p.line.size,
                    "unit_price": str(money(p.line.unit_price)),
                    "making_charge": str(money(p.line.making_charge)),
                    "line_subtotal": str(p.line_subtotal),
                    "line_making_charges": str(p.line_making_charges),
                    "line_total": str(p.line_total),
                }
                for p in self.lines
            ],
            "subtotal": str(self.subtotal),
            "making_charges": str(self.making_charges),
            "taxable_amount": str(self.taxable_amount),
            "tax_percent": str(self.tax_percent),
            "tax_amount": str(self.tax_amount),
            "shipping_fee": str(self.shipping_fee),
            "discount": str(self.discount),
            "total": str(self.total),
        }


# =====================================================
# PURE PRICING
# =====================================================


def price_line(line: PricingLine) -> PricedLine:
    if int(line.quantity) < 1:
        raise ValidationError("quantity must be at least 1", field="quantity", entity_id=line.product_id)
    if to_decimal(line.unit_price) < 0:
        raise ValidationError("unit price cannot be negative", field="unit_price", entity_id=line.product_id)

    qty = Decimal(int(line.quantity))
    return PricedLine(
        line=line,
        line_subtotal=money(to_decimal(line.unit_price) * qty),
        line_making_charges=money(to_decimal(line.making_charge) * qty),
    )


def shipping_fee_for(taxable_amount: Decimal, config: PricingConfig) -> Decimal:
    if taxable_amount > to_decimal(config.shipping_free_threshold):
        return ZERO
    return money(config.shipping_flat_fee)


def price_lines(lines, config: PricingConfig | None = None, *, discount=ZERO) -> PriceBreakdown:
    config = config or PricingConfig()
    priced = [price_line(line) for line in lines]
    if not priced:
        raise ValidationError("No items to price", field="items")

    subtotal = sum((p.line_subtotal for p in priced), ZERO)
    making = sum((p.line_making_charges for p in priced), ZERO)
    taxable = subtotal + making
    tax = money(percent_of(taxable, config.tax_percent))
    shipping = shipping_fee_for(taxable, config)

    if money(discount) < 0:
        raise ValidationError("discount cannot be negative", field="discount")

    gross = taxable + tax + shipping
    applied_discount = min(money(discount), gross)

    return PriceBreakdown(
        lines=priced,
        subtotal=subtotal,
        making_charges=making,
        taxable_amount=taxable,
        tax_percent=to_decimal(config.tax_percent),
        tax_amount=tax,
        shipping_fee=shipping,
        discount=applied_discount,
        total=gross - applied_discount,
    )


# =====================================================
# CATALOG LOOKUP
# =====================================================


def get_product(product_id) -> Product:
    try:
        return Product.objects.select_related("category").get(pk=product_id, is_active=True)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Product not found", field="product_id", entity_id=product_id)


def line_from_product(product: Product, quantity: int, size: str = "") -> PricingLine:
    return PricingLine(
        product_id=product.pk,
        name=product.name,
        quantity=int(quantity),
        unit_price=to_decimal(product.price),
        making_charge=making_charge_per_unit(product),
        size=size or "",
        hsn_code=product.hsn_code or Product.DEFAULT_HSN_CODE,
    )


def validate_stock(requested: dict) -> None:
    """
    requested: {product_id: total quantity}. Reads stock at validation time.
    """
    products = Product.objects.in_bulk(list(requested.keys()))
    for product_id, qty in requested.items():
        product = products.get(product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product not found", field="product_id", entity_id=product_id)
        if product.stock < qty:
            raise ValidationError(
                f"Insufficient stock for {product.name}: requested {qty}, available {product.stock}",
                field="quantity",
                entity_id=product_id,
            )
