# cart/services/cart_service.py

"""
CART SERVICE

- get_or_create_cart / add_item / update_item / remove_item / clear_cart
- cart_lines(): cart -> PricingLine list at live catalog prices
- cart_summary(): priced breakdown for display (no discount applied)
"""

from __future__ import annotations

from decimal import Decimal

from django.db import transaction

from cart.models import Cart, CartItem
from catalog.services.pricing_engine import (
    PricingConfig,
    get_product,
    line_from_product,
    price_line,
    price_lines,
)
from core.exceptions import NotFoundError, ValidationError
from core.money import ZERO


def get_or_create_cart(user) -> Cart:
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


@transaction.atomic
def add_item(*, user, product_id, quantity: int, size: str = "") -> CartItem:
    if int(quantity) < 1:
        raise ValidationError("quantity must be at least 1", field="quantity")

    product = get_product(product_id)
    cart = get_or_create_cart(user)

    item = CartItem.objects.select_for_update().filter(cart=cart, product=product, size=size or "").first()
    new_qty = int(quantity) + (item.quantity if item else 0)
    if product.stock < new_qty:
        raise ValidationError(
            f"Only {product.stock} of {product.name} in stock",
            field="quantity",
            entity_id=product.pk,
        )

    if item:
        item.quantity = new_qty
        item.save()
        return item

    return CartItem.objects.create(cart=cart, product=product, quantity=new_qty, size=size or "")


@transaction.atomic
def update_item(*, user, item_id, quantity: int) -> CartItem:
    item = _get_item(user, item_id)
    if int(quantity) < 1:
        raise ValidationError("quantity must be at least 1", field="quantity")
    item.quantity = int(quantity)
    item.save()
    return item


def remove_item(*, user, item_id) -> None:
    _get_item(user, item_id).delete()


def clear_cart(cart: Cart) -> None:
    cart.items.all().delete()


def cart_lines(cart: Cart) -> list:
    items = cart.items.select_related("product", "product__category").order_by("created_at")
    return [
        line_from_product(item.product, item.quantity, item.size)
        for item in items
        if item.product.is_active
    ]


def cart_goods_value(cart: Cart) -> Decimal:
    """Item value incl. making charges, before tax and shipping (voucher base)."""
    return sum((price_line(line).line_total for line in cart_lines(cart)), ZERO)


def cart_summary(cart: Cart) -> dict:
    lines = cart_lines(cart)
    if not lines:
        return {"items": [], "item_count": 0, "total": "0.00"}

    breakdown = price_lines(lines, PricingConfig.load())
    out = breakdown.as_dict()
    out["item_count"] = sum(line.quantity for line in lines)
    return out


def _get_item(user, item_id) -> CartItem:
    try:
        return CartItem.objects.select_related("cart").get(pk=item_id, cart__user=user)
    except (CartItem.DoesNotExist, ValueError):
        raise NotFoundError("Cart item not found", entity_id=item_id)
