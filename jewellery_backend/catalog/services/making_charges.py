# catalog/services/making_charges.py

"""
MAKING CHARGE RESOLUTION

Resolution order (first match wins):
1) product.making_charges_percent (explicit override)
2) category.making_charges_percent_by_material[product.material]
   (entries that are not a 0-100 number are skipped)
3) category.making_charges_percent_default
4) zero

Charge per unit = price x percent / 100, returned UNROUNDED. Rounding
happens at the line boundary in the pricing engine.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from core.money import HUNDRED, percent_of, to_decimal

logger = logging.getLogger(__name__)


def _material_percent(category, material: str):
    by_material = getattr(category, "making_charges_percent_by_material", None) or {}
    if not material or not isinstance(by_material, dict):
        return None

    if material in by_material:
        return by_material[material]

    # Admin-entered keys are not always cased consistently ("gold" vs "Gold")
    lowered = material.lower()
    for key, pct in by_material.items():
        if str(key).lower() == lowered:
            return pct
    return None


def _valid_percent(category, material: str) -> Decimal | None:
    """Material percent as Decimal; entries that are not a 0-100 number count as missing."""
    raw = _material_percent(category, material)
    if raw is None:
        return None
    try:
        pct = to_decimal(raw)
    except ValueError:
        pct = None
    if pct is None or pct < 0 or pct > HUNDRED:
        logger.warning(
            "Ignoring invalid material making charge",
            extra={"category_id": str(category.pk), "material": material, "value": repr(raw)},
        )
        return None
    return pct


def resolve_making_charge_percent(product) -> Decimal:
    if product.making_charges_percent is not None:
        return to_decimal(product.making_charges_percent)

    category = getattr(product, "category", None)
    if category is None:
        return Decimal("0")

    by_material = _valid_percent(category, product.material)
    if by_material is not None:
        return by_material

    if category.making_charges_percent_default is not None:
        return to_decimal(category.making_charges_percent_default)

    return Decimal("0")


def making_charge_per_unit(product) -> Decimal:
    return percent_of(product.price, resolve_making_charge_percent(product))
