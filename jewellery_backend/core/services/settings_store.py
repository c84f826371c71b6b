# core/services/settings_store.py

"""
CONFIGURATION STORE

Contract:
- get_setting(key, default) -> value

Resolution order:
1) AppSetting row (admin-managed)
2) explicit default passed by the caller
3) DEFAULT_SETTINGS below

Values are read on every call (no module-level cache) so an admin change to
e.g. max_loyalty_usage_percent takes effect on the very next request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from core.models import AppSetting
from core.money import to_decimal

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class SettingDefault:
    value: object
    category: str
    description: str


DEFAULT_SETTINGS: dict[str, SettingDefault] = {
    # Referral
    "referral_reward_percent": SettingDefault(
        50, AppSetting.CATEGORY_REFERRAL, "Percent of the referee's purchase credited to the referrer as points"
    ),
    "referral_validity_days": SettingDefault(
        30, AppSetting.CATEGORY_REFERRAL, "Days after signup during which a referral code can be applied"
    ),
    # Membership
    "membership_discount_percent": SettingDefault(
        20, AppSetting.CATEGORY_MEMBERSHIP, "Default discount percent for members"
    ),
    "membership_default_duration_days": SettingDefault(
        365, AppSetting.CATEGORY_MEMBERSHIP, "Default membership duration in days"
    ),
    # Loyalty
    "max_loyalty_usage_percent": SettingDefault(
        50, AppSetting.CATEGORY_LOYALTY, "Max percent of an order total payable with points"
    ),
    "loyalty_point_value": SettingDefault(
        1, AppSetting.CATEGORY_LOYALTY, "Currency value of one loyalty point"
    ),
    "min_loyalty_redemption": SettingDefault(
        100, AppSetting.CATEGORY_LOYALTY, "Minimum points per redemption (unless redeeming the full balance)"
    ),
    "loyalty_cashback_percent": SettingDefault(
        0, AppSetting.CATEGORY_LOYALTY, "Percent of a settled order credited back as points (0 disables)"
    ),
    # Checkout / pricing
    "checkout_tax_percent": SettingDefault(
        18, AppSetting.CATEGORY_CHECKOUT, "Flat tax percent applied at checkout"
    ),
    "shipping_free_threshold": SettingDefault(
        50, AppSetting.CATEGORY_CHECKOUT, "Orders with taxable amount above this ship free"
    ),
    "shipping_flat_fee": SettingDefault(
        5, AppSetting.CATEGORY_CHECKOUT, "Flat shipping fee below the free threshold"
    ),
    "delivery_settles_payment": SettingDefault(
        True, AppSetting.CATEGORY_CHECKOUT, "Mark payment completed when an order is delivered"
    ),
    # Billing
    "cgst_rate": SettingDefault(1.5, AppSetting.CATEGORY_BILLING, "CGST percent"),
    "sgst_rate": SettingDefault(1.5, AppSetting.CATEGORY_BILLING, "SGST percent"),
    "business_name": SettingDefault("Gold Jewellers", AppSetting.CATEGORY_BILLING, "Invoice business name"),
    "business_address": SettingDefault("Mumbai, Maharashtra", AppSetting.CATEGORY_BILLING, "Invoice business address"),
    "business_phone": SettingDefault("", AppSetting.CATEGORY_BILLING, "Invoice business phone"),
    "business_email": SettingDefault("", AppSetting.CATEGORY_BILLING, "Invoice business email"),
    "business_gstin": SettingDefault("", AppSetting.CATEGORY_BILLING, "Business GSTIN"),
}


def get_setting(key: str, default=_MISSING):
    value = AppSetting.objects.filter(key=key).values_list("value", flat=True).first()
    if value is not None:
        return value

    if default is not _MISSING:
        return default

    fallback = DEFAULT_SETTINGS.get(key)
    return fallback.value if fallback else None


def get_decimal_setting(key: str, default=_MISSING) -> Decimal:
    raw = get_setting(key, default)
    try:
        return to_decimal(raw)
    except ValueError:
        logger.warning("Non-numeric setting value, using default", extra={"key": key, "value": raw})
        fallback = DEFAULT_SETTINGS.get(key)
        return to_decimal(fallback.value if fallback else 0)


def get_int_setting(key: str, default=_MISSING) -> int:
    return int(get_decimal_setting(key, default))


def get_bool_setting(key: str, default=_MISSING) -> bool:
    raw = get_setting(key, default)
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    return bool(raw)


def set_setting(key: str, value, *, description: str | None = None, category: str | None = None) -> AppSetting:
    defaults = {"value": value}

    known = DEFAULT_SETTINGS.get(key)
    if category is not None:
        defaults["category"] = category
    elif known:
        defaults["category"] = known.category

    if description is not None:
        defaults["description"] = description
    elif known:
        defaults["description"] = known.description

    setting, created = AppSetting.objects.update_or_create(key=key, defaults=defaults)
    logger.info(
        "Setting updated",
        extra={"key": key, "value": value, "created": created},
    )
    return setting


def get_settings_by_category(category: str) -> dict:
    out = {
        key: d.value for key, d in DEFAULT_SETTINGS.items() if d.category == category
    }
    for row in AppSetting.objects.filter(category=category):
        out[row.key] = row.value
    return out


def all_settings() -> dict:
    out = {key: d.value for key, d in DEFAULT_SETTINGS.items()}
    for row in AppSetting.objects.all():
        out[row.key] = row.value
    return out


@transaction.atomic
def seed_default_settings() -> int:
    """Create missing AppSetting rows from DEFAULT_SETTINGS. Existing rows are untouched."""
    created_count = 0
    for key, d in DEFAULT_SETTINGS.items():
        _, created = AppSetting.objects.get_or_create(
            key=key,
            defaults={
                "value": d.value,
                "category": d.category,
                "description": d.description,
            },
        )
        if created:
            created_count += 1
    return created_count
