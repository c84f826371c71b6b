# users/admin.py

"""
ACCOUNTS ADMIN

loyalty_points is read-only here: balance changes go through the points
ledger (admin adjustments included) so the ledger keeps reconciling.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from users.models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "role", "loyalty_points", "membership_status", "is_active")
    list_filter = ("role", "membership_status", "is_staff", "is_active")
    search_fields = ("email", "first_name", "last_name", "referral_code")
    readonly_fields = ("loyalty_points", "referral_code", "referred_by", "referred_by_code")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("first_name", "last_name", "phone", "role")}),
        ("Loyalty & referral", {"fields": ("loyalty_points", "referral_code", "referred_by", "referred_by_code")}),
        (
            "Membership",
            {
                "fields": (
                    "membership_status",
                    "membership_activated_at",
                    "membership_expires_at",
                    "membership_discount_percent",
                )
            },
        ),
        ("Payment options", {"fields": ("payment_settings",)}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "role",
                    "is_staff",
                    "is_active",
                ),
            },
        ),
    )
