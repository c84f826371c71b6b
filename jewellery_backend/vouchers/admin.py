# vouchers/admin.py

from django.contrib import admin

from vouchers.models import Voucher, VoucherClaim


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_type", "discount_value", "min_amount", "used_count", "usage_limit", "is_active")
    list_filter = ("discount_type", "is_active")
    search_fields = ("code", "description")
    readonly_fields = ("used_count", "created_at", "updated_at")


@admin.register(VoucherClaim)
class VoucherClaimAdmin(admin.ModelAdmin):
    list_display = ("voucher", "account", "discount", "order_ref", "claimed_at")
    search_fields = ("voucher__code", "account__email", "order_ref")
