# memberships/admin.py

from django.contrib import admin

from memberships.models import Package, PackagePurchase


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "membership_duration_days", "discount_percent", "is_active", "display_order")
    list_filter = ("is_active",)
    search_fields = ("name",)


@admin.register(PackagePurchase)
class PackagePurchaseAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "package", "amount_paid", "payment_status", "referral_rewarded", "created_at")
    list_filter = ("payment_status", "referral_rewarded")
    search_fields = ("user__email", "gateway_order_id", "gateway_payment_id")
    readonly_fields = (
        "amount_paid",
        "loyalty_points_used",
        "loyalty_points_shortfall",
        "gateway_order_id",
        "gateway_payment_id",
        "gateway_signature",
        "membership_granted",
        "membership_granted_at",
        "membership_expires_at",
        "referral_rewarded",
        "created_at",
    )
