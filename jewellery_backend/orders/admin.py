# orders/admin.py

from django.contrib import admin

from orders.models import InstallmentPlan, Order, OrderItem, TrackingEvent


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = [f.name for f in OrderItem._meta.fields]


class TrackingEventInline(admin.TabularInline):
    model = TrackingEvent
    extra = 0
    can_delete = False
    readonly_fields = ("status", "carrier", "location", "note", "created_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_id", "user", "status", "payment_type", "payment_status", "total_amount", "created_at")
    list_filter = ("status", "payment_status", "payment_type", "payment_method")
    search_fields = ("order_id", "user__email", "tracking_number")
    readonly_fields = (
        "order_id",
        "subtotal",
        "making_charges",
        "tax_amount",
        "shipping_fee",
        "voucher_discount",
        "loyalty_points_used",
        "loyalty_discount",
        "total_amount",
        "amount_paid",
        "remaining_amount",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline, TrackingEventInline]


@admin.register(InstallmentPlan)
class InstallmentPlanAdmin(admin.ModelAdmin):
    list_display = ("months", "interest_rate_percent", "min_amount", "max_amount", "processing_fee", "is_active")
    list_filter = ("is_active",)
