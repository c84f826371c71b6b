# payments/admin.py

from django.contrib import admin

from payments.models import PaymentAttempt


@admin.register(PaymentAttempt)
class PaymentAttemptAdmin(admin.ModelAdmin):
    list_display = ("gateway_order_id", "order", "amount", "currency", "status", "created_at", "verified_at")
    list_filter = ("status", "currency")
    search_fields = ("gateway_order_id", "gateway_payment_id", "order__order_id")
    readonly_fields = [f.name for f in PaymentAttempt._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
