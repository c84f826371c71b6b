# billing/admin.py

from django.contrib import admin

from billing.models import Invoice, InvoiceLineItem


class InvoiceLineItemInline(admin.TabularInline):
    model = InvoiceLineItem
    extra = 0
    can_delete = False
    readonly_fields = [f.name for f in InvoiceLineItem._meta.fields]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "order", "billing_type", "status", "payment_status", "grand_total", "invoice_date")
    list_filter = ("status", "billing_type", "payment_status")
    search_fields = ("invoice_number", "order__order_id", "customer_name", "customer_email")
    readonly_fields = (
        "invoice_number",
        "order",
        "subtotal",
        "total_discount",
        "taxable_amount",
        "total_cgst",
        "total_sgst",
        "total_igst",
        "total_tax",
        "round_off",
        "grand_total",
        "amount_in_words",
        "generated_by",
        "created_at",
    )
    inlines = [InvoiceLineItemInline]
