# billing/serializers.py

from rest_framework import serializers

from billing.models import Invoice, InvoiceLineItem


class InvoiceLineItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceLineItem
        fields = [
            "id",
            "product",
            "name",
            "description",
            "hsn_code",
            "quantity",
            "unit_price",
            "discount",
            "taxable_amount",
            "cgst_rate",
            "cgst_amount",
            "sgst_rate",
            "sgst_amount",
            "igst_rate",
            "igst_amount",
            "total_amount",
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    line_items = InvoiceLineItemSerializer(many=True, read_only=True)
    order_id = serializers.CharField(source="order.order_id", read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "invoice_date",
            "order",
            "order_id",
            "billing_type",
            "is_inter_state",
            "business_name",
            "business_address",
            "business_phone",
            "business_email",
            "business_gstin",
            "customer_name",
            "customer_phone",
            "customer_email",
            "customer_gstin",
            "billing_address",
            "shipping_address",
            "line_items",
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
            "payment_method",
            "payment_status",
            "status",
            "document_url",
            "notes",
            "terms_and_conditions",
            "cancelled_at",
            "cancel_reason",
            "created_at",
        ]
        read_only_fields = fields


# =====================================================
# INPUT
# =====================================================

class GenerateInvoiceInputSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    billing_type = serializers.ChoiceField(choices=Invoice.BILLING_TYPES, default=Invoice.TYPE_WITH_GST)
    customer_gstin = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    inter_state = serializers.BooleanField(required=False, default=False)


class CancelInvoiceInputSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
