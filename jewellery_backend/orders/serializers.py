# orders/serializers.py

from rest_framework import serializers

from orders.models import InstallmentPlan, Order, OrderItem, TrackingEvent


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "making_charge",
            "size",
            "hsn_code",
            "line_subtotal",
            "line_making_charges",
            "line_total",
        ]
        read_only_fields = fields


class TrackingEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = TrackingEvent
        fields = ["status", "carrier", "location", "note", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    payment = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_id",
            "status",
            "items",
            "subtotal",
            "making_charges",
            "tax_percent",
            "tax_amount",
            "shipping_fee",
            "voucher_code",
            "voucher_discount",
            "loyalty_points_used",
            "loyalty_discount",
            "total_amount",
            "shipping_address",
            "payment",
            "payment_status",
            "tracking_carrier",
            "tracking_number",
            "cancelled_at",
            "cancel_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_payment(self, obj):
        return obj.payment_snapshot()


class AdminOrderSerializer(OrderSerializer):
    customer_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["customer_email"]
        read_only_fields = fields


class InstallmentPlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = InstallmentPlan
        fields = [
            "id",
            "name",
            "months",
            "interest_rate_percent",
            "min_amount",
            "max_amount",
            "processing_fee",
            "is_active",
        ]

    def validate(self, attrs):
        min_amount = attrs.get("min_amount", getattr(self.instance, "min_amount", None))
        max_amount = attrs.get("max_amount", getattr(self.instance, "max_amount", None))
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise serializers.ValidationError({"max_amount": "max_amount must be >= min_amount"})
        return attrs


# ---------------- INPUT ----------------
class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    size = serializers.CharField(required=False, allow_blank=True, default="")


class CreateOrderInputSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, required=False)
    shipping_address = serializers.DictField()
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHODS, default=Order.METHOD_CASH)
    payment_type = serializers.ChoiceField(choices=Order.PAYMENT_TYPES, default=Order.TYPE_FULL)
    partial_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    emi_plan_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    voucher_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    loyalty_points = serializers.IntegerField(required=False, min_value=0, default=0)


class CancelOrderInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class UpdateOrderStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
    tracking_carrier = serializers.CharField(required=False, allow_blank=True, default="")
    tracking_number = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.CharField(required=False, allow_blank=True, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")


class TrackingEventInputSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True, default="")
    carrier = serializers.CharField(required=False, allow_blank=True, default="")
    tracking_number = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.CharField(required=False, allow_blank=True, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")
