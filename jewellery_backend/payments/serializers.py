# payments/serializers.py

from rest_framework import serializers

from payments.models import PaymentAttempt


class PaymentAttemptSerializer(serializers.ModelSerializer):
    order_id = serializers.CharField(source="order.order_id", read_only=True)

    class Meta:
        model = PaymentAttempt
        fields = [
            "id",
            "order_id",
            "amount",
            "currency",
            "gateway_order_id",
            "gateway_payment_id",
            "status",
            "failure_reason",
            "created_at",
            "verified_at",
        ]
        read_only_fields = fields


class VerifyPaymentInputSerializer(serializers.Serializer):
    attempt_id = serializers.UUIDField(required=False)
    gateway_order_id = serializers.CharField(required=False, allow_blank=True)
    gateway_payment_id = serializers.CharField(max_length=64)
    gateway_signature = serializers.CharField(max_length=128)

    def validate(self, attrs):
        if not attrs.get("attempt_id") and not attrs.get("gateway_order_id"):
            raise serializers.ValidationError("attempt_id or gateway_order_id is required")
        return attrs
