# memberships/serializers.py

from rest_framework import serializers

from memberships.models import Package, PackagePurchase


class PackageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Package
        fields = [
            "id",
            "name",
            "description",
            "price",
            "original_price",
            "membership_duration_days",
            "discount_percent",
            "savings_text",
            "benefits",
            "badge",
            "is_active",
            "display_order",
        ]

    def validate_benefits(self, value):
        if not isinstance(value, list) or not all(isinstance(b, str) for b in value):
            raise serializers.ValidationError("benefits must be a list of strings")
        return value


class PackageSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Package
        fields = ["id", "name", "price", "membership_duration_days", "discount_percent"]
        read_only_fields = fields


class PackagePurchaseSerializer(serializers.ModelSerializer):
    package = PackageSummarySerializer(read_only=True)

    class Meta:
        model = PackagePurchase
        fields = [
            "id",
            "package",
            "amount_paid",
            "loyalty_points_used",
            "loyalty_points_shortfall",
            "gateway_order_id",
            "gateway_payment_id",
            "payment_method",
            "payment_status",
            "membership_granted",
            "membership_granted_at",
            "membership_expires_at",
            "membership_discount_percent",
            "referral_rewarded",
            "created_at",
        ]
        read_only_fields = fields


# ---------------- INPUT ----------------
class InitiatePurchaseInputSerializer(serializers.Serializer):
    package_id = serializers.UUIDField()
    loyalty_points_to_use = serializers.IntegerField(required=False, min_value=0, default=0)


class VerifyPurchaseInputSerializer(serializers.Serializer):
    purchase_id = serializers.UUIDField()
    gateway_order_id = serializers.CharField(max_length=64)
    gateway_payment_id = serializers.CharField(max_length=64)
    gateway_signature = serializers.CharField(max_length=128)
