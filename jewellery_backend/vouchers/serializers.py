# vouchers/serializers.py

from rest_framework import serializers

from vouchers.models import Voucher, VoucherClaim


class VoucherSerializer(serializers.ModelSerializer):
    class Meta:
        model = Voucher
        fields = [
            "id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "min_amount",
            "max_discount",
            "start_date",
            "end_date",
            "usage_limit",
            "used_count",
        ]
        read_only_fields = fields


class VoucherClaimSerializer(serializers.ModelSerializer):
    code = serializers.CharField(source="voucher.code", read_only=True)
    description = serializers.CharField(source="voucher.description", read_only=True)

    class Meta:
        model = VoucherClaim
        fields = ["id", "code", "description", "discount", "order_ref", "claimed_at"]
        read_only_fields = fields


class ApplyVoucherInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32)
    cart_total = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        help_text="Defaults to the goods value of the caller's cart",
    )
