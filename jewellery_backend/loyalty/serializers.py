# loyalty/serializers.py

from rest_framework import serializers

from loyalty.models import LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "direction",
            "points",
            "balance_after",
            "source",
            "description",
            "reference_type",
            "reference_id",
            "created_at",
        ]
        read_only_fields = fields


class AdminLedgerEntrySerializer(LedgerEntrySerializer):
    account_email = serializers.EmailField(source="account.email", read_only=True)
    created_by_email = serializers.EmailField(source="created_by.email", read_only=True, default=None)

    class Meta(LedgerEntrySerializer.Meta):
        fields = LedgerEntrySerializer.Meta.fields + ["account", "account_email", "created_by_email"]
        read_only_fields = fields


# ---------------- INPUT ----------------
class CalculateUsageInputSerializer(serializers.Serializer):
    order_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    points_to_use = serializers.IntegerField(min_value=0, required=False, default=0)


class AdjustPointsInputSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    points = serializers.IntegerField(min_value=1)
    direction = serializers.ChoiceField(choices=LedgerEntry.DIRECTIONS)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
