# referrals/serializers.py

from rest_framework import serializers

from referrals.models import Referral


class ReferralSerializer(serializers.ModelSerializer):
    referee_name = serializers.CharField(source="referee.full_name", read_only=True)
    referee_joined_at = serializers.DateTimeField(source="referee.created_at", read_only=True)

    class Meta:
        model = Referral
        fields = [
            "id",
            "code",
            "status",
            "referee_name",
            "referee_joined_at",
            "reward_amount",
            "reward_credited_at",
            "purchase_type",
            "purchase_id",
            "purchase_amount",
            "created_at",
        ]
        read_only_fields = fields


class AdminReferralSerializer(ReferralSerializer):
    referrer_email = serializers.EmailField(source="referrer.email", read_only=True)
    referee_email = serializers.EmailField(source="referee.email", read_only=True)

    class Meta(ReferralSerializer.Meta):
        fields = ReferralSerializer.Meta.fields + ["referrer_email", "referee_email"]
        read_only_fields = fields


class ApplyReferralInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=16)
