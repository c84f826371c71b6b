from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from users.services.membership import membership_snapshot

User = get_user_model()


# ---------------- REGISTER ----------------
class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    referral_code = serializers.CharField(
        required=False,
        allow_blank=True,
        write_only=True,
        help_text="Optional referral code from an existing customer",
    )

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "first_name",
            "last_name",
            "phone",
            "referral_code",
        ]


# ---------------- LOGIN (INPUT ONLY) ----------------
class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe account representation for frontend consumption.
    """

    membership = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone",
            "role",
            "loyalty_points",
            "referral_code",
            "membership",
        ]

    def get_membership(self, obj):
        return membership_snapshot(obj)


# ---------------- PAYMENT SETTINGS (ADMIN) ----------------
class PaymentSettingsUpdateSerializer(serializers.Serializer):
    """
    Partial update: any omitted field keeps its current value.
    """

    emi_enabled = serializers.BooleanField(required=False)
    partial_payment_enabled = serializers.BooleanField(required=False)
    allowed_emi_tenures = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
    )
    min_partial_payment_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False
    )
    max_partial_payment_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False
    )
    can_convert_partial_to_emi = serializers.BooleanField(required=False)
    credit_limit = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    trust_score = serializers.IntegerField(min_value=0, max_value=100, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
