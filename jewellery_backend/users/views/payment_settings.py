from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from users.models import User
from users.permissions import IsAdmin
from users.serializers import PaymentSettingsUpdateSerializer
from users.services.payment_settings import (
    PaymentSettingsUpdate,
    bulk_update_payment_settings,
    get_payment_settings,
    update_payment_settings,
)


def _to_update(validated: dict) -> PaymentSettingsUpdate:
    data = dict(validated)
    if "allowed_emi_tenures" in data:
        data["allowed_emi_tenures"] = tuple(data["allowed_emi_tenures"])
    return PaymentSettingsUpdate(**data)


class CustomerPaymentSettingsView(APIView):
    """
    ADMIN: per-customer payment options (EMI / partial payment / credit).
    PATCH merges only the supplied fields.
    """

    permission_classes = [IsAdmin]

    @extend_schema(responses={200: dict}, description="Read a customer's payment settings")
    def get(self, request, user_id):
        account = get_object_or_404(User, pk=user_id)
        return Response(get_payment_settings(account).to_json())

    @extend_schema(
        request=PaymentSettingsUpdateSerializer,
        responses={200: dict},
        description="Partially update a customer's payment settings",
    )
    def patch(self, request, user_id):
        account = get_object_or_404(User, pk=user_id)
        serializer = PaymentSettingsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        merged = update_payment_settings(
            account=account,
            update=_to_update(serializer.validated_data),
            updated_by=request.user,
        )
        return Response(merged.to_json())


class BulkPaymentSettingsInputSerializer(serializers.Serializer):
    user_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    settings = PaymentSettingsUpdateSerializer()


class BulkPaymentSettingsView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(
        request=BulkPaymentSettingsInputSerializer,
        responses={200: dict},
        description="Apply the same partial payment-settings update to many customers",
    )
    def post(self, request):
        serializer = BulkPaymentSettingsInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        accounts = User.objects.filter(pk__in=serializer.validated_data["user_ids"])
        updated = bulk_update_payment_settings(
            accounts=accounts,
            update=_to_update(serializer.validated_data["settings"]),
            updated_by=request.user,
        )
        return Response({"updated": updated})
