# payments/views.py

"""
PAYMENTS API

- POST /orders/<id>/initiate/   open a gateway payment for the order's amount_to_pay
- POST /verify/                 confirm a gateway payment (signature check)
- GET  /orders/<id>/attempts/   payment attempt history for one order
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.serializers import OrderSerializer
from orders.services.order_service import get_order_for
from payments.gateway import RazorpayGateway
from payments.serializers import PaymentAttemptSerializer, VerifyPaymentInputSerializer
from payments.services.order_payments import (
    attempts_for,
    confirm_order_payment,
    get_attempt_for,
    initiate_order_payment,
)

logger = logging.getLogger(__name__)


class GatewayMixin:
    def get_gateway(self):
        return RazorpayGateway.from_settings()


@extend_schema(tags=["payments"])
class InitiateOrderPaymentView(GatewayMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={201: dict})
    def post(self, request, pk):
        order = get_order_for(request.user, pk)
        gateway = self.get_gateway()
        attempt = initiate_order_payment(order=order, gateway=gateway)
        return Response(
            {**attempt.client_payload(), "order_id": order.order_id, "key_id": gateway.key_id},
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["payments"])
class VerifyOrderPaymentView(GatewayMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=VerifyPaymentInputSerializer, responses={200: OrderSerializer})
    def post(self, request):
        serializer = VerifyPaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        attempt = get_attempt_for(
            request.user,
            attempt_id=data.get("attempt_id"),
            gateway_order_id=data.get("gateway_order_id"),
        )
        order = confirm_order_payment(
            attempt=attempt,
            payment_id=data["gateway_payment_id"],
            signature=data["gateway_signature"],
            gateway=self.get_gateway(),
        )
        return Response(
            {
                "success": True,
                "message": "Payment verified",
                "order": OrderSerializer(order).data,
            }
        )


@extend_schema(tags=["payments"])
class OrderPaymentAttemptsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: PaymentAttemptSerializer(many=True)})
    def get(self, request, pk):
        order = get_order_for(request.user, pk)
        return Response(PaymentAttemptSerializer(attempts_for(order), many=True).data)
