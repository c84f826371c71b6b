# orders/views.py

"""
ORDERS API

Customer:
- GET/POST /               list own orders / create from cart or item list
- GET      /<id>/          detail
- POST     /<id>/cancel/   cancel (pending / processing only)
- GET      /<id>/track/    status + tracking history
- GET      /emi-plans/?amount=   installment quotes

Staff / admin:
- GET   /admin/all/              all orders (filter: status, payment_status, payment_type)
- POST  /<id>/status/            advance status (delivered settles payment)
- POST  /<id>/tracking/          append a tracking event
- GET/POST /emi-plans/manage/    plan reference data
- POST  /emi-plans/seed/         standard plan set
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ValidationError
from orders.models import InstallmentPlan, Order
from orders.serializers import (
    AdminOrderSerializer,
    CancelOrderInputSerializer,
    CreateOrderInputSerializer,
    InstallmentPlanSerializer,
    OrderSerializer,
    TrackingEventInputSerializer,
    TrackingEventSerializer,
    UpdateOrderStatusInputSerializer,
)
from orders.services.order_service import (
    add_tracking_event,
    cancel_order,
    create_order,
    get_order,
    get_order_for,
    orders_for,
    track_order,
    update_order_status,
)
from orders.services.payment_resolver import quote_installments, seed_installment_plans
from payments.gateway import RazorpayGateway
from users.permissions import IsAdmin, IsStaffOrAdmin

logger = logging.getLogger(__name__)


@extend_schema(tags=["orders"])
class OrderListCreateView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer

    def get_queryset(self):
        return orders_for(self.request.user)

    def get_gateway(self):
        return RazorpayGateway.from_settings()

    @extend_schema(request=CreateOrderInputSerializer, responses={201: OrderSerializer})
    def post(self, request):
        serializer = CreateOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        gateway = self.get_gateway() if data["payment_method"] == Order.METHOD_ONLINE else None

        order = create_order(
            account=request.user,
            items=[dict(item) for item in data.get("items") or []],
            shipping_address=data["shipping_address"],
            payment_method=data["payment_method"],
            payment_type=data["payment_type"],
            partial_amount=data.get("partial_amount"),
            emi_plan_id=data.get("emi_plan_id"),
            voucher_code=data.get("voucher_code"),
            loyalty_points=data.get("loyalty_points", 0),
            gateway=gateway,
        )

        payload = OrderSerializer(order).data
        attempt = order.payment_attempts.order_by("-created_at").first() if gateway else None
        if attempt is not None:
            payload["payment_attempt"] = {**attempt.client_payload(), "key_id": gateway.key_id}

        return Response(payload, status=status.HTTP_201_CREATED)


@extend_schema(tags=["orders"])
class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OrderSerializer})
    def get(self, request, pk):
        return Response(OrderSerializer(get_order_for(request.user, pk)).data)


@extend_schema(tags=["orders"])
class OrderCancelView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=CancelOrderInputSerializer, responses={200: OrderSerializer})
    def post(self, request, pk):
        serializer = CancelOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = get_order_for(request.user, pk)
        order = cancel_order(order=order, account=request.user, reason=serializer.validated_data["reason"])
        return Response(OrderSerializer(order).data)


@extend_schema(tags=["orders"])
class OrderTrackView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict})
    def get(self, request, pk):
        return Response(track_order(get_order_for(request.user, pk)))


@extend_schema(tags=["orders"])
class EmiQuoteView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter("amount", str, required=True)],
        responses={200: dict},
    )
    def get(self, request):
        amount = request.query_params.get("amount")
        if not amount:
            raise ValidationError("Valid amount is required", field="amount")
        try:
            plans = quote_installments(amount)
        except ValueError:
            raise ValidationError("Valid amount is required", field="amount")
        return Response({"amount": amount, "plans": plans})


# =====================================================
# STAFF / ADMIN
# =====================================================

@extend_schema(tags=["orders"])
class AdminOrderListView(generics.ListAPIView):
    permission_classes = [IsStaffOrAdmin]
    serializer_class = AdminOrderSerializer
    filterset_fields = ["status", "payment_status", "payment_type", "payment_method"]

    def get_queryset(self):
        return Order.objects.select_related("user").prefetch_related("items").order_by("-created_at")


@extend_schema(tags=["orders"])
class OrderStatusUpdateView(APIView):
    permission_classes = [IsStaffOrAdmin]

    @extend_schema(request=UpdateOrderStatusInputSerializer, responses={200: AdminOrderSerializer})
    def post(self, request, pk):
        serializer = UpdateOrderStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = update_order_status(
            order=get_order(pk),
            status=data["status"],
            carrier=data.get("tracking_carrier", ""),
            tracking_number=data.get("tracking_number", ""),
            location=data.get("location", ""),
            note=data.get("note", ""),
        )
        order.refresh_from_db()
        return Response(AdminOrderSerializer(order).data)


@extend_schema(tags=["orders"])
class OrderTrackingEventView(APIView):
    permission_classes = [IsStaffOrAdmin]

    @extend_schema(request=TrackingEventInputSerializer, responses={201: TrackingEventSerializer})
    def post(self, request, pk):
        serializer = TrackingEventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        event = add_tracking_event(
            order=get_order(pk),
            status=data.get("status") or None,
            location=data.get("location", ""),
            note=data.get("note", ""),
            carrier=data.get("carrier", ""),
            tracking_number=data.get("tracking_number", ""),
        )
        return Response(TrackingEventSerializer(event).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["orders"])
class InstallmentPlanAdminView(generics.ListCreateAPIView):
    permission_classes = [IsAdmin]
    serializer_class = InstallmentPlanSerializer
    queryset = InstallmentPlan.objects.all().order_by("months")
    pagination_class = None


@extend_schema(tags=["orders"])
class InstallmentPlanAdminDetailView(generics.RetrieveUpdateAPIView):
    permission_classes = [IsAdmin]
    serializer_class = InstallmentPlanSerializer
    queryset = InstallmentPlan.objects.all()


@extend_schema(tags=["orders"])
class SeedInstallmentPlansView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=None, responses={201: dict})
    def post(self, request):
        return Response({"created": seed_installment_plans()}, status=status.HTTP_201_CREATED)
