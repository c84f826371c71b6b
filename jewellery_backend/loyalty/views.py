# loyalty/views.py

"""
LOYALTY API

Customer:
- GET  balance/        points + redemption policy
- POST calculate/      how many points an order can use (read-only quote)
- GET  transactions/   own ledger, filterable by direction / source

Admin:
- POST adjust/               credit or debit with source admin_adjustment
- GET  admin/transactions/   all entries + totals
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from loyalty.filters import AdminLedgerEntryFilter, LedgerEntryFilter
from loyalty.models import LedgerEntry
from loyalty.serializers import (
    AdjustPointsInputSerializer,
    AdminLedgerEntrySerializer,
    CalculateUsageInputSerializer,
    LedgerEntrySerializer,
)
from loyalty.services import ledger
from loyalty.services.redemption import balance_summary, calculate_usage_for
from users.models import User
from users.permissions import IsAdmin


@extend_schema(tags=["loyalty"])
class LoyaltyBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict})
    def get(self, request):
        request.user.refresh_from_db(fields=["loyalty_points"])
        return Response(balance_summary(request.user))


@extend_schema(tags=["loyalty"])
class CalculateUsageView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=CalculateUsageInputSerializer, responses={200: dict})
    def post(self, request):
        serializer = CalculateUsageInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        request.user.refresh_from_db(fields=["loyalty_points"])
        quote = calculate_usage_for(
            request.user,
            order_total=serializer.validated_data["order_total"],
            points_to_use=serializer.validated_data.get("points_to_use", 0),
        )
        return Response(quote.as_dict())


@extend_schema(tags=["loyalty"])
class LedgerTransactionsView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = LedgerEntrySerializer
    filterset_class = LedgerEntryFilter

    def get_queryset(self):
        return LedgerEntry.objects.filter(account=self.request.user).order_by("-id")


@extend_schema(tags=["loyalty"])
class AdminAdjustPointsView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=AdjustPointsInputSerializer, responses={201: LedgerEntrySerializer})
    def post(self, request):
        serializer = AdjustPointsInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        account = get_object_or_404(User, pk=data["user_id"])
        entry = ledger.adjust(
            account=account,
            points=data["points"],
            direction=data["direction"],
            reason=data.get("reason", ""),
            admin=request.user,
        )
        return Response(
            {
                "entry": LedgerEntrySerializer(entry).data,
                "new_balance": entry.balance_after,
            },
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["loyalty"])
class AdminLedgerTransactionsView(generics.ListAPIView):
    permission_classes = [IsAdmin]
    serializer_class = AdminLedgerEntrySerializer
    filterset_class = AdminLedgerEntryFilter

    def get_queryset(self):
        return LedgerEntry.objects.select_related("account", "created_by").order_by("-id")

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data["stats"] = ledger.ledger_stats()
        return response


@extend_schema(tags=["loyalty"])
class VerifyBalanceView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: dict})
    def get(self, request, user_id):
        account = get_object_or_404(User, pk=user_id)
        return Response(ledger.verify_balance(account))
