# memberships/views.py

"""
MEMBERSHIP PACKAGES API

- GET  packages/             active packages (public)
- GET  packages/<id>/        one package (public)
- POST purchase/             start an online purchase
- POST purchase/verify/      confirm payment, activate membership
- GET  purchase/history/     own purchases
- GET  status/               own membership state

Admin:
- GET/POST       admin/packages/
- GET/PATCH/PUT  admin/packages/<id>/
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from memberships.models import Package
from memberships.serializers import (
    InitiatePurchaseInputSerializer,
    PackagePurchaseSerializer,
    PackageSerializer,
    VerifyPurchaseInputSerializer,
)
from memberships.services.package_purchase import (
    active_packages,
    get_package,
    initiate_package_purchase,
    membership_status,
    purchase_history,
    verify_package_purchase,
)
from payments.services.order_payments import payment_currency
from payments.views import GatewayMixin
from users.permissions import IsAdmin

logger = logging.getLogger(__name__)


@extend_schema(tags=["memberships"])
class PackageListView(generics.ListAPIView):
    permission_classes = [AllowAny]
    serializer_class = PackageSerializer
    pagination_class = None

    def get_queryset(self):
        return active_packages()


@extend_schema(tags=["memberships"])
class PackageDetailView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses={200: PackageSerializer})
    def get(self, request, pk):
        return Response(PackageSerializer(get_package(pk)).data)


@extend_schema(tags=["memberships"])
class InitiatePurchaseView(GatewayMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=InitiatePurchaseInputSerializer, responses={201: dict})
    def post(self, request):
        serializer = InitiatePurchaseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        package = get_package(data["package_id"])
        gateway = self.get_gateway()
        purchase = initiate_package_purchase(
            account=request.user,
            package=package,
            points=data.get("loyalty_points_to_use", 0),
            gateway=gateway,
        )
        return Response(
            {
                "gateway_order_id": purchase.gateway_order_id,
                "purchase_id": str(purchase.pk),
                "amount": str(purchase.amount_paid),
                "currency": payment_currency(),
                "package_name": package.name,
                "loyalty_points_used": purchase.loyalty_points_used,
                "key_id": gateway.key_id,
            },
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["memberships"])
class VerifyPurchaseView(GatewayMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=VerifyPurchaseInputSerializer, responses={200: dict})
    def post(self, request):
        serializer = VerifyPurchaseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        purchase = verify_package_purchase(
            account=request.user,
            purchase_id=data["purchase_id"],
            gateway_order_id=data["gateway_order_id"],
            payment_id=data["gateway_payment_id"],
            signature=data["gateway_signature"],
            gateway=self.get_gateway(),
        )
        request.user.refresh_from_db()
        return Response(
            {
                "success": True,
                "message": "Payment verified and membership activated",
                "purchase": PackagePurchaseSerializer(purchase).data,
                "membership": membership_status(request.user),
            }
        )


@extend_schema(tags=["memberships"])
class PurchaseHistoryView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PackagePurchaseSerializer

    def get_queryset(self):
        return purchase_history(self.request.user)


@extend_schema(tags=["memberships"])
class MembershipStatusView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict})
    def get(self, request):
        return Response(membership_status(request.user))


# =====================================================
# ADMIN
# =====================================================

@extend_schema(tags=["memberships"])
class AdminPackageListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsAdmin]
    serializer_class = PackageSerializer
    queryset = Package.objects.all().order_by("display_order", "-created_at")
    pagination_class = None


@extend_schema(tags=["memberships"])
class AdminPackageDetailView(generics.RetrieveUpdateAPIView):
    permission_classes = [IsAdmin]
    serializer_class = PackageSerializer
    queryset = Package.objects.all()
