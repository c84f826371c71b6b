# vouchers/views.py

"""
VOUCHER API

- GET  /                 usable vouchers
- GET  /<code>/          one voucher (400/409 when not usable)
- POST /apply/           check a code against a total (no usage consumed;
                         the order consumes it at creation)
- GET  /mine/            vouchers this account has used
- POST /seed/            admin: create the standard codes
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.services.cart_service import cart_goods_value, get_or_create_cart
from users.permissions import IsAdmin
from vouchers.serializers import (
    ApplyVoucherInputSerializer,
    VoucherClaimSerializer,
    VoucherSerializer,
)
from vouchers.services.voucher_evaluator import (
    claims_for,
    ensure_usable,
    get_by_code,
    list_usable,
    preview,
    seed_default_vouchers,
)


@extend_schema(tags=["vouchers"])
class VoucherListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = VoucherSerializer

    def get_queryset(self):
        return list_usable()


@extend_schema(tags=["vouchers"])
class VoucherDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: VoucherSerializer})
    def get(self, request, code):
        voucher = get_by_code(code)
        ensure_usable(voucher)
        return Response(VoucherSerializer(voucher).data)


@extend_schema(tags=["vouchers"])
class ApplyVoucherView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=ApplyVoucherInputSerializer, responses={200: dict})
    def post(self, request):
        serializer = ApplyVoucherInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart_total = serializer.validated_data.get("cart_total")
        if cart_total is None:
            cart_total = cart_goods_value(get_or_create_cart(request.user))

        application = preview(serializer.validated_data["code"], cart_total)
        return Response(application.as_dict())


@extend_schema(tags=["vouchers"])
class MyVouchersView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = VoucherClaimSerializer

    def get_queryset(self):
        return claims_for(self.request.user)


@extend_schema(tags=["vouchers"])
class SeedVouchersView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=None, responses={201: dict})
    def post(self, request):
        created = seed_default_vouchers()
        return Response({"created": created}, status=status.HTTP_201_CREATED)
