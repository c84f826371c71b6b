# referrals/views.py

from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import generics
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from referrals.models import Referral
from referrals.serializers import (
    AdminReferralSerializer,
    ApplyReferralInputSerializer,
    ReferralSerializer,
)
from referrals.services.referral_service import (
    apply_referral_code,
    get_or_create_referral_code,
    referral_history,
    referral_overview,
    referral_stats,
    validate_referral_code,
)
from users.permissions import IsAdmin


@extend_schema(tags=["referrals"])
class ReferralCodeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict})
    def get(self, request):
        code = get_or_create_referral_code(request.user)
        return Response(
            {
                "referral_code": code,
                "share_link": f"{settings.FRONTEND_BASE_URL.rstrip('/')}/signup?ref={code}",
            }
        )


@extend_schema(tags=["referrals"])
class ApplyReferralView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=ApplyReferralInputSerializer, responses={200: dict})
    def post(self, request):
        serializer = ApplyReferralInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        referral = apply_referral_code(account=request.user, code=serializer.validated_data["code"])
        return Response(
            {
                "success": True,
                "message": "Referral code applied successfully. Reward will be credited after your first purchase.",
                "referrer_name": referral.referrer.first_name or referral.referrer.full_name,
            }
        )


@extend_schema(tags=["referrals"])
class ValidateReferralView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses={200: dict})
    def get(self, request, code):
        return Response(validate_referral_code(code))


@extend_schema(tags=["referrals"])
class ReferralHistoryView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReferralSerializer

    def get_queryset(self):
        return referral_history(self.request.user)


@extend_schema(tags=["referrals"])
class ReferralStatsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict})
    def get(self, request):
        return Response(referral_stats(request.user))


@extend_schema(tags=["referrals"])
class AdminReferralListView(generics.ListAPIView):
    permission_classes = [IsAdmin]
    serializer_class = AdminReferralSerializer
    filterset_fields = ["status"]

    def get_queryset(self):
        return Referral.objects.select_related("referrer", "referee").order_by("-created_at")

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data["stats"] = referral_overview()
        return response
