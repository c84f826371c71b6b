import logging

from django.contrib.auth import authenticate
from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from referrals.services.referral_service import apply_referral_code, get_or_create_referral_code
from users.models import User
from users.serializers import LoginSerializer, RegisterSerializer

logger = logging.getLogger(__name__)


class LoginResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user_id = serializers.UUIDField()
    email = serializers.EmailField()
    role = serializers.CharField()
    access = serializers.CharField()
    refresh = serializers.CharField()


# ---------------------------
# VIEWS
# ---------------------------


class RegisterView(APIView):
    """
    Customer registration.

    If a referral_code is supplied it is applied in the same transaction;
    an invalid code rejects the whole registration.
    """

    permission_classes = [AllowAny]
    serializer_class = RegisterSerializer

    @extend_schema(
        request=RegisterSerializer,
        responses={201: dict},
        description="Register a new customer account",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        code = (data.get("referral_code") or "").strip()

        with transaction.atomic():
            user = User.objects.create_user(
                email=data["email"],
                password=data["password"],
                first_name=data.get("first_name", ""),
                last_name=data.get("last_name", ""),
                phone=data.get("phone", ""),
                role=User.ROLE_CUSTOMER,
            )
            get_or_create_referral_code(user)
            if code:
                apply_referral_code(account=user, code=code)

        logger.info("Account registered", extra={"account_id": str(user.id), "referred": bool(code)})

        return Response(
            {
                "message": "User registered successfully",
                "user_id": str(user.id),
                "referral_code": user.referral_code,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: LoginResponseSerializer},
        description="Authenticate with email and password, returns a JWT pair",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request=request,
            username=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
        )

        if not user:
            return Response(
                {"detail": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        refresh = RefreshToken.for_user(user)

        return Response(
            {
                "message": "Login successful",
                "user_id": user.id,
                "email": user.email,
                "role": user.role,
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            }
        )
