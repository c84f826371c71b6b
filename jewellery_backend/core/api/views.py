# core/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.models import AppSetting
from core.services.settings_store import (
    DEFAULT_SETTINGS,
    all_settings,
    get_setting,
    get_settings_by_category,
    seed_default_settings,
    set_setting,
)
from users.permissions import IsAdmin


class SettingUpdateSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=100)
    value = serializers.JSONField()
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.ChoiceField(
        choices=[c[0] for c in AppSetting.CATEGORY_CHOICES],
        required=False,
    )


class SettingsView(APIView):
    """
    ADMIN CONFIGURATION STORE

    GET  -> all effective settings (stored rows over defaults), optional ?category=
    PUT  -> bulk update: {"settings": [{key, value, ...}, ...]}
    """

    permission_classes = [IsAdmin]

    @extend_schema(responses={200: dict}, description="Effective application settings")
    def get(self, request):
        category = (request.query_params.get("category") or "").strip()
        if category:
            return Response(get_settings_by_category(category))
        return Response(all_settings())

    @extend_schema(
        request=SettingUpdateSerializer(many=True),
        responses={200: dict},
        description="Update one or more settings",
    )
    def put(self, request):
        payload = request.data.get("settings", request.data) if isinstance(request.data, dict) else request.data
        serializer = SettingUpdateSerializer(data=payload, many=True)
        serializer.is_valid(raise_exception=True)

        for item in serializer.validated_data:
            set_setting(
                item["key"],
                item["value"],
                description=item.get("description"),
                category=item.get("category"),
            )

        return Response(all_settings())


class SettingDetailView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: dict}, description="Read a single setting")
    def get(self, request, key):
        if key not in DEFAULT_SETTINGS and not AppSetting.objects.filter(key=key).exists():
            return Response({"detail": "Setting not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response({"key": key, "value": get_setting(key)})


class SeedSettingsView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=None, responses={201: dict}, description="Create missing default settings")
    def post(self, request):
        created = seed_default_settings()
        return Response({"created": created}, status=status.HTTP_201_CREATED)
