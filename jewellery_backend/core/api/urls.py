# core/api/urls.py

from django.urls import path

from core.api.views import SeedSettingsView, SettingDetailView, SettingsView

app_name = "core"

urlpatterns = [
    path("", SettingsView.as_view(), name="settings"),
    path("seed/", SeedSettingsView.as_view(), name="settings-seed"),
    path("<str:key>/", SettingDetailView.as_view(), name="setting-detail"),
]
