# users/urls.py

from django.urls import path

from .views import (
    BulkPaymentSettingsView,
    CustomerPaymentSettingsView,
    LoginView,
    MeView,
    RegisterView,
)

app_name = "users"

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    # ---------------- ADMIN ----------------
    path(
        "<uuid:user_id>/payment-settings/",
        CustomerPaymentSettingsView.as_view(),
        name="payment-settings",
    ),
    path(
        "payment-settings/bulk/",
        BulkPaymentSettingsView.as_view(),
        name="payment-settings-bulk",
    ),
]
