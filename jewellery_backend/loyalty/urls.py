# loyalty/urls.py

from django.urls import path

from loyalty.views import (
    AdminAdjustPointsView,
    AdminLedgerTransactionsView,
    CalculateUsageView,
    LedgerTransactionsView,
    LoyaltyBalanceView,
    VerifyBalanceView,
)

app_name = "loyalty"

urlpatterns = [
    path("balance/", LoyaltyBalanceView.as_view(), name="balance"),
    path("calculate/", CalculateUsageView.as_view(), name="calculate"),
    path("transactions/", LedgerTransactionsView.as_view(), name="transactions"),
    path("adjust/", AdminAdjustPointsView.as_view(), name="adjust"),
    path("admin/transactions/", AdminLedgerTransactionsView.as_view(), name="admin-transactions"),
    path("admin/verify/<uuid:user_id>/", VerifyBalanceView.as_view(), name="verify-balance"),
]
