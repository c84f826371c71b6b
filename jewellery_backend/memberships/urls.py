# memberships/urls.py

from django.urls import path

from memberships.views import (
    AdminPackageDetailView,
    AdminPackageListCreateView,
    InitiatePurchaseView,
    MembershipStatusView,
    PackageDetailView,
    PackageListView,
    PurchaseHistoryView,
    VerifyPurchaseView,
)

app_name = "memberships"

urlpatterns = [
    path("packages/", PackageListView.as_view(), name="packages"),
    path("packages/<uuid:pk>/", PackageDetailView.as_view(), name="package-detail"),
    path("purchase/", InitiatePurchaseView.as_view(), name="purchase"),
    path("purchase/verify/", VerifyPurchaseView.as_view(), name="purchase-verify"),
    path("purchase/history/", PurchaseHistoryView.as_view(), name="purchase-history"),
    path("status/", MembershipStatusView.as_view(), name="status"),
    path("admin/packages/", AdminPackageListCreateView.as_view(), name="admin-packages"),
    path("admin/packages/<uuid:pk>/", AdminPackageDetailView.as_view(), name="admin-package-detail"),
]
