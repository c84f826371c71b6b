# orders/urls.py

from django.urls import path

from orders.views import (
    AdminOrderListView,
    EmiQuoteView,
    InstallmentPlanAdminDetailView,
    InstallmentPlanAdminView,
    OrderCancelView,
    OrderDetailView,
    OrderListCreateView,
    OrderStatusUpdateView,
    OrderTrackView,
    OrderTrackingEventView,
    SeedInstallmentPlansView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="list-create"),
    # ---------------- EMI ----------------
    path("emi-plans/", EmiQuoteView.as_view(), name="emi-quote"),
    path("emi-plans/manage/", InstallmentPlanAdminView.as_view(), name="emi-plans"),
    path("emi-plans/manage/<uuid:pk>/", InstallmentPlanAdminDetailView.as_view(), name="emi-plan-detail"),
    path("emi-plans/seed/", SeedInstallmentPlansView.as_view(), name="emi-seed"),
    # ---------------- ADMIN ----------------
    path("admin/all/", AdminOrderListView.as_view(), name="admin-list"),
    path("<uuid:pk>/status/", OrderStatusUpdateView.as_view(), name="status"),
    path("<uuid:pk>/tracking/", OrderTrackingEventView.as_view(), name="tracking"),
    # ---------------- CUSTOMER ----------------
    path("<uuid:pk>/", OrderDetailView.as_view(), name="detail"),
    path("<uuid:pk>/cancel/", OrderCancelView.as_view(), name="cancel"),
    path("<uuid:pk>/track/", OrderTrackView.as_view(), name="track"),
]
