# vouchers/urls.py

from django.urls import path

from vouchers.views import (
    ApplyVoucherView,
    MyVouchersView,
    SeedVouchersView,
    VoucherDetailView,
    VoucherListView,
)

app_name = "vouchers"

urlpatterns = [
    path("", VoucherListView.as_view(), name="list"),
    path("apply/", ApplyVoucherView.as_view(), name="apply"),
    path("mine/", MyVouchersView.as_view(), name="mine"),
    path("seed/", SeedVouchersView.as_view(), name="seed"),
    path("<str:code>/", VoucherDetailView.as_view(), name="detail"),
]
