# billing/urls.py

from django.urls import path

from billing.views import (
    InvoiceCancelView,
    InvoiceDetailView,
    InvoiceListCreateView,
    InvoiceRenderView,
    OrderInvoiceView,
)

app_name = "billing"

urlpatterns = [
    path("invoices/", InvoiceListCreateView.as_view(), name="invoices"),
    path("invoices/<uuid:pk>/", InvoiceDetailView.as_view(), name="invoice-detail"),
    path("invoices/<uuid:pk>/cancel/", InvoiceCancelView.as_view(), name="invoice-cancel"),
    path("invoices/<uuid:pk>/render/", InvoiceRenderView.as_view(), name="invoice-render"),
    path("orders/<uuid:order_pk>/", OrderInvoiceView.as_view(), name="order-invoice"),
]
