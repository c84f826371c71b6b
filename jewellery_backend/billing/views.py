# billing/views.py

"""
BILLING API

Staff / admin:
- GET  /invoices/                 list (filter: status, billing_type)
- POST /invoices/                 generate an invoice for an order
- POST /invoices/<id>/cancel/     cancel (frees the order for a new invoice)

Customer (own orders) and staff:
- GET  /invoices/<id>/            detail
- GET  /invoices/<id>/render/     rendered document
- GET  /orders/<order id>/        live invoice for an order
"""

import logging

from django.http import HttpResponse
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from billing.renderer import JsonInvoiceRenderer
from billing.serializers import (
    CancelInvoiceInputSerializer,
    GenerateInvoiceInputSerializer,
    InvoiceSerializer,
)
from billing.services.invoice_generator import (
    cancel_invoice,
    generate_invoice,
    get_invoice,
    get_invoice_for,
    get_invoice_for_order,
    list_invoices,
    render_invoice,
)
from orders.services.order_service import get_order, get_order_for
from users.permissions import IsStaffOrAdmin, is_back_office

logger = logging.getLogger(__name__)


@extend_schema(tags=["billing"])
class InvoiceListCreateView(generics.ListAPIView):
    permission_classes = [IsStaffOrAdmin]
    serializer_class = InvoiceSerializer
    filterset_fields = ["status", "billing_type", "payment_status"]

    def get_queryset(self):
        return list_invoices()

    @extend_schema(request=GenerateInvoiceInputSerializer, responses={201: InvoiceSerializer})
    def post(self, request):
        serializer = GenerateInvoiceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        invoice = generate_invoice(
            order=get_order(data["order_id"]),
            billing_type=data["billing_type"],
            customer_gstin=data.get("customer_gstin", ""),
            notes=data.get("notes", ""),
            inter_state=data.get("inter_state", False),
            generated_by=request.user,
        )
        return Response(InvoiceSerializer(get_invoice(invoice.pk)).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["billing"])
class InvoiceDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: InvoiceSerializer})
    def get(self, request, pk):
        return Response(InvoiceSerializer(get_invoice_for(request.user, pk)).data)


@extend_schema(tags=["billing"])
class InvoiceCancelView(APIView):
    permission_classes = [IsStaffOrAdmin]

    @extend_schema(request=CancelInvoiceInputSerializer, responses={200: InvoiceSerializer})
    def post(self, request, pk):
        serializer = CancelInvoiceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = cancel_invoice(invoice=get_invoice(pk), reason=serializer.validated_data["reason"])
        return Response(InvoiceSerializer(get_invoice(invoice.pk)).data)


@extend_schema(tags=["billing"])
class InvoiceRenderView(APIView):
    permission_classes = [IsAuthenticated]

    def get_renderer(self):
        return JsonInvoiceRenderer()

    @extend_schema(responses={200: bytes})
    def get(self, request, pk):
        invoice = get_invoice_for(request.user, pk)
        renderer = self.get_renderer()
        output = render_invoice(invoice, renderer)

        if isinstance(output, str):
            return Response({"document_url": output})

        response = HttpResponse(output, content_type=renderer.content_type)
        response["Content-Disposition"] = f'inline; filename="{invoice.invoice_number}.{renderer.extension}"'
        return response


@extend_schema(tags=["billing"])
class OrderInvoiceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: InvoiceSerializer})
    def get(self, request, order_pk):
        if is_back_office(request.user):
            order = get_order(order_pk)
        else:
            order = get_order_for(request.user, order_pk)
        return Response(InvoiceSerializer(get_invoice_for_order(order)).data)
