# sales/api/viewsets/invoice.py

"""
INVOICE ENDPOINTS

- GET  /api/sales/invoices/?status=&customer=&from=&to=
- POST /api/sales/invoices/
- GET  /api/sales/invoices/<id>/
- GET  /api/sales/invoices/<id>/payments/
- POST /api/sales/invoices/<id>/payments/
- POST /api/sales/invoices/<id>/cancel/

Invoices are never edited or deleted through the API. Every write goes
through sales.services.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import error_response
from core.coerce import to_date, to_uuid
from core.exceptions import InventoryAppError
from core.unit_of_work import UnitOfWork
from permissions.roles import (
    CAP_SALES_CANCEL,
    CAP_SALES_INVOICE,
    CAP_SALES_PAYMENT,
    CAP_SALES_VIEW,
    HasCapability,
)
from sales.models import Invoice, InvoiceStatus
from sales.serializers import (
    InvoiceCancelSerializer,
    InvoiceCreateSerializer,
    InvoiceSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
)
from sales.services.invoice_service import create_invoice
from sales.services.payment_service import cancel_invoice, record_payment


class InvoiceViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated, HasCapability]

    _CAPABILITY_BY_ACTION = {
        "create": CAP_SALES_INVOICE,
        "cancel": CAP_SALES_CANCEL,
    }

    @property
    def required_capability(self):
        if self.action == "payments" and self.request.method == "POST":
            return CAP_SALES_PAYMENT
        return self._CAPABILITY_BY_ACTION.get(self.action, CAP_SALES_VIEW)

    def get_queryset(self):
        qs = (
            Invoice.objects.select_related("customer", "created_by")
            .prefetch_related("items__product", "payments")
            .order_by("-created_at")
        )
        params = self.request.query_params

        status_filter = (params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        customer = (params.get("customer") or "").strip()
        if customer:
            qs = qs.filter(customer_id=to_uuid(customer, field_name="customer"))

        if params.get("from"):
            qs = qs.filter(document_date__gte=to_date(params["from"], field_name="from"))
        if params.get("to"):
            qs = qs.filter(document_date__lte=to_date(params["to"], field_name="to"))

        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False,
                             enum=InvoiceStatus.values),
            OpenApiParameter("customer", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("from", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("to", str, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except InventoryAppError as exc:
            return error_response(exc)

    @extend_schema(request=InvoiceCreateSerializer, responses={201: InvoiceSerializer})
    def create(self, request):
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            invoice = create_invoice(
                customer_id=data["customer_id"],
                items=data["items"],
                document_date=data.get("document_date"),
                due_date=data.get("due_date"),
                notes=data.get("notes", ""),
                actor=request.user,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        invoice = self.get_queryset().get(pk=invoice.pk)
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @extend_schema(methods=["GET"], responses=PaymentSerializer(many=True))
    @extend_schema(methods=["POST"], request=PaymentCreateSerializer, responses={201: InvoiceSerializer})
    @action(detail=True, methods=["get", "post"], url_path="payments")
    def payments(self, request, pk=None):
        if request.method == "GET":
            invoice = self.get_object()
            rows = invoice.payments.select_related("invoice").order_by("payment_date", "created_at")
            data = PaymentSerializer(rows, many=True).data
            return Response({"count": len(data), "results": data})

        s = PaymentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = record_payment(
                invoice_id=pk,
                amount=data["amount"],
                method=data["method"],
                payment_date=data.get("payment_date"),
                reference_number=data.get("reference_number", ""),
                notes=data.get("notes", ""),
                actor=request.user,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        invoice = self.get_queryset().get(pk=result.invoice.pk)
        return Response(
            {
                "invoice": InvoiceSerializer(invoice).data,
                "payment": PaymentSerializer(result.payment).data,
                "applied_amount": str(result.applied_amount),
                "credit_amount": str(result.credit_amount),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=InvoiceCancelSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        s = InvoiceCancelSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = cancel_invoice(
                invoice_id=pk,
                reason=s.validated_data.get("reason", ""),
                actor=request.user,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        invoice = self.get_queryset().get(pk=invoice.pk)
        return Response(InvoiceSerializer(invoice).data)
