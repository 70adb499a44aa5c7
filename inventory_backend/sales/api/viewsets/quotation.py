# sales/api/viewsets/quotation.py

"""
QUOTATION ENDPOINTS

- GET  /api/sales/quotations/?status=
- POST /api/sales/quotations/
- GET  /api/sales/quotations/<id>/
- POST /api/sales/quotations/<id>/transition/   {"status": "Sent"}
- POST /api/sales/quotations/<id>/convert/      -> Invoice

Quotations never touch stock. Conversion creates a normal invoice, which does.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import error_response
from core.exceptions import InventoryAppError
from core.unit_of_work import UnitOfWork
from permissions.roles import CAP_SALES_INVOICE, CAP_SALES_VIEW, HasCapability
from sales.models import Invoice, Quotation
from sales.serializers import (
    InvoiceSerializer,
    QuotationCreateSerializer,
    QuotationSerializer,
    QuotationTransitionSerializer,
)
from sales.services.quotation_service import (
    convert_quotation_to_invoice,
    create_quotation,
    transition_quotation,
)


class QuotationViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = QuotationSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SALES_INVOICE
    read_capability = CAP_SALES_VIEW

    def get_queryset(self):
        qs = (
            Quotation.objects.select_related("customer", "converted_invoice")
            .prefetch_related("items__product")
            .order_by("-created_at")
        )
        status_filter = (self.request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    @extend_schema(request=QuotationCreateSerializer, responses={201: QuotationSerializer})
    def create(self, request):
        s = QuotationCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            quotation = create_quotation(
                customer_id=data["customer_id"],
                items=data["items"],
                document_date=data.get("document_date"),
                valid_until=data.get("valid_until"),
                notes=data.get("notes", ""),
                terms_conditions=data.get("terms_conditions", ""),
                actor=request.user,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        quotation = self.get_queryset().get(pk=quotation.pk)
        return Response(QuotationSerializer(quotation).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=QuotationTransitionSerializer, responses={200: QuotationSerializer})
    @action(detail=True, methods=["post"], url_path="transition")
    def transition(self, request, pk=None):
        s = QuotationTransitionSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            quotation = transition_quotation(
                quotation_id=pk,
                target_status=s.validated_data["status"],
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        quotation = self.get_queryset().get(pk=quotation.pk)
        return Response(QuotationSerializer(quotation).data)

    @extend_schema(request=None, responses={201: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="convert")
    def convert(self, request, pk=None):
        try:
            invoice = convert_quotation_to_invoice(
                quotation_id=pk,
                actor=request.user,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        invoice = (
            Invoice.objects.select_related("customer")
            .prefetch_related("items__product", "payments")
            .get(pk=invoice.pk)
        )
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)
