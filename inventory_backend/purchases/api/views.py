# purchases/api/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import error_response
from core.exceptions import InventoryAppError
from core.unit_of_work import UnitOfWork
from permissions.roles import CAP_PURCHASES_MANAGE, CAP_PURCHASES_VIEW, HasCapability
from purchases.api.serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    ReceivePurchaseOrderSerializer,
    SupplierSerializer,
)
from purchases.models import PurchaseOrder, Supplier
from purchases.services.order_service import cancel_purchase_order, create_purchase_order
from purchases.services.receiving_service import receive_purchase_order


def _order_queryset():
    return (
        PurchaseOrder.objects.select_related("supplier")
        .prefetch_related("items", "items__product")
        .order_by("-created_at")
    )


class _PurchasesPermissionMixin:
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASES_MANAGE
    read_capability = CAP_PURCHASES_VIEW


class SupplierListCreateView(_PurchasesPermissionMixin, GenericAPIView):
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer(many=True))
    def get(self, request):
        qs = Supplier.objects.filter(is_active=True).order_by("name")
        return Response(SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = s.save()
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)


class SupplierDetailView(_PurchasesPermissionMixin, GenericAPIView):
    serializer_class = SupplierSerializer
    queryset = Supplier.objects.all()
    lookup_url_kwarg = "supplier_id"

    @extend_schema(tags=["purchases"], responses=SupplierSerializer)
    def get(self, request, supplier_id):
        return Response(SupplierSerializer(self.get_object()).data)

    @extend_schema(tags=["purchases"], request=SupplierSerializer, responses=SupplierSerializer)
    def patch(self, request, supplier_id):
        s = SupplierSerializer(self.get_object(), data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(SupplierSerializer(s.save()).data)

    @extend_schema(tags=["purchases"], responses=SupplierSerializer)
    def delete(self, request, supplier_id):
        # Purchase orders PROTECT the supplier row; deactivate instead.
        supplier = self.get_object()
        if supplier.is_active:
            supplier.is_active = False
            supplier.save(update_fields=["is_active", "updated_at"])
        return Response(SupplierSerializer(supplier).data)


class PurchaseOrderListCreateView(_PurchasesPermissionMixin, GenericAPIView):
    serializer_class = PurchaseOrderSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False)],
        responses=PurchaseOrderSerializer(many=True),
    )
    def get(self, request):
        qs = _order_queryset()
        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)
        return Response(PurchaseOrderSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseOrderCreateSerializer,
        responses={201: PurchaseOrderSerializer},
    )
    def post(self, request):
        s = PurchaseOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            order = create_purchase_order(
                supplier_id=data["supplier_id"],
                items=data["items"],
                document_date=data.get("document_date"),
                expected_delivery=data.get("expected_delivery"),
                notes=data.get("notes", ""),
                actor=request.user,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        order = _order_queryset().get(id=order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class PurchaseOrderDetailView(_PurchasesPermissionMixin, GenericAPIView):
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer)
    def get(self, request, order_id):
        order = _order_queryset().filter(id=order_id).first()
        if order is None:
            return Response({"detail": "Purchase order not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(PurchaseOrderSerializer(order).data)


class PurchaseOrderReceiveView(_PurchasesPermissionMixin, GenericAPIView):
    serializer_class = ReceivePurchaseOrderSerializer

    @extend_schema(
        tags=["purchases"],
        request=ReceivePurchaseOrderSerializer,
        responses=PurchaseOrderSerializer,
    )
    def post(self, request, order_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            order = receive_purchase_order(
                order_id=order_id,
                receipts=s.validated_data.get("receipts"),
                actor=request.user,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        order = _order_queryset().get(id=order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_200_OK)


class PurchaseOrderCancelView(_PurchasesPermissionMixin, GenericAPIView):
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], request=None, responses=PurchaseOrderSerializer)
    def post(self, request, order_id):
        try:
            order = cancel_purchase_order(order_id=order_id, uow=UnitOfWork())
        except InventoryAppError as exc:
            return error_response(exc)

        order = _order_queryset().get(id=order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_200_OK)
