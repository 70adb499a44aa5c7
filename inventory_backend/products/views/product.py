# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Staff catalog endpoints (list, detail, create, update, deactivate)
- Low stock alerts
- Per-product stock movements (history + manual movement)

Key rules:
- Writes go through products.services (catalog / ledger), never the ORM.
- DELETE deactivates; products are never removed.
"""

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import error_response
from core.exceptions import InventoryAppError
from core.unit_of_work import UnitOfWork
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasCapability,
)
from products.models import Product
from products.serializers import (
    LowStockProductSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    StockMovementCreateSerializer,
    StockMovementSerializer,
)
from products.services import catalog, ledger


def _truthy(raw) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes")


class ProductViewSet(viewsets.GenericViewSet):
    """
    Product endpoints.

    - GET    /products/products/?q=&category=&include_inactive=
    - POST   /products/products/
    - GET    /products/products/<id>/
    - PATCH  /products/products/<id>/
    - DELETE /products/products/<id>/            (deactivate)
    - GET    /products/products/alerts/low-stock/
    - GET    /products/products/<id>/movements/?limit=
    - POST   /products/products/<id>/movements/
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    queryset = Product.objects.select_related("category", "stock_level")

    _CAPABILITY_BY_ACTION = {
        "create": CAP_INVENTORY_EDIT,
        "partial_update": CAP_INVENTORY_EDIT,
        "update": CAP_INVENTORY_EDIT,
        "destroy": CAP_INVENTORY_EDIT,
    }

    @property
    def required_capability(self):
        if self.action == "movements" and self.request.method == "POST":
            return CAP_INVENTORY_ADJUST
        return self._CAPABILITY_BY_ACTION.get(self.action, CAP_INVENTORY_VIEW)

    def _uow(self) -> UnitOfWork:
        return UnitOfWork()

    @extend_schema(
        parameters=[
            OpenApiParameter("q", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("category", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("include_inactive", bool, OpenApiParameter.QUERY, required=False),
        ],
        responses=ProductSerializer(many=True),
    )
    def list(self, request):
        try:
            products = catalog.list_products(
                search=request.query_params.get("q") or "",
                category_id=(request.query_params.get("category") or "").strip() or None,
                include_inactive=_truthy(request.query_params.get("include_inactive")),
                uow=self._uow(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        data = ProductSerializer(products, many=True).data
        return Response({"count": len(data), "results": data})

    def retrieve(self, request, pk=None):
        product = self.get_object()
        return Response(ProductSerializer(product).data)

    @extend_schema(request=ProductWriteSerializer, responses={201: ProductSerializer})
    def create(self, request):
        s = ProductWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        try:
            product = catalog.create_product(
                name=data.pop("name"),
                sku=data.pop("sku", ""),
                category=data.pop("category", None),
                opening_stock=data.pop("opening_stock", None),
                location=data.pop("location", ""),
                actor=request.user,
                uow=self._uow(),
                **data,
            )
        except InventoryAppError as exc:
            return error_response(exc)

        product = self.get_queryset().get(pk=product.pk)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ProductWriteSerializer, responses=ProductSerializer)
    def partial_update(self, request, pk=None):
        s = ProductWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        changes = dict(s.validated_data)
        changes.pop("opening_stock", None)
        changes.pop("location", None)

        try:
            product = catalog.update_product(product_id=pk, changes=changes, uow=self._uow())
        except InventoryAppError as exc:
            return error_response(exc)

        product = self.get_queryset().get(pk=product.pk)
        return Response(ProductSerializer(product).data)

    update = partial_update

    @extend_schema(responses={200: ProductSerializer})
    def destroy(self, request, pk=None):
        try:
            product = catalog.deactivate_product(product_id=pk, uow=self._uow())
        except InventoryAppError as exc:
            return error_response(exc)
        return Response(ProductSerializer(product).data)

    # -----------------------------
    # Alerts: Low stock
    # -----------------------------
    @extend_schema(
        responses={
            200: OpenApiResponse(
                response=LowStockProductSerializer(many=True),
                description="Active products at or below reorder level, most urgent first",
            )
        }
    )
    @action(detail=False, methods=["get"], url_path="alerts/low-stock")
    def low_stock_alerts(self, request):
        """
        GET /products/products/alerts/low-stock/
        """
        products = ledger.get_low_stock_products(uow=self._uow())
        data = LowStockProductSerializer(products, many=True).data
        return Response({"count": len(data), "results": data})

    # -----------------------------
    # Stock movements
    # -----------------------------
    @extend_schema(
        methods=["GET"],
        parameters=[OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False)],
        responses=StockMovementSerializer(many=True),
    )
    @extend_schema(
        methods=["POST"],
        request=StockMovementCreateSerializer,
        responses={201: StockMovementSerializer},
    )
    @action(detail=True, methods=["get", "post"], url_path="movements")
    def movements(self, request, pk=None):
        if request.method == "GET":
            try:
                rows = ledger.get_stock_movements(
                    product_id=pk,
                    limit=request.query_params.get("limit") or ledger.DEFAULT_MOVEMENT_LIMIT,
                    uow=self._uow(),
                )
            except InventoryAppError as exc:
                return error_response(exc)
            data = StockMovementSerializer(rows, many=True).data
            return Response({"count": len(data), "results": data})

        s = StockMovementCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            movement = ledger.apply_movement(
                product_id=pk,
                quantity=data["quantity"],
                movement_type=data["movement_type"],
                reference_type=data["reference_type"],
                notes=data.get("notes", ""),
                actor=request.user,
                uow=self._uow(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
