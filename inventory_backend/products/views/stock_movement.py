# products/views/stock_movement.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import error_response
from core.exceptions import InventoryAppError
from core.unit_of_work import UnitOfWork
from permissions.roles import CAP_INVENTORY_VIEW, HasCapability
from products.serializers import StockMovementSerializer
from products.services import ledger


class StockMovementListView(GenericAPIView):
    """
    GET /products/movements/?product_id=<uuid>&limit=100

    Most recent first, across all products unless product_id is given.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    serializer_class = StockMovementSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("product_id", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False),
        ],
        responses=StockMovementSerializer(many=True),
    )
    def get(self, request):
        try:
            rows = ledger.get_stock_movements(
                product_id=(request.query_params.get("product_id") or "").strip() or None,
                limit=request.query_params.get("limit") or ledger.DEFAULT_MOVEMENT_LIMIT,
                uow=UnitOfWork(),
            )
        except InventoryAppError as exc:
            return error_response(exc)

        data = StockMovementSerializer(rows, many=True).data
        return Response({"count": len(data), "results": data})
