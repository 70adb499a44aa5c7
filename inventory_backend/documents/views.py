# documents/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import error_response
from core.exceptions import InventoryAppError
from core.unit_of_work import UnitOfWork
from documents.numbering import DocumentKind, next_number
from documents.serializers import NextNumberSerializer


class NextNumberView(GenericAPIView):
    """
    GET /api/documents/next-number/?kind=INVOICE|PURCHASE_ORDER|QUOTATION

    Preview only: the number is minted again, inside the create transaction,
    when the document is actually saved.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NextNumberSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter(
                "kind",
                str,
                OpenApiParameter.QUERY,
                required=True,
                enum=DocumentKind.values,
            )
        ],
        responses=NextNumberSerializer,
    )
    def get(self, request):
        kind = (request.query_params.get("kind") or "").strip().upper()
        try:
            number = next_number(kind, uow=UnitOfWork())
        except InventoryAppError as exc:
            return error_response(exc)
        return Response({"kind": kind, "next_number": number})
