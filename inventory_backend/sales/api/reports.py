# sales/api/reports.py

"""
SALES REPORT

GET /api/sales/reports/summary/?from=YYYY-MM-DD&to=YYYY-MM-DD

Contract:
- from / to are optional; default is the current month up to today.
- Cancelled invoices are excluded.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from django.utils import timezone
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import error_response
from core.exceptions import InventoryAppError
from core.unit_of_work import UnitOfWork
from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from sales.services.report_service import sales_report


def _serialize_report(report) -> dict:
    return {
        "from": report.date_from.isoformat(),
        "to": report.date_to.isoformat(),
        "total_sales": str(report.total_sales),
        "total_invoices": report.total_invoices,
        "paid_amount": str(report.paid_amount),
        "pending_amount": str(report.pending_amount),
        "top_products": [
            {
                **row,
                "product_id": str(row["product_id"]),
                "quantity": str(row["quantity"]),
                "revenue": str(row["revenue"]),
            }
            for row in report.top_products
        ],
        "daily_sales": [
            {**row, "date": row["date"].isoformat(), "amount": str(row["amount"])}
            for row in report.daily_sales
        ],
    }


class SalesReportView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        parameters=[
            OpenApiParameter("from", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("to", str, OpenApiParameter.QUERY, required=False),
        ],
    )
    def get(self, request):
        today = timezone.localdate()
        date_from = request.query_params.get("from") or today.replace(day=1)
        date_to = request.query_params.get("to") or today

        try:
            report = sales_report(date_from=date_from, date_to=date_to, uow=UnitOfWork())
        except InventoryAppError as exc:
            return error_response(exc)

        return Response(_serialize_report(report))
