# sales/services/report_service.py

"""
SALES REPORT

Read-only aggregates over invoices dated within [date_from, date_to]
(inclusive). Cancelled invoices are excluded.

Tolerant read: a datastore failure is logged and an all-zero report is
returned, so dashboards degrade instead of crashing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from django.db import DatabaseError
from django.db.models import Case, Count, DecimalField, F, Sum, Value, When

from core.coerce import ZERO, money, quantity, to_date
from core.exceptions import InvalidInputError
from core.unit_of_work import UnitOfWork, resolve_uow
from sales.models import Invoice, InvoiceItem, InvoiceStatus

logger = logging.getLogger("inventory.sales")

TOP_PRODUCTS_LIMIT = 10

_MONEY_FIELD = DecimalField(max_digits=14, decimal_places=2)


@dataclass(frozen=True)
class SalesReport:
    date_from: object
    date_to: object
    total_sales: Decimal = ZERO
    total_invoices: int = 0
    paid_amount: Decimal = ZERO
    pending_amount: Decimal = ZERO
    top_products: list = field(default_factory=list)
    daily_sales: list = field(default_factory=list)


def sales_report(*, date_from, date_to, uow: Optional[UnitOfWork] = None) -> SalesReport:
    uow = resolve_uow(uow)
    date_from = to_date(date_from, field_name="from")
    date_to = to_date(date_to, field_name="to")
    if date_to < date_from:
        raise InvalidInputError("'to' must not be before 'from'", field="to")

    try:
        invoices = (
            Invoice.objects.using(uow.using)
            .filter(document_date__gte=date_from, document_date__lte=date_to)
            .exclude(status=InvoiceStatus.CANCELLED)
        )

        summary = invoices.aggregate(
            total_invoices=Count("id"),
            total_sales=Sum("total_amount"),
            paid_amount=Sum("paid_amount"),
            pending_amount=Sum(
                Case(
                    When(
                        paid_amount__lt=F("total_amount"),
                        then=F("total_amount") - F("paid_amount"),
                    ),
                    default=Value(ZERO),
                    output_field=_MONEY_FIELD,
                )
            ),
        )

        top_rows = (
            InvoiceItem.objects.using(uow.using)
            .filter(invoice__in=invoices)
            .values("product_id", "product__sku", "product__name")
            .annotate(quantity=Sum("quantity"), revenue=Sum("total_price"))
            .order_by("-revenue", "product__name")[:TOP_PRODUCTS_LIMIT]
        )

        daily_rows = (
            invoices.values("document_date")
            .annotate(amount=Sum("total_amount"), invoices=Count("id"))
            .order_by("document_date")
        )

        return SalesReport(
            date_from=date_from,
            date_to=date_to,
            total_sales=money(summary["total_sales"] or 0),
            total_invoices=summary["total_invoices"] or 0,
            paid_amount=money(summary["paid_amount"] or 0),
            pending_amount=money(summary["pending_amount"] or 0),
            top_products=[
                {
                    "product_id": row["product_id"],
                    "sku": row["product__sku"],
                    "product_name": row["product__name"],
                    "quantity": quantity(row["quantity"] or 0),
                    "revenue": money(row["revenue"] or 0),
                }
                for row in top_rows
            ],
            daily_sales=[
                {
                    "date": row["document_date"],
                    "amount": money(row["amount"] or 0),
                    "invoices": row["invoices"],
                }
                for row in daily_rows
            ],
        )
    except DatabaseError:
        logger.exception(
            "failed to build sales report",
            extra={"date_from": str(date_from), "date_to": str(date_to)},
        )
        return SalesReport(date_from=date_from, date_to=date_to)
