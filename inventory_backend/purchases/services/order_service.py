# purchases/services/order_service.py

"""
PURCHASE ORDER CREATION / CANCELLATION

Rules:
- Numbering + totals follow the same path as sales documents.
- unit_price defaults to the product's purchase price.
- No stock effect. Stock arrives on receiving only.
- Only Pending orders can be cancelled (nothing received yet).
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from django.db import IntegrityError
from django.utils import timezone

from core.coerce import to_date, to_uuid
from core.exceptions import (
    DuplicateDocumentNumberError,
    InvalidInputError,
    InvalidTransitionError,
    ReferenceNotFoundError,
)
from core.unit_of_work import UnitOfWork, resolve_uow
from documents.lines import PRICE_PURCHASE, resolve_lines
from documents.numbering import DocumentKind, next_number
from documents.totals import compute_document_totals
from purchases.models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus, Supplier

logger = logging.getLogger("inventory.purchases")


def get_active_supplier(supplier_id, *, uow: UnitOfWork) -> Supplier:
    supplier_id = to_uuid(supplier_id, field_name="supplier_id")
    supplier = Supplier.objects.using(uow.using).filter(pk=supplier_id).first()
    if supplier is None:
        raise ReferenceNotFoundError(f"Supplier not found: {supplier_id}", field="supplier_id")
    if not supplier.is_active:
        raise InvalidInputError(f"Supplier {supplier.name} is inactive", field="supplier_id")
    return supplier


def lock_purchase_order(order_id, *, uow: UnitOfWork) -> PurchaseOrder:
    order_id = to_uuid(order_id, field_name="order_id")
    order = (
        PurchaseOrder.objects.using(uow.using)
        .select_for_update()
        .filter(pk=order_id)
        .first()
    )
    if order is None:
        raise ReferenceNotFoundError(f"Purchase order not found: {order_id}", field="order_id")
    return order


def create_purchase_order(
    *,
    supplier_id,
    items: Iterable[Mapping],
    document_date=None,
    expected_delivery=None,
    notes: str = "",
    actor=None,
    uow: Optional[UnitOfWork] = None,
) -> PurchaseOrder:
    uow = resolve_uow(uow)

    document_date = to_date(document_date, field_name="document_date") if document_date else timezone.localdate()
    if expected_delivery:
        expected_delivery = to_date(expected_delivery, field_name="expected_delivery")
        if expected_delivery < document_date:
            raise InvalidInputError(
                "expected_delivery cannot be before document_date", field="expected_delivery"
            )

    with uow.atomic():
        supplier = get_active_supplier(supplier_id, uow=uow)
        lines = resolve_lines(items, uow=uow, price_field=PRICE_PURCHASE)

        subtotal, tax_amount, total_amount = compute_document_totals(
            line.totals for line in lines
        ).persisted()

        number = next_number(DocumentKind.PURCHASE_ORDER, uow=uow)

        order = PurchaseOrder(
            document_number=number,
            document_date=document_date,
            supplier=supplier,
            expected_delivery=expected_delivery or None,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=total_amount,
            status=PurchaseOrderStatus.PENDING,
            notes=(notes or "").strip(),
            created_by=actor if getattr(actor, "pk", None) else None,
        )
        try:
            order.save(using=uow.using)
        except IntegrityError as exc:
            raise DuplicateDocumentNumberError(f"Purchase order number already exists: {number}") from exc

        for line in lines:
            PurchaseOrderItem(purchase_order=order, **line.as_model_kwargs()).save(using=uow.using)

    logger.info(
        "purchase order created",
        extra={
            "purchase_order_id": str(order.id),
            "po_number": number,
            "lines": len(lines),
            "total_amount": str(total_amount),
        },
    )
    return order


def cancel_purchase_order(*, order_id, uow: Optional[UnitOfWork] = None) -> PurchaseOrder:
    uow = resolve_uow(uow)

    with uow.atomic():
        order = lock_purchase_order(order_id, uow=uow)
        if order.status != PurchaseOrderStatus.PENDING:
            raise InvalidTransitionError(
                f"Purchase order {order.document_number} cannot be cancelled from '{order.status}'"
            )
        order.status = PurchaseOrderStatus.CANCELLED
        order.save(using=uow.using, update_fields=["status", "updated_at"])

    logger.info("purchase order cancelled", extra={"purchase_order_id": str(order.id)})
    return order
