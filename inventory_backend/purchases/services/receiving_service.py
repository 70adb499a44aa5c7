# purchases/services/receiving_service.py

"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
PURCHASE RECEIVING SERVICE

Receive a PurchaseOrder atomically.

Canonical flow:
1) Lock order
2) Validate status + requested receipts (before any write)
3) Per received line: bump received_quantity, IN movement via the ledger
   (reference PURCHASE_ORDER)
4) Status -> Partially Received / Received

Rules:
- receipts=None receives everything still pending.
- receipts is a list of {"item_id", "quantity"}; lines not listed are untouched.
- A line can never receive more than was ordered.
- Cancelled / fully Received orders cannot be received.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from core.coerce import ZERO, quantity as to_quantity, to_decimal, to_uuid
from core.exceptions import InvalidInputError, InvalidTransitionError, ReferenceNotFoundError
from core.unit_of_work import UnitOfWork, resolve_uow
from products.models import StockMovement
from products.services.ledger import apply_movement
from purchases.models import PurchaseOrder, PurchaseOrderStatus
from purchases.services.order_service import lock_purchase_order

logger = logging.getLogger("inventory.purchases")

RECEIVABLE_STATES = {
    PurchaseOrderStatus.PENDING,
    PurchaseOrderStatus.PARTIALLY_RECEIVED,
}


def _plan_receipts(items, receipts: Optional[Iterable[Mapping]]) -> list[tuple]:
    """
    Returns [(item, quantity)] with every quantity validated against what is
    still pending on the line.
    """
    if receipts is None:
        return [(item, item.pending_quantity) for item in items if item.pending_quantity > ZERO]

    by_id = {item.id: item for item in items}
    requested: dict = {}

    for index, receipt in enumerate(receipts):
        if not isinstance(receipt, Mapping):
            raise InvalidInputError("Receipt must be an object", field=f"receipts[{index}]")

        item_field = f"receipts[{index}].item_id"
        qty_field = f"receipts[{index}].quantity"

        item_id = to_uuid(receipt.get("item_id"), field_name=item_field)
        item = by_id.get(item_id)
        if item is None:
            raise ReferenceNotFoundError(
                f"Line {item_id} does not belong to this purchase order", field=item_field
            )

        qty = to_quantity(to_decimal(receipt.get("quantity"), field_name=qty_field))
        if qty <= ZERO:
            raise InvalidInputError(f"{qty_field} must be greater than zero", field=qty_field)

        requested[item_id] = requested.get(item_id, ZERO) + qty
        if requested[item_id] > item.pending_quantity:
            raise InvalidInputError(
                f"Cannot receive {requested[item_id]} of {item.product.sku}; "
                f"only {item.pending_quantity} pending",
                field=qty_field,
            )

    return [(by_id[item_id], qty) for item_id, qty in requested.items()]


def receive_purchase_order(
    *,
    order_id,
    receipts: Optional[Iterable[Mapping]] = None,
    actor=None,
    uow: Optional[UnitOfWork] = None,
) -> PurchaseOrder:
    uow = resolve_uow(uow)

    with uow.atomic():
        order = lock_purchase_order(order_id, uow=uow)

        if order.status not in RECEIVABLE_STATES:
            raise InvalidTransitionError(
                f"Purchase order {order.document_number} cannot be received from '{order.status}'"
            )

        items = list(
            order.items.using(uow.using).select_related("product").order_by("created_at", "id")
        )
        plan = _plan_receipts(items, list(receipts) if receipts is not None else None)
        if not plan:
            raise InvalidInputError("Nothing to receive", field="receipts")

        for item, qty in plan:
            item.received_quantity = Decimal(item.received_quantity or 0) + qty
            item.save(using=uow.using, update_fields=["received_quantity"])

            apply_movement(
                product_id=item.product_id,
                quantity=qty,
                movement_type=StockMovement.MovementType.IN,
                reference_type=StockMovement.ReferenceType.PURCHASE_ORDER,
                reference_id=order.id,
                notes=f"Received against {order.document_number}",
                actor=actor,
                uow=uow,
            )

        fully_received = all(item.pending_quantity <= ZERO for item in items)
        order.status = (
            PurchaseOrderStatus.RECEIVED if fully_received else PurchaseOrderStatus.PARTIALLY_RECEIVED
        )
        order.save(using=uow.using, update_fields=["status", "updated_at"])

    logger.info(
        "purchase order received",
        extra={
            "purchase_order_id": str(order.id),
            "lines_received": len(plan),
            "status": order.status,
        },
    )
    return order
