# products/services/ledger.py

"""
======================================================
PATH: products/services/ledger.py
======================================================
LEDGER ENGINE

Purpose:
- The ONLY code path that changes StockLevel.current_stock.
- Every change appends exactly one StockMovement in the same transaction.

Rules:
- IN:         new = current + quantity
- OUT:        new = current - quantity; new < 0 -> InsufficientStockError,
              nothing is written (no level change, no movement)
- ADJUSTMENT: new = quantity (absolute set, may be zero)
- Missing StockLevel for an existing product is an integrity failure
  (ProductNotFoundError), logged on inventory.integrity, never confused with
  a normal insufficient-stock refusal.

Reads:
- get_stock_movements / get_low_stock_products are tolerant: a datastore
  failure is logged and an empty list is returned.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import DatabaseError
from django.db.models import DecimalField, ExpressionWrapper, F, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.coerce import MAX_QUANTITY, ZERO, quantity as to_quantity, to_decimal, to_int, to_uuid
from core.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    ProductNotFoundError,
    ReferenceNotFoundError,
)
from core.unit_of_work import UnitOfWork, resolve_uow
from products.models import Product, StockLevel, StockMovement
from products.signals import stock_below_reorder_level

logger = logging.getLogger("inventory.ledger")
integrity_logger = logging.getLogger("inventory.integrity")

DEFAULT_MOVEMENT_LIMIT = 100
MAX_MOVEMENT_LIMIT = 1000

_STOCK_FIELD = DecimalField(max_digits=12, decimal_places=3)


def _movement_type(value) -> str:
    try:
        return StockMovement.MovementType(value)
    except ValueError as exc:
        raise InvalidInputError(
            f"movement_type must be one of {', '.join(StockMovement.MovementType.values)}",
            field="movement_type",
        ) from exc


def _reference_type(value) -> str:
    if value in (None, ""):
        return ""
    try:
        return StockMovement.ReferenceType(value)
    except ValueError as exc:
        raise InvalidInputError(
            f"reference_type must be one of {', '.join(StockMovement.ReferenceType.values)}",
            field="reference_type",
        ) from exc


def _lock_stock_level(product_id, *, uow: UnitOfWork) -> StockLevel:
    level = (
        StockLevel.objects.using(uow.using)
        .select_for_update()
        .select_related("product")
        .filter(product_id=product_id)
        .first()
    )
    if level is not None:
        return level

    if Product.objects.using(uow.using).filter(pk=product_id).exists():
        integrity_logger.error(
            "stock level missing for existing product",
            extra={"product_id": str(product_id)},
        )
        raise ProductNotFoundError(product_id=product_id)

    raise ReferenceNotFoundError(f"Product not found: {product_id}", field="product_id")


def _crossed_reorder_level(product: Product, before: Decimal, after: Decimal) -> bool:
    level = Decimal(product.reorder_level or 0)
    return before > level >= after


def _notify_low_stock(product, before, after, movement, *, uow: UnitOfWork) -> None:
    if not getattr(settings, "LOW_STOCK_ALERTS_ENABLED", True):
        return
    if not product.is_active or not _crossed_reorder_level(product, before, after):
        return
    uow.on_commit(
        lambda: stock_below_reorder_level.send(
            sender=StockMovement,
            product=product,
            previous_stock=before,
            current_stock=after,
            movement=movement,
        )
    )


def apply_movement(
    *,
    product_id,
    quantity,
    movement_type: str,
    reference_type: str = "",
    reference_id=None,
    notes: str = "",
    actor=None,
    uow: Optional[UnitOfWork] = None,
) -> StockMovement:
    """
    Apply one stock change and append its movement record.

    Runs inside the caller's unit of work when one is open, so a failure here
    rolls back everything the caller wrote before it.
    """
    uow = resolve_uow(uow)
    product_id = to_uuid(product_id, field_name="product_id")
    mtype = _movement_type(movement_type)
    rtype = _reference_type(reference_type)
    ref_id = to_uuid(reference_id, field_name="reference_id") if reference_id else None

    raw_qty = to_decimal(quantity, field_name="quantity")
    if raw_qty > MAX_QUANTITY:
        raise InvalidInputError(f"quantity cannot exceed {MAX_QUANTITY}", field="quantity")
    qty = to_quantity(raw_qty)
    if qty < ZERO:
        raise InvalidInputError("quantity cannot be negative", field="quantity")
    if qty == ZERO and mtype != StockMovement.MovementType.ADJUSTMENT:
        raise InvalidInputError("quantity must be greater than zero", field="quantity")

    with uow.atomic():
        level = _lock_stock_level(product_id, uow=uow)
        before = Decimal(level.current_stock)

        if mtype == StockMovement.MovementType.IN:
            after = before + qty
        elif mtype == StockMovement.MovementType.OUT:
            after = before - qty
            if after < ZERO:
                logger.warning(
                    "insufficient stock",
                    extra={
                        "product_id": str(product_id),
                        "requested": str(qty),
                        "available": str(before),
                        "reference_type": rtype,
                        "reference_id": str(ref_id) if ref_id else None,
                    },
                )
                raise InsufficientStockError(
                    product_id=product_id,
                    sku=level.product.sku,
                    requested=qty,
                    available=before,
                )
        else:
            after = qty

        if after > MAX_QUANTITY:
            raise InvalidInputError(
                f"Resulting stock {after} exceeds the maximum {MAX_QUANTITY}", field="quantity"
            )

        level.current_stock = after
        level.last_updated = timezone.now()
        level.save(using=uow.using, update_fields=["current_stock", "last_updated"])

        movement = StockMovement(
            product_id=product_id,
            movement_type=mtype,
            quantity=qty,
            reference_type=rtype,
            reference_id=ref_id,
            notes=(notes or "").strip(),
            performed_by=actor if getattr(actor, "pk", None) else None,
        )
        movement.save(using=uow.using)

        _notify_low_stock(level.product, before, after, movement, uow=uow)

    logger.info(
        "stock movement applied",
        extra={
            "product_id": str(product_id),
            "movement_type": mtype,
            "quantity": str(qty),
            "stock_before": str(before),
            "stock_after": str(after),
            "reference_type": rtype,
        },
    )
    return movement


def get_stock_movements(
    product_id=None,
    limit=DEFAULT_MOVEMENT_LIMIT,
    *,
    uow: Optional[UnitOfWork] = None,
) -> list[StockMovement]:
    """Most recent first. Returns [] if the datastore cannot be read."""
    uow = resolve_uow(uow)
    limit = to_int(limit, field_name="limit")
    if limit <= 0:
        raise InvalidInputError("limit must be greater than zero", field="limit")
    limit = min(limit, MAX_MOVEMENT_LIMIT)

    if product_id not in (None, ""):
        product_id = to_uuid(product_id, field_name="product_id")

    try:
        qs = StockMovement.objects.using(uow.using).select_related("product", "performed_by")
        if product_id:
            qs = qs.filter(product_id=product_id)
        return list(qs.order_by("-created_at", "-id")[:limit])
    except DatabaseError:
        logger.exception("failed to read stock movements")
        return []


def low_stock_queryset(*, uow: Optional[UnitOfWork] = None):
    uow = resolve_uow(uow)
    stock = Coalesce(F("stock_level__current_stock"), Value(ZERO), output_field=_STOCK_FIELD)
    return (
        Product.objects.using(uow.using)
        .filter(is_active=True)
        .select_related("category")
        .annotate(stock_on_hand=stock)
        .filter(stock_on_hand__lte=F("reorder_level"))
        .annotate(
            stock_gap=ExpressionWrapper(
                F("stock_on_hand") - F("reorder_level"), output_field=_STOCK_FIELD
            )
        )
        .order_by("stock_gap", "name", "sku")
    )


def get_low_stock_products(*, uow: Optional[UnitOfWork] = None) -> list[Product]:
    """
    Active products with current_stock <= reorder_level, most urgent first.

    Each product carries `stock_on_hand` and `stock_gap` (stock minus reorder
    level, so the most negative gap sorts first). Returns [] on read failure.
    """
    try:
        return list(low_stock_queryset(uow=uow))
    except DatabaseError:
        logger.exception("failed to read low stock products")
        return []
