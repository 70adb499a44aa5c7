# documents/lines.py

"""
LINE ITEM RESOLUTION

Turns raw line requests into validated, priced lines before anything is
written.

Rules:
- At least one line
- Every product resolves and is active
- quantity > 0
- unit_price >= 0 (defaults to the product's selling or purchase price)
- discount_percent and tax_rate in [0, 100]
- tax_rate defaults to the product's tax_rate (snapshotted on the line)
- quantity, unit_price, each line total and the document total fit the
  columns they are stored in

Errors are field-level: "items[2].quantity", "items[0].product_id".
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

from core.coerce import (
    HUNDRED,
    MAX_AMOUNT,
    MAX_QUANTITY,
    MAX_UNIT_PRICE,
    ZERO,
    money,
    quantity as to_quantity,
    to_decimal,
    to_uuid,
)
from core.exceptions import InvalidInputError, ReferenceNotFoundError
from core.unit_of_work import UnitOfWork
from documents.totals import LineTotals, compute_document_totals, compute_line_totals

PRICE_SELLING = "selling_price"
PRICE_PURCHASE = "purchase_price"


@dataclass(frozen=True)
class ResolvedLine:
    product: Any
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal
    tax_rate: Decimal
    totals: LineTotals

    def as_model_kwargs(self) -> dict:
        return {
            "product": self.product,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "discount_percent": self.discount_percent,
            "tax_rate": self.tax_rate,
        }


def _field(index: int, name: str) -> str:
    return f"items[{index}].{name}"


def _percent(raw, *, field: str, default) -> Decimal:
    value = to_decimal(default if raw in (None, "") else raw, field_name=field)
    if value < ZERO or value > HUNDRED:
        raise InvalidInputError(f"{field} must be between 0 and 100", field=field)
    return money(value)


def resolve_lines(
    items: Iterable[Mapping],
    *,
    uow: UnitOfWork,
    price_field: str = PRICE_SELLING,
) -> list[ResolvedLine]:
    from products.models import Product

    items = list(items or [])
    if not items:
        raise InvalidInputError("At least one line item is required", field="items")

    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise InvalidInputError("Line item must be an object", field=f"items[{index}]")

    product_ids = [
        to_uuid(item.get("product_id"), field_name=_field(i, "product_id"))
        for i, item in enumerate(items)
    ]
    products = Product.objects.using(uow.using).in_bulk(set(product_ids))

    resolved: list[ResolvedLine] = []
    for index, (item, product_id) in enumerate(zip(items, product_ids)):
        product = products.get(product_id)
        if product is None:
            raise ReferenceNotFoundError(
                f"Product not found: {product_id}", field=_field(index, "product_id")
            )
        if not product.is_active:
            raise InvalidInputError(
                f"Product {product.sku} is inactive", field=_field(index, "product_id")
            )

        qty_field = _field(index, "quantity")
        raw_qty = to_decimal(item.get("quantity"), field_name=qty_field)
        if raw_qty > MAX_QUANTITY:
            raise InvalidInputError(f"{qty_field} cannot exceed {MAX_QUANTITY}", field=qty_field)
        qty = to_quantity(raw_qty)
        if qty <= ZERO:
            raise InvalidInputError(f"{qty_field} must be greater than zero", field=qty_field)

        price_field_name = _field(index, "unit_price")
        raw_price = item.get("unit_price")
        if raw_price in (None, ""):
            raw_price = getattr(product, price_field)
        raw_price = to_decimal(raw_price, field_name=price_field_name)
        if raw_price < ZERO:
            raise InvalidInputError(
                f"{price_field_name} cannot be negative", field=price_field_name
            )
        if raw_price > MAX_UNIT_PRICE:
            raise InvalidInputError(
                f"{price_field_name} cannot exceed {MAX_UNIT_PRICE}", field=price_field_name
            )
        price = money(raw_price)

        discount = _percent(
            item.get("discount_percent"), field=_field(index, "discount_percent"), default=ZERO
        )
        tax_rate = _percent(
            item.get("tax_rate"), field=_field(index, "tax_rate"), default=product.tax_rate
        )

        totals = compute_line_totals(
            quantity=qty,
            unit_price=price,
            discount_percent=discount,
            tax_rate=tax_rate,
        )
        if totals.persisted_total > MAX_AMOUNT:
            raise InvalidInputError(
                f"Line total {totals.persisted_total} exceeds the maximum amount {MAX_AMOUNT}",
                field=qty_field,
            )

        resolved.append(
            ResolvedLine(
                product=product,
                quantity=qty,
                unit_price=price,
                discount_percent=discount,
                tax_rate=tax_rate,
                totals=totals,
            )
        )

    _, _, total_amount = compute_document_totals(line.totals for line in resolved).persisted()
    if total_amount > MAX_AMOUNT:
        raise InvalidInputError(
            f"Document total {total_amount} exceeds the maximum amount {MAX_AMOUNT}",
            field="items",
        )

    return resolved
