# products/services/catalog.py

"""
CATALOG SERVICES

Purpose:
- Create products together with their StockLevel (paired creation).
- Generate SKUs from category + name.
- Update / deactivate products (never delete).

Rules:
- SKU is unique (case-insensitive check, DB unique constraint as backstop).
- Opening stock, when given, goes through the ledger as an IN movement.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError
from django.db.models import Q

from core.coerce import ZERO, money, to_decimal, to_int, to_uuid
from core.exceptions import DuplicateSkuError, InvalidInputError, ReferenceNotFoundError
from core.unit_of_work import UnitOfWork, resolve_uow
from products.models import Category, Product, StockLevel, StockMovement
from products.services.ledger import apply_movement

logger = logging.getLogger("inventory.ledger")

UPDATABLE_FIELDS = (
    "sku",
    "name",
    "description",
    "category",
    "unit",
    "purchase_price",
    "selling_price",
    "reorder_level",
    "barcode",
    "hsn_code",
    "tax_rate",
    "is_active",
)

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def generate_sku(category_name: str, name: str, *, timestamp_ms: Optional[int] = None) -> str:
    """
    CAT + NAM + last 4 digits of the millisecond clock, e.g. PLY + MAR + 4821.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    category_part = (category_name or "GEN").strip()[:3].upper()
    name_part = _NON_ALNUM.sub("", name or "")[:3].upper()
    return f"{category_part}{name_part}{str(timestamp_ms)[-4:]}"


def _sku_taken(sku: str, *, uow: UnitOfWork, exclude_id=None) -> bool:
    qs = Product.objects.using(uow.using).filter(sku__iexact=sku)
    if exclude_id:
        qs = qs.exclude(pk=exclude_id)
    return qs.exists()


def _unique_generated_sku(base: str, *, uow: UnitOfWork) -> str:
    candidate = base
    suffix = 1
    while _sku_taken(candidate, uow=uow):
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate


def _resolve_category(value, *, uow: UnitOfWork) -> Optional[Category]:
    if value in (None, ""):
        return None
    if isinstance(value, Category):
        return value
    category_id = to_uuid(value, field_name="category")
    category = Category.objects.using(uow.using).filter(pk=category_id).first()
    if category is None:
        raise ReferenceNotFoundError(f"Category not found: {category_id}", field="category")
    return category


def _non_negative_money(value, *, field_name: str):
    amount = money(to_decimal(value, field_name=field_name))
    if amount < ZERO:
        raise InvalidInputError(f"{field_name} cannot be negative", field=field_name)
    return amount


def _percent(value, *, field_name: str):
    rate = money(to_decimal(value, field_name=field_name))
    if rate < ZERO or rate > 100:
        raise InvalidInputError(f"{field_name} must be between 0 and 100", field=field_name)
    return rate


def _reorder_level(value) -> int:
    level = to_int(value, field_name="reorder_level")
    if level < 0:
        raise InvalidInputError("reorder_level cannot be negative", field="reorder_level")
    return level


def _normalize(data: dict, *, uow: UnitOfWork) -> dict:
    clean = {}
    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            raise InvalidInputError("name is required", field="name")
        clean["name"] = name
    if "category" in data:
        clean["category"] = _resolve_category(data.get("category"), uow=uow)
    for field_name in ("purchase_price", "selling_price"):
        if data.get(field_name) not in (None, ""):
            clean[field_name] = _non_negative_money(data[field_name], field_name=field_name)
    if data.get("tax_rate") not in (None, ""):
        clean["tax_rate"] = _percent(data["tax_rate"], field_name="tax_rate")
    if data.get("reorder_level") not in (None, ""):
        clean["reorder_level"] = _reorder_level(data["reorder_level"])
    for field_name in ("description", "unit", "barcode", "hsn_code"):
        if field_name in data and data[field_name] is not None:
            clean[field_name] = str(data[field_name]).strip()
    if "is_active" in data:
        clean["is_active"] = bool(data["is_active"])
    return clean


def create_product(
    *,
    name: str,
    sku: str = "",
    category=None,
    actor=None,
    opening_stock=None,
    location: str = "",
    uow: Optional[UnitOfWork] = None,
    **fields,
) -> Product:
    """
    Create a product and its StockLevel in one unit of work.

    Extra keyword fields: description, unit, purchase_price, selling_price,
    reorder_level, barcode, hsn_code, tax_rate, is_active.
    """
    uow = resolve_uow(uow)
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidInputError(f"Unknown product fields: {', '.join(sorted(unknown))}")

    with uow.atomic():
        data = _normalize({"name": name, "category": category, **fields}, uow=uow)
        if "tax_rate" not in data:
            data["tax_rate"] = _percent(
                getattr(settings, "DEFAULT_TAX_RATE", "18.00"), field_name="tax_rate"
            )

        sku = (sku or "").strip().upper()
        if sku:
            if _sku_taken(sku, uow=uow):
                raise DuplicateSkuError(f"SKU already exists: {sku}")
        else:
            category_obj = data.get("category")
            sku = _unique_generated_sku(
                generate_sku(category_obj.name if category_obj else "", data["name"]),
                uow=uow,
            )

        try:
            product = Product(sku=sku, **data)
            product.save(using=uow.using)
        except IntegrityError as exc:
            raise DuplicateSkuError(f"SKU already exists: {sku}") from exc
        except ValidationError as exc:
            raise InvalidInputError.from_validation_error(exc) from exc

        StockLevel.objects.using(uow.using).create(
            product=product,
            location=(location or "").strip() or "Main Store",
        )

        if opening_stock not in (None, "", 0):
            apply_movement(
                product_id=product.id,
                quantity=opening_stock,
                movement_type=StockMovement.MovementType.IN,
                reference_type=StockMovement.ReferenceType.OPENING,
                notes="Opening stock",
                actor=actor,
                uow=uow,
            )

    logger.info("product created", extra={"product_id": str(product.id), "sku": sku})
    return product


def update_product(*, product_id, changes: dict, uow: Optional[UnitOfWork] = None) -> Product:
    uow = resolve_uow(uow)
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidInputError(f"Unknown product fields: {', '.join(sorted(unknown))}")

    with uow.atomic():
        product = _get_product(product_id, uow=uow)
        data = _normalize(changes, uow=uow)

        if "sku" in changes:
            new_sku = (changes.get("sku") or "").strip().upper()
            if not new_sku:
                raise InvalidInputError("sku cannot be blank", field="sku")
            if new_sku != product.sku:
                if _sku_taken(new_sku, uow=uow, exclude_id=product.pk):
                    raise DuplicateSkuError(f"SKU already exists: {new_sku}")
                if product.is_referenced(using=uow.using):
                    raise InvalidInputError(
                        "SKU cannot change once the product has movements or documents",
                        field="sku",
                    )
                data["sku"] = new_sku

        for key, value in data.items():
            setattr(product, key, value)

        try:
            product.save(using=uow.using)
        except ValidationError as exc:
            raise InvalidInputError.from_validation_error(exc) from exc

    return product


def deactivate_product(*, product_id, uow: Optional[UnitOfWork] = None) -> Product:
    uow = resolve_uow(uow)
    with uow.atomic():
        product = _get_product(product_id, uow=uow)
        if product.is_active:
            product.is_active = False
            product.save(using=uow.using, update_fields=["is_active", "updated_at"])
            logger.info("product deactivated", extra={"product_id": str(product.id)})
    return product


def _get_product(product_id, *, uow: UnitOfWork) -> Product:
    product_id = to_uuid(product_id, field_name="product_id")
    product = Product.objects.using(uow.using).filter(pk=product_id).first()
    if product is None:
        raise ReferenceNotFoundError(f"Product not found: {product_id}", field="product_id")
    return product


def list_products(
    *,
    search: str = "",
    category_id=None,
    include_inactive: bool = False,
    uow: Optional[UnitOfWork] = None,
) -> list[Product]:
    """Catalog listing with current stock attached. Returns [] on read failure."""
    uow = resolve_uow(uow)
    try:
        qs = Product.objects.using(uow.using).select_related("category", "stock_level")
        if not include_inactive:
            qs = qs.filter(is_active=True)
        if category_id:
            qs = qs.filter(category_id=to_uuid(category_id, field_name="category_id"))
        search = (search or "").strip()
        if search:
            qs = qs.filter(
                Q(name__icontains=search) | Q(sku__icontains=search) | Q(barcode__iexact=search)
            )
        return list(qs.order_by("name"))
    except DatabaseError:
        logger.exception("failed to list products")
        return []
