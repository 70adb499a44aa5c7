# core/coerce.py

"""
Input coercion helpers shared by services.

Rules:
- Money is stored at 2 dp, quantities at 3 dp, both ROUND_HALF_UP.
- Arithmetic happens on unrounded Decimals; rounding is applied only when a
  value is persisted.
- Bad input raises InvalidInputError carrying the offending field name.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.exceptions import InvalidInputError

TWOPLACES = Decimal("0.01")
QTY_PLACES = Decimal("0.001")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Largest values the stored DecimalFields hold: quantities (12, 3),
# unit prices (12, 2), line and document amounts (14, 2).
MAX_QUANTITY = Decimal("999999999.999")
MAX_UNIT_PRICE = Decimal("9999999999.99")
MAX_AMOUNT = Decimal("999999999999.99")


def to_decimal(value, *, field_name: str = "value") -> Decimal:
    if value is None or value == "" or value == "null":
        raise InvalidInputError(f"{field_name} is required", field=field_name)
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a number", field=field_name)
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError(
            f"{field_name} must be a valid decimal", field=field_name
        ) from exc
    if not result.is_finite():
        raise InvalidInputError(f"{field_name} must be a finite number", field=field_name)
    return result


def to_int(value, *, field_name: str = "value") -> int:
    if value is None or value == "":
        raise InvalidInputError(f"{field_name} is required", field=field_name)
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be an integer", field=field_name)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{field_name} must be an integer", field=field_name) from exc


def to_uuid(value, *, field_name: str = "id") -> uuid.UUID:
    if value in (None, ""):
        raise InvalidInputError(f"{field_name} is required", field=field_name)
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except ValueError as exc:
        raise InvalidInputError(f"{field_name} must be a valid id", field=field_name) from exc


def money(value) -> Decimal:
    return Decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def quantity(value) -> Decimal:
    return Decimal(value).quantize(QTY_PLACES, rounding=ROUND_HALF_UP)


def to_date(value, *, field_name: str = "date") -> date:
    """Accepts a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value in (None, ""):
        raise InvalidInputError(f"{field_name} is required", field=field_name)
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidInputError(f"{field_name} must be YYYY-MM-DD", field=field_name) from exc
