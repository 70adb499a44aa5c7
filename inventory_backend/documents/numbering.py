# documents/numbering.py

"""
DOCUMENT NUMBERING

Sequential, zero-padded, prefixed numbers per document kind:
    INV0001, INV0002, ... PO0001 ... QUO0001

Rules:
- The next number is derived from the highest number already issued for the
  kind's current prefix (suffix parsed as an integer, +1, re-padded).
- Padding is a minimum width: INV9999 -> INV10000. The "highest" lookup
  orders by length first so the sequence keeps increasing past the width.
- Minting happens inside the caller's unit of work, under the writer lock,
  in the same transaction as the insert. The unique constraint on
  document_number is the last line of defence.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.apps import apps
from django.conf import settings
from django.db import models
from django.db.models.functions import Length

from core.exceptions import InvalidInputError
from core.unit_of_work import UnitOfWork, resolve_uow

logger = logging.getLogger("inventory.sales")


class DocumentKind(models.TextChoices):
    INVOICE = "INVOICE", "Invoice"
    PURCHASE_ORDER = "PURCHASE_ORDER", "Purchase Order"
    QUOTATION = "QUOTATION", "Quotation"


DEFAULT_PREFIXES = {
    DocumentKind.INVOICE: "INV",
    DocumentKind.PURCHASE_ORDER: "PO",
    DocumentKind.QUOTATION: "QUO",
}

DEFAULT_WIDTH = 4

_MODEL_BY_KIND = {
    DocumentKind.INVOICE: "sales.Invoice",
    DocumentKind.PURCHASE_ORDER: "purchases.PurchaseOrder",
    DocumentKind.QUOTATION: "sales.Quotation",
}


def _kind(kind) -> DocumentKind:
    try:
        return DocumentKind(kind)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown document kind: {kind}", field="kind") from exc


def prefix_for(kind) -> str:
    kind = _kind(kind)
    configured = {
        str(key).lower(): value
        for key, value in (getattr(settings, "DOCUMENT_NUMBER_PREFIXES", {}) or {}).items()
    }
    return (configured.get(kind.value.lower()) or DEFAULT_PREFIXES[kind]).strip()


def number_width() -> int:
    return int(getattr(settings, "DOCUMENT_NUMBER_WIDTH", DEFAULT_WIDTH))


def format_number(kind, sequence: int) -> str:
    if sequence < 1:
        raise InvalidInputError("sequence must be at least 1", field="sequence")
    return f"{prefix_for(kind)}{sequence:0{number_width()}d}"


def parse_number(kind, number: str) -> Optional[int]:
    """Return the numeric suffix of `number`, or None if it is not ours."""
    prefix = prefix_for(kind)
    if not number or not number.startswith(prefix):
        return None
    suffix = number[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def _model_for(kind):
    return apps.get_model(_MODEL_BY_KIND[_kind(kind)])


def last_issued_sequence(kind, *, uow: UnitOfWork) -> int:
    model = _model_for(kind)
    numbers = (
        model._base_manager.using(uow.using)
        .filter(document_number__startswith=prefix_for(kind))
        .annotate(_number_length=Length("document_number"))
        .order_by("-_number_length", "-document_number")
        .values_list("document_number", flat=True)
    )
    for number in numbers.iterator():
        sequence = parse_number(kind, number)
        if sequence is not None:
            return sequence
    return 0


def next_number(kind, uow: Optional[UnitOfWork] = None) -> str:
    kind = _kind(kind)
    uow = resolve_uow(uow)
    with uow.atomic():
        number = format_number(kind, last_issued_sequence(kind, uow=uow) + 1)
    logger.debug("minted document number", extra={"kind": kind.value, "number": number})
    return number
