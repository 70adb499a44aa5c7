# sales/services/quotation_service.py

"""
QUOTATIONS

- create_quotation: numbering + totals, no stock effect
- transition_quotation: Draft -> Sent -> {Accepted, Rejected, Expired}
- expire_quotations: Sent quotations past valid_until become Expired
- convert_quotation_to_invoice: Accepted quotation -> Invoice, exactly once,
  in the same unit of work as the invoice creation
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
from documents.lines import PRICE_SELLING, resolve_lines
from documents.numbering import DocumentKind, next_number
from documents.totals import compute_document_totals
from sales.models import Invoice, Quotation, QuotationItem, QuotationStatus
from sales.models.quotation import default_valid_until
from sales.services.invoice_service import create_invoice, get_active_customer
from sales.services.quotation_lifecycle import validate_transition

logger = logging.getLogger("inventory.sales")


def create_quotation(
    *,
    customer_id,
    items: Iterable[Mapping],
    document_date=None,
    valid_until=None,
    notes: str = "",
    terms_conditions: str = "",
    actor=None,
    uow: Optional[UnitOfWork] = None,
) -> Quotation:
    uow = resolve_uow(uow)

    document_date = to_date(document_date, field_name="document_date") if document_date else timezone.localdate()
    valid_until = to_date(valid_until, field_name="valid_until") if valid_until else default_valid_until()
    if valid_until < document_date:
        raise InvalidInputError("valid_until cannot be before document_date", field="valid_until")

    with uow.atomic():
        customer = get_active_customer(customer_id, uow=uow)
        lines = resolve_lines(items, uow=uow, price_field=PRICE_SELLING)

        subtotal, tax_amount, total_amount = compute_document_totals(
            line.totals for line in lines
        ).persisted()

        number = next_number(DocumentKind.QUOTATION, uow=uow)

        quotation = Quotation(
            document_number=number,
            document_date=document_date,
            customer=customer,
            valid_until=valid_until,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=total_amount,
            notes=(notes or "").strip(),
            terms_conditions=(terms_conditions or "").strip(),
            created_by=actor if getattr(actor, "pk", None) else None,
        )
        try:
            quotation.save(using=uow.using)
        except IntegrityError as exc:
            raise DuplicateDocumentNumberError(f"Quotation number already exists: {number}") from exc

        for line in lines:
            QuotationItem(quotation=quotation, **line.as_model_kwargs()).save(using=uow.using)

    logger.info(
        "quotation created",
        extra={"quotation_id": str(quotation.id), "quote_number": number},
    )
    return quotation


def _lock_quotation(quotation_id, *, uow: UnitOfWork) -> Quotation:
    quotation_id = to_uuid(quotation_id, field_name="quotation_id")
    quotation = (
        Quotation.objects.using(uow.using)
        .select_for_update()
        .filter(pk=quotation_id)
        .first()
    )
    if quotation is None:
        raise ReferenceNotFoundError(f"Quotation not found: {quotation_id}", field="quotation_id")
    return quotation


def transition_quotation(
    *,
    quotation_id,
    target_status: str,
    uow: Optional[UnitOfWork] = None,
) -> Quotation:
    uow = resolve_uow(uow)
    try:
        target_status = QuotationStatus(target_status)
    except ValueError as exc:
        raise InvalidInputError(
            f"status must be one of {', '.join(QuotationStatus.values)}", field="status"
        ) from exc

    with uow.atomic():
        quotation = _lock_quotation(quotation_id, uow=uow)
        validate_transition(quotation=quotation, target_status=target_status)
        previous = quotation.status
        quotation.status = target_status
        quotation.save(using=uow.using, update_fields=["status", "updated_at"])

    logger.info(
        "quotation status changed",
        extra={
            "quotation_id": str(quotation.id),
            "from_status": previous,
            "to_status": target_status,
        },
    )
    return quotation


def expire_quotations(*, as_of=None, uow: Optional[UnitOfWork] = None) -> int:
    uow = resolve_uow(uow)
    as_of = to_date(as_of, field_name="as_of") if as_of else timezone.localdate()

    with uow.atomic():
        changed = (
            Quotation.objects.using(uow.using)
            .filter(status=QuotationStatus.SENT, valid_until__lt=as_of)
            .update(status=QuotationStatus.EXPIRED, updated_at=timezone.now())
        )

    if changed:
        logger.info("quotations expired", extra={"count": changed, "as_of": str(as_of)})
    return changed


def convert_quotation_to_invoice(
    *,
    quotation_id,
    actor=None,
    uow: Optional[UnitOfWork] = None,
) -> Invoice:
    """
    Re-run invoice creation with the quotation's lines (prices, discounts
    and tax snapshots carried over). Stock is deducted at this point, not
    when the quotation was made.
    """
    uow = resolve_uow(uow)

    with uow.atomic():
        quotation = _lock_quotation(quotation_id, uow=uow)

        if quotation.status != QuotationStatus.ACCEPTED:
            raise InvalidTransitionError(
                f"Quotation {quotation.document_number} must be Accepted before conversion "
                f"(current status '{quotation.status}')"
            )
        if quotation.converted_invoice_id:
            raise InvalidTransitionError(
                f"Quotation {quotation.document_number} was already converted"
            )

        items = [
            {
                "product_id": item.product_id,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "discount_percent": item.discount_percent,
                "tax_rate": item.tax_rate,
            }
            for item in quotation.items.using(uow.using).all()
        ]

        invoice = create_invoice(
            customer_id=quotation.customer_id,
            items=items,
            notes=f"Converted from quotation {quotation.document_number}",
            actor=actor,
            uow=uow,
        )

        quotation.converted_invoice = invoice
        quotation.save(using=uow.using, update_fields=["converted_invoice", "updated_at"])

    logger.info(
        "quotation converted",
        extra={"quotation_id": str(quotation.id), "invoice_id": str(invoice.id)},
    )
    return invoice
