# sales/services/invoice_service.py

"""
INVOICE CREATION

SINGLE SOURCE OF TRUTH for:
- Invoice number minting
- Invoice + InvoiceItem creation
- Stock deduction (one OUT movement per line, via the ledger)
- Totals calculation

GUARANTEES:
- Fully atomic: if any line fails (e.g. insufficient stock) the header,
  every item already written and every movement already applied roll back.
  Partial invoices never exist.
- Validation happens before the first write.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Mapping, Optional

from django.db import IntegrityError
from django.utils import timezone

from core.coerce import to_date, to_uuid
from core.exceptions import DuplicateDocumentNumberError, InvalidInputError, ReferenceNotFoundError
from core.unit_of_work import UnitOfWork, resolve_uow
from documents.lines import PRICE_SELLING, resolve_lines
from documents.numbering import DocumentKind, next_number
from documents.totals import compute_document_totals
from products.models import StockMovement
from products.services.ledger import apply_movement
from sales.models import Customer, Invoice, InvoiceItem, InvoiceStatus
from sales.services.payment_service import derive_invoice_status

logger = logging.getLogger("inventory.sales")


def get_active_customer(customer_id, *, uow: UnitOfWork) -> Customer:
    customer_id = to_uuid(customer_id, field_name="customer_id")
    customer = Customer.objects.using(uow.using).filter(pk=customer_id).first()
    if customer is None:
        raise ReferenceNotFoundError(f"Customer not found: {customer_id}", field="customer_id")
    if not customer.is_active:
        raise InvalidInputError(f"Customer {customer.name} is inactive", field="customer_id")
    return customer


def create_invoice(
    *,
    customer_id,
    items: Iterable[Mapping],
    document_date=None,
    due_date=None,
    notes: str = "",
    actor=None,
    uow: Optional[UnitOfWork] = None,
) -> Invoice:
    uow = resolve_uow(uow)

    document_date = to_date(document_date, field_name="document_date") if document_date else timezone.localdate()
    if due_date:
        due_date = to_date(due_date, field_name="due_date")
        if due_date < document_date:
            raise InvalidInputError("due_date cannot be before document_date", field="due_date")

    with uow.atomic():
        customer = get_active_customer(customer_id, uow=uow)
        lines = resolve_lines(items, uow=uow, price_field=PRICE_SELLING)

        subtotal, tax_amount, total_amount = compute_document_totals(
            line.totals for line in lines
        ).persisted()

        if due_date is None and customer.payment_terms:
            due_date = document_date + timedelta(days=customer.payment_terms)

        number = next_number(DocumentKind.INVOICE, uow=uow)

        invoice = Invoice(
            document_number=number,
            document_date=document_date,
            customer=customer,
            due_date=due_date,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=total_amount,
            paid_amount=0,
            status=derive_invoice_status(
                total_amount=total_amount,
                paid_amount=0,
                current_status=InvoiceStatus.PENDING,
            ),
            notes=(notes or "").strip(),
            created_by=actor if getattr(actor, "pk", None) else None,
        )
        try:
            invoice.save(using=uow.using)
        except IntegrityError as exc:
            raise DuplicateDocumentNumberError(f"Invoice number already exists: {number}") from exc

        for line in lines:
            InvoiceItem(invoice=invoice, **line.as_model_kwargs()).save(using=uow.using)

            # SINGLE STOCK EXIT POINT
            apply_movement(
                product_id=line.product.id,
                quantity=line.quantity,
                movement_type=StockMovement.MovementType.OUT,
                reference_type=StockMovement.ReferenceType.INVOICE,
                reference_id=invoice.id,
                notes=f"Invoice {number}",
                actor=actor,
                uow=uow,
            )

    logger.info(
        "invoice created",
        extra={
            "invoice_id": str(invoice.id),
            "invoice_number": number,
            "lines": len(lines),
            "total_amount": str(total_amount),
        },
    )
    return invoice
