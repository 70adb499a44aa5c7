# sales/services/payment_service.py

"""
INVOICE SETTLEMENT

Purpose:
- Record customer payments (append-only) and roll them up onto the invoice.
- Derive invoice status from paid vs total.
- External policies: mark overdue invoices, cancel unpaid invoices.

Rules:
- status is PAID if and only if paid_amount >= total_amount.
- A partial payment never clears OVERDUE; only full settlement does.
- Cancelled invoices accept no payments.
- Overpayment is governed by settings.OVERPAYMENT_POLICY:
    reject (default) -> OverpaymentError, nothing written
    clamp            -> only the outstanding balance is recorded
    credit           -> full amount recorded; the excess is customer credit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import models
from django.utils import timezone

from core.coerce import MAX_AMOUNT, ZERO, money, to_date, to_decimal, to_uuid
from core.exceptions import (
    InvalidInputError,
    InvalidTransitionError,
    InvoiceNotFoundError,
    InvoiceNotPayableError,
    OverpaymentError,
)
from core.unit_of_work import UnitOfWork, resolve_uow
from products.models import StockMovement
from products.services.ledger import apply_movement
from sales.models import Invoice, InvoiceStatus, Payment, PaymentMethod

logger = logging.getLogger("inventory.payments")


class OverpaymentPolicy(models.TextChoices):
    REJECT = "reject", "Reject"
    CLAMP = "clamp", "Clamp to outstanding"
    CREDIT = "credit", "Keep as customer credit"


@dataclass(frozen=True)
class PaymentResult:
    payment: Payment
    invoice: Invoice
    requested_amount: Decimal
    applied_amount: Decimal
    credit_amount: Decimal


def current_overpayment_policy() -> OverpaymentPolicy:
    raw = (getattr(settings, "OVERPAYMENT_POLICY", "") or OverpaymentPolicy.REJECT).strip().lower()
    try:
        return OverpaymentPolicy(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(
            f"OVERPAYMENT_POLICY must be one of {', '.join(OverpaymentPolicy.values)}"
        ) from exc


def derive_invoice_status(*, total_amount, paid_amount, current_status=InvoiceStatus.PENDING) -> str:
    if Decimal(paid_amount) >= Decimal(total_amount):
        return InvoiceStatus.PAID
    if current_status in (InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED):
        return current_status
    return InvoiceStatus.PENDING


def _lock_invoice(invoice_id, *, uow: UnitOfWork) -> Invoice:
    invoice_id = to_uuid(invoice_id, field_name="invoice_id")
    invoice = (
        Invoice.objects.using(uow.using)
        .select_for_update()
        .filter(pk=invoice_id)
        .first()
    )
    if invoice is None:
        raise InvoiceNotFoundError(f"Invoice not found: {invoice_id}", field="invoice_id")
    return invoice


def record_payment(
    *,
    invoice_id,
    amount,
    method: str = PaymentMethod.CASH,
    payment_date=None,
    reference_number: str = "",
    notes: str = "",
    actor=None,
    policy: Optional[str] = None,
    uow: Optional[UnitOfWork] = None,
) -> PaymentResult:
    uow = resolve_uow(uow)
    policy = OverpaymentPolicy(policy) if policy else current_overpayment_policy()

    raw_amount = to_decimal(amount, field_name="amount")
    if raw_amount > MAX_AMOUNT:
        raise InvalidInputError(f"amount cannot exceed {MAX_AMOUNT}", field="amount")
    requested = money(raw_amount)
    if requested <= ZERO:
        raise InvalidInputError("amount must be greater than zero", field="amount")

    method = (method or "").strip().lower()
    if method not in PaymentMethod.values:
        raise InvalidInputError(
            f"method must be one of {', '.join(PaymentMethod.values)}", field="method"
        )

    payment_date = to_date(payment_date, field_name="payment_date") if payment_date else timezone.localdate()

    with uow.atomic():
        invoice = _lock_invoice(invoice_id, uow=uow)

        if invoice.status == InvoiceStatus.CANCELLED:
            raise InvoiceNotPayableError(
                f"Invoice {invoice.document_number} is cancelled and cannot accept payments"
            )

        outstanding = Decimal(invoice.total_amount) - Decimal(invoice.paid_amount)
        applied = requested
        credit = ZERO

        if requested > outstanding:
            if policy == OverpaymentPolicy.REJECT or (
                policy == OverpaymentPolicy.CLAMP and outstanding <= ZERO
            ):
                logger.warning(
                    "overpayment rejected",
                    extra={
                        "invoice_id": str(invoice.id),
                        "amount": str(requested),
                        "outstanding": str(outstanding),
                        "policy": policy.value,
                    },
                )
                raise OverpaymentError(
                    invoice_id=invoice.id,
                    amount=requested,
                    outstanding=max(outstanding, ZERO),
                )
            if policy == OverpaymentPolicy.CLAMP:
                applied = outstanding
            else:
                credit = requested - max(outstanding, ZERO)

        payment = Payment(
            invoice=invoice,
            amount=applied,
            method=method,
            payment_date=payment_date,
            reference_number=(reference_number or "").strip(),
            notes=(notes or "").strip(),
            created_by=actor if getattr(actor, "pk", None) else None,
        )
        payment.save(using=uow.using)

        invoice.paid_amount = Decimal(invoice.paid_amount) + applied
        invoice.status = derive_invoice_status(
            total_amount=invoice.total_amount,
            paid_amount=invoice.paid_amount,
            current_status=invoice.status,
        )
        invoice.save(using=uow.using, update_fields=["paid_amount", "status", "updated_at"])

    logger.info(
        "payment recorded",
        extra={
            "invoice_id": str(invoice.id),
            "payment_id": str(payment.id),
            "amount": str(applied),
            "credit": str(credit),
            "status": invoice.status,
        },
    )
    return PaymentResult(
        payment=payment,
        invoice=invoice,
        requested_amount=requested,
        applied_amount=applied,
        credit_amount=credit,
    )


def mark_overdue_invoices(*, as_of=None, uow: Optional[UnitOfWork] = None) -> int:
    """Pending invoices past their due date become Overdue. Returns how many changed."""
    uow = resolve_uow(uow)
    as_of = to_date(as_of, field_name="as_of") if as_of else timezone.localdate()

    with uow.atomic():
        changed = (
            Invoice.objects.using(uow.using)
            .filter(
                status=InvoiceStatus.PENDING,
                due_date__isnull=False,
                due_date__lt=as_of,
            )
            .update(status=InvoiceStatus.OVERDUE, updated_at=timezone.now())
        )

    if changed:
        logger.info("invoices marked overdue", extra={"count": changed, "as_of": str(as_of)})
    return changed


def cancel_invoice(
    *,
    invoice_id,
    reason: str = "",
    actor=None,
    uow: Optional[UnitOfWork] = None,
) -> Invoice:
    """
    Cancel an unpaid invoice and return its stock.

    Each item gets an IN movement referencing the invoice; the invoice keeps
    its number and items for the audit trail.
    """
    uow = resolve_uow(uow)

    with uow.atomic():
        invoice = _lock_invoice(invoice_id, uow=uow)

        if invoice.status not in (InvoiceStatus.PENDING, InvoiceStatus.OVERDUE):
            raise InvalidTransitionError(
                f"Invoice {invoice.document_number} cannot be cancelled from '{invoice.status}'"
            )
        if Decimal(invoice.paid_amount) > ZERO:
            raise InvalidTransitionError(
                f"Invoice {invoice.document_number} has payments and cannot be cancelled"
            )

        for item in invoice.items.using(uow.using).all():
            apply_movement(
                product_id=item.product_id,
                quantity=item.quantity,
                movement_type=StockMovement.MovementType.IN,
                reference_type=StockMovement.ReferenceType.INVOICE_CANCELLATION,
                reference_id=invoice.id,
                notes=f"Invoice {invoice.document_number} cancelled",
                actor=actor,
                uow=uow,
            )

        invoice.status = InvoiceStatus.CANCELLED
        reason = (reason or "").strip()
        if reason:
            invoice.notes = f"{invoice.notes}\nCancelled: {reason}".strip()
        invoice.save(using=uow.using, update_fields=["status", "notes", "updated_at"])

    logger.info("invoice cancelled", extra={"invoice_id": str(invoice.id)})
    return invoice
