# sales/models/invoice.py

"""
SALES INVOICE

GUARANTEES:
- Created atomically with its items and one OUT stock movement per item
- Header is immutable except paid_amount / status (payments, overdue,
  cancellation) and notes
- status == PAID if and only if paid_amount >= total_amount
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from documents.models import DocumentHeader, DocumentLine

from .customer import Customer


class InvoiceStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    PAID = "Paid", "Paid"
    OVERDUE = "Overdue", "Overdue"
    CANCELLED = "Cancelled", "Cancelled"


class Invoice(DocumentHeader):
    Status = InvoiceStatus

    MUTABLE_FIELDS = frozenset({"paid_amount", "status", "notes"})

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    due_date = models.DateField(null=True, blank=True)

    paid_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=16,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.PENDING,
    )

    class Meta(DocumentHeader.Meta):
        indexes = [
            models.Index(fields=["document_date"], name="invoice_date_idx"),
            models.Index(fields=["status"], name="invoice_status_idx"),
            models.Index(fields=["customer", "document_date"], name="invoice_customer_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(paid_amount__gte=0),
                name="invoice_paid_amount_non_negative",
            ),
        ]

    @property
    def invoice_number(self) -> str:
        return self.document_number

    @property
    def outstanding(self) -> Decimal:
        return max(Decimal(self.total_amount) - Decimal(self.paid_amount), Decimal("0.00"))

    def clean(self):
        super().clean()
        if self.paid_amount is not None and Decimal(self.paid_amount) < 0:
            raise ValidationError("paid_amount cannot be negative")

        is_settled = Decimal(self.paid_amount or 0) >= Decimal(self.total_amount or 0)
        if is_settled != (self.status == InvoiceStatus.PAID):
            raise ValidationError(
                "Invoice status must be Paid exactly when paid_amount >= total_amount"
            )


class InvoiceItem(DocumentLine):
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    class Meta(DocumentLine.Meta):
        indexes = [
            models.Index(fields=["invoice", "created_at"], name="invoiceitem_invoice_idx"),
            models.Index(fields=["product", "created_at"], name="invoiceitem_product_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_id} | {self.product_id} x {self.quantity}"
