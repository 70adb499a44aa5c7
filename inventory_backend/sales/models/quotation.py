# sales/models/quotation.py

"""
QUOTATION

No stock effect. Lifecycle: Draft -> Sent -> {Accepted, Rejected, Expired}
(rules in sales/services/quotation_lifecycle.py).

An Accepted quotation may be converted into exactly one Invoice.
"""

from datetime import timedelta

from django.db import models
from django.utils import timezone

from documents.models import DocumentHeader, DocumentLine

from .customer import Customer
from .invoice import Invoice

DEFAULT_VALIDITY_DAYS = 30


def default_valid_until():
    return timezone.localdate() + timedelta(days=DEFAULT_VALIDITY_DAYS)


class QuotationStatus(models.TextChoices):
    DRAFT = "Draft", "Draft"
    SENT = "Sent", "Sent"
    ACCEPTED = "Accepted", "Accepted"
    REJECTED = "Rejected", "Rejected"
    EXPIRED = "Expired", "Expired"


class Quotation(DocumentHeader):
    Status = QuotationStatus

    MUTABLE_FIELDS = frozenset({"status", "converted_invoice", "notes"})

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="quotations",
    )

    valid_until = models.DateField(default=default_valid_until)

    status = models.CharField(
        max_length=16,
        choices=QuotationStatus.choices,
        default=QuotationStatus.DRAFT,
    )

    terms_conditions = models.TextField(blank=True, default="")

    converted_invoice = models.OneToOneField(
        Invoice,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="source_quotation",
    )

    class Meta(DocumentHeader.Meta):
        indexes = [
            models.Index(fields=["status", "valid_until"], name="quotation_status_valid_idx"),
        ]

    @property
    def quote_number(self) -> str:
        return self.document_number


class QuotationItem(DocumentLine):
    quotation = models.ForeignKey(
        Quotation,
        on_delete=models.CASCADE,
        related_name="items",
    )

    def __str__(self):
        return f"{self.quotation_id} | {self.product_id} x {self.quantity}"
