# documents/models.py

"""
SHARED DOCUMENT SHAPE

Invoices, quotations and purchase orders share one header shape and one
line-item shape. Both are abstract; each app adds its party FK, status and
document FK.

GUARANTEES:
- total_amount == subtotal + tax_amount on every save
- Header fields are immutable after insert, except MUTABLE_FIELDS
- Line items are immutable after insert, except MUTABLE_FIELDS
- Line total_price is always derived from the line's own fields
- Neither headers nor lines are deleted through the ORM
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from documents.totals import compute_line_totals

ZERO_MONEY = Decimal("0.00")


def _immutable_changes(instance: models.Model, mutable: frozenset) -> list[str]:
    model = type(instance)
    skip = set(mutable) | {"updated_at", model._meta.pk.name}
    names = [
        f.attname
        for f in model._meta.concrete_fields
        if f.name not in skip and f.attname not in skip
    ]
    previous = (
        model._base_manager.using(instance._state.db or "default")
        .filter(pk=instance.pk)
        .values(*names)
        .first()
    )
    if previous is None:
        return []
    return [name for name in names if getattr(instance, name) != previous[name]]


class DocumentHeader(models.Model):
    MUTABLE_FIELDS: frozenset = frozenset()

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    document_number = models.CharField(max_length=32, unique=True)
    document_date = models.DateField(default=timezone.localdate)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO_MONEY)
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO_MONEY)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO_MONEY)

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def clean(self):
        subtotal = Decimal(self.subtotal or 0)
        tax = Decimal(self.tax_amount or 0)
        if subtotal < 0 or tax < 0:
            raise ValidationError("Document amounts cannot be negative")
        if Decimal(self.total_amount or 0) != subtotal + tax:
            raise ValidationError("total_amount must equal subtotal + tax_amount")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            changed = _immutable_changes(self, self.MUTABLE_FIELDS)
            if changed:
                raise ValidationError(
                    f"{type(self).__name__} {self.document_number} is immutable; "
                    f"cannot change {', '.join(changed)}"
                )
        self.full_clean(validate_unique=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(f"{type(self).__name__} records cannot be deleted")

    def __str__(self):
        return f"{self.document_number} | {self.total_amount}"


class DocumentLine(models.Model):
    MUTABLE_FIELDS: frozenset = frozenset()

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="+",
    )

    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit_price = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(ZERO_MONEY)]
    )
    discount_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=ZERO_MONEY,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    # Snapshot of the product's tax rate when the document was created.
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=ZERO_MONEY,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    total_price = models.DecimalField(max_digits=14, decimal_places=2, editable=False)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        abstract = True
        ordering = ["created_at", "id"]

    def clean(self):
        if self.quantity is None or Decimal(self.quantity) <= 0:
            raise ValidationError("quantity must be greater than zero")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            changed = _immutable_changes(self, self.MUTABLE_FIELDS)
            if changed:
                raise ValidationError(
                    f"{type(self).__name__} is immutable; cannot change {', '.join(changed)}"
                )
        else:
            self.total_price = compute_line_totals(
                quantity=self.quantity,
                unit_price=self.unit_price,
                discount_percent=self.discount_percent,
                tax_rate=self.tax_rate,
            ).persisted_total

        self.full_clean(validate_unique=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(f"{type(self).__name__} records cannot be deleted")
