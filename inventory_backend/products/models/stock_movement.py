# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is an unsigned magnitude; its meaning comes from movement_type:
    IN          -> added to stock
    OUT         -> removed from stock
    ADJUSTMENT  -> stock was SET to this value (snapshot correction)
- IN / OUT quantities are strictly positive; an ADJUSTMENT may be zero
- Written only by the ledger service, in the same transaction as the
  StockLevel change it records
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"

    class ReferenceType(models.TextChoices):
        INVOICE = "INVOICE", "Sales Invoice"
        INVOICE_CANCELLATION = "INVOICE_CANCELLATION", "Invoice Cancellation"
        PURCHASE_ORDER = "PURCHASE_ORDER", "Purchase Order"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"
        OPENING = "OPENING", "Opening Stock"
        MANUAL = "MANUAL", "Manual Entry"

    # Integer pk keeps insertion order as a tie-breaker for created_at.
    id = models.BigAutoField(primary_key=True)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=10, choices=MovementType.choices)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)

    reference_type = models.CharField(
        max_length=32, choices=ReferenceType.choices, blank=True, default=""
    )
    reference_id = models.UUIDField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="stockmove_product_created_idx"),
            models.Index(fields=["movement_type"], name="stockmove_type_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="stockmove_reference_idx"),
        ]

    def clean(self):
        if self.quantity is None or Decimal(self.quantity) < 0:
            raise ValidationError("quantity cannot be negative")

        if self.movement_type != self.MovementType.ADJUSTMENT and Decimal(self.quantity) == 0:
            raise ValidationError(f"{self.movement_type} quantity must be greater than zero")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def signed_quantity(self) -> Decimal:
        """Delta applied by IN/OUT; ADJUSTMENT has no delta and returns its absolute value."""
        if self.movement_type == self.MovementType.OUT:
            return -Decimal(self.quantity)
        return Decimal(self.quantity)

    def __str__(self):
        return f"{self.product_id} | {self.movement_type} | {self.quantity}"
