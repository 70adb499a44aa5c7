# purchases/models.py

"""
PURCHASING

Supplier master, purchase orders and their lines.

GUARANTEES:
- Creating a purchase order never touches stock
- Stock arrives only when an order is received (IN movement per line,
  written by purchases.services.receiving_service)
- received_quantity never exceeds the ordered quantity
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from documents.models import DocumentHeader, DocumentLine


class Supplier(models.Model):
    """
    Supplier master.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    contact_person = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")
    gst_number = models.CharField(max_length=32, blank=True, default="")

    # Days from order date to payment due.
    payment_terms = models.PositiveIntegerField(default=30)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="supplier_name_idx"),
            models.Index(fields=["is_active"], name="supplier_active_idx"),
        ]

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Supplier name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class PurchaseOrderStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    PARTIALLY_RECEIVED = "Partially Received", "Partially Received"
    RECEIVED = "Received", "Received"
    CANCELLED = "Cancelled", "Cancelled"


class PurchaseOrder(DocumentHeader):
    Status = PurchaseOrderStatus

    MUTABLE_FIELDS = frozenset({"status", "notes"})

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )

    expected_delivery = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=PurchaseOrderStatus.choices,
        default=PurchaseOrderStatus.PENDING,
    )

    class Meta(DocumentHeader.Meta):
        indexes = [
            models.Index(fields=["status", "created_at"], name="po_status_created_idx"),
            models.Index(fields=["supplier", "document_date"], name="po_supplier_date_idx"),
        ]

    @property
    def po_number(self) -> str:
        return self.document_number

    def clean(self):
        super().clean()
        if self.expected_delivery and self.document_date and self.expected_delivery < self.document_date:
            raise ValidationError(
                {"expected_delivery": "expected_delivery cannot be before the order date"}
            )


class PurchaseOrderItem(DocumentLine):
    MUTABLE_FIELDS = frozenset({"received_quantity"})

    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )

    received_quantity = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )

    class Meta(DocumentLine.Meta):
        constraints = [
            models.CheckConstraint(
                condition=Q(received_quantity__gte=0) & Q(received_quantity__lte=F("quantity")),
                name="po_item_received_within_ordered",
            ),
        ]
        indexes = [
            models.Index(fields=["purchase_order", "created_at"], name="poitem_order_idx"),
            models.Index(fields=["product", "created_at"], name="poitem_product_idx"),
        ]

    @property
    def pending_quantity(self) -> Decimal:
        return Decimal(self.quantity) - Decimal(self.received_quantity or 0)

    def clean(self):
        super().clean()
        received = Decimal(self.received_quantity or 0)
        if received < 0:
            raise ValidationError({"received_quantity": "received_quantity cannot be negative"})
        if self.quantity is not None and received > Decimal(self.quantity):
            raise ValidationError(
                {"received_quantity": "received_quantity cannot exceed the ordered quantity"}
            )

    def __str__(self):
        return f"{self.purchase_order_id} | {self.product_id} x {self.quantity}"
