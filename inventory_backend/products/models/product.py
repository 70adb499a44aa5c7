# products/models/product.py

import uuid
from decimal import Decimal

from django.apps import apps
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .category import Category

# Line-item models that snapshot a product; once any of them points at a
# product its SKU is frozen.
LINE_ITEM_MODELS = (
    "sales.InvoiceItem",
    "sales.QuotationItem",
    "purchases.PurchaseOrderItem",
)


class Product(models.Model):
    """
    Represents a catalog item.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in its paired StockLevel (created with the product)
    - StockLevel is changed ONLY by the ledger service

    LIFECYCLE:
    - Never hard-deleted; deactivate instead (documents reference it)
    - SKU is immutable once a movement or line item references the product
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    unit = models.CharField(max_length=20, default="pcs")

    purchase_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    selling_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    reorder_level = models.PositiveIntegerField(default=0)

    barcode = models.CharField(max_length=64, blank=True, default="")
    hsn_code = models.CharField(max_length=32, blank=True, default="")

    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("18.00"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active", "name"], name="product_active_name_idx"),
            models.Index(fields=["barcode"], name="product_barcode_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        self.sku = (self.sku or "").strip()
        if not self.sku:
            raise ValidationError("SKU is required")

        if self.purchase_price is None or Decimal(self.purchase_price) < 0:
            raise ValidationError("purchase_price cannot be negative")

        if self.selling_price is None or Decimal(self.selling_price) < 0:
            raise ValidationError("selling_price cannot be negative")

    def is_referenced(self, using=None) -> bool:
        using = using or self._state.db or "default"
        if self.stock_movements.using(using).exists():
            return True
        for label in LINE_ITEM_MODELS:
            model = apps.get_model(label)
            if model._base_manager.using(using).filter(product_id=self.pk).exists():
                return True
        return False

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous_sku = (
                Product.objects.using(self._state.db)
                .filter(pk=self.pk)
                .values_list("sku", flat=True)
                .first()
            )
            if (
                previous_sku is not None
                and previous_sku != (self.sku or "").strip()
                and self.is_referenced()
            ):
                raise ValidationError(
                    f"SKU {previous_sku} is referenced by stock movements or documents "
                    "and cannot be changed"
                )

        self.full_clean(validate_unique=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Products are never deleted; deactivate the product instead")
