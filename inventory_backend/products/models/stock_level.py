# products/models/stock_level.py

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .product import Product


class StockLevel(models.Model):
    """
    Single stock counter per product.

    GUARANTEES:
    - Exactly one row per product, created together with the product
    - current_stock >= 0 (database constraint)
    - Mutated exclusively by products.services.ledger.apply_movement
    - reserved_stock is tracked for display only, never enforced
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.OneToOneField(
        Product,
        on_delete=models.CASCADE,
        related_name="stock_level",
    )

    current_stock = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )
    reserved_stock = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )

    location = models.CharField(max_length=100, default="Main Store")
    last_updated = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(current_stock__gte=0),
                name="stocklevel_current_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.product_id} | {self.current_stock}"
