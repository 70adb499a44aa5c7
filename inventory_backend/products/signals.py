# products/signals.py

"""
Stock notification hooks.

stock_below_reorder_level is sent after commit whenever a movement takes a
product from above its reorder level to at-or-below it. Delivery (toast,
email, SMS) belongs to whoever connects to it; the receiver here only logs.

Signal kwargs: product, previous_stock, current_stock, movement
"""

import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger("inventory.ledger")

stock_below_reorder_level = Signal()


@receiver(stock_below_reorder_level)
def log_low_stock(sender, product, previous_stock, current_stock, **kwargs):
    logger.warning(
        "product fell to reorder level",
        extra={
            "product_id": str(product.id),
            "sku": product.sku,
            "previous_stock": str(previous_stock),
            "current_stock": str(current_stock),
            "reorder_level": product.reorder_level,
        },
    )
