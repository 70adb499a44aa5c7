"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .category import Category
from .product import Product
from .stock_level import StockLevel
from .stock_movement import StockMovement

__all__ = [
    "Category",
    "Product",
    "StockLevel",
    "StockMovement",
]
