# products/views/__init__.py

from .category import CategoryViewSet
from .product import ProductViewSet
from .stock_movement import StockMovementListView

__all__ = [
    "CategoryViewSet",
    "ProductViewSet",
    "StockMovementListView",
]
