from .category import CategorySerializer
from .product import LowStockProductSerializer, ProductSerializer, ProductWriteSerializer
from .stock_movement import StockMovementCreateSerializer, StockMovementSerializer

__all__ = [
    "CategorySerializer",
    "LowStockProductSerializer",
    "ProductSerializer",
    "ProductWriteSerializer",
    "StockMovementCreateSerializer",
    "StockMovementSerializer",
]
