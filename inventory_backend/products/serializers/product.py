# products/serializers/product.py

"""
PRODUCT SERIALIZERS

Purpose:
- ProductSerializer: read shape for staff screens (stock from StockLevel).
- ProductWriteSerializer: input shape; writes go through products.services.catalog.
- LowStockProductSerializer: alert list rows (stock_on_hand / stock_gap annotations).
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - Stock is read from the paired StockLevel (single source of truth)
    - No frontend-side stock math
    """

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    current_stock = serializers.SerializerMethodField()
    reserved_stock = serializers.SerializerMethodField()
    location = serializers.SerializerMethodField()
    is_low_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "category",
            "category_name",
            "unit",
            "purchase_price",
            "selling_price",
            "reorder_level",
            "barcode",
            "hsn_code",
            "tax_rate",
            "current_stock",
            "reserved_stock",
            "location",
            "is_low_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _level(self, obj):
        try:
            return obj.stock_level
        except Product.stock_level.RelatedObjectDoesNotExist:
            return None

    def get_current_stock(self, obj) -> str:
        level = self._level(obj)
        return str(level.current_stock if level else Decimal("0.000"))

    def get_reserved_stock(self, obj) -> str:
        level = self._level(obj)
        return str(level.reserved_stock if level else Decimal("0.000"))

    def get_location(self, obj):
        level = self._level(obj)
        return level.location if level else None

    def get_is_low_stock(self, obj) -> bool:
        level = self._level(obj)
        stock = level.current_stock if level else Decimal("0")
        return Decimal(stock) <= Decimal(obj.reorder_level or 0)


class ProductWriteSerializer(serializers.Serializer):
    sku = serializers.CharField(required=False, allow_blank=True, max_length=64)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.UUIDField(required=False, allow_null=True)
    unit = serializers.CharField(required=False, max_length=20)
    purchase_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, min_value=Decimal("0")
    )
    selling_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, min_value=Decimal("0")
    )
    reorder_level = serializers.IntegerField(required=False, min_value=0)
    barcode = serializers.CharField(required=False, allow_blank=True, max_length=64)
    hsn_code = serializers.CharField(required=False, allow_blank=True, max_length=32)
    tax_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        required=False,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
    )
    is_active = serializers.BooleanField(required=False)
    opening_stock = serializers.DecimalField(
        max_digits=12, decimal_places=3, required=False, min_value=Decimal("0")
    )
    location = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate_sku(self, value):
        return (value or "").strip().upper()


class LowStockProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    current_stock = serializers.DecimalField(
        source="stock_on_hand", max_digits=12, decimal_places=3, read_only=True
    )
    stock_gap = serializers.DecimalField(max_digits=12, decimal_places=3, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "category_name",
            "unit",
            "current_stock",
            "reorder_level",
            "stock_gap",
        ]
        read_only_fields = fields
