# products/serializers/stock_movement.py

from decimal import Decimal

from rest_framework import serializers

from products.models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    performed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "movement_type",
            "quantity",
            "reference_type",
            "reference_id",
            "notes",
            "performed_by",
            "performed_by_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_performed_by_name(self, obj):
        user = obj.performed_by
        if not user:
            return None
        return user.full_name or user.username


class StockMovementCreateSerializer(serializers.Serializer):
    """Manual stock change. Document-driven movements are created by their services."""

    movement_type = serializers.ChoiceField(choices=StockMovement.MovementType.choices)
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0")
    )
    reference_type = serializers.ChoiceField(
        choices=[
            StockMovement.ReferenceType.ADJUSTMENT,
            StockMovement.ReferenceType.MANUAL,
        ],
        required=False,
        default=StockMovement.ReferenceType.MANUAL,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
