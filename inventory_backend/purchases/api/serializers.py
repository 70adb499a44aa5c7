# purchases/api/serializers.py

from decimal import Decimal

from rest_framework import serializers

from documents.serializers import DocumentLineSerializer, LineItemInputSerializer
from purchases.models import PurchaseOrder, Supplier


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            "id",
            "name",
            "contact_person",
            "phone",
            "email",
            "address",
            "gst_number",
            "payment_terms",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "created_at", "updated_at")


class PurchaseOrderItemSerializer(DocumentLineSerializer):
    received_quantity = serializers.DecimalField(max_digits=12, decimal_places=3, read_only=True)
    pending_quantity = serializers.DecimalField(max_digits=12, decimal_places=3, read_only=True)


class PurchaseOrderSerializer(serializers.ModelSerializer):
    po_number = serializers.CharField(source="document_number", read_only=True)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "po_number",
            "document_date",
            "expected_delivery",
            "supplier",
            "supplier_name",
            "subtotal",
            "tax_amount",
            "total_amount",
            "status",
            "notes",
            "created_by",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class PurchaseOrderCreateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    document_date = serializers.DateField(required=False)
    expected_delivery = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True, allow_empty=True)


class ReceiptLineSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal("0.001"))


class ReceivePurchaseOrderSerializer(serializers.Serializer):
    """Omit receipts (or send null) to receive everything still pending."""

    receipts = ReceiptLineSerializer(many=True, required=False, allow_null=True)
