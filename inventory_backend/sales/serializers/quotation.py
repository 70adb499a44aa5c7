# sales/serializers/quotation.py

from rest_framework import serializers

from documents.serializers import DocumentLineSerializer, LineItemInputSerializer
from sales.models import Quotation, QuotationStatus


class QuotationSerializer(serializers.ModelSerializer):
    quote_number = serializers.CharField(source="document_number", read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    converted_invoice_number = serializers.CharField(
        source="converted_invoice.document_number", read_only=True, default=None
    )
    items = DocumentLineSerializer(many=True, read_only=True)

    class Meta:
        model = Quotation
        fields = [
            "id",
            "quote_number",
            "document_date",
            "valid_until",
            "customer",
            "customer_name",
            "subtotal",
            "tax_amount",
            "total_amount",
            "status",
            "notes",
            "terms_conditions",
            "converted_invoice",
            "converted_invoice_number",
            "created_by",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class QuotationCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    document_date = serializers.DateField(required=False)
    valid_until = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    terms_conditions = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True, allow_empty=True)


class QuotationTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=QuotationStatus.choices)
