# sales/serializers/invoice.py

from decimal import Decimal

from rest_framework import serializers

from documents.serializers import DocumentLineSerializer, LineItemInputSerializer
from sales.models import Invoice, Payment, PaymentMethod


class PaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.document_number", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "invoice",
            "invoice_number",
            "amount",
            "method",
            "payment_date",
            "reference_number",
            "notes",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    """
    Invoice read shape (header + items + payments).
    Designed for the invoice screen and the PDF renderer.
    """

    invoice_number = serializers.CharField(source="document_number", read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    outstanding = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    items = DocumentLineSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "document_date",
            "due_date",
            "customer",
            "customer_name",
            "subtotal",
            "tax_amount",
            "total_amount",
            "paid_amount",
            "outstanding",
            "status",
            "notes",
            "created_by",
            "created_at",
            "updated_at",
            "items",
            "payments",
        ]
        read_only_fields = fields


class InvoiceCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    document_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True, allow_empty=True)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    payment_date = serializers.DateField(required=False)
    reference_number = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class InvoiceCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
