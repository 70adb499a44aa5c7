# sales/serializers/customer.py

from rest_framework import serializers

from sales.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "contact_person",
            "phone",
            "email",
            "address",
            "gst_number",
            "credit_limit",
            "payment_terms",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_name(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name cannot be blank")
        return v

    def validate_credit_limit(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("credit_limit cannot be negative")
        return value
