# products/views/category.py

from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from permissions.roles import CAP_INVENTORY_EDIT, HasAnyCapability
from products.models import Category
from products.serializers.category import CategorySerializer


class CategoryViewSet(viewsets.ModelViewSet):
    """
    Category API

    Policy:
    - Any authenticated user can READ categories (needed for product forms)
    - Only users with inventory edit capability can CREATE/UPDATE/DELETE
    - A category still used by products cannot be deleted
    """

    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
    pagination_class = None

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [IsAuthenticated()]

        self.required_any_capabilities = {CAP_INVENTORY_EDIT}
        return [IsAuthenticated(), HasAnyCapability()]

    def perform_destroy(self, instance):
        from rest_framework.exceptions import ValidationError

        if instance.products.exists():
            raise ValidationError({"detail": "Category is in use by products"})
        instance.delete()
