# sales/api/viewsets/customer.py

from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_SALES_INVOICE, CAP_SALES_VIEW, HasCapability
from sales.models import Customer
from sales.serializers import CustomerSerializer


class CustomerViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Customers.

    DELETE deactivates (invoices keep a PROTECT reference to the customer).
    """

    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SALES_INVOICE
    read_capability = CAP_SALES_VIEW

    def get_queryset(self):
        qs = Customer.objects.all().order_by("name")
        params = self.request.query_params

        if (params.get("include_inactive") or "").lower() not in ("1", "true", "yes"):
            qs = qs.filter(is_active=True)

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(phone__icontains=q) | Q(email__icontains=q))
        return qs

    def destroy(self, request, pk=None):
        customer = Customer.objects.filter(pk=pk).first()
        if customer is None:
            return Response({"detail": "Customer not found."}, status=status.HTTP_404_NOT_FOUND)

        if customer.is_active:
            customer.is_active = False
            customer.save(update_fields=["is_active", "updated_at"])
        return Response(CustomerSerializer(customer).data)
