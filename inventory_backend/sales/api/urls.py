# sales/api/urls.py

"""
SALES API URLS

Mounted at /api/sales/

- /customers/
- /invoices/            (+ /<id>/payments/, /<id>/cancel/)
- /quotations/          (+ /<id>/transition/, /<id>/convert/)
- /reports/summary/

Explicit non-router routes go BEFORE router URLs.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.reports import SalesReportView
from sales.api.viewsets.customer import CustomerViewSet
from sales.api.viewsets.invoice import InvoiceViewSet
from sales.api.viewsets.quotation import QuotationViewSet

router = DefaultRouter()
router.register(r"customers", CustomerViewSet, basename="customers")
router.register(r"invoices", InvoiceViewSet, basename="invoices")
router.register(r"quotations", QuotationViewSet, basename="quotations")

urlpatterns = [
    path("reports/summary/", SalesReportView.as_view(), name="sales-reports-summary"),
    path("", include(router.urls)),
]
