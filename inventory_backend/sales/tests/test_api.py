# sales/tests/test_api.py

from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from core.tests.factories import make_customer, make_product, make_user
from permissions.roles import ROLE_MANAGER, ROLE_SALES, ROLE_VIEWER
from products.models import StockLevel
from sales.models import Invoice, InvoiceStatus

INVOICES = "/api/sales/invoices/"


class InvoiceApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user(role=ROLE_SALES))
        self.customer = make_customer(name="Verma Traders")
        self.product = make_product(stock=10, selling_price="250.00", tax_rate="18.00")

    def _create(self, quantity=2, **extra):
        return self.client.post(
            INVOICES,
            {
                "customer_id": str(self.customer.id),
                "items": [{"product_id": str(self.product.id), "quantity": str(quantity)}],
                **extra,
            },
            format="json",
        )

    def test_create_invoice(self):
        response = self._create()

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["invoice_number"], "INV0001")
        self.assertEqual(response.data["total_amount"], "590.00")
        self.assertEqual(response.data["customer_name"], "Verma Traders")
        self.assertEqual(len(response.data["items"]), 1)
        self.assertEqual(StockLevel.objects.get(product=self.product).current_stock, Decimal("8"))

    def test_insufficient_stock_is_a_conflict_and_writes_nothing(self):
        response = self._create(quantity=11)

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "InsufficientStockError")
        self.assertFalse(Invoice.objects.exists())

    def test_total_too_large_to_store_is_a_bad_request(self):
        bulk = make_product(stock=200000, selling_price="10.00", tax_rate="0")

        response = self.client.post(
            INVOICES,
            {
                "customer_id": str(self.customer.id),
                "items": [
                    {"product_id": str(bulk.id), "quantity": "100000", "unit_price": "10000000.00"}
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 400, response.data)
        self.assertEqual(response.data["field"], "items[0].quantity")
        self.assertFalse(Invoice.objects.exists())
        self.assertEqual(StockLevel.objects.get(product=bulk).current_stock, Decimal("200000"))

    def test_empty_items(self):
        response = self.client.post(
            INVOICES, {"customer_id": str(self.customer.id), "items": []}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["field"], "items")

    def test_unknown_customer_is_404(self):
        response = self.client.post(
            INVOICES,
            {
                "customer_id": "00000000-0000-0000-0000-000000000000",
                "items": [{"product_id": str(self.product.id), "quantity": "1"}],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 404)

    def test_list_and_filter(self):
        self._create()

        response = self.client.get(INVOICES, {"status": "Pending"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(INVOICES, {"status": "Paid"})
        self.assertEqual(response.data["count"], 0)

    def test_payment_flow(self):
        invoice_id = self._create().data["id"]

        response = self.client.post(
            f"{INVOICES}{invoice_id}/payments/", {"amount": "590.00", "method": "upi"}, format="json"
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["invoice"]["status"], InvoiceStatus.PAID)
        self.assertEqual(response.data["applied_amount"], "590.00")

        history = self.client.get(f"{INVOICES}{invoice_id}/payments/")
        self.assertEqual(history.data["count"], 1)

    def test_overpayment_is_a_conflict(self):
        invoice_id = self._create().data["id"]

        response = self.client.post(
            f"{INVOICES}{invoice_id}/payments/", {"amount": "1000.00"}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "OverpaymentError")

    def test_sales_role_cannot_cancel(self):
        invoice_id = self._create().data["id"]

        response = self.client.post(f"{INVOICES}{invoice_id}/cancel/", {}, format="json")

        self.assertEqual(response.status_code, 403)

    def test_manager_cancels(self):
        invoice_id = self._create().data["id"]
        manager = APIClient()
        manager.force_authenticate(user=make_user(role=ROLE_MANAGER))

        response = manager.post(f"{INVOICES}{invoice_id}/cancel/", {"reason": "typo"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], InvoiceStatus.CANCELLED)
        self.assertEqual(StockLevel.objects.get(product=self.product).current_stock, Decimal("10"))

    def test_viewer_reads_only(self):
        self._create()
        viewer = APIClient()
        viewer.force_authenticate(user=make_user(role=ROLE_VIEWER))

        self.assertEqual(viewer.get(INVOICES).status_code, 200)
        self.assertEqual(
            viewer.post(INVOICES, {"customer_id": str(self.customer.id), "items": []}, format="json").status_code,
            403,
        )


class QuotationApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user(role=ROLE_SALES))
        self.customer = make_customer()
        self.product = make_product(stock=10, selling_price="100.00", tax_rate="0")

    def test_quote_send_accept_convert(self):
        created = self.client.post(
            "/api/sales/quotations/",
            {
                "customer_id": str(self.customer.id),
                "items": [{"product_id": str(self.product.id), "quantity": "4"}],
            },
            format="json",
        )
        self.assertEqual(created.status_code, 201, created.data)
        self.assertEqual(created.data["quote_number"], "QUO0001")
        quotation_id = created.data["id"]

        for status in ("Sent", "Accepted"):
            response = self.client.post(
                f"/api/sales/quotations/{quotation_id}/transition/", {"status": status}, format="json"
            )
            self.assertEqual(response.status_code, 200, response.data)

        converted = self.client.post(f"/api/sales/quotations/{quotation_id}/convert/", {}, format="json")
        self.assertEqual(converted.status_code, 201, converted.data)
        self.assertEqual(converted.data["total_amount"], "400.00")

        again = self.client.post(f"/api/sales/quotations/{quotation_id}/convert/", {}, format="json")
        self.assertEqual(again.status_code, 409)

    def test_invalid_transition_is_a_conflict(self):
        created = self.client.post(
            "/api/sales/quotations/",
            {
                "customer_id": str(self.customer.id),
                "items": [{"product_id": str(self.product.id), "quantity": "1"}],
            },
            format="json",
        )

        response = self.client.post(
            f"/api/sales/quotations/{created.data['id']}/transition/",
            {"status": "Accepted"},
            format="json",
        )

        self.assertEqual(response.status_code, 409)


class CustomerAndReportApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user(role=ROLE_SALES))

    def test_customer_crud_and_deactivate(self):
        created = self.client.post(
            "/api/sales/customers/", {"name": "Kapoor Builders", "payment_terms": 30}, format="json"
        )
        self.assertEqual(created.status_code, 201, created.data)

        deleted = self.client.delete(f"/api/sales/customers/{created.data['id']}/")
        self.assertEqual(deleted.status_code, 200)
        self.assertFalse(deleted.data["is_active"])

        listing = self.client.get("/api/sales/customers/")
        self.assertEqual(listing.data["count"], 0)

    def test_report_summary(self):
        customer = make_customer()
        product = make_product(stock=5, selling_price="10.00", tax_rate="0")
        self.client.post(
            INVOICES,
            {"customer_id": str(customer.id), "items": [{"product_id": str(product.id), "quantity": "2"}]},
            format="json",
        )

        response = self.client.get("/api/sales/reports/summary/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_invoices"], 1)
        self.assertEqual(response.data["total_sales"], "20.00")

    def test_report_bad_range(self):
        response = self.client.get("/api/sales/reports/summary/", {"from": "2026-02-01", "to": "2026-01-01"})

        self.assertEqual(response.status_code, 400)
