# core/tests/test_api.py

from django.test import SimpleTestCase, TestCase

from core.api import error_response, status_for
from core.exceptions import (
    BackupError,
    DuplicateSkuError,
    InsufficientStockError,
    InvalidInputError,
    InvoiceNotFoundError,
    OverpaymentError,
    ProductNotFoundError,
)


class ErrorMappingTests(SimpleTestCase):
    def test_each_category_maps_to_one_status(self):
        self.assertEqual(status_for(InvalidInputError("bad", field="quantity")), 400)
        self.assertEqual(status_for(InvoiceNotFoundError()), 404)
        self.assertEqual(status_for(DuplicateSkuError()), 409)
        self.assertEqual(
            status_for(InsufficientStockError(product_id="p", requested=5, available=2)), 409
        )
        self.assertEqual(status_for(ProductNotFoundError(product_id="p")), 500)
        self.assertEqual(status_for(BackupError()), 503)

    def test_field_errors_carry_the_field(self):
        response = error_response(InvalidInputError("items[2].quantity is required", field="items[2].quantity"))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["field"], "items[2].quantity")
        self.assertEqual(response.data["code"], "InvalidInputError")

    def test_overpayment_payload(self):
        response = error_response(OverpaymentError(invoice_id="abc", amount="10.00", outstanding="4.00"))

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["outstanding"], "4.00")


class PublicEndpointTests(TestCase):
    def test_health(self):
        response = self.client.get("/api/health/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "db": "ok"})

    def test_api_root_lists_modules(self):
        response = self.client.get("/api/")

        self.assertEqual(response.status_code, 200)
        self.assertIn("sales", response.json()["modules"])
