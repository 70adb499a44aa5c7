# documents/tests/test_numbering.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.exceptions import InvalidInputError
from core.tests.factories import make_customer, make_supplier
from documents.numbering import DocumentKind, format_number, next_number, parse_number
from purchases.models import PurchaseOrder
from sales.models import Invoice, InvoiceStatus

User = get_user_model()


def _issued_invoice(number, customer):
    # zero-value header: Paid by definition
    return Invoice.objects.create(
        document_number=number,
        customer=customer,
        status=InvoiceStatus.PAID,
    )


class NextNumberTests(TestCase):
    def setUp(self):
        self.customer = make_customer()

    def test_first_invoice_number(self):
        self.assertEqual(next_number(DocumentKind.INVOICE), "INV0001")

    def test_increments_from_last_issued(self):
        for n in range(1, 10):
            _issued_invoice(f"INV{n:04d}", self.customer)

        self.assertEqual(next_number(DocumentKind.INVOICE), "INV0010")

    def test_width_is_a_minimum(self):
        _issued_invoice("INV9999", self.customer)

        self.assertEqual(next_number(DocumentKind.INVOICE), "INV10000")

    def test_longer_numbers_sort_after_padded_ones(self):
        _issued_invoice("INV9999", self.customer)
        _issued_invoice("INV10000", self.customer)

        self.assertEqual(next_number(DocumentKind.INVOICE), "INV10001")

    def test_kinds_are_independent(self):
        _issued_invoice("INV0007", self.customer)
        PurchaseOrder.objects.create(document_number="PO0003", supplier=make_supplier())

        self.assertEqual(next_number(DocumentKind.PURCHASE_ORDER), "PO0004")
        self.assertEqual(next_number(DocumentKind.QUOTATION), "QUO0001")

    def test_unknown_kind(self):
        with self.assertRaises(InvalidInputError):
            next_number("RECEIPT")

    @override_settings(DOCUMENT_NUMBER_PREFIXES={"invoice": "SI-"}, DOCUMENT_NUMBER_WIDTH=6)
    def test_configured_prefix_and_width(self):
        self.assertEqual(next_number(DocumentKind.INVOICE), "SI-000001")


class NumberFormatTests(TestCase):
    def test_parse_rejects_foreign_numbers(self):
        self.assertEqual(parse_number(DocumentKind.INVOICE, "INV0042"), 42)
        self.assertIsNone(parse_number(DocumentKind.INVOICE, "PO0042"))
        self.assertIsNone(parse_number(DocumentKind.INVOICE, "INV-DRAFT"))

    def test_format_pads(self):
        self.assertEqual(format_number(DocumentKind.QUOTATION, 12), "QUO0012")


class NextNumberApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(
            user=User.objects.create_user("clerk", password="password123", role="sales")
        )

    def test_preview(self):
        response = self.client.get("/api/documents/next-number/", {"kind": "invoice"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["next_number"], "INV0001")

    def test_bad_kind(self):
        response = self.client.get("/api/documents/next-number/", {"kind": "nope"})

        self.assertEqual(response.status_code, 400)
