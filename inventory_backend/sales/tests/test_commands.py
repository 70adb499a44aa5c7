# sales/tests/test_commands.py

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from core.tests.factories import make_customer, make_product
from products.models import Product
from sales.models import Invoice, InvoiceStatus, Quotation, QuotationStatus
from sales.services.invoice_service import create_invoice
from sales.services.quotation_service import create_quotation, transition_quotation


class ScheduledCommandTests(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.product = make_product(stock=10)

    def test_mark_overdue_invoices(self):
        invoice = create_invoice(
            customer_id=self.customer.id,
            items=[{"product_id": self.product.id, "quantity": 1}],
            document_date="2026-01-01",
            due_date="2026-01-10",
        )
        out = StringIO()

        call_command("mark_overdue_invoices", "--as-of", "2026-01-11", stdout=out)

        self.assertIn("1 invoice(s) marked overdue", out.getvalue())
        self.assertEqual(Invoice.objects.get(pk=invoice.pk).status, InvoiceStatus.OVERDUE)

    def test_bad_date(self):
        with self.assertRaises(CommandError):
            call_command("mark_overdue_invoices", "--as-of", "11/01/2026", stdout=StringIO())

    def test_expire_quotations(self):
        quotation = create_quotation(
            customer_id=self.customer.id,
            items=[{"product_id": self.product.id, "quantity": 1}],
            document_date="2026-01-01",
            valid_until="2026-01-15",
        )
        transition_quotation(quotation_id=quotation.id, target_status=QuotationStatus.SENT)

        call_command("expire_quotations", "--as-of", "2026-01-16", stdout=StringIO())

        self.assertEqual(Quotation.objects.get(pk=quotation.pk).status, QuotationStatus.EXPIRED)


class SeedProductsCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_products", stdout=StringIO())
        count = Product.objects.count()
        call_command("seed_products", stdout=StringIO())

        self.assertGreater(count, 0)
        self.assertEqual(Product.objects.count(), count)
