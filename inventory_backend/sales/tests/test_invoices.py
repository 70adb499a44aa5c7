# sales/tests/test_invoices.py

from datetime import date, timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from core.exceptions import InsufficientStockError, InvalidInputError, ReferenceNotFoundError
from core.tests.factories import make_customer, make_product, make_user
from products.models import StockLevel, StockMovement
from sales.models import Invoice, InvoiceItem, InvoiceStatus
from sales.services.invoice_service import create_invoice


def stock_of(product):
    return StockLevel.objects.get(product=product).current_stock


class CreateInvoiceTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.customer = make_customer(name="Sharma Interiors")
        self.plywood = make_product(stock=50, selling_price="2500.00", tax_rate="18.00")
        self.hinge = make_product(stock=20, selling_price="850.00", tax_rate="18.00")

    def test_totals_items_and_stock(self):
        invoice = create_invoice(
            customer_id=self.customer.id,
            items=[
                {"product_id": self.plywood.id, "quantity": 10, "discount_percent": 5},
                {"product_id": self.hinge.id, "quantity": 5},
            ],
            actor=self.user,
        )

        self.assertEqual(invoice.document_number, "INV0001")
        self.assertEqual(invoice.subtotal, Decimal("28000.00"))
        self.assertEqual(invoice.tax_amount, Decimal("5040.00"))
        self.assertEqual(invoice.total_amount, Decimal("33040.00"))
        self.assertEqual(invoice.status, InvoiceStatus.PENDING)
        self.assertEqual(invoice.created_by, self.user)

        totals = sorted(i.total_price for i in InvoiceItem.objects.filter(invoice=invoice))
        self.assertEqual(totals, [Decimal("5015.00"), Decimal("28025.00")])

        self.assertEqual(stock_of(self.plywood), Decimal("40"))
        self.assertEqual(stock_of(self.hinge), Decimal("15"))

        outs = StockMovement.objects.filter(
            reference_type=StockMovement.ReferenceType.INVOICE, reference_id=invoice.id
        )
        self.assertEqual(outs.count(), 2)
        self.assertTrue(all(m.movement_type == StockMovement.MovementType.OUT for m in outs))

    def test_line_totals_add_up_to_the_header(self):
        odd = make_product(stock=100, selling_price="3.33", tax_rate="5.00")
        cheap = make_product(stock=100, selling_price="1.11", tax_rate="12.00")
        items = [
            {"product_id": odd.id, "quantity": 3},
            {"product_id": cheap.id, "quantity": 7, "discount_percent": "3"},
            {"product_id": self.hinge.id, "quantity": "1.5", "discount_percent": "12.5"},
        ]

        invoice = create_invoice(customer_id=self.customer.id, items=items)

        line_totals = [i.total_price for i in InvoiceItem.objects.filter(invoice=invoice)]
        self.assertEqual(len(line_totals), 3)
        self.assertEqual(invoice.total_amount, invoice.subtotal + invoice.tax_amount)
        self.assertLessEqual(
            abs(sum(line_totals) - invoice.total_amount), Decimal("0.01") * len(line_totals)
        )

    def test_oversized_total_is_rejected_before_any_write(self):
        bulk = make_product(stock=200000, selling_price="10.00", tax_rate="0")

        with self.assertRaises(InvalidInputError) as ctx:
            create_invoice(
                customer_id=self.customer.id,
                items=[{"product_id": bulk.id, "quantity": "100000", "unit_price": "10000000.00"}],
            )

        self.assertEqual(ctx.exception.field, "items[0].quantity")
        self.assertFalse(Invoice.objects.exists())
        self.assertEqual(stock_of(bulk), Decimal("200000"))

    def test_numbers_are_sequential(self):
        items = [{"product_id": self.hinge.id, "quantity": 1}]

        first = create_invoice(customer_id=self.customer.id, items=items)
        second = create_invoice(customer_id=self.customer.id, items=items)

        self.assertEqual((first.document_number, second.document_number), ("INV0001", "INV0002"))

    def test_explicit_price_overrides_catalog(self):
        invoice = create_invoice(
            customer_id=self.customer.id,
            items=[{"product_id": self.hinge.id, "quantity": 2, "unit_price": "100", "tax_rate": "0"}],
        )

        self.assertEqual(invoice.total_amount, Decimal("200.00"))

    def test_failing_third_line_rolls_back_everything(self):
        glue = make_product(stock=1)
        movements_before = StockMovement.objects.count()

        with self.assertRaises(InsufficientStockError):
            create_invoice(
                customer_id=self.customer.id,
                items=[
                    {"product_id": self.plywood.id, "quantity": 5},
                    {"product_id": self.hinge.id, "quantity": 5},
                    {"product_id": glue.id, "quantity": 2},
                ],
            )

        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(InvoiceItem.objects.exists())
        self.assertEqual(StockMovement.objects.count(), movements_before)
        self.assertEqual(stock_of(self.plywood), Decimal("50"))
        self.assertEqual(stock_of(self.hinge), Decimal("20"))
        self.assertEqual(stock_of(glue), Decimal("1"))

    def test_failed_attempt_does_not_burn_a_number(self):
        with self.assertRaises(InsufficientStockError):
            create_invoice(
                customer_id=self.customer.id,
                items=[{"product_id": self.hinge.id, "quantity": 999}],
            )

        invoice = create_invoice(
            customer_id=self.customer.id, items=[{"product_id": self.hinge.id, "quantity": 1}]
        )

        self.assertEqual(invoice.document_number, "INV0001")

    def test_line_errors_name_the_line(self):
        with self.assertRaises(InvalidInputError) as ctx:
            create_invoice(
                customer_id=self.customer.id,
                items=[
                    {"product_id": self.hinge.id, "quantity": 1},
                    {"product_id": self.hinge.id, "quantity": 0},
                ],
            )

        self.assertEqual(ctx.exception.field, "items[1].quantity")

    def test_discount_out_of_range(self):
        with self.assertRaises(InvalidInputError) as ctx:
            create_invoice(
                customer_id=self.customer.id,
                items=[{"product_id": self.hinge.id, "quantity": 1, "discount_percent": "120"}],
            )

        self.assertEqual(ctx.exception.field, "items[0].discount_percent")

    def test_requires_lines(self):
        with self.assertRaises(InvalidInputError) as ctx:
            create_invoice(customer_id=self.customer.id, items=[])

        self.assertEqual(ctx.exception.field, "items")

    def test_unknown_product_and_customer(self):
        missing = "00000000-0000-0000-0000-000000000000"

        with self.assertRaises(ReferenceNotFoundError):
            create_invoice(customer_id=self.customer.id, items=[{"product_id": missing, "quantity": 1}])
        with self.assertRaises(ReferenceNotFoundError):
            create_invoice(customer_id=missing, items=[{"product_id": self.hinge.id, "quantity": 1}])

    def test_inactive_customer(self):
        self.customer.is_active = False
        self.customer.save()

        with self.assertRaises(InvalidInputError):
            create_invoice(
                customer_id=self.customer.id, items=[{"product_id": self.hinge.id, "quantity": 1}]
            )

    def test_due_date_from_payment_terms(self):
        customer = make_customer(payment_terms=15)

        invoice = create_invoice(
            customer_id=customer.id,
            items=[{"product_id": self.hinge.id, "quantity": 1}],
            document_date="2026-03-01",
        )

        self.assertEqual(invoice.due_date, date(2026, 3, 1) + timedelta(days=15))

    def test_due_date_before_document_date(self):
        with self.assertRaises(InvalidInputError):
            create_invoice(
                customer_id=self.customer.id,
                items=[{"product_id": self.hinge.id, "quantity": 1}],
                document_date="2026-03-10",
                due_date="2026-03-01",
            )

    def test_header_is_immutable(self):
        invoice = create_invoice(
            customer_id=self.customer.id, items=[{"product_id": self.hinge.id, "quantity": 1}]
        )

        invoice.total_amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            invoice.save()
        with self.assertRaises(ValidationError):
            invoice.delete()
