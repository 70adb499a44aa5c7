# sales/tests/test_quotations.py

from datetime import date
from decimal import Decimal

from django.test import TestCase

from core.exceptions import InsufficientStockError, InvalidInputError, InvalidTransitionError
from core.tests.factories import make_customer, make_product
from products.models import StockLevel, StockMovement
from sales.models import Invoice, Quotation, QuotationStatus
from sales.services.quotation_service import (
    convert_quotation_to_invoice,
    create_quotation,
    expire_quotations,
    transition_quotation,
)

SENT = QuotationStatus.SENT
ACCEPTED = QuotationStatus.ACCEPTED


class QuotationTestCase(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.product = make_product(stock=10, selling_price="200.00", tax_rate="5.00")
        self.quotation = create_quotation(
            customer_id=self.customer.id,
            items=[{"product_id": self.product.id, "quantity": 3, "discount_percent": "10"}],
            document_date="2026-05-01",
            valid_until="2026-05-31",
        )

    def advance(self, *statuses):
        for status in statuses:
            transition_quotation(quotation_id=self.quotation.id, target_status=status)
        return Quotation.objects.get(pk=self.quotation.pk)


class CreateQuotationTests(QuotationTestCase):
    def test_numbered_priced_and_no_stock_effect(self):
        self.assertEqual(self.quotation.document_number, "QUO0001")
        self.assertEqual(self.quotation.status, QuotationStatus.DRAFT)
        # 3 * 200 = 600, -10% = 540, +5% tax = 27
        self.assertEqual(self.quotation.subtotal, Decimal("540.00"))
        self.assertEqual(self.quotation.tax_amount, Decimal("27.00"))
        self.assertEqual(self.quotation.total_amount, Decimal("567.00"))

        self.assertEqual(StockLevel.objects.get(product=self.product).current_stock, Decimal("10"))
        self.assertFalse(
            StockMovement.objects.filter(movement_type=StockMovement.MovementType.OUT).exists()
        )

    def test_quoting_more_than_stock_is_fine(self):
        quotation = create_quotation(
            customer_id=self.customer.id,
            items=[{"product_id": self.product.id, "quantity": 500}],
        )

        self.assertEqual(quotation.document_number, "QUO0002")

    def test_total_too_large_to_store(self):
        with self.assertRaises(InvalidInputError) as ctx:
            create_quotation(
                customer_id=self.customer.id,
                items=[{"product_id": self.product.id, "quantity": "100000", "unit_price": "10000000.00"}],
            )

        self.assertEqual(ctx.exception.field, "items[0].quantity")
        self.assertEqual(Quotation.objects.count(), 1)

    def test_valid_until_before_document_date(self):
        with self.assertRaises(InvalidInputError):
            create_quotation(
                customer_id=self.customer.id,
                items=[{"product_id": self.product.id, "quantity": 1}],
                document_date="2026-05-10",
                valid_until="2026-05-01",
            )


class TransitionTests(QuotationTestCase):
    def test_happy_path(self):
        self.assertEqual(self.advance(SENT, ACCEPTED).status, ACCEPTED)

    def test_draft_cannot_be_accepted_directly(self):
        with self.assertRaises(InvalidTransitionError):
            self.advance(ACCEPTED)

    def test_terminal_states_are_final(self):
        self.advance(SENT, QuotationStatus.REJECTED)

        with self.assertRaises(InvalidTransitionError):
            self.advance(ACCEPTED)

    def test_unknown_status(self):
        with self.assertRaises(InvalidInputError):
            self.advance("Maybe")

    def test_expire_only_sent_quotations_past_validity(self):
        draft = create_quotation(
            customer_id=self.customer.id,
            items=[{"product_id": self.product.id, "quantity": 1}],
            document_date="2026-05-01",
            valid_until="2026-05-02",
        )
        self.advance(SENT)

        self.assertEqual(expire_quotations(as_of=date(2026, 5, 31)), 0)
        self.assertEqual(expire_quotations(as_of=date(2026, 6, 1)), 1)

        self.assertEqual(Quotation.objects.get(pk=self.quotation.pk).status, QuotationStatus.EXPIRED)
        self.assertEqual(Quotation.objects.get(pk=draft.pk).status, QuotationStatus.DRAFT)


class ConvertQuotationTests(QuotationTestCase):
    def test_accepted_quotation_becomes_an_invoice(self):
        self.advance(SENT, ACCEPTED)

        invoice = convert_quotation_to_invoice(quotation_id=self.quotation.id)

        self.assertEqual(invoice.document_number, "INV0001")
        self.assertEqual(invoice.total_amount, self.quotation.total_amount)
        self.assertEqual(StockLevel.objects.get(product=self.product).current_stock, Decimal("7"))
        self.assertEqual(Quotation.objects.get(pk=self.quotation.pk).converted_invoice, invoice)

    def test_only_once(self):
        self.advance(SENT, ACCEPTED)
        convert_quotation_to_invoice(quotation_id=self.quotation.id)

        with self.assertRaises(InvalidTransitionError):
            convert_quotation_to_invoice(quotation_id=self.quotation.id)
        self.assertEqual(Invoice.objects.count(), 1)

    def test_must_be_accepted(self):
        self.advance(SENT)

        with self.assertRaises(InvalidTransitionError):
            convert_quotation_to_invoice(quotation_id=self.quotation.id)

    def test_stock_shortage_leaves_quotation_unconverted(self):
        big = create_quotation(
            customer_id=self.customer.id,
            items=[{"product_id": self.product.id, "quantity": 50}],
        )
        transition_quotation(quotation_id=big.id, target_status=SENT)
        transition_quotation(quotation_id=big.id, target_status=ACCEPTED)

        with self.assertRaises(InsufficientStockError):
            convert_quotation_to_invoice(quotation_id=big.id)

        self.assertIsNone(Quotation.objects.get(pk=big.pk).converted_invoice_id)
        self.assertFalse(Invoice.objects.exists())
