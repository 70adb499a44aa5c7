# sales/tests/test_payments.py

from datetime import date
from decimal import Decimal

from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.test import TestCase, override_settings

from core.exceptions import (
    InvalidInputError,
    InvalidTransitionError,
    InvoiceNotFoundError,
    InvoiceNotPayableError,
    OverpaymentError,
)
from core.tests.factories import make_customer, make_product
from products.models import StockLevel, StockMovement
from sales.models import Invoice, InvoiceStatus, Payment
from sales.services.invoice_service import create_invoice
from sales.services.payment_service import (
    cancel_invoice,
    derive_invoice_status,
    mark_overdue_invoices,
    record_payment,
)


class PaymentTestCase(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.product = make_product(stock=100, selling_price="500.00", tax_rate="0")
        # total 1000.00
        self.invoice = create_invoice(
            customer_id=self.customer.id,
            items=[{"product_id": self.product.id, "quantity": 2}],
            document_date="2026-01-01",
            due_date="2026-01-31",
        )

    def refresh(self):
        return Invoice.objects.get(pk=self.invoice.pk)


class RecordPaymentTests(PaymentTestCase):
    def test_partial_then_full(self):
        record_payment(invoice_id=self.invoice.id, amount="400")
        invoice = self.refresh()
        self.assertEqual(invoice.paid_amount, Decimal("400.00"))
        self.assertEqual(invoice.status, InvoiceStatus.PENDING)

        result = record_payment(invoice_id=self.invoice.id, amount="600", method="upi")
        self.assertEqual(result.invoice.status, InvoiceStatus.PAID)
        self.assertEqual(self.refresh().paid_amount, Decimal("1000.00"))
        self.assertEqual(Payment.objects.filter(invoice=self.invoice).count(), 2)

    def test_overpayment_rejected_by_default(self):
        record_payment(invoice_id=self.invoice.id, amount="900")

        with self.assertRaises(OverpaymentError) as ctx:
            record_payment(invoice_id=self.invoice.id, amount="200")

        self.assertEqual(ctx.exception.outstanding, Decimal("100.00"))
        self.assertEqual(self.refresh().paid_amount, Decimal("900.00"))
        self.assertEqual(Payment.objects.filter(invoice=self.invoice).count(), 1)

    def test_clamp_policy_records_only_outstanding(self):
        result = record_payment(invoice_id=self.invoice.id, amount="1500", policy="clamp")

        self.assertEqual(result.applied_amount, Decimal("1000.00"))
        self.assertEqual(result.payment.amount, Decimal("1000.00"))
        self.assertEqual(self.refresh().status, InvoiceStatus.PAID)

    def test_clamp_policy_refuses_a_settled_invoice(self):
        record_payment(invoice_id=self.invoice.id, amount="1000")

        with self.assertRaises(OverpaymentError):
            record_payment(invoice_id=self.invoice.id, amount="1", policy="clamp")

    @override_settings(OVERPAYMENT_POLICY="credit")
    def test_credit_policy_keeps_the_excess(self):
        result = record_payment(invoice_id=self.invoice.id, amount="1200")

        invoice = self.refresh()
        self.assertEqual(result.credit_amount, Decimal("200.00"))
        self.assertEqual(invoice.paid_amount, Decimal("1200.00"))
        self.assertEqual(invoice.status, InvoiceStatus.PAID)
        self.assertEqual(invoice.outstanding, Decimal("0.00"))

    @override_settings(OVERPAYMENT_POLICY="sometimes")
    def test_misconfigured_policy(self):
        with self.assertRaises(ImproperlyConfigured):
            record_payment(invoice_id=self.invoice.id, amount="1")

    def test_amount_must_be_positive(self):
        with self.assertRaises(InvalidInputError):
            record_payment(invoice_id=self.invoice.id, amount="0")
        with self.assertRaises(InvalidInputError):
            record_payment(invoice_id=self.invoice.id, amount="-5")

    def test_unknown_method(self):
        with self.assertRaises(InvalidInputError) as ctx:
            record_payment(invoice_id=self.invoice.id, amount="10", method="barter")

        self.assertEqual(ctx.exception.field, "method")

    def test_unknown_invoice(self):
        with self.assertRaises(InvoiceNotFoundError):
            record_payment(invoice_id="00000000-0000-0000-0000-000000000000", amount="10")

    def test_amount_too_large_to_store(self):
        with self.assertRaises(InvalidInputError) as ctx:
            record_payment(invoice_id=self.invoice.id, amount="1e30")

        self.assertEqual(ctx.exception.field, "amount")
        self.assertFalse(Payment.objects.exists())

    def test_payments_are_append_only(self):
        payment = record_payment(invoice_id=self.invoice.id, amount="10").payment

        payment.amount = Decimal("20")
        with self.assertRaises(ValidationError):
            payment.save()


class OverdueTests(PaymentTestCase):
    def test_mark_overdue_after_due_date(self):
        self.assertEqual(mark_overdue_invoices(as_of=date(2026, 1, 31)), 0)
        self.assertEqual(mark_overdue_invoices(as_of=date(2026, 2, 1)), 1)
        self.assertEqual(self.refresh().status, InvoiceStatus.OVERDUE)

    def test_partial_payment_keeps_overdue(self):
        mark_overdue_invoices(as_of=date(2026, 2, 1))

        record_payment(invoice_id=self.invoice.id, amount="100")
        self.assertEqual(self.refresh().status, InvoiceStatus.OVERDUE)

        record_payment(invoice_id=self.invoice.id, amount="900")
        self.assertEqual(self.refresh().status, InvoiceStatus.PAID)

    def test_paid_invoices_never_become_overdue(self):
        record_payment(invoice_id=self.invoice.id, amount="1000")

        self.assertEqual(mark_overdue_invoices(as_of=date(2026, 6, 1)), 0)


class CancelInvoiceTests(PaymentTestCase):
    def test_cancel_returns_stock_and_blocks_payments(self):
        cancel_invoice(invoice_id=self.invoice.id, reason="customer changed mind")

        invoice = self.refresh()
        self.assertEqual(invoice.status, InvoiceStatus.CANCELLED)
        self.assertIn("customer changed mind", invoice.notes)
        self.assertEqual(StockLevel.objects.get(product=self.product).current_stock, Decimal("100"))
        self.assertTrue(
            StockMovement.objects.filter(
                reference_type=StockMovement.ReferenceType.INVOICE_CANCELLATION,
                reference_id=self.invoice.id,
            ).exists()
        )

        with self.assertRaises(InvoiceNotPayableError):
            record_payment(invoice_id=self.invoice.id, amount="10")

    def test_cannot_cancel_with_payments(self):
        record_payment(invoice_id=self.invoice.id, amount="10")

        with self.assertRaises(InvalidTransitionError):
            cancel_invoice(invoice_id=self.invoice.id)

    def test_cannot_cancel_twice(self):
        cancel_invoice(invoice_id=self.invoice.id)

        with self.assertRaises(InvalidTransitionError):
            cancel_invoice(invoice_id=self.invoice.id)


class DeriveStatusTests(TestCase):
    def test_paid_iff_fully_paid(self):
        self.assertEqual(
            derive_invoice_status(total_amount=Decimal("10"), paid_amount=Decimal("10")),
            InvoiceStatus.PAID,
        )
        self.assertEqual(
            derive_invoice_status(total_amount=Decimal("10"), paid_amount=Decimal("9.99")),
            InvoiceStatus.PENDING,
        )
        self.assertEqual(
            derive_invoice_status(
                total_amount=Decimal("10"),
                paid_amount=Decimal("5"),
                current_status=InvoiceStatus.OVERDUE,
            ),
            InvoiceStatus.OVERDUE,
        )
