# documents/tests/test_lines.py

from decimal import Decimal

from django.test import TestCase

from core.coerce import MAX_AMOUNT
from core.exceptions import InvalidInputError
from core.tests.factories import make_product
from core.unit_of_work import UnitOfWork
from documents.lines import resolve_lines


class ResolveLinesLimitTests(TestCase):
    def setUp(self):
        self.product = make_product(selling_price="10.00", tax_rate="0")

    def resolve(self, *items):
        return resolve_lines(list(items), uow=UnitOfWork())

    def line(self, quantity, unit_price, **extra):
        return {
            "product_id": self.product.id,
            "quantity": quantity,
            "unit_price": unit_price,
            **extra,
        }

    def test_line_total_too_large_for_storage(self):
        with self.assertRaises(InvalidInputError) as ctx:
            self.resolve(self.line("100000", "10000000.00"))

        self.assertEqual(ctx.exception.field, "items[0].quantity")

    def test_document_total_too_large_for_storage(self):
        # each line fits on its own, the sum does not
        big = self.line("60000", "10000000.00")

        with self.assertRaises(InvalidInputError) as ctx:
            self.resolve(big, big)

        self.assertEqual(ctx.exception.field, "items")

    def test_tax_can_push_a_line_over_the_limit(self):
        with self.assertRaises(InvalidInputError) as ctx:
            self.resolve(self.line("1", "999999999.99"), self.line("100", "9999999999.99", tax_rate="18"))

        self.assertEqual(ctx.exception.field, "items[1].quantity")

    def test_quantity_beyond_column_precision(self):
        with self.assertRaises(InvalidInputError) as ctx:
            self.resolve(self.line("1e30", "1.00"))

        self.assertEqual(ctx.exception.field, "items[0].quantity")

    def test_unit_price_beyond_column_precision(self):
        with self.assertRaises(InvalidInputError) as ctx:
            self.resolve(self.line("1", "1e30"))

        self.assertEqual(ctx.exception.field, "items[0].unit_price")

    def test_largest_storable_total_is_accepted(self):
        lines = self.resolve(self.line("1", "9999999999.99"))

        self.assertEqual(lines[0].totals.persisted_total, Decimal("9999999999.99"))
        self.assertLess(lines[0].totals.persisted_total, MAX_AMOUNT)
