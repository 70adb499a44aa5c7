# products/tests/test_catalog.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from core.exceptions import DuplicateSkuError, InvalidInputError, ReferenceNotFoundError
from core.tests.factories import make_product
from products.models import Category, Product, StockLevel, StockMovement
from products.services.catalog import (
    create_product,
    deactivate_product,
    generate_sku,
    list_products,
    update_product,
)


class CreateProductTests(TestCase):
    def test_creates_paired_stock_level(self):
        product = create_product(name="Marine Plywood 18mm", sku="ply-18")

        level = StockLevel.objects.get(product=product)
        self.assertEqual(product.sku, "PLY-18")
        self.assertEqual(level.current_stock, Decimal("0"))
        self.assertEqual(level.location, "Main Store")

    def test_opening_stock_goes_through_the_ledger(self):
        product = create_product(name="Door Hinge", sku="HNG-1", opening_stock="25")

        movement = StockMovement.objects.get(product=product)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.IN)
        self.assertEqual(movement.reference_type, StockMovement.ReferenceType.OPENING)
        self.assertEqual(product.stock_level.current_stock, Decimal("25"))

    def test_duplicate_sku_is_case_insensitive(self):
        create_product(name="A", sku="ABC-1")

        with self.assertRaises(DuplicateSkuError):
            create_product(name="B", sku="abc-1")

    def test_generated_sku(self):
        category = Category.objects.create(name="Plywood")

        product = create_product(name="Marine 18mm", category=category.id)

        self.assertTrue(product.sku.startswith("PLYMAR"))

    @override_settings(DEFAULT_TAX_RATE="12.00")
    def test_default_tax_rate_from_settings(self):
        product = create_product(name="Glue", sku="GLUE-1")

        self.assertEqual(product.tax_rate, Decimal("12.00"))

    def test_rejects_bad_values(self):
        with self.assertRaises(InvalidInputError):
            create_product(name="   ")
        with self.assertRaises(InvalidInputError):
            create_product(name="X", sku="X-1", selling_price="-1")
        with self.assertRaises(InvalidInputError):
            create_product(name="X", sku="X-2", tax_rate="101")

    def test_unknown_category(self):
        with self.assertRaises(ReferenceNotFoundError):
            create_product(name="X", category="00000000-0000-0000-0000-000000000000")

    def test_failure_leaves_no_half_created_product(self):
        with self.assertRaises(InvalidInputError):
            create_product(name="Half", sku="HALF-1", opening_stock="-3")

        self.assertFalse(Product.objects.filter(sku="HALF-1").exists())


class GenerateSkuTests(TestCase):
    def test_shape(self):
        self.assertEqual(generate_sku("Hardware", "2-inch nails", timestamp_ms=1700000004821), "HAR2IN4821")

    def test_no_category(self):
        self.assertEqual(generate_sku("", "Tape", timestamp_ms=12345), "GENTAP2345")


class UpdateProductTests(TestCase):
    def test_sku_frozen_once_referenced(self):
        product = make_product(stock=5)

        with self.assertRaises(InvalidInputError):
            update_product(product_id=product.id, changes={"sku": "NEW-SKU"})

    def test_sku_editable_before_first_movement(self):
        product = make_product()

        updated = update_product(product_id=product.id, changes={"sku": "fresh-1", "selling_price": "12.5"})

        self.assertEqual(updated.sku, "FRESH-1")
        self.assertEqual(updated.selling_price, Decimal("12.50"))

    def test_unknown_field(self):
        product = make_product()

        with self.assertRaises(InvalidInputError):
            update_product(product_id=product.id, changes={"current_stock": 5})


class DeactivateProductTests(TestCase):
    def test_deactivate_hides_from_default_listing(self):
        product = make_product()

        deactivate_product(product_id=product.id)

        self.assertNotIn(product, list_products())
        self.assertIn(product, list_products(include_inactive=True))

    def test_products_are_never_deleted(self):
        product = make_product()

        with self.assertRaises(ValidationError):
            product.delete()

    def test_search(self):
        make_product(name="Teak Veneer")
        make_product(name="Oak Veneer")

        names = [p.name for p in list_products(search="teak")]

        self.assertEqual(names, ["Teak Veneer"])
