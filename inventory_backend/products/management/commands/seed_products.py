from decimal import Decimal

from django.core.management.base import BaseCommand

from core.exceptions import DuplicateSkuError
from products.models import Category, Product
from products.services.catalog import create_product

DEFAULT_CATEGORIES = [
    "Plywood",
    "Laminates",
    "Hardware",
    "Edge Bands",
    "Adhesives",
    "Tools",
    "Accessories",
]

DEMO_PRODUCTS = [
    # sku, name, category, unit, purchase, selling, reorder, opening
    ("PLY-MR-18", "MR Plywood 18mm", "Plywood", "sheet", "1950.00", "2500.00", 20, "40"),
    ("LAM-GL-1", "Gloss Laminate 1mm", "Laminates", "sheet", "650.00", "850.00", 15, "30"),
    ("HW-HNG-35", "Soft-close Hinge 35mm", "Hardware", "pcs", "85.00", "120.00", 50, "200"),
    ("EB-PVC-22", "PVC Edge Band 22mm", "Edge Bands", "m", "6.50", "9.00", 100, "500"),
    ("ADH-FV-1", "Fevicol SH 1kg", "Adhesives", "kg", "260.00", "320.00", 10, "12"),
]


class Command(BaseCommand):
    help = "Seed default categories and demo products with opening stock"

    def add_arguments(self, parser):
        parser.add_argument(
            "--categories-only",
            action="store_true",
            help="Create the default categories without demo products",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding categories..."))

        category_objs = {}
        for name in DEFAULT_CATEGORIES:
            obj, _ = Category.objects.get_or_create(name=name)
            category_objs[name] = obj

        if options["categories_only"]:
            self.stdout.write(self.style.SUCCESS("Categories seeded."))
            return

        self.stdout.write(self.style.WARNING("Seeding products and opening stock..."))
        created = 0
        for sku, name, cat, unit, purchase, selling, reorder, opening in DEMO_PRODUCTS:
            if Product.objects.filter(sku=sku).exists():
                continue
            try:
                create_product(
                    sku=sku,
                    name=name,
                    category=category_objs[cat],
                    unit=unit,
                    purchase_price=Decimal(purchase),
                    selling_price=Decimal(selling),
                    reorder_level=reorder,
                    opening_stock=Decimal(opening),
                )
            except DuplicateSkuError:
                continue
            created += 1

        self.stdout.write(self.style.SUCCESS(f"Seeded {created} products."))
