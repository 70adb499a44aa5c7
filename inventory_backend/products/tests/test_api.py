# products/tests/test_api.py

from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from core.tests.factories import make_product, make_user
from permissions.roles import ROLE_INVENTORY, ROLE_SALES, ROLE_VIEWER
from products.models import StockLevel


class ProductApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user(role=ROLE_INVENTORY))

    def test_unauthenticated_is_refused(self):
        response = APIClient().get("/api/products/products/")

        self.assertEqual(response.status_code, 401)

    def test_create_and_list(self):
        response = self.client.post(
            "/api/products/products/",
            {"name": "Laminate Sheet", "sku": "lam-1", "selling_price": "450.00", "opening_stock": "8"},
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["sku"], "LAM-1")
        self.assertEqual(Decimal(str(response.data["current_stock"])), Decimal("8"))

        listing = self.client.get("/api/products/products/", {"q": "laminate"})
        self.assertEqual(listing.data["count"], 1)

    def test_duplicate_sku_conflict(self):
        make_product(sku="DUP-1")

        response = self.client.post(
            "/api/products/products/", {"name": "Again", "sku": "dup-1"}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "DuplicateSkuError")

    def test_delete_deactivates(self):
        product = make_product()

        response = self.client.delete(f"/api/products/products/{product.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["is_active"])

    def test_manual_movement_and_history(self):
        product = make_product(stock=10)

        response = self.client.post(
            f"/api/products/products/{product.id}/movements/",
            {"movement_type": "OUT", "quantity": "3", "notes": "damaged"},
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(StockLevel.objects.get(product=product).current_stock, Decimal("7"))

        history = self.client.get(f"/api/products/products/{product.id}/movements/", {"limit": 1})
        self.assertEqual(history.data["count"], 1)
        self.assertEqual(history.data["results"][0]["movement_type"], "OUT")

    def test_insufficient_stock_is_a_conflict(self):
        product = make_product(stock=2)

        response = self.client.post(
            f"/api/products/products/{product.id}/movements/",
            {"movement_type": "OUT", "quantity": "5"},
            format="json",
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["available"], "2.000")

    def test_low_stock_alerts(self):
        low = make_product(stock=1, reorder_level=5)
        make_product(stock=50, reorder_level=5)

        response = self.client.get("/api/products/products/alerts/low-stock/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["id"] for row in response.data["results"]], [str(low.id)])

    def test_global_movement_feed(self):
        make_product(stock=3)

        response = self.client.get("/api/products/movements/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)


class ProductPermissionTests(TestCase):
    def setUp(self):
        self.product = make_product(stock=10)

    def _client(self, role):
        client = APIClient()
        client.force_authenticate(user=make_user(role=role))
        return client

    def test_viewer_can_read_but_not_write(self):
        client = self._client(ROLE_VIEWER)

        self.assertEqual(client.get("/api/products/products/").status_code, 200)
        self.assertEqual(
            client.post("/api/products/products/", {"name": "Nope"}, format="json").status_code,
            403,
        )

    def test_sales_cannot_adjust_stock(self):
        client = self._client(ROLE_SALES)

        response = client.post(
            f"/api/products/products/{self.product.id}/movements/",
            {"movement_type": "ADJUSTMENT", "quantity": "0"},
            format="json",
        )

        self.assertEqual(response.status_code, 403)
