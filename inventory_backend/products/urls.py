# products/urls.py

"""
PRODUCTS URLS

Registers product domain routes under /api/products/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import CategoryViewSet, ProductViewSet, StockMovementListView

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"products", ProductViewSet, basename="products")

urlpatterns = [
    path("movements/", StockMovementListView.as_view(), name="stock-movements"),
    path("", include(router.urls)),
]
