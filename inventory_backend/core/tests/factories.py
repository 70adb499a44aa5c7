# core/tests/factories.py

"""
Small builders shared by the app test suites.

Everything goes through the real services so the paired StockLevel and the
opening-stock movement exist exactly as they would in production.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model

from permissions.roles import ROLE_ADMIN
from products.services.catalog import create_product
from purchases.models import Supplier
from sales.models import Customer

User = get_user_model()

_counter = {"n": 0}


def _next() -> int:
    _counter["n"] += 1
    return _counter["n"]


def make_user(role=ROLE_ADMIN, username=None, password="password123", **extra):
    return User.objects.create_user(
        username or f"{role}_{_next()}",
        password=password,
        role=role,
        **extra,
    )


def make_product(
    *,
    stock=0,
    selling_price="100.00",
    purchase_price="60.00",
    tax_rate="18.00",
    reorder_level=0,
    **fields,
):
    n = _next()
    fields.setdefault("name", f"Product {n}")
    fields.setdefault("sku", f"SKU-{n:04d}")
    return create_product(
        selling_price=Decimal(selling_price),
        purchase_price=Decimal(purchase_price),
        tax_rate=Decimal(tax_rate),
        reorder_level=reorder_level,
        opening_stock=stock or None,
        **fields,
    )


def make_customer(**fields):
    fields.setdefault("name", f"Customer {_next()}")
    return Customer.objects.create(**fields)


def make_supplier(**fields):
    fields.setdefault("name", f"Supplier {_next()}")
    return Supplier.objects.create(**fields)

