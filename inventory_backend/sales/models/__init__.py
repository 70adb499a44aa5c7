# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS
"""

from .customer import Customer
from .invoice import Invoice, InvoiceItem, InvoiceStatus
from .payment import Payment, PaymentMethod
from .quotation import Quotation, QuotationItem, QuotationStatus

__all__ = [
    "Customer",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "Payment",
    "PaymentMethod",
    "Quotation",
    "QuotationItem",
    "QuotationStatus",
]
