from .customer import CustomerSerializer
from .invoice import (
    InvoiceCancelSerializer,
    InvoiceCreateSerializer,
    InvoiceSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
)
from .quotation import (
    QuotationCreateSerializer,
    QuotationSerializer,
    QuotationTransitionSerializer,
)

__all__ = [
    "CustomerSerializer",
    "InvoiceCancelSerializer",
    "InvoiceCreateSerializer",
    "InvoiceSerializer",
    "PaymentCreateSerializer",
    "PaymentSerializer",
    "QuotationCreateSerializer",
    "QuotationSerializer",
    "QuotationTransitionSerializer",
]
