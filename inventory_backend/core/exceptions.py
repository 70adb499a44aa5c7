# core/exceptions.py

"""
DOMAIN ERRORS

Centralized error taxonomy for every service in the backend.

Categories:
- InvalidInputError     -> caller sent something malformed (field-level)
- BusinessRuleError     -> well-formed request refused by a domain rule
- DataIntegrityError    -> persisted state contradicts an invariant
- StorageError          -> the datastore itself failed (I/O, locked file)

Rules:
- Services raise these, never return silent defaults on write paths.
- The API layer maps each category to one HTTP status (see core/api.py).
"""

from __future__ import annotations


class InventoryAppError(Exception):
    """Base exception for all domain failures."""

    default_message = "Operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}

    @property
    def code(self) -> str:
        return self.__class__.__name__


# ============================================================
# INPUT
# ============================================================


class InvalidInputError(InventoryAppError):
    """Raised when a request argument is missing or malformed."""

    default_message = "Invalid input"

    def __init__(self, message: str | None = None, *, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data

    @classmethod
    def from_validation_error(cls, exc) -> "InvalidInputError":
        """Wrap a Django ValidationError raised by model.full_clean()."""
        if hasattr(exc, "error_dict"):
            field, messages = next(iter(exc.message_dict.items()))
            if field == "__all__":
                return cls("; ".join(messages))
            return cls(f"{field}: {'; '.join(messages)}", field=field)
        return cls("; ".join(exc.messages))


class ReferenceNotFoundError(InvalidInputError):
    """Raised when a referenced product, party or document does not exist."""

    default_message = "Referenced record not found"


class InvoiceNotFoundError(ReferenceNotFoundError):
    """Raised when a payment targets an unknown invoice."""

    default_message = "Invoice not found"


# ============================================================
# BUSINESS RULES
# ============================================================


class BusinessRuleError(InventoryAppError):
    """Raised when a well-formed request violates a domain rule."""

    default_message = "Business rule violated"


class InsufficientStockError(BusinessRuleError):
    def __init__(self, *, product_id, requested, available, sku: str = ""):
        self.product_id = product_id
        self.sku = sku
        self.requested = requested
        self.available = available
        label = sku or str(product_id)
        super().__init__(
            f"Insufficient stock for {label}: requested={requested}, available={available}"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            {
                "product_id": str(self.product_id),
                "requested": str(self.requested),
                "available": str(self.available),
            }
        )
        return data


class DuplicateSkuError(BusinessRuleError):
    """Raised when a product SKU is already taken."""

    default_message = "SKU already exists"


class DuplicateDocumentNumberError(BusinessRuleError):
    """Raised when a minted document number collides with an existing one."""

    default_message = "Document number already exists"


class OverpaymentError(BusinessRuleError):
    def __init__(self, *, invoice_id, amount, outstanding):
        self.invoice_id = invoice_id
        self.amount = amount
        self.outstanding = outstanding
        super().__init__(
            f"Payment of {amount} exceeds outstanding balance {outstanding} "
            f"on invoice {invoice_id}"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            {
                "invoice_id": str(self.invoice_id),
                "amount": str(self.amount),
                "outstanding": str(self.outstanding),
            }
        )
        return data


class InvoiceNotPayableError(BusinessRuleError):
    """Raised when a payment targets a cancelled invoice."""

    default_message = "Invoice cannot accept payments"


class InvalidTransitionError(BusinessRuleError):
    """Raised when a document status change is not allowed."""

    default_message = "Status transition not allowed"


# ============================================================
# INTEGRITY
# ============================================================


class DataIntegrityError(InventoryAppError):
    """Raised when stored data contradicts a system invariant."""

    default_message = "Data integrity violation"


class ProductNotFoundError(DataIntegrityError):
    """Raised when a product exists but its stock level row is missing."""

    def __init__(self, *, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} has no stock level record")


# ============================================================
# STORAGE
# ============================================================


class StorageError(InventoryAppError):
    """Raised when the datastore cannot be read or written."""

    default_message = "Storage unavailable"


class BackupError(StorageError):
    """Raised when a backup cannot be created, restored or removed."""

    default_message = "Backup operation failed"
