# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import SAFE_METHODS, BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_SALES = "sales"
ROLE_INVENTORY = "inventory"
ROLE_VIEWER = "viewer"

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_MANAGER, "Manager"),
    (ROLE_SALES, "Sales"),
    (ROLE_INVENTORY, "Inventory"),
    (ROLE_VIEWER, "Viewer"),
]


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_SALES_VIEW = "sales.view"
CAP_SALES_INVOICE = "sales.invoice"       # invoices, quotations, customers
CAP_SALES_PAYMENT = "sales.payment"
CAP_SALES_CANCEL = "sales.cancel"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"     # catalog changes
CAP_INVENTORY_ADJUST = "inventory.adjust"  # manual stock movements

CAP_PURCHASES_VIEW = "purchases.view"
CAP_PURCHASES_MANAGE = "purchases.manage"

CAP_REPORTS_VIEW = "reports.view"

CAP_USERS_MANAGE = "users.manage"
CAP_BACKUP_MANAGE = "backup.manage"

ALL_CAPABILITIES = {
    CAP_SALES_VIEW,
    CAP_SALES_INVOICE,
    CAP_SALES_PAYMENT,
    CAP_SALES_CANCEL,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
    CAP_PURCHASES_VIEW,
    CAP_PURCHASES_MANAGE,
    CAP_REPORTS_VIEW,
    CAP_USERS_MANAGE,
    CAP_BACKUP_MANAGE,
}

READ_CAPABILITIES = {
    CAP_SALES_VIEW,
    CAP_INVENTORY_VIEW,
    CAP_PURCHASES_VIEW,
    CAP_REPORTS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        *READ_CAPABILITIES,
        CAP_SALES_INVOICE,
        CAP_SALES_PAYMENT,
        CAP_SALES_CANCEL,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_ADJUST,
        CAP_PURCHASES_MANAGE,
    },
    ROLE_SALES: {
        CAP_SALES_VIEW,
        CAP_SALES_INVOICE,
        CAP_SALES_PAYMENT,
        CAP_INVENTORY_VIEW,
        CAP_REPORTS_VIEW,
    },
    ROLE_INVENTORY: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_ADJUST,
        CAP_PURCHASES_VIEW,
        CAP_PURCHASES_MANAGE,
        CAP_REPORTS_VIEW,
    },
    ROLE_VIEWER: {
        *READ_CAPABILITIES,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_SALES_PAYMENT

    Views that read and write with different capabilities may set
    read_capability; it is used for GET/HEAD/OPTIONS.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if request.method in SAFE_METHODS:
            required = getattr(view, "read_capability", None) or required

        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return required in effective_capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a list.

    Usage:
        view.required_any_capabilities = {CAP_REPORTS_VIEW, CAP_SALES_VIEW}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(user)
        return any(cap in caps for cap in set(required))
