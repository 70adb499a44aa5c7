"""
QUOTATION LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Quotation entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from core.exceptions import InvalidTransitionError
from sales.models import Quotation, QuotationStatus

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    QuotationStatus.ACCEPTED,
    QuotationStatus.REJECTED,
    QuotationStatus.EXPIRED,
}

ALLOWED_TRANSITIONS = {
    QuotationStatus.DRAFT: {
        QuotationStatus.SENT,
    },
    QuotationStatus.SENT: {
        QuotationStatus.ACCEPTED,
        QuotationStatus.REJECTED,
        QuotationStatus.EXPIRED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, quotation: Quotation, target_status: str):
    if not can_transition(
        from_status=quotation.status,
        to_status=target_status,
    ):
        raise InvalidTransitionError(
            f"Quotation {quotation.document_number} cannot transition from "
            f"'{quotation.status}' to '{target_status}'"
        )
