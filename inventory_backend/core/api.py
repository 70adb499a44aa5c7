# core/api.py

"""
API ERROR MAPPING

Views catch InventoryAppError around service calls and hand it here.

Mapping:
- InvalidInputError       -> 400
- ReferenceNotFoundError  -> 404
- BusinessRuleError       -> 409
- DataIntegrityError      -> 500 (logged on inventory.integrity)
- StorageError            -> 503
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response

from core.exceptions import (
    BusinessRuleError,
    DataIntegrityError,
    InvalidInputError,
    InventoryAppError,
    ReferenceNotFoundError,
    StorageError,
)

logger = logging.getLogger("inventory.integrity")

_STATUS_BY_CATEGORY = (
    (ReferenceNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (BusinessRuleError, status.HTTP_409_CONFLICT),
    (DataIntegrityError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: InventoryAppError) -> int:
    for category, code in _STATUS_BY_CATEGORY:
        if isinstance(exc, category):
            return code
    return status.HTTP_400_BAD_REQUEST


def error_response(exc: InventoryAppError) -> Response:
    code = status_for(exc)
    if isinstance(exc, DataIntegrityError):
        logger.error(
            "integrity violation surfaced to API",
            extra={"error": exc.code, "detail": exc.message},
        )
    return Response(exc.to_dict(), status=code)
