"""
Standardized API Error Module

Provides consistent error formatting across all storefront endpoints.

ERROR FORMAT:
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable message",
            "details": {...}  # Optional extra context
        },
        "status": "error"
    }

ERROR CODES:
    - STORE_NOT_FOUND: No active store for the addressed slug
    - PAGE_NOT_FOUND: Store exists but has no matching page and no homepage
    - TRANSPORT_ERROR: Data store unreachable, safe to retry
    - NAVIGATION_SUPERSEDED: A newer navigation in the same session won
    - VALIDATION_ERROR: Request data failed validation
"""

from typing import Any, Optional
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Structured error information."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


# ============================================================================
# COMMON ERROR CODES
# ============================================================================

class ErrorCodes:
    """Standard error codes for API responses."""

    # Not found errors (404)
    STORE_NOT_FOUND = "STORE_NOT_FOUND"
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"

    # Conflict errors (409)
    NAVIGATION_SUPERSEDED = "NAVIGATION_SUPERSEDED"

    # Validation errors (422)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Upstream errors (503)
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def error_response(
    code: str,
    message: str,
    details: Optional[dict] = None,
) -> dict:
    """
    Create a standardized error response dict.

    Empty details are left out of the payload.
    """
    error = ErrorDetail(code=code, message=message, details=details or None)
    return {
        "error": error.model_dump(exclude_none=True),
        "status": "error",
    }
