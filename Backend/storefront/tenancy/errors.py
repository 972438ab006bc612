"""
Failure taxonomy for tenant resolution and page loading.

TenantContext is the single place that turns these into user-facing state;
main.py maps them onto HTTP responses. ConfigDegraded is deliberately not an
exception: degraded configuration is defaulted and only logged.
"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for modeled storefront failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TenantNotFound(StorefrontError):
    """No active store for the slug. Never says whether it exists but is inactive."""

    def __init__(self, slug: Optional[str]):
        self.slug = slug
        super().__init__(f"Store not found: {slug}" if slug else "No store specified")


class TransportError(StorefrontError):
    """The data store could not be reached or answered with an error. Retryable."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class PageNotFound(StorefrontError):
    """The store has neither the requested page nor a published homepage."""

    def __init__(self, tenant_id, slug: Optional[str]):
        self.tenant_id = tenant_id
        self.slug = slug
        super().__init__(f"Page not found: {slug}" if slug else "Page not found")


class ResolutionSuperseded(StorefrontError):
    """A newer navigation in the same context replaced this resolution before it finished."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Resolution for '{slug}' was superseded by a newer navigation")


CONFIG_DEGRADED = "ConfigDegraded"
"""Log marker for sub-fetches that fell back to defaults."""
