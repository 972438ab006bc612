"""
Multi-tenant store resolution.

Flow for one request:
    HostResolver.decide(host, path)  -> RoutingDecision (mode + slug)
    TenantContext.resolve(slug)      -> TenantSnapshot (store + theme + chrome + nav)
    LinkBuilder(decision)            -> every URL back into the store
"""
from .errors import (
    PageNotFound,
    ResolutionSuperseded,
    StorefrontError,
    TenantNotFound,
    TransportError,
)
from .host import HostResolver, RoutingDecision, RoutingMode
from .query import QueryClient, SqlQueryClient
from .directory import Tenant, TenantDirectory
from .loader import (
    HeaderFooterConfig,
    NavigationItem,
    NavigationMenu,
    TenantConfig,
    TenantConfigLoader,
    TenantTheme,
)
from .theme import ROOT_STYLES, StyleNamespace, StyleNamespaceBusy, ThemeProjection
from .context import ContextState, TenantContext, TenantSnapshot
from .links import LinkBuilder

__all__ = [
    # Errors
    "StorefrontError",
    "TenantNotFound",
    "TransportError",
    "PageNotFound",
    "ResolutionSuperseded",
    # Routing
    "HostResolver",
    "RoutingDecision",
    "RoutingMode",
    # Data access
    "QueryClient",
    "SqlQueryClient",
    "Tenant",
    "TenantDirectory",
    "TenantConfig",
    "TenantConfigLoader",
    "TenantTheme",
    "HeaderFooterConfig",
    "NavigationItem",
    "NavigationMenu",
    # Context
    "ContextState",
    "TenantContext",
    "TenantSnapshot",
    "ROOT_STYLES",
    "StyleNamespace",
    "StyleNamespaceBusy",
    "ThemeProjection",
    # Links
    "LinkBuilder",
]
