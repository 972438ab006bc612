"""
Host resolution: which store does a request address, and how.

A store is reachable two ways:
    bombay.extendbee.com/product/saree-1          -> subdomain mode
    extendbee.com/store/bombay/product/saree-1    -> path mode

HostResolver turns (hostname, path) into a RoutingDecision. It is pure and
total: no I/O, never raises, same output for same input. Every other
component takes the RoutingDecision as given and never looks at the raw
host or path again.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional

from .config import (
    DEFAULT_RESERVED_SUBDOMAINS,
    DEFAULT_ROOT_DOMAINS,
    LOCAL_HOSTNAMES,
    STORE_PATH_PREFIX,
)


class RoutingMode(str, Enum):
    """How the request addresses its store."""

    SUBDOMAIN = "subdomain"  # <slug>.<root>/...
    PATH = "path"            # <root>/store/<slug>/...


@dataclass(frozen=True)
class RoutingDecision:
    """
    Immutable routing result, produced once per request.

    Attributes:
        mode: Subdomain or path routing
        tenant_slug_candidate: Store slug to look up. In subdomain mode it is
            never a reserved name and never contains a dot. In path mode it is
            None until read from the /store/<slug> prefix.
    """

    mode: RoutingMode
    tenant_slug_candidate: Optional[str] = None

    @property
    def is_subdomain_mode(self) -> bool:
        return self.mode is RoutingMode.SUBDOMAIN


PATH_MODE = RoutingDecision(mode=RoutingMode.PATH)


def _strip_port(host: str) -> str:
    host = host.strip().lower()
    if host.startswith("["):
        # IPv6 literal, e.g. [::1]:8000
        return host[: host.find("]") + 1] if "]" in host else host
    return host.split(":", 1)[0].rstrip(".")


class HostResolver:
    """
    Resolve the routing mode and store slug from a hostname.

    Root domains are tried longest first, so a more specific root
    (shop.example.com) wins over a shorter one (example.com).
    """

    def __init__(
        self,
        root_domains: Iterable[str] = DEFAULT_ROOT_DOMAINS,
        reserved_subdomains: Iterable[str] = DEFAULT_RESERVED_SUBDOMAINS,
        path_prefix: str = STORE_PATH_PREFIX,
    ):
        roots = [_strip_port(domain) for domain in root_domains if domain and domain.strip()]
        # The first configured root is the public one used for display URLs
        self.primary_domain: Optional[str] = roots[0] if roots else None
        self.root_domains: tuple[str, ...] = tuple(sorted(set(roots), key=lambda d: (-len(d), d)))
        self.reserved_subdomains: frozenset[str] = frozenset(
            name.strip().lower() for name in reserved_subdomains
        )
        self.path_prefix = "/" + path_prefix.strip("/")
        self._path_pattern = re.compile(
            rf"^{re.escape(self.path_prefix)}/([A-Za-z0-9][A-Za-z0-9_-]*)(?:/|$)"
        )

    @classmethod
    def from_settings(cls, settings) -> "HostResolver":
        return cls(
            root_domains=settings.root_domains_list,
            reserved_subdomains=settings.reserved_subdomains_set,
            path_prefix=settings.path_prefix,
        )

    # ────────────────────────────────────────────────────────────
    # Core resolution
    # ────────────────────────────────────────────────────────────

    def subdomain_of(self, hostname: str) -> Optional[str]:
        """Return the store slug carried by the hostname, or None."""
        host = _strip_port(hostname or "")

        for root in self.root_domains:
            if host == root:
                return None
            suffix = f".{root}"
            if not host.endswith(suffix):
                continue

            candidate = host[: -len(suffix)]
            if not candidate or candidate == "www":
                return None
            if candidate in self.reserved_subdomains:
                return None
            # Nested subdomains (www.bombay.extendbee.com) are not stores
            if "." in candidate:
                return None
            return candidate

        return None

    def resolve(self, hostname: str, path: str = "/") -> RoutingDecision:
        """
        Decide the routing mode from the hostname.

        Subdomain mode when the host is <slug>.<root> for an enabled root and
        a non-reserved, dot-free slug. Everything else is path mode with no
        candidate; the caller then reads the slug from the path.
        """
        slug = self.subdomain_of(hostname)
        if slug is None:
            return PATH_MODE
        return RoutingDecision(mode=RoutingMode.SUBDOMAIN, tenant_slug_candidate=slug)

    # ────────────────────────────────────────────────────────────
    # Path mode helpers
    # ────────────────────────────────────────────────────────────

    def extract_slug_from_path(self, path: str) -> Optional[str]:
        """
        Extract the store slug from a path-mode URL.

            /store/bombay            -> "bombay"
            /store/bombay/cart       -> "bombay"
            /catalog                 -> None
        """
        match = self._path_pattern.match(path or "")
        if match:
            return match.group(1).lower()
        return None

    def decide(self, hostname: str, path: str) -> RoutingDecision:
        """
        Produce the request's RoutingDecision, including the path-mode slug.

        Subdomain decisions ignore the path entirely.
        """
        decision = self.resolve(hostname, path)
        if decision.is_subdomain_mode:
            return decision

        slug = self.extract_slug_from_path(path)
        if slug is None:
            return decision
        return replace(decision, tenant_slug_candidate=slug)

    # ────────────────────────────────────────────────────────────
    # Platform domain helpers
    # ────────────────────────────────────────────────────────────

    def is_main_domain(self, hostname: str) -> bool:
        """True for localhost, a bare root, www.<root>, or any non-store host."""
        host = _strip_port(hostname or "")
        if host in LOCAL_HOSTNAMES:
            return True
        for root in self.root_domains:
            if host == root or host == f"www.{root}":
                return True
        return self.subdomain_of(host) is None

    def subdomain_url(self, slug: str) -> str:
        """Absolute subdomain URL for display, e.g. https://bombay.extendbee.com"""
        return f"https://{slug}.{self._display_domain()}"

    def path_based_url(self, slug: str) -> str:
        """Absolute path-mode URL for display, e.g. https://extendbee.com/store/bombay"""
        return f"https://{self._display_domain()}{self.path_prefix}/{slug}"

    def _display_domain(self) -> str:
        if self.primary_domain is None:
            raise ValueError("No root domain configured")
        return self.primary_domain

    def __repr__(self) -> str:
        return f"HostResolver(root_domains={list(self.root_domains)!r})"
