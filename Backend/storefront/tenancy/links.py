"""
Store link building.

The one place that knows what a URL to a store page looks like:

    subdomain mode (bombay.extendbee.com):  /product/saree-1
    path mode      (extendbee.com):         /store/bombay/product/saree-1

No other code concatenates a store prefix.
"""

from typing import Optional
from urllib.parse import quote

from .config import STORE_PATH_PREFIX
from .host import RoutingDecision


def encode_component(value: str) -> str:
    """Percent-encode a query value the way browsers' encodeURIComponent does."""
    return quote(str(value), safe="-_.!~*'()")


class LinkBuilder:
    """
    Build store-relative or store-prefixed paths from a RoutingDecision.

    Usage:
        links = LinkBuilder(decision)
        links.product("saree-1")   # "/product/saree-1" or "/store/bombay/product/saree-1"
    """

    def __init__(self, decision: RoutingDecision, path_prefix: str = STORE_PATH_PREFIX):
        if not decision.is_subdomain_mode and not decision.tenant_slug_candidate:
            raise ValueError("Path-mode links need a store slug")
        self.decision = decision
        self.path_prefix = "/" + path_prefix.strip("/")

    @property
    def store_slug(self) -> Optional[str]:
        return self.decision.tenant_slug_candidate

    def custom(self, path: str) -> str:
        """Any path inside the store."""
        normalized = path if path.startswith("/") else f"/{path}"
        if self.decision.is_subdomain_mode:
            return normalized
        return f"{self.path_prefix}/{self.store_slug}{normalized}"

    def resolve(self, url: Optional[str]) -> Optional[str]:
        """Run a store-relative URL from stored config through custom(); leave absolute ones alone."""
        if url and url.startswith("/") and not url.startswith("//"):
            return self.custom(url)
        return url

    def home(self) -> str:
        return self.custom("/")

    def catalog(self) -> str:
        return self.custom("/catalog")

    def product(self, slug: str) -> str:
        return self.custom(f"/product/{slug}")

    def category(self, slug: str) -> str:
        return self.custom(f"/categories?cat={encode_component(slug)}")

    def page(self, slug: str) -> str:
        return self.custom(f"/page/{slug}")

    def cart(self) -> str:
        return self.custom("/cart")

    def checkout(self) -> str:
        return self.custom("/checkout")

    def search(self, query: Optional[str] = None) -> str:
        if query:
            return self.custom(f"/search?q={encode_component(query)}")
        return self.custom("/search")

    def order_tracking(self, order_id: Optional[str] = None) -> str:
        if order_id:
            return self.custom(f"/order/{order_id}")
        return self.custom("/order-tracking")

    def auth(self, return_to: Optional[str] = None) -> str:
        if return_to:
            return self.custom(f"/auth?returnTo={encode_component(return_to)}")
        return self.custom("/auth")

    def account(self) -> str:
        return self.custom("/account")

    def orders(self) -> str:
        return self.custom("/account/orders")

    def profile(self) -> str:
        return self.custom("/account/profile")

    def as_dict(self) -> dict[str, str]:
        """The fixed links every store shell renders."""
        return {
            "home": self.home(),
            "catalog": self.catalog(),
            "cart": self.cart(),
            "checkout": self.checkout(),
            "search": self.search(),
            "auth": self.auth(),
            "account": self.account(),
            "profile": self.profile(),
            "orders": self.orders(),
            "order_tracking": self.order_tracking(),
        }
