"""
Link Builder Tests

Every store URL comes from LinkBuilder. These tests pin down what each
link looks like under subdomain mode (store-relative) and path mode
(/store/<slug> prefix).

Run with: pytest tests/test_links.py -v
"""

import pytest

from storefront.tenancy.host import HostResolver, RoutingDecision, RoutingMode
from storefront.tenancy.links import LinkBuilder, encode_component


@pytest.fixture
def subdomain_links():
    return LinkBuilder(RoutingDecision(mode=RoutingMode.SUBDOMAIN, tenant_slug_candidate="bombay"))


@pytest.fixture
def path_links():
    return LinkBuilder(RoutingDecision(mode=RoutingMode.PATH, tenant_slug_candidate="bombay"))


class TestEndToEndExample:

    def test_subdomain_product_link_has_no_prefix(self):
        decision = HostResolver().resolve("bombay.extendbee.com", "/product/saree-1")
        assert LinkBuilder(decision).product("saree-1") == "/product/saree-1"

    def test_path_mode_product_link_is_prefixed(self):
        decision = HostResolver().decide("extendbee.com", "/store/bombay/product/saree-1")
        assert LinkBuilder(decision).product("saree-1") == "/store/bombay/product/saree-1"


class TestSubdomainLinks:

    def test_core_links(self, subdomain_links):
        assert subdomain_links.home() == "/"
        assert subdomain_links.catalog() == "/catalog"
        assert subdomain_links.cart() == "/cart"
        assert subdomain_links.checkout() == "/checkout"
        assert subdomain_links.auth() == "/auth"

    def test_account_links(self, subdomain_links):
        assert subdomain_links.account() == "/account"
        assert subdomain_links.orders() == "/account/orders"
        assert subdomain_links.profile() == "/account/profile"

    def test_custom_adds_leading_slash(self, subdomain_links):
        assert subdomain_links.custom("wishlist") == "/wishlist"


class TestPathLinks:

    def test_core_links(self, path_links):
        assert path_links.home() == "/store/bombay/"
        assert path_links.catalog() == "/store/bombay/catalog"
        assert path_links.cart() == "/store/bombay/cart"
        assert path_links.checkout() == "/store/bombay/checkout"
        assert path_links.auth() == "/store/bombay/auth"
        assert path_links.page("about") == "/store/bombay/page/about"

    def test_every_fixed_link_is_prefixed(self, path_links):
        for name, link in path_links.as_dict().items():
            assert link.startswith("/store/bombay/"), name

    def test_custom_prefix(self):
        links = LinkBuilder(RoutingDecision(mode=RoutingMode.PATH, tenant_slug_candidate="bombay"), path_prefix="/shop/")
        assert links.cart() == "/shop/bombay/cart"

    def test_path_mode_requires_slug(self):
        with pytest.raises(ValueError):
            LinkBuilder(RoutingDecision(mode=RoutingMode.PATH))


class TestQueryLinks:

    def test_auth_return_to_is_encoded(self, path_links):
        assert path_links.auth("/store/bombay/checkout") == "/store/bombay/auth?returnTo=%2Fstore%2Fbombay%2Fcheckout"

    def test_search(self, subdomain_links):
        assert subdomain_links.search() == "/search"
        assert subdomain_links.search("silk saree") == "/search?q=silk%20saree"

    def test_category(self, subdomain_links):
        assert subdomain_links.category("wedding & bridal") == "/categories?cat=wedding%20%26%20bridal"

    def test_order_tracking(self, path_links):
        assert path_links.order_tracking() == "/store/bombay/order-tracking"
        assert path_links.order_tracking("ord-42") == "/store/bombay/order/ord-42"

    def test_encode_component_keeps_unreserved_marks(self):
        assert encode_component("a-b_c.d!e~f*g'h(i)") == "a-b_c.d!e~f*g'h(i)"


class TestResolve:

    def test_store_relative_urls_follow_mode(self, subdomain_links, path_links):
        assert subdomain_links.resolve("/page/about") == "/page/about"
        assert path_links.resolve("/page/about") == "/store/bombay/page/about"

    @pytest.mark.parametrize("url", ["https://instagram.com/bombay", "//cdn.example.com/x.png", "mailto:hi@example.com", None, ""])
    def test_other_urls_pass_through(self, path_links, url):
        assert path_links.resolve(url) == url
