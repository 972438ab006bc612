"""
Storefront API Tests

End-to-end through the FastAPI app on a seeded SQLite database:
1. The same store is served by subdomain and by /store/<slug>
2. Links in responses follow the routing mode
3. Pages fall back to the homepage; drafts are never served
4. Inactive and unknown stores get the same 404
5. Carts are isolated per store within one browser session

Run with: pytest tests/test_api.py -v
"""

import inspect
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from storefront import routes_storefront
from storefront.models import Store, StoreStatus
from storefront.routes_storefront import build_context_response
from storefront.sessions import SessionRegistry
from storefront.tenancy import HostResolver, LinkBuilder, TenantConfigLoader, TenantDirectory

from conftest import make_store, make_theme


SAREE = {"product_id": "saree-1", "name": "Banarasi Saree", "unit_price": "2499.00"}


# ────────────────────────────────────────────────────────────────
# Store shell
# ────────────────────────────────────────────────────────────────

class TestStoreContext:

    @pytest.mark.asyncio
    async def test_subdomain_context(self, subdomain_client):
        response = await subdomain_client.get("/context")

        assert response.status_code == 200
        body = response.json()
        assert body["store"]["slug"] == "bombay"
        assert body["store"]["name"] == "Bombay Silk House"
        assert body["routing"]["mode"] == "subdomain"
        assert body["links"]["cart"] == "/cart"
        assert body["links"]["home"] == "/"

    @pytest.mark.asyncio
    async def test_path_mode_context(self, platform_client):
        response = await platform_client.get("/store/bombay/context")

        assert response.status_code == 200
        body = response.json()
        assert body["store"]["slug"] == "bombay"
        assert body["routing"]["mode"] == "path"
        assert body["routing"]["subdomain_url"] == "https://bombay.extendbee.com"
        assert body["routing"]["path_url"] == "https://extendbee.com/store/bombay"
        for name, link in body["links"].items():
            assert link.startswith("/store/bombay/"), name

    @pytest.mark.asyncio
    async def test_navigation_hrefs_follow_routing_mode(self, subdomain_client, platform_client):
        subdomain = (await subdomain_client.get("/context")).json()["navigation"]
        path = (await platform_client.get("/store/bombay/context")).json()["navigation"]

        assert [item["label"] for item in subdomain["header"]] == ["Home", "Shop", "Collections", "About"]
        assert [item["href"] for item in subdomain["header"]] == ["/", "/catalog", "/page/collections", "/page/about"]
        assert [item["href"] for item in path["header"]] == [
            "/store/bombay/",
            "/store/bombay/catalog",
            "/store/bombay/page/collections",
            "/store/bombay/page/about",
        ]
        # Absolute URLs are left alone
        assert path["footer"][0]["href"] == "mailto:hello@bombaysilk.example"

    @pytest.mark.asyncio
    async def test_theme_is_projected(self, subdomain_client):
        theme = (await subdomain_client.get("/context")).json()["theme"]

        assert theme["colors"]["primary"] == "#b45309"
        assert theme["css_variables"]["--primary"] == "#b45309"
        assert "--primary: #b45309;" in theme["css"]

    @pytest.mark.asyncio
    async def test_session_cookie_is_set_once(self, subdomain_client, test_settings):
        first = await subdomain_client.get("/context")
        second = await subdomain_client.get("/context")

        assert test_settings.session_cookie_name in first.cookies
        assert test_settings.session_cookie_name not in second.cookies


class TestUnknownStores:

    @pytest.mark.asyncio
    async def test_pending_store_is_not_found(self, app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://kathmandu-crafts.extendbee.com") as client:
            response = await client.get("/context")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "STORE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_pending_and_missing_look_the_same(self, platform_client):
        pending = await platform_client.get("/store/kathmandu-crafts/context")
        missing = await platform_client.get("/store/no-such-store/context")

        assert pending.status_code == missing.status_code == 404
        assert pending.json() == missing.json()

    @pytest.mark.asyncio
    async def test_bare_platform_domain_has_no_store(self, platform_client):
        response = await platform_client.get("/context")
        assert response.status_code == 404
        assert response.json()["status"] == "error"

    @pytest.mark.asyncio
    async def test_health(self, platform_client):
        response = await platform_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True}


# ────────────────────────────────────────────────────────────────
# Pages
# ────────────────────────────────────────────────────────────────

class TestPages:

    @pytest.mark.asyncio
    async def test_homepage(self, subdomain_client):
        response = await subdomain_client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["page"]["page_type"] == "homepage"
        assert body["title"] == "Bombay Silk House | Handwoven Sarees"
        assert body["is_fallback"] is False
        assert [block["kind"] for block in body["blocks"]] == ["hero_banner", "product_grid", "category_grid", "faq"]

    @pytest.mark.asyncio
    async def test_homepage_in_path_mode_links_are_prefixed(self, platform_client):
        body = (await platform_client.get("/store/bombay/")).json()

        hero = body["blocks"][0]
        assert hero["props"]["primary_button"]["url"] == "/store/bombay/catalog"

    @pytest.mark.asyncio
    async def test_named_page(self, subdomain_client):
        body = (await subdomain_client.get("/page/about")).json()

        assert body["page"]["slug"] == "about"
        assert body["title"] == "About Us"
        assert body["blocks"][0]["props"]["content"] == "Three generations of weavers."

    @pytest.mark.asyncio
    async def test_category_page_wraps_builtin_content(self, platform_client):
        body = (await platform_client.get("/store/bombay/page/collections?cat=sarees")).json()

        assert [block["kind"] for block in body["blocks"]] == ["promo_banner", "category_browser", "newsletter"]
        browser = body["blocks"][1]
        assert browser["source"] == "builtin"
        assert browser["props"]["category_slug"] == "sarees"

    @pytest.mark.asyncio
    async def test_unknown_page_falls_back_to_homepage(self, subdomain_client):
        response = await subdomain_client.get("/page/does-not-exist")

        assert response.status_code == 200
        assert response.json()["is_fallback"] is True
        assert response.json()["page"]["slug"] == "home"

    @pytest.mark.asyncio
    async def test_draft_page_is_not_served(self, subdomain_client):
        body = (await subdomain_client.get("/page/diwali-sale")).json()
        assert body["page"]["slug"] == "home"
        assert body["is_fallback"] is True

    @pytest.mark.asyncio
    async def test_store_without_pages(self, platform_client, seeded_session_factory):
        async with seeded_session_factory() as session:
            session.add(Store(name="Empty Shelf", slug="empty-shelf", status=StoreStatus.ACTIVE))
            await session.commit()

        response = await platform_client.get("/store/empty-shelf/page/about")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PAGE_NOT_FOUND"
        assert response.json()["error"]["details"] == {"slug": "about"}


# ────────────────────────────────────────────────────────────────
# Cart
# ────────────────────────────────────────────────────────────────

class TestCartApi:

    @pytest.mark.asyncio
    async def test_cart_flow(self, subdomain_client):
        empty = await subdomain_client.get("/cart")
        assert empty.json()["items"] == []

        added = await subdomain_client.post("/cart/items", json={**SAREE, "quantity": 2})
        assert added.status_code == 201

        merged = await subdomain_client.post("/cart/items", json=SAREE)
        body = merged.json()
        assert len(body["items"]) == 1
        assert body["item_count"] == 3
        assert Decimal(str(body["total"])) == Decimal("7497.00")
        assert body["checkout_url"] == "/checkout"

        updated = await subdomain_client.patch("/cart/items", json={"product_id": "saree-1", "quantity": 1})
        assert updated.json()["item_count"] == 1

        removed = await subdomain_client.delete("/cart/items", params={"product_id": "saree-1"})
        assert removed.json()["items"] == []

    @pytest.mark.asyncio
    async def test_quantity_zero_is_rejected(self, subdomain_client):
        await subdomain_client.post("/cart/items", json=SAREE)

        response = await subdomain_client.patch("/cart/items", json={"product_id": "saree-1", "quantity": 0})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert (await subdomain_client.get("/cart")).json()["item_count"] == 1

    @pytest.mark.asyncio
    async def test_missing_line(self, subdomain_client):
        patch = await subdomain_client.patch("/cart/items", json={"product_id": "nope", "quantity": 2})
        delete = await subdomain_client.delete("/cart/items", params={"product_id": "nope"})

        assert patch.status_code == 404
        assert delete.status_code == 404

    @pytest.mark.asyncio
    async def test_checkout_summary(self, platform_client):
        await platform_client.post("/store/bombay/cart/items", json={**SAREE, "quantity": 2})

        body = (await platform_client.get("/store/bombay/checkout")).json()

        assert body["ready"] is True
        assert body["item_count"] == 2
        assert Decimal(str(body["total"])) == Decimal("4998.00")
        assert body["cart_url"] == "/store/bombay/cart"

    @pytest.mark.asyncio
    async def test_carts_are_isolated_between_stores(self, platform_client, seeded_session_factory):
        async with seeded_session_factory() as session:
            session.add(Store(name="Mumbai Spice", slug="mumbai-spice", status=StoreStatus.ACTIVE))
            await session.commit()

        await platform_client.post("/store/bombay/cart/items", json={**SAREE, "quantity": 2})
        await platform_client.post(
            "/store/mumbai-spice/cart/items",
            json={"product_id": "masala-1", "name": "Garam Masala", "unit_price": "5.50"},
        )

        bombay = (await platform_client.get("/store/bombay/cart")).json()
        spice = (await platform_client.get("/store/mumbai-spice/cart")).json()

        assert [item["product_id"] for item in bombay["items"]] == ["saree-1"]
        assert [item["product_id"] for item in spice["items"]] == ["masala-1"]

        # Emptying one store's cart leaves the other alone
        await platform_client.delete("/store/mumbai-spice/cart")
        assert (await platform_client.get("/store/mumbai-spice/cart")).json()["items"] == []
        assert (await platform_client.get("/store/bombay/cart")).json()["item_count"] == 2

    @pytest.mark.asyncio
    async def test_new_browser_gets_a_new_cart(self, app, subdomain_client):
        await subdomain_client.post("/cart/items", json=SAREE)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://bombay.extendbee.com") as other:
            assert (await other.get("/cart")).json()["items"] == []


# ────────────────────────────────────────────────────────────────
# Context response
# ────────────────────────────────────────────────────────────────

class TestContextResponse:

    @pytest.mark.asyncio
    async def test_theme_comes_from_the_snapshot_not_the_session(self, fake_client):
        alpha = make_store("alpha", name="Alpha Store")
        beta = make_store("beta", name="Beta Store")
        fake_client.add(alpha, beta, make_theme(alpha, {"primary": "#aa0000"}), make_theme(beta, {"primary": "#00bb00"}))
        registry = SessionRegistry(TenantDirectory(fake_client), TenantConfigLoader(fake_client))
        session, _ = registry.get_or_create(None)
        resolver = HostResolver(root_domains=["extendbee.com"])
        decision = resolver.decide("extendbee.com", "/store/alpha/context")

        alpha_snapshot = await session.context.resolve("alpha")
        # The same browser moves on to another store before the response is built
        await session.context.resolve("beta")
        assert session.styles.get("--primary") == "#00bb00"

        response = build_context_response(alpha_snapshot, decision, LinkBuilder(decision), resolver)

        assert response.store.slug == "alpha"
        assert response.theme.colors["primary"] == "#aa0000"
        assert response.theme.css_variables == {"--primary": "#aa0000"}
        assert response.theme.css == ":root { --primary: #aa0000; }"

    @pytest.mark.parametrize("name", [
        "get_host_resolver",
        "get_routing_decision",
        "get_browsing_session",
        "get_store_snapshot",
        "get_link_builder",
    ])
    def test_dependencies_run_on_the_event_loop(self, name):
        # Sync dependencies would run in the threadpool and touch the session registry off-loop
        assert inspect.iscoroutinefunction(getattr(routes_storefront, name))
