"""
Storefront routes, served under both addressing schemes.

The same router is mounted twice by main.py:

    Subdomain mode:  https://bombay.extendbee.com/page/about
    Path mode:       https://extendbee.com/store/bombay/page/about

Handlers never read the store slug from the URL. The request's one
RoutingDecision (HostResolver.decide) names the store, the browsing
session's TenantContext resolves it, and every link in the response comes
from a LinkBuilder over that same decision.

Usage:
    GET    /context                 -> store shell (store, theme, chrome, navigation, links)
    GET    /                        -> composed homepage
    GET    /page/{page_slug}        -> composed page (falls back to the homepage)
    GET    /cart                    -> this store's cart
    POST   /cart/items              -> add (merges with an existing line)
    PATCH  /cart/items              -> set quantity (>= 1)
    DELETE /cart/items              -> remove a line
    DELETE /cart                    -> empty this store's cart
    GET    /checkout                -> checkout summary for this store
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from .cart import CartLineItem
from .models import NavLocation
from .pages import ComposedPage, PageCompositionEngine, PageResolver, RenderContext
from .sessions import BrowsingSession, SessionRegistry
from .tenancy import HostResolver, LinkBuilder, RoutingDecision, TenantSnapshot
from .tenancy.loader import NavigationNode
from .tenancy.theme import render_css, theme_variables

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────
# Router Definition
# ────────────────────────────────────────────────────────────────

router = APIRouter(tags=["storefront"])


# ────────────────────────────────────────────────────────────────
# Response Models
# ────────────────────────────────────────────────────────────────

class StoreOut(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ThemeOut(BaseModel):
    colors: dict[str, Any]
    typography: dict[str, Any]
    layout: dict[str, Any]
    css_variables: dict[str, str] = Field(description="Custom properties projected for this store")
    css: str


class HeaderFooterOut(BaseModel):
    header: dict[str, Any]
    footer: dict[str, Any]
    social_links: dict[str, Any]


class NavItemOut(BaseModel):
    id: str
    label: str
    href: Optional[str] = None
    is_highlighted: bool = False
    open_in_new_tab: bool = False
    children: list["NavItemOut"] = Field(default_factory=list)


class RoutingOut(BaseModel):
    mode: str
    store_slug: str
    subdomain_url: Optional[str] = None
    path_url: Optional[str] = None


class StoreContextResponse(BaseModel):
    store: StoreOut
    theme: ThemeOut
    header_footer: HeaderFooterOut
    navigation: dict[str, list[NavItemOut]]
    links: dict[str, str]
    routing: RoutingOut


class PageOut(BaseModel):
    id: str
    slug: str
    title: str
    page_type: str
    seo_description: Optional[str] = None
    show_header: bool = True
    show_footer: bool = True


class BlockOut(BaseModel):
    kind: str
    source: str
    section_id: Optional[str] = None
    props: dict[str, Any]


class PageResponse(BaseModel):
    store_slug: str
    title: str
    is_fallback: bool
    page: PageOut
    blocks: list[BlockOut]


class CartLineOut(BaseModel):
    product_id: str
    variant_id: Optional[str] = None
    name: str
    variant_name: Optional[str] = None
    image_ref: Optional[str] = None
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class CartResponse(BaseModel):
    store_slug: str
    items: list[CartLineOut]
    item_count: int
    total: Decimal
    checkout_url: str


class CheckoutResponse(BaseModel):
    store_slug: str
    items: list[CartLineOut]
    item_count: int
    total: Decimal
    ready: bool
    cart_url: str


# ────────────────────────────────────────────────────────────────
# Request Models
# ────────────────────────────────────────────────────────────────

class AddCartItemRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    variant_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    variant_name: Optional[str] = None
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)
    image_ref: Optional[str] = None


class UpdateCartItemRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    variant_id: Optional[str] = None
    quantity: int = Field(..., ge=1, description="Minimum 1; remove the line to delete it")


# ────────────────────────────────────────────────────────────────
# Dependencies
# ────────────────────────────────────────────────────────────────

async def get_host_resolver(request: Request) -> HostResolver:
    return request.app.state.host_resolver


async def get_routing_decision(
    request: Request,
    resolver: HostResolver = Depends(get_host_resolver),
) -> RoutingDecision:
    """The request's single routing decision, made once from Host and path."""
    host = request.headers.get("host") or (request.url.hostname or "")  # noqa: tenant-scoping
    decision = resolver.decide(host, request.url.path)
    logger.debug(f"Routing {host}{request.url.path} -> {decision}")
    return decision


async def get_browsing_session(request: Request, response: Response) -> BrowsingSession:
    settings = request.app.state.settings
    registry: SessionRegistry = request.app.state.sessions
    session, created = registry.get_or_create(request.cookies.get(settings.session_cookie_name))
    if created:
        response.set_cookie(
            settings.session_cookie_name,
            session.id,
            httponly=True,
            samesite="lax",
            path="/",
        )
    return session


async def get_store_snapshot(
    decision: RoutingDecision = Depends(get_routing_decision),
    session: BrowsingSession = Depends(get_browsing_session),
) -> TenantSnapshot:
    """
    Resolve the addressed store through the session's TenantContext.

    TenantNotFound, TransportError and ResolutionSuperseded propagate to the
    exception handlers registered in main.py.
    """
    return await session.context.resolve(decision.tenant_slug_candidate)


async def get_link_builder(
    decision: RoutingDecision = Depends(get_routing_decision),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    resolver: HostResolver = Depends(get_host_resolver),
) -> LinkBuilder:
    # Only built once the store resolved, so path mode always has a slug
    return LinkBuilder(decision, path_prefix=resolver.path_prefix)


# ────────────────────────────────────────────────────────────────
# Serialization helpers
# ────────────────────────────────────────────────────────────────

def _nav_out(node: NavigationNode, links: LinkBuilder) -> NavItemOut:
    item = node.item
    return NavItemOut(
        id=str(item.id),
        label=item.label,
        href=links.resolve(item.url),
        is_highlighted=item.is_highlighted,
        open_in_new_tab=item.open_in_new_tab,
        children=[_nav_out(child, links) for child in node.children],
    )


def _line_out(line: CartLineItem) -> CartLineOut:
    return CartLineOut(
        product_id=line.product_id,
        variant_id=line.variant_id,
        name=line.name,
        variant_name=line.variant_name,
        image_ref=line.image_ref,
        unit_price=line.unit_price,
        quantity=line.quantity,
        line_total=line.line_total,
    )


def build_context_response(
    snapshot: TenantSnapshot,
    decision: RoutingDecision,
    links: LinkBuilder,
    resolver: HostResolver,
) -> StoreContextResponse:
    tenant = snapshot.tenant
    # Built from this snapshot; the session namespace may already hold another store's theme
    css_variables = theme_variables(snapshot.theme.colors)
    routing = RoutingOut(mode=decision.mode.value, store_slug=tenant.slug)
    if resolver.primary_domain:
        routing.subdomain_url = resolver.subdomain_url(tenant.slug)
        routing.path_url = resolver.path_based_url(tenant.slug)

    return StoreContextResponse(
        store=StoreOut(
            id=str(tenant.id),
            name=tenant.name,
            slug=tenant.slug,
            description=tenant.description,
            logo_url=tenant.logo_url,
            banner_url=tenant.banner_url,
            email=tenant.email,
            phone=tenant.phone,
        ),
        theme=ThemeOut(
            colors=dict(snapshot.theme.colors),
            typography=dict(snapshot.theme.typography),
            layout=dict(snapshot.theme.layout),
            css_variables=css_variables,
            css=render_css(css_variables),
        ),
        header_footer=HeaderFooterOut(
            header=dict(snapshot.header_footer.header_options),
            footer=dict(snapshot.header_footer.footer_options),
            social_links=dict(snapshot.header_footer.social_links),
        ),
        navigation={
            location.value: [_nav_out(node, links) for node in snapshot.navigation.tree(location)]
            for location in NavLocation
        },
        links=links.as_dict(),
        routing=routing,
    )


def build_page_response(composed: ComposedPage, snapshot: TenantSnapshot, is_fallback: bool) -> PageResponse:
    page = composed.page
    return PageResponse(
        store_slug=snapshot.tenant_slug,
        title=composed.title,
        is_fallback=is_fallback,
        page=PageOut(
            id=str(page.id),
            slug=page.slug,
            title=page.title,
            page_type=page.page_type,
            seo_description=page.seo_description,
            show_header=page.show_header,
            show_footer=page.show_footer,
        ),
        blocks=[BlockOut(**block.to_dict()) for block in composed.blocks],
    )


def build_cart_response(session: BrowsingSession, snapshot: TenantSnapshot, links: LinkBuilder) -> CartResponse:
    cart = session.cart.for_tenant(snapshot.tenant_slug)
    return CartResponse(
        store_slug=cart.tenant_slug,
        items=[_line_out(line) for line in cart.items],
        item_count=cart.item_count,
        total=cart.total,
        checkout_url=links.checkout(),
    )


# ────────────────────────────────────────────────────────────────
# Store shell
# ────────────────────────────────────────────────────────────────

@router.get("/context", response_model=StoreContextResponse)
async def store_context(
    decision: RoutingDecision = Depends(get_routing_decision),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
    resolver: HostResolver = Depends(get_host_resolver),
):
    return build_context_response(snapshot, decision, links, resolver)


# ────────────────────────────────────────────────────────────────
# Pages
# ────────────────────────────────────────────────────────────────

async def _render_page(
    request: Request,
    page_slug: Optional[str],
    snapshot: TenantSnapshot,
    links: LinkBuilder,
) -> PageResponse:
    page_resolver: PageResolver = request.app.state.page_resolver
    engine: PageCompositionEngine = request.app.state.composition

    resolved = await page_resolver.resolve_page(snapshot.tenant_id, page_slug)
    context = RenderContext(snapshot=snapshot, links=links, query=dict(request.query_params))
    composed = engine.render(resolved.page, resolved.sections, context)
    return build_page_response(composed, snapshot, resolved.is_fallback)


@router.get("/", response_model=PageResponse)
async def store_home(
    request: Request,
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    return await _render_page(request, None, snapshot, links)


@router.get("/page/{page_slug}", response_model=PageResponse)
async def store_page(
    page_slug: str,
    request: Request,
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    return await _render_page(request, page_slug, snapshot, links)


# ────────────────────────────────────────────────────────────────
# Cart
# ────────────────────────────────────────────────────────────────

@router.get("/cart", response_model=CartResponse)
async def get_cart(
    session: BrowsingSession = Depends(get_browsing_session),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    return build_cart_response(session, snapshot, links)


@router.post("/cart/items", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    payload: AddCartItemRequest,
    session: BrowsingSession = Depends(get_browsing_session),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    session.cart.for_tenant(snapshot.tenant_slug).add_item(
        product_id=payload.product_id,
        name=payload.name,
        unit_price=payload.unit_price,
        quantity=payload.quantity,
        variant_id=payload.variant_id,
        variant_name=payload.variant_name,
        image_ref=payload.image_ref,
    )
    logger.info(f"Cart {session.id[:8]}... added {payload.product_id} x{payload.quantity} for '{snapshot.tenant_slug}'")
    return build_cart_response(session, snapshot, links)


@router.patch("/cart/items", response_model=CartResponse)
async def update_cart_item(
    payload: UpdateCartItemRequest,
    session: BrowsingSession = Depends(get_browsing_session),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    updated = session.cart.for_tenant(snapshot.tenant_slug).update_quantity(
        payload.product_id, payload.variant_id, payload.quantity
    )
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item not in cart: {payload.product_id}",
        )
    return build_cart_response(session, snapshot, links)


@router.delete("/cart/items", response_model=CartResponse)
async def remove_cart_item(
    product_id: str,
    variant_id: Optional[str] = None,
    session: BrowsingSession = Depends(get_browsing_session),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    if not session.cart.for_tenant(snapshot.tenant_slug).remove_item(product_id, variant_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item not in cart: {product_id}",
        )
    return build_cart_response(session, snapshot, links)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    session: BrowsingSession = Depends(get_browsing_session),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    removed = session.cart.clear(snapshot.tenant_slug)
    logger.info(f"Cart {session.id[:8]}... cleared {removed} lines for '{snapshot.tenant_slug}'")
    return build_cart_response(session, snapshot, links)


@router.get("/checkout", response_model=CheckoutResponse)
async def checkout_summary(
    session: BrowsingSession = Depends(get_browsing_session),
    snapshot: TenantSnapshot = Depends(get_store_snapshot),
    links: LinkBuilder = Depends(get_link_builder),
):
    summary = session.cart.checkout_for(snapshot.tenant_slug)
    return CheckoutResponse(
        store_slug=summary.tenant_slug,
        items=[_line_out(line) for line in summary.lines],
        item_count=summary.item_count,
        total=summary.total,
        ready=not summary.is_empty,
        cart_url=links.cart(),
    )
