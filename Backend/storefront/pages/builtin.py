"""
Built-in page-type content.

Some page types carry content of their own, independent of any section
record: a category page browses categories, a product page lists the
catalog. The product and category data itself is fetched by the client;
these renderers describe what to fetch and how to order it.
"""

from typing import Any, Optional

from ..models import PageType
from .composition import RenderContext
from .registry import RendererRegistry
from .resolver import Page

PAGE_TYPE_RENDERERS = RendererRegistry("page_type")

# Catalog sort keys -> (column, ascending)
PRODUCT_SORTS = {
    "newest": ("created_at", False),
    "price-asc": ("price", True),
    "price-desc": ("price", False),
    "name": ("name", True),
}
DEFAULT_SORT = "newest"


def _sort(value: Optional[str]) -> dict[str, Any]:
    key = value if value in PRODUCT_SORTS else DEFAULT_SORT
    column, ascending = PRODUCT_SORTS[key]
    return {"key": key, "column": column, "ascending": ascending}


@PAGE_TYPE_RENDERERS.register(PageType.CATEGORY.value)
def category_browser(page: Page, context: RenderContext) -> dict[str, Any]:
    """All categories as a grid, or one category's products when ?cat= is set."""
    category_slug = (context.query.get("cat") or "").strip() or None
    if category_slug is None:
        return {
            "kind": "category_browser",
            "mode": "categories",
            "order_by": {"column": "sort_order", "ascending": True},
            "link_base": context.links.custom("/categories"),
        }
    return {
        "kind": "category_browser",
        "mode": "products",
        "category_slug": category_slug,
        "sort": _sort(context.query.get("sort")),
        "back_link": context.links.custom(f"/page/{page.slug}"),
    }


@PAGE_TYPE_RENDERERS.register(PageType.PRODUCT.value)
def product_listing(page: Page, context: RenderContext) -> dict[str, Any]:
    """Searchable, sortable product listing driven by ?q=, ?sort= and ?category=."""
    return {
        "kind": "product_listing",
        "search": (context.query.get("q") or "").strip(),
        "category": (context.query.get("category") or "").strip() or None,
        "sort": _sort(context.query.get("sort")),
        "sort_options": list(PRODUCT_SORTS),
    }
