"""
Stock section renderers.

Each renderer takes (section, context) and returns the props a client needs
to draw the block: config normalized to one set of names, defaults filled
in, and store-relative URLs run through the store's LinkBuilder so they work
under both routing modes. Older editor field names (buttonLink,
backgroundOverlay, textAlignment) are accepted alongside the current ones.

Aliases:
    new_arrivals     product grid sorted by created_at, titled "New Arrivals"
    best_sellers     featured products titled "Best Sellers"
    category_banner  category grid with two columns
"""

from typing import Any, Mapping, Optional

from .composition import RenderContext
from .registry import RendererRegistry
from .resolver import Section

SECTION_RENDERERS = RendererRegistry("section")


# ────────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────────

def store_link(context: RenderContext, url: Optional[str]) -> Optional[str]:
    return context.links.resolve(url) or None


def _button(context: RenderContext, text: Optional[str], url: Optional[str]) -> Optional[dict[str, Any]]:
    if not text:
        return None
    return {"text": text, "url": store_link(context, url) or context.links.catalog()}


def _columns(config: Mapping[str, Any], default: int) -> int:
    columns = int(config.get("columns", default))
    if columns < 1:
        raise ValueError(f"columns must be positive, got {columns}")
    return columns


def _heading(config: Mapping[str, Any], default_title: str = "") -> dict[str, Any]:
    return {
        "title": config.get("title") or default_title,
        "subtitle": config.get("subtitle") or "",
    }


# ────────────────────────────────────────────────────────────────
# Hero sections
# ────────────────────────────────────────────────────────────────

@SECTION_RENDERERS.register("hero_banner")
def hero_banner(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    if config.get("backgroundOverlay") is not None:
        overlay = float(config["backgroundOverlay"]) / 100
    else:
        overlay = float(config.get("overlayOpacity", 0.5))

    primary = config.get("primaryButton") or {}
    secondary = config.get("secondaryButton") or {}
    return {
        **_heading(config, context.snapshot.tenant.name),
        "background_image": config.get("backgroundImage") or context.snapshot.tenant.banner_url,
        "overlay_opacity": overlay,
        "height": config.get("height") or "large",
        "alignment": config.get("textAlignment") or config.get("alignment") or "center",
        "primary_button": _button(
            context,
            primary.get("text") or config.get("buttonText"),
            primary.get("url") or config.get("buttonLink"),
        ),
        "secondary_button": _button(
            context,
            secondary.get("text") or config.get("secondaryButtonText"),
            secondary.get("url") or config.get("secondaryButtonLink"),
        ),
    }


@SECTION_RENDERERS.register("hero_slider")
def hero_slider(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    slides = config.get("slides") or [config]
    return {
        "slides": [
            {
                **_heading(slide),
                "background_image": slide.get("backgroundImage"),
                "button": _button(
                    context,
                    slide.get("buttonText"),
                    slide.get("buttonUrl") or slide.get("buttonLink"),
                ),
            }
            for slide in slides
        ],
        "autoplay": bool(config.get("autoplay", True)),
        "interval": int(config.get("interval", 5000)),
        "height": config.get("height") or "large",
    }


@SECTION_RENDERERS.register("hero_video")
def hero_video(section: Section, context: RenderContext) -> Optional[dict[str, Any]]:
    config = section.config
    if not config.get("videoUrl"):
        return None
    return {
        **_heading(config),
        "video_url": config["videoUrl"],
        "button": _button(context, config.get("buttonText"), config.get("buttonUrl")),
        "overlay_opacity": float(config.get("overlayOpacity", 0.4)),
        "autoplay": bool(config.get("autoplay", True)),
        "loop": bool(config.get("loop", True)),
        "muted": bool(config.get("muted", True)),
    }


# ────────────────────────────────────────────────────────────────
# Catalog sections
# ────────────────────────────────────────────────────────────────

def _product_grid(section: Section, context: RenderContext, title: str = "", sort_by: str = "sort_order"):
    config = section.config
    columns = _columns(config, 4)
    rows = int(config.get("rows", 2))
    return {
        "kind": "product_grid",
        **_heading(config, title),
        "columns": columns,
        "limit": columns * rows,
        "show_prices": bool(config.get("showPrices", True)),
        "category_id": config.get("categoryId"),
        "sort_by": config.get("sortBy") or sort_by,
        "view_all": context.links.catalog(),
    }


def _featured_products(section: Section, context: RenderContext, title: str = "Featured Products"):
    config = section.config
    return {
        "kind": "featured_products",
        **_heading(config, title),
        "columns": _columns(config, 4),
        "limit": int(config.get("limit", 8)),
        "show_prices": bool(config.get("showPrices", True)),
        "show_add_to_cart": bool(config.get("showAddToCart", True)),
        "view_all": context.links.catalog(),
    }


def _category_grid(section: Section, context: RenderContext, columns: Optional[int] = None):
    config = section.config
    return {
        "kind": "category_grid",
        **_heading(config, "Shop by Category"),
        "columns": columns if columns is not None else _columns(config, 3),
        "limit": int(config.get("limit", 6)),
        "show_description": bool(config.get("showDescription", False)),
        "link_base": context.links.custom("/categories"),
    }


@SECTION_RENDERERS.register("product_grid")
def product_grid(section: Section, context: RenderContext) -> dict[str, Any]:
    return _product_grid(section, context)


@SECTION_RENDERERS.register("new_arrivals")
def new_arrivals(section: Section, context: RenderContext) -> dict[str, Any]:
    return _product_grid(section, context, title="New Arrivals", sort_by="created_at")


@SECTION_RENDERERS.register("featured_products")
def featured_products(section: Section, context: RenderContext) -> dict[str, Any]:
    return _featured_products(section, context)


@SECTION_RENDERERS.register("best_sellers")
def best_sellers(section: Section, context: RenderContext) -> dict[str, Any]:
    return _featured_products(section, context, title="Best Sellers")


@SECTION_RENDERERS.register("category_grid")
def category_grid(section: Section, context: RenderContext) -> dict[str, Any]:
    return _category_grid(section, context)


@SECTION_RENDERERS.register("category_banner")
def category_banner(section: Section, context: RenderContext) -> dict[str, Any]:
    return _category_grid(section, context, columns=2)


# ────────────────────────────────────────────────────────────────
# Content sections
# ────────────────────────────────────────────────────────────────

@SECTION_RENDERERS.register("text_block")
def text_block(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    return {
        "title": config.get("title") or "",
        "content": config.get("content") or "",
        "alignment": config.get("alignment") or "left",
        "background_color": config.get("backgroundColor"),
    }


@SECTION_RENDERERS.register("image_text")
def image_text(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    position = config.get("imagePosition") or "left"
    if position not in ("left", "right"):
        raise ValueError(f"imagePosition must be left or right, got {position!r}")
    return {
        "title": config.get("title") or "",
        "content": config.get("content") or "",
        "image_url": config.get("imageUrl"),
        "image_position": position,
        "button": _button(context, config.get("buttonText"), config.get("buttonUrl")),
    }


@SECTION_RENDERERS.register("gallery")
def gallery(section: Section, context: RenderContext) -> Optional[dict[str, Any]]:
    config = section.config
    images = [image for image in config.get("images") or [] if image]
    if not images:
        return None
    return {**_heading(config), "images": images, "columns": _columns(config, 3)}


@SECTION_RENDERERS.register("testimonials")
def testimonials(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    return {
        **_heading(config, "What Our Customers Say"),
        "testimonials": [
            {
                "quote": item.get("quote") or "",
                "author": item.get("author") or "",
                "role": item.get("role"),
                "avatar": item.get("avatar"),
            }
            for item in config.get("testimonials") or []
        ],
        "columns": _columns(config, 3),
    }


@SECTION_RENDERERS.register("faq")
def faq(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    items = [
        {"question": item.get("question"), "answer": item.get("answer") or ""}
        for item in config.get("items") or []
        if item.get("question")
    ]
    return {**_heading(config, "Frequently Asked Questions"), "items": items}


# ────────────────────────────────────────────────────────────────
# Promotional sections
# ────────────────────────────────────────────────────────────────

@SECTION_RENDERERS.register("announcement_bar")
def announcement_bar(section: Section, context: RenderContext) -> Optional[dict[str, Any]]:
    config = section.config
    if not config.get("text"):
        return None
    return {
        "text": config["text"],
        "link": store_link(context, config.get("link")),
        "link_text": config.get("linkText"),
        "dismissible": bool(config.get("dismissible", True)),
        "background_color": config.get("backgroundColor"),
        "text_color": config.get("textColor"),
    }


@SECTION_RENDERERS.register("newsletter")
def newsletter(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    return {
        **_heading(config, "Subscribe to our newsletter"),
        "button_text": config.get("buttonText") or "Subscribe",
        "background_color": config.get("backgroundColor"),
        "text_color": config.get("textColor"),
    }


@SECTION_RENDERERS.register("countdown")
def countdown(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    return {
        **_heading(config),
        "end_date": config.get("endDate"),
        "expired_message": config.get("expiredMessage") or "This offer has ended",
    }


@SECTION_RENDERERS.register("promo_banner")
def promo_banner(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    return {
        **_heading(config),
        "badge": config.get("badge"),
        "background_image": config.get("backgroundImage"),
        "button": _button(context, config.get("buttonText"), config.get("buttonUrl")),
    }


@SECTION_RENDERERS.register("trust_badges")
def trust_badges(section: Section, context: RenderContext) -> dict[str, Any]:
    config = section.config
    return {
        "title": config.get("title") or "",
        "badges": [
            {
                "icon": badge.get("icon") or "shield",
                "title": badge.get("title") or "",
                "description": badge.get("description") or "",
            }
            for badge in config.get("badges") or []
        ],
        "columns": _columns(config, 4),
    }


@SECTION_RENDERERS.register("brand_logos")
def brand_logos(section: Section, context: RenderContext) -> Optional[dict[str, Any]]:
    config = section.config
    logos = [logo for logo in config.get("logos") or [] if logo]
    if not logos:
        return None
    return {"title": config.get("title") or "", "logos": logos}


# ────────────────────────────────────────────────────────────────
# Layout sections
# ────────────────────────────────────────────────────────────────

@SECTION_RENDERERS.register("spacer")
def spacer(section: Section, context: RenderContext) -> dict[str, Any]:
    return {"height": section.config.get("height") or "medium"}


@SECTION_RENDERERS.register("divider")
def divider(section: Section, context: RenderContext) -> dict[str, Any]:
    return {
        "style": section.config.get("style") or "solid",
        "width": section.config.get("width") or "full",
    }
