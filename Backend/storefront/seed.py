from sqlalchemy import select

from .models import (
    NavLocation,
    PageSection,
    PageType,
    SectionPosition,
    Store,
    StoreHeaderFooter,
    StoreNavigation,
    StorePage,
    StoreStatus,
    StoreTheme,
)

DEMO_STORE_SLUG = "bombay"
PENDING_STORE_SLUG = "kathmandu-crafts"


async def seed_demo_data(session):
    """Insert the demo stores if missing. Safe to run on every startup."""
    result = await session.execute(select(Store).where(Store.slug == DEMO_STORE_SLUG))
    store = result.scalar_one_or_none()

    if not store:
        store = Store(
            name="Bombay Silk House",
            slug=DEMO_STORE_SLUG,
            description="Handwoven sarees and silks from Mumbai",
            email="hello@bombaysilk.example",
            status=StoreStatus.ACTIVE,
        )
        session.add(store)
        await session.flush()
        _seed_presentation(session, store)
        await session.flush()
        await _seed_pages(session, store)

    result = await session.execute(select(Store).where(Store.slug == PENDING_STORE_SLUG))
    if not result.scalar_one_or_none():
        # Awaiting approval; must never be reachable from a storefront
        session.add(
            Store(
                name="Kathmandu Crafts",
                slug=PENDING_STORE_SLUG,
                status=StoreStatus.PENDING,
            )
        )

    await session.commit()


def _seed_presentation(session, store):
    session.add_all(
        [
            StoreTheme(
                store_id=store.id,
                name="Saffron",
                is_active=True,
                colors={"primary": "#b45309", "accent": "#7c2d12", "background": "#fffbeb"},
                typography={"headingFont": "Playfair Display"},
                layout={},
            ),
            StoreHeaderFooter(
                store_id=store.id,
                header_config={"style": "centered", "announcementBar": True},
                footer_config={"copyrightText": "© Bombay Silk House"},
                social_links={"instagram": "https://instagram.com/bombaysilk"},
            ),
            StoreNavigation(store_id=store.id, label="Home", url="/", sort_order=0),
            StoreNavigation(store_id=store.id, label="Shop", url="/catalog", sort_order=1),
            StoreNavigation(
                store_id=store.id,
                label="Collections",
                url="/page/collections",
                sort_order=2,
                is_highlighted=True,
            ),
            StoreNavigation(store_id=store.id, label="About", url="/page/about", sort_order=3),
            StoreNavigation(
                store_id=store.id,
                label="Contact",
                url="mailto:hello@bombaysilk.example",
                location=NavLocation.FOOTER,
                sort_order=0,
            ),
        ]
    )


async def _seed_pages(session, store):
    home = StorePage(
        store_id=store.id,
        title="Home",
        slug="home",
        page_type=PageType.HOMEPAGE.value,
        seo_title="Bombay Silk House | Handwoven Sarees",
        is_published=True,
    )
    about = StorePage(
        store_id=store.id,
        title="About Us",
        slug="about",
        page_type=PageType.ABOUT.value,
        is_published=True,
    )
    collections = StorePage(
        store_id=store.id,
        title="Collections",
        slug="collections",
        page_type=PageType.CATEGORY.value,
        is_published=True,
    )
    draft = StorePage(
        store_id=store.id,
        title="Diwali Sale",
        slug="diwali-sale",
        page_type=PageType.CUSTOM.value,
        is_published=False,
    )
    session.add_all([home, about, collections, draft])

    await session.flush()

    session.add_all(
        [
            PageSection(
                page_id=home.id,
                store_id=store.id,
                section_type="hero_banner",
                sort_order=0,
                config={
                    "title": "Woven in Mumbai",
                    "subtitle": "Silk sarees for every occasion",
                    "buttonText": "Shop Now",
                    "buttonLink": "/catalog",
                },
            ),
            PageSection(page_id=home.id, store_id=store.id, section_type="new_arrivals", sort_order=1),
            PageSection(page_id=home.id, store_id=store.id, section_type="category_banner", sort_order=2),
            PageSection(
                page_id=home.id,
                store_id=store.id,
                section_type="faq",
                sort_order=3,
                config={"items": [{"question": "Do you ship abroad?", "answer": "Yes, worldwide."}]},
            ),
            PageSection(
                page_id=about.id,
                store_id=store.id,
                section_type="text_block",
                sort_order=0,
                config={"title": "Our Story", "content": "Three generations of weavers."},
            ),
            PageSection(
                page_id=collections.id,
                store_id=store.id,
                section_type="promo_banner",
                sort_order=0,
                position=SectionPosition.ABOVE.value,
                config={"title": "Festive Edit", "badge": "New"},
            ),
            PageSection(
                page_id=collections.id,
                store_id=store.id,
                section_type="newsletter",
                sort_order=0,
                position=SectionPosition.BELOW.value,
            ),
        ]
    )
