"""
Pytest configuration and fixtures for the storefront.

Unit tests run against FakeQueryClient, an in-memory stand-in for the
store database that speaks the same select/select_one interface and can be
told to stall (gates) or fail (failures) per table. SQL-backed tests use a
throwaway SQLite file per test through aiosqlite.
"""
import asyncio
import os
import uuid
from typing import Any, Optional, Sequence

# Never let the test run pick up a real database from the environment
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storefront.core.config import Settings
from storefront.core.db import Base
from storefront.models import (
    NavLocation,
    PageSection,
    Store,
    StoreHeaderFooter,
    StoreNavigation,
    StorePage,
    StoreStatus,
    StoreTheme,
)
from storefront.tenancy.errors import TransportError


# ────────────────────────────────────────────────────────────────
# In-memory QueryClient
# ────────────────────────────────────────────────────────────────

class FakeQueryClient:
    """
    QueryClient over plain lists of ORM instances.

    Attributes:
        rows: model -> list of instances
        gates: store slug -> asyncio.Event; a Store lookup for that slug waits for it
        failures: model -> exception raised by any read of that model
        calls: (model name, filters) per read, in call order
    """

    def __init__(self):
        self.rows: dict[type, list] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.failures: dict[type, Exception] = {}
        self.calls: list[tuple[str, dict]] = []

    def add(self, *instances):
        for instance in instances:
            self.rows.setdefault(type(instance), []).append(instance)
        return instances[0] if len(instances) == 1 else instances

    async def select(
        self,
        model,
        *,
        order_by: Sequence[str] = (),
        limit: Optional[int] = None,
        **filters: Any,
    ) -> list:
        self.calls.append((model.__name__, dict(filters)))

        if model is Store and filters.get("slug") in self.gates:
            await self.gates[filters["slug"]].wait()
        if model in self.failures:
            raise self.failures[model]

        matches = [
            row for row in self.rows.get(model, [])
            if all(getattr(row, column) == value for column, value in filters.items())
        ]
        for column in reversed(order_by):
            matches.sort(key=lambda row: getattr(row, column))
        if limit is not None:
            matches = matches[:limit]
        return matches

    async def select_one(self, model, **filters: Any):
        rows = await self.select(model, limit=1, **filters)
        return rows[0] if rows else None


# ────────────────────────────────────────────────────────────────
# Row builders (ids and defaults set explicitly; nothing is flushed)
# ────────────────────────────────────────────────────────────────

def make_store(slug: str, name: Optional[str] = None, status: StoreStatus = StoreStatus.ACTIVE, **extra) -> Store:
    return Store(
        id=uuid.uuid4(),
        name=name or slug.title(),
        slug=slug,
        status=status,
        **extra,
    )


def make_theme(store: Store, colors: dict, is_active: bool = True) -> StoreTheme:
    return StoreTheme(
        id=uuid.uuid4(),
        store_id=store.id,
        name="Theme",
        is_active=is_active,
        colors=colors,
        typography={},
        layout={},
    )


def make_header_footer(store: Store, header: Optional[dict] = None) -> StoreHeaderFooter:
    return StoreHeaderFooter(
        id=uuid.uuid4(),
        store_id=store.id,
        header_config=header or {},
        footer_config={},
        social_links={},
    )


def make_nav(store: Store, label: str, sort_order: int, location: NavLocation = NavLocation.HEADER, **extra):
    return StoreNavigation(
        id=extra.pop("id", uuid.uuid4()),
        store_id=store.id,
        label=label,
        url=extra.pop("url", f"/{label.lower()}"),
        location=location,
        sort_order=sort_order,
        is_highlighted=False,
        open_in_new_tab=False,
        **extra,
    )


def make_page(store: Store, slug: str, page_type: str = "custom", is_published: bool = True, **extra) -> StorePage:
    return StorePage(
        id=uuid.uuid4(),
        store_id=store.id,
        title=extra.pop("title", slug.title()),
        slug=slug,
        page_type=page_type,
        is_published=is_published,
        show_header=True,
        show_footer=True,
        **extra,
    )


def make_section(
    page: StorePage,
    section_type: str,
    sort_order: int = 0,
    position: Optional[str] = None,
    config: Optional[dict] = None,
    is_visible: bool = True,
) -> PageSection:
    return PageSection(
        id=uuid.uuid4(),
        page_id=page.id,
        store_id=page.store_id,
        section_type=section_type,
        name=section_type,
        config=config or {},
        is_visible=is_visible,
        sort_order=sort_order,
        position=position,
    )


@pytest.fixture
def fake_client():
    return FakeQueryClient()


@pytest.fixture
def transport_error():
    return TransportError("connection refused", operation="test")


# ────────────────────────────────────────────────────────────────
# SQLite-backed fixtures
# ────────────────────────────────────────────────────────────────

@pytest.fixture
async def sqlite_engine(tmp_path):
    """Engine on a fresh SQLite file with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return async_sessionmaker(sqlite_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seeded_session_factory(session_factory):
    from storefront.seed import seed_demo_data

    async with session_factory() as session:
        await seed_demo_data(session)
    return session_factory


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        STOREFRONT_ROOT_DOMAINS="extendbee.com",
        CART_STORAGE_DIR=str(tmp_path / "carts"),
        ALLOWED_ORIGINS="http://localhost:5173",
    )


@pytest.fixture
async def app(test_settings, sqlite_engine, seeded_session_factory):
    from storefront.main import create_app

    return create_app(test_settings, engine=sqlite_engine, session_factory=seeded_session_factory)


@pytest.fixture
async def subdomain_client(app):
    """Client whose requests carry Host: bombay.extendbee.com."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://bombay.extendbee.com") as client:
        yield client


@pytest.fixture
async def platform_client(app):
    """Client on the bare platform domain; stores are addressed by /store/<slug>."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://extendbee.com") as client:
        yield client
