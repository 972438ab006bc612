"""
Page and section resolution for a store.

Lookup order for a requested slug:
    1. published page with that exact slug under the store
    2. the store's published homepage
    3. PageNotFound

A page that exists but has no sections is a hit, never a miss.
"""

import logging
import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..models import PageSection, PageType, StorePage
from ..tenancy.errors import PageNotFound
from ..tenancy.loader import frozen_mapping
from ..tenancy.query import QueryClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    id: uuid.UUID
    tenant_id: uuid.UUID
    title: str
    slug: str
    page_type: str
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    show_header: bool = True
    show_footer: bool = True
    is_published: bool = True

    @classmethod
    def from_row(cls, row: StorePage) -> "Page":
        return cls(
            id=row.id,
            tenant_id=row.store_id,
            title=row.title,
            slug=row.slug,
            page_type=row.page_type,
            seo_title=row.seo_title,
            seo_description=row.seo_description,
            show_header=row.show_header is not False,
            show_footer=row.show_footer is not False,
            is_published=bool(row.is_published),
        )


@dataclass(frozen=True)
class Section:
    """
    One typed content block on a page.

    `config` is opaque here: its shape belongs to whichever renderer is
    registered for `type`.
    """

    id: uuid.UUID
    page_id: uuid.UUID
    type: str
    config: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    is_visible: bool = True
    sort_order: int = 0
    position: Optional[str] = None
    name: str = ""

    @classmethod
    def from_row(cls, row: PageSection) -> "Section":
        return cls(
            id=row.id,
            page_id=row.page_id,
            type=row.section_type,
            config=frozen_mapping(row.config),
            is_visible=row.is_visible is not False,
            sort_order=row.sort_order or 0,
            position=row.position,
            name=row.name or "",
        )


@dataclass(frozen=True)
class ResolvedPage:
    page: Page
    sections: tuple[Section, ...]
    is_fallback: bool = False


class PageResolver:
    """Resolves a requested page slug to a published page and its visible sections."""

    def __init__(self, client: QueryClient):
        self._client = client

    async def resolve_page(self, tenant_id: uuid.UUID, requested_slug: Optional[str]) -> ResolvedPage:
        """
        Raises:
            PageNotFound: Neither the requested page nor a homepage is published
            TransportError: The store database could not be read
        """
        slug = (requested_slug or "").strip().lower() or None
        is_fallback = False

        row = None
        if slug:
            row = await self._client.select_one(
                StorePage,
                store_id=tenant_id,
                slug=slug,
                is_published=True,
            )

        if row is None:
            row = await self._client.select_one(
                StorePage,
                store_id=tenant_id,
                page_type=PageType.HOMEPAGE.value,
                is_published=True,
            )
            is_fallback = slug is not None
            if row is None:
                logger.info(f"No page '{slug}' and no published homepage for store_id={tenant_id}")
                raise PageNotFound(tenant_id, slug)
            if is_fallback:
                logger.debug(f"Page '{slug}' not found for store_id={tenant_id}, using homepage")

        page = Page.from_row(row)
        sections = await self.load_sections(tenant_id, page.id)
        return ResolvedPage(page=page, sections=sections, is_fallback=is_fallback)

    async def load_sections(self, tenant_id: uuid.UUID, page_id: uuid.UUID) -> tuple[Section, ...]:
        rows = await self._client.select(
            PageSection,
            order_by=("sort_order",),
            page_id=page_id,
            store_id=tenant_id,
            is_visible=True,
        )
        return tuple(Section.from_row(row) for row in rows)
