"""
Store configuration loader: theme, header/footer and navigation.

The three lookups have no ordering dependency and run concurrently. Each one
degrades independently: a missing row or a failed read turns into that
field's default and a ConfigDegraded log line, never into a failed load. A
store with a broken theme still renders.
"""

import asyncio
import copy
import logging
import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..models import NavLocation, StoreHeaderFooter, StoreNavigation, StoreTheme
from .config import (
    DEFAULT_FOOTER_OPTIONS,
    DEFAULT_HEADER_OPTIONS,
    DEFAULT_SOCIAL_LINKS,
    DEFAULT_THEME_COLORS,
    DEFAULT_THEME_LAYOUT,
    DEFAULT_THEME_TYPOGRAPHY,
)
from .errors import CONFIG_DEGRADED, TransportError
from .query import QueryClient

logger = logging.getLogger(__name__)


def frozen_mapping(*layers: Any) -> Mapping[str, Any]:
    """Merge mapping layers left to right into a read-only copy."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if isinstance(layer, Mapping):
            merged.update(copy.deepcopy(dict(layer)))
    return MappingProxyType(merged)


# ────────────────────────────────────────────────────────────────
# Configuration values
# ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TenantTheme:
    colors: Mapping[str, Any]
    typography: Mapping[str, Any]
    layout: Mapping[str, Any]

    @classmethod
    def default(cls) -> "TenantTheme":
        return cls(
            colors=frozen_mapping(DEFAULT_THEME_COLORS),
            typography=frozen_mapping(DEFAULT_THEME_TYPOGRAPHY),
            layout=frozen_mapping(DEFAULT_THEME_LAYOUT),
        )

    @classmethod
    def from_row(cls, row: StoreTheme) -> "TenantTheme":
        # Partial rows keep the defaults for anything they leave out
        return cls(
            colors=frozen_mapping(DEFAULT_THEME_COLORS, row.colors),
            typography=frozen_mapping(DEFAULT_THEME_TYPOGRAPHY, row.typography),
            layout=frozen_mapping(DEFAULT_THEME_LAYOUT, row.layout),
        )


@dataclass(frozen=True)
class HeaderFooterConfig:
    header_options: Mapping[str, Any]
    footer_options: Mapping[str, Any]
    social_links: Mapping[str, Any]

    @classmethod
    def default(cls) -> "HeaderFooterConfig":
        return cls(
            header_options=frozen_mapping(DEFAULT_HEADER_OPTIONS),
            footer_options=frozen_mapping(DEFAULT_FOOTER_OPTIONS),
            social_links=frozen_mapping(DEFAULT_SOCIAL_LINKS),
        )

    @classmethod
    def from_row(cls, row: StoreHeaderFooter) -> "HeaderFooterConfig":
        return cls(
            header_options=frozen_mapping(DEFAULT_HEADER_OPTIONS, row.header_config),
            footer_options=frozen_mapping(DEFAULT_FOOTER_OPTIONS, row.footer_config),
            social_links=frozen_mapping(DEFAULT_SOCIAL_LINKS, row.social_links),
        )


@dataclass(frozen=True)
class NavigationItem:
    id: uuid.UUID
    label: str
    location: NavLocation
    sort_order: int = 0
    url: Optional[str] = None
    page_id: Optional[uuid.UUID] = None
    parent_id: Optional[uuid.UUID] = None
    is_highlighted: bool = False
    open_in_new_tab: bool = False

    @classmethod
    def from_row(cls, row: StoreNavigation) -> "NavigationItem":
        return cls(
            id=row.id,
            label=row.label,
            location=NavLocation(row.location),
            sort_order=row.sort_order or 0,
            url=row.url,
            page_id=row.page_id,
            parent_id=row.parent_id,
            is_highlighted=bool(row.is_highlighted),
            open_in_new_tab=bool(row.open_in_new_tab),
        )


@dataclass(frozen=True)
class NavigationNode:
    item: NavigationItem
    children: tuple["NavigationNode", ...] = ()


def sort_navigation(items) -> tuple[NavigationItem, ...]:
    """Ascending sort_order; equal orders keep fetch order (sorted() is stable)."""
    return tuple(sorted(items, key=lambda item: item.sort_order))


@dataclass(frozen=True)
class NavigationMenu:
    """Ordered navigation items with location and nesting helpers."""

    items: tuple[NavigationItem, ...] = ()

    def for_location(self, location: NavLocation) -> tuple[NavigationItem, ...]:
        return tuple(item for item in self.items if item.location == location)

    def tree(self, location: NavLocation) -> tuple[NavigationNode, ...]:
        """
        Nest items under their parent_id within one location.

        Items whose parent is missing from the location are promoted to roots.
        """
        items = self.for_location(location)
        known = {item.id for item in items}
        children: dict[uuid.UUID, list[NavigationItem]] = {}
        roots: list[NavigationItem] = []
        for item in items:
            if item.parent_id is not None and item.parent_id in known and item.parent_id != item.id:
                children.setdefault(item.parent_id, []).append(item)
            else:
                roots.append(item)

        def build(item: NavigationItem, seen: frozenset) -> NavigationNode:
            kids = tuple(
                build(child, seen | {child.id})
                for child in children.get(item.id, [])
                if child.id not in seen
            )
            return NavigationNode(item=item, children=kids)

        return tuple(build(item, frozenset({item.id})) for item in roots)


@dataclass(frozen=True)
class TenantConfig:
    theme: TenantTheme
    header_footer: HeaderFooterConfig
    navigation: NavigationMenu
    degraded: frozenset[str] = field(default_factory=frozenset)

    @property
    def nav_items(self) -> tuple[NavigationItem, ...]:
        return self.navigation.items


# ────────────────────────────────────────────────────────────────
# Loader
# ────────────────────────────────────────────────────────────────

class TenantConfigLoader:
    """Fetch and normalize one store's presentation configuration."""

    def __init__(self, client: QueryClient):
        self._client = client

    async def load_config(self, tenant_id: uuid.UUID) -> TenantConfig:
        theme_result, header_footer_result, nav_result = await asyncio.gather(
            self._client.select_one(StoreTheme, store_id=tenant_id, is_active=True),
            self._client.select_one(StoreHeaderFooter, store_id=tenant_id),
            self._client.select(StoreNavigation, order_by=("sort_order",), store_id=tenant_id),
            return_exceptions=True,
        )

        degraded: set[str] = set()

        theme_row = self._settle("theme", tenant_id, theme_result, degraded)
        theme = TenantTheme.from_row(theme_row) if theme_row is not None else TenantTheme.default()

        hf_row = self._settle("header_footer", tenant_id, header_footer_result, degraded)
        header_footer = (
            HeaderFooterConfig.from_row(hf_row) if hf_row is not None else HeaderFooterConfig.default()
        )

        nav_rows = self._settle("nav_items", tenant_id, nav_result, degraded, missing_is_degraded=False)
        navigation = NavigationMenu(
            items=sort_navigation(NavigationItem.from_row(row) for row in (nav_rows or []))
        )

        return TenantConfig(
            theme=theme,
            header_footer=header_footer,
            navigation=navigation,
            degraded=frozenset(degraded),
        )

    @staticmethod
    def _settle(
        field_name: str,
        tenant_id: uuid.UUID,
        result: Any,
        degraded: set[str],
        missing_is_degraded: bool = True,
    ) -> Any:
        """Turn one gather() result into a row (or None), recording degradation."""
        if isinstance(result, TransportError):
            logger.warning(
                f"{CONFIG_DEGRADED}: {field_name} for store_id={tenant_id} fell back to defaults: {result}"
            )
            degraded.add(field_name)
            return None
        if isinstance(result, BaseException):
            raise result
        if result is None and missing_is_degraded:
            logger.warning(f"{CONFIG_DEGRADED}: store_id={tenant_id} has no {field_name}, using defaults")
            degraded.add(field_name)
        return result
