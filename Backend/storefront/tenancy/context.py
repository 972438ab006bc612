"""
Tenant context: the resolved store for one browsing session.

TenantContext combines the directory lookup and the configuration load into
one immutable snapshot and owns the loading/error lifecycle:

    IDLE --resolve(slug)--> LOADING --> READY  (snapshot available)
                                    `-> ERROR  (TenantNotFound / TransportError)

Any slug change (including the first) re-enters LOADING. While LOADING there
is no snapshot at all, so a previous store's name, logo or colors can never be
shown for the new one.

Freshness: every load carries a ticket (slug + sequence number). When a load
finishes after a newer one has started, its result is dropped and its caller
gets ResolutionSuperseded. Loads are never cancelled, only discarded.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .directory import Tenant, TenantDirectory
from .errors import ResolutionSuperseded, StorefrontError, TenantNotFound, TransportError
from .loader import HeaderFooterConfig, NavigationItem, NavigationMenu, TenantConfigLoader, TenantTheme
from .theme import ROOT_STYLES, StyleNamespace, ThemeProjection

logger = logging.getLogger(__name__)


class ContextState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class TenantSnapshot:
    """
    Immutable, render-ready view of one store.

    This object is the only thing downstream consumers (links, pages, carts)
    learn about the store; nothing re-reads the store from raw request data.
    """

    tenant: Tenant
    theme: TenantTheme
    header_footer: HeaderFooterConfig
    navigation: NavigationMenu
    degraded: frozenset[str] = field(default_factory=frozenset)

    @property
    def tenant_id(self):
        return self.tenant.id

    @property
    def tenant_slug(self) -> str:
        return self.tenant.slug

    @property
    def nav_items(self) -> tuple[NavigationItem, ...]:
        return self.navigation.items


@dataclass(frozen=True)
class _LoadTicket:
    slug: str
    sequence: int


class TenantContext:
    """Session-scoped store resolution with scoped theme projection."""

    _ids = itertools.count(1)

    def __init__(
        self,
        directory: TenantDirectory,
        loader: TenantConfigLoader,
        styles: Optional[StyleNamespace] = None,
    ):
        self._directory = directory
        self._loader = loader
        self._styles = styles if styles is not None else ROOT_STYLES
        self._sequence = itertools.count(1)
        self._id = next(self._ids)

        self._state = ContextState.IDLE
        self._ticket: Optional[_LoadTicket] = None
        self._inflight: Optional[asyncio.Task] = None
        self._snapshot: Optional[TenantSnapshot] = None
        self._error: Optional[StorefrontError] = None
        self._projection: Optional[ThemeProjection] = None

    def __repr__(self) -> str:
        return f"TenantContext#{self._id}(slug={self.slug!r}, state={self._state.value})"

    # ────────────────────────────────────────────────────────────
    # Observable state
    # ────────────────────────────────────────────────────────────

    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def slug(self) -> Optional[str]:
        return self._ticket.slug if self._ticket else None

    @property
    def snapshot(self) -> Optional[TenantSnapshot]:
        """The READY snapshot; None in every other state."""
        return self._snapshot if self._state is ContextState.READY else None

    @property
    def error(self) -> Optional[StorefrontError]:
        """The classified failure; None unless in ERROR."""
        return self._error if self._state is ContextState.ERROR else None

    @property
    def styles(self) -> StyleNamespace:
        return self._styles

    # ────────────────────────────────────────────────────────────
    # Resolution
    # ────────────────────────────────────────────────────────────

    async def resolve(self, slug: Optional[str]) -> TenantSnapshot:
        """
        Make `slug` the current store and return its snapshot.

        Raises:
            TenantNotFound: No active store for the slug
            TransportError: Store lookup failed; retry later
            ResolutionSuperseded: A newer resolve() replaced this one
        """
        normalized = (slug or "").strip().lower()
        if not normalized:
            self._begin("")
            self._enter_error(TenantNotFound(None))
            raise self._error

        if self._ticket is not None and self._ticket.slug == normalized:
            if self._state is ContextState.READY:
                return self._snapshot
            if self._inflight is not None and not self._inflight.done():
                return await self._join(self._ticket, self._inflight)

        ticket = self._begin(normalized)
        return await self._join(ticket, self._start(ticket))

    async def refetch(self) -> TenantSnapshot:
        """Reload the current store, discarding its snapshot first."""
        if self._ticket is None or not self._ticket.slug:
            raise TenantNotFound(None)
        ticket = self._begin(self._ticket.slug)
        return await self._join(ticket, self._start(ticket))

    def close(self) -> None:
        """Unmount: retract the theme projection and forget the store."""
        self._release_theme()
        self._ticket = None
        self._inflight = None
        self._snapshot = None
        self._error = None
        self._state = ContextState.IDLE

    async def __aenter__(self) -> "TenantContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ────────────────────────────────────────────────────────────
    # Internals
    # ────────────────────────────────────────────────────────────

    def _begin(self, slug: str) -> _LoadTicket:
        # Leaving the previous store: nothing of it may outlive this line
        self._release_theme()
        self._snapshot = None
        self._error = None
        self._ticket = _LoadTicket(slug=slug, sequence=next(self._sequence))
        self._state = ContextState.LOADING
        logger.debug(f"{self!r} loading (ticket #{self._ticket.sequence})")
        return self._ticket

    def _start(self, ticket: _LoadTicket) -> asyncio.Task:
        self._inflight = asyncio.ensure_future(self._load(ticket))
        return self._inflight

    def _is_current(self, ticket: _LoadTicket) -> bool:
        return self._ticket == ticket

    async def _load(self, ticket: _LoadTicket) -> None:
        try:
            tenant = await self._directory.find_by_slug(ticket.slug)
            config = await self._loader.load_config(tenant.id)
        except (TenantNotFound, TransportError) as e:
            if not self._is_current(ticket):
                logger.debug(f"Discarding stale failure for '{ticket.slug}' (ticket #{ticket.sequence})")
                return
            self._enter_error(e)
            return

        if not self._is_current(ticket):
            logger.debug(f"Discarding stale result for '{ticket.slug}' (ticket #{ticket.sequence})")
            return

        self._enter_ready(
            TenantSnapshot(
                tenant=tenant,
                theme=config.theme,
                header_footer=config.header_footer,
                navigation=config.navigation,
                degraded=config.degraded,
            )
        )

    async def _join(self, ticket: _LoadTicket, task: asyncio.Task) -> TenantSnapshot:
        # Shielded: a cancelled request must not cancel a load others are waiting on
        await asyncio.shield(task)
        if not self._is_current(ticket):
            raise ResolutionSuperseded(ticket.slug)
        if self._state is ContextState.ERROR:
            raise self._error
        return self._snapshot

    def _enter_ready(self, snapshot: TenantSnapshot) -> None:
        self._snapshot = snapshot
        self._error = None
        self._state = ContextState.READY
        self._projection = ThemeProjection(self._styles, snapshot.theme.colors, owner=self).enter()
        if snapshot.degraded:
            logger.info(f"{self!r} ready with degraded config: {sorted(snapshot.degraded)}")
        else:
            logger.debug(f"{self!r} ready: store_id={snapshot.tenant_id}")

    def _enter_error(self, error: StorefrontError) -> None:
        self._snapshot = None
        self._error = error
        self._state = ContextState.ERROR
        logger.debug(f"{self!r} failed: {type(error).__name__}: {error}")

    def _release_theme(self) -> None:
        if self._projection is not None:
            self._projection.exit()
            self._projection = None
