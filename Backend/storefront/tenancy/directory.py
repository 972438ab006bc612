"""
Store directory: slug -> active store.

Public traffic can only ever reach active stores. Pending, suspended and
closed stores are filtered in the query itself, so to a caller they look
exactly like a slug that was never registered.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from ..models import Store, StoreStatus
from .errors import TenantNotFound
from .query import QueryClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tenant:
    """
    Immutable view of an active store.

    Attributes:
        id: stores.id
        name: Display name
        slug: URL-safe identifier (e.g., "bombay")
        status: Always StoreStatus.ACTIVE when produced by TenantDirectory
        logo_url, banner_url, description, email, phone: Branding fields
    """

    id: uuid.UUID
    name: str
    slug: str
    status: StoreStatus = StoreStatus.ACTIVE
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_row(cls, store: Store) -> "Tenant":
        return cls(
            id=store.id,
            name=store.name,
            slug=store.slug,
            status=StoreStatus(store.status),
            logo_url=store.logo_url,
            banner_url=store.banner_url,
            description=store.description,
            email=store.email,
            phone=store.phone,
        )


class TenantDirectory:
    """Async lookup of active stores by slug."""

    def __init__(self, client: QueryClient):
        self._client = client

    async def find_by_slug(self, slug: Optional[str]) -> Tenant:
        """
        Resolve an active store from its slug.

        Raises:
            TenantNotFound: Empty slug, unknown slug, or a store that is not active
            TransportError: The store database could not be read
        """
        normalized = (slug or "").strip().lower()
        if not normalized:
            raise TenantNotFound(None)

        store = await self._client.select_one(
            Store,
            slug=normalized,
            status=StoreStatus.ACTIVE,
        )
        if store is None:
            logger.debug(f"No active store for slug '{normalized}'")
            raise TenantNotFound(normalized)

        logger.debug(f"Resolved store from slug '{normalized}': store_id={store.id}")
        return Tenant.from_row(store)
