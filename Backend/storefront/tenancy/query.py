"""
Read-only query client over the store database.

This module is THE boundary between the tenancy layer and the relational
store. Everything above it (directory, config loader, page resolver) speaks
only filter-by-equality, order-by and limit-to-one, and only ever sees
TransportError when the store misbehaves.

Usage:
    client = SqlQueryClient(AsyncSessionLocal)
    theme = await client.select_one(StoreTheme, store_id=tenant_id, is_active=True)
    items = await client.select(StoreNavigation, order_by=("sort_order",), store_id=tenant_id)

Each call opens its own session, so several calls can be awaited concurrently
(asyncio.gather) without sharing an AsyncSession.
"""

import logging
from typing import Any, Optional, Protocol, Sequence, Type, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from .errors import TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DeclarativeBase)


class QueryClient(Protocol):
    """The generic read interface the tenancy layer depends on."""

    async def select(
        self,
        model: Type[T],
        *,
        order_by: Sequence[str] = (),
        limit: Optional[int] = None,
        **filters: Any,
    ) -> list[T]:
        ...

    async def select_one(self, model: Type[T], **filters: Any) -> Optional[T]:
        ...


# ────────────────────────────────────────────────────────────────
# Composable Query Helpers
# ────────────────────────────────────────────────────────────────

def equality_select(
    model: Type[T],
    filters: dict[str, Any],
    order_by: Sequence[str] = (),
    limit: Optional[int] = None,
) -> Select:
    """
    Build a SELECT with one equality clause per filter.

    Usage:
        stmt = equality_select(StorePage, {"store_id": tenant_id, "slug": "about"})
    """
    stmt = select(model)
    for column, value in filters.items():
        stmt = stmt.where(getattr(model, column) == value)
    for column in order_by:
        stmt = stmt.order_by(getattr(model, column).asc())
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


# ────────────────────────────────────────────────────────────────
# SQLAlchemy implementation
# ────────────────────────────────────────────────────────────────

class SqlQueryClient:
    """QueryClient backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def select(
        self,
        model: Type[T],
        *,
        order_by: Sequence[str] = (),
        limit: Optional[int] = None,
        **filters: Any,
    ) -> list[T]:
        stmt = equality_select(model, filters, order_by=order_by, limit=limit)
        return await self._run(model, stmt)

    async def select_one(self, model: Type[T], **filters: Any) -> Optional[T]:
        stmt = equality_select(model, filters, limit=1)
        rows = await self._run(model, stmt)
        return rows[0] if rows else None

    async def _run(self, model: Type[T], stmt: Select) -> list[T]:
        table = model.__tablename__
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Query on {table} failed: {e}")
            raise TransportError(f"Could not read {table}", operation=table) from e
