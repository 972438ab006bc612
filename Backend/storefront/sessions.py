"""
Browsing sessions.

A browsing session is what one shopper's browser tab holds on to: the
tenant context for the store currently in view, the style namespace its
theme is projected into, and the cart. Sessions are keyed by a cookie and
live in a SessionRegistry on app.state.

Usage:
    registry = SessionRegistry(directory, loader, cart_storage)
    session, created = registry.get_or_create(request.cookies.get("storefront_session"))
    snapshot = await session.context.resolve("bombay")
"""

import logging
import re
import secrets
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from .cart import CartStorage, CartStore, MemoryCartStorage
from .tenancy import StyleNamespace, TenantConfigLoader, TenantContext, TenantDirectory

logger = logging.getLogger(__name__)

_SESSION_ID = re.compile(r"^[A-Za-z0-9_-]{16,128}$")

DEFAULT_MAX_SESSIONS = 10_000


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


@dataclass
class BrowsingSession:
    id: str
    context: TenantContext
    cart: CartStore
    styles: StyleNamespace

    def close(self) -> None:
        self.context.close()


class SessionRegistry:
    """
    In-process session table with least-recently-used eviction.

    Evicting a session closes its tenant context; its cart stays in storage
    and is picked up again if the same cookie comes back.
    """

    def __init__(
        self,
        directory: TenantDirectory,
        loader: TenantConfigLoader,
        cart_storage: Optional[CartStorage] = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        self._directory = directory
        self._loader = loader
        self._cart_storage = cart_storage if cart_storage is not None else MemoryCartStorage()
        self._max_sessions = max_sessions
        self._sessions: "OrderedDict[str, BrowsingSession]" = OrderedDict()

    def get_or_create(self, session_id: Optional[str]) -> tuple[BrowsingSession, bool]:
        """Return (session, created). Unknown or malformed ids start a new session."""
        if session_id and _SESSION_ID.match(session_id):
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
                return session, False
        else:
            session_id = new_session_id()

        session = self._create(session_id)
        self._sessions[session_id] = session
        self._evict()
        return session, True

    def get(self, session_id: str) -> Optional[BrowsingSession]:
        return self._sessions.get(session_id)

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def _create(self, session_id: str) -> BrowsingSession:
        styles = StyleNamespace(f"session:{session_id[:8]}")
        session = BrowsingSession(
            id=session_id,
            context=TenantContext(self._directory, self._loader, styles=styles),
            cart=CartStore(self._cart_storage, key=session_id),
            styles=styles,
        )
        logger.debug(f"Created browsing session {session_id[:8]}...")
        return session

    def _evict(self) -> None:
        while len(self._sessions) > self._max_sessions:
            session_id, session = self._sessions.popitem(last=False)
            session.close()
            logger.debug(f"Evicted browsing session {session_id[:8]}...")
