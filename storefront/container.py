"""Wiring of settings, integrations and services."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from storefront.core.config import BACKEND_POSTGRES, Settings, load_settings
from storefront.core.logging_config import setup_logging
from storefront.core.sentry_integration import init_sentry
from storefront.integrations.backend import AuthProvider, StorefrontBackend
from storefront.integrations.local_storage import LocalStorage
from storefront.integrations.pg_backend import PostgresBackend
from storefront.integrations.rest_client import RestAuthProvider, RestBackend
from storefront.services.cart_store import CartStore
from storefront.services.catalog_service import CatalogService
from storefront.services.order_history import OrderHistoryService
from storefront.services.session import SessionGate
from storefront.services.wishlist_service import WishlistService

logger = logging.getLogger(__name__)


@dataclass
class Visitor:
    """Services acting for one caller.

    ``cart_id`` names a cart owned by the caller's browsing session; without
    one, a signed-in caller falls back to a cart keyed by their user id.
    """

    session: SessionGate
    orders: StorefrontBackend
    order_history: OrderHistoryService
    cart_id: str | None = None
    _wishlist: WishlistService | None = field(default=None, repr=False)

    @property
    def wishlist(self) -> WishlistService:
        # Created once the caller is resolved, so it only hears later identity changes
        if self._wishlist is None:
            self._wishlist = WishlistService(self.orders, self.session)
        return self._wishlist

    @property
    def cart_owner(self) -> str | None:
        if self.cart_id:
            return f"cart:{self.cart_id}"
        user = self.session.current_user
        if user is not None:
            return f"user:{user.id}"
        return None


@dataclass
class StorefrontContainer:
    settings: Settings
    storage: LocalStorage
    backend: StorefrontBackend
    auth: AuthProvider
    catalog: CatalogService

    def open_visitor(self, cart_id: str | None = None) -> Visitor:
        """Fresh, signed-out services for a single caller."""
        session = SessionGate(self.auth)
        orders = self.backend.with_token_provider(lambda: session.token)
        return Visitor(
            session=session,
            orders=orders,
            order_history=OrderHistoryService(orders, session),
            cart_id=cart_id,
        )

    def cart_for(self, owner: str) -> CartStore:
        return CartStore(self.storage, f"{self.settings.cart_storage_key}:{owner}")

    async def shutdown(self) -> None:
        await self.backend.close()
        close_auth = getattr(self.auth, "close", None)
        if close_auth is not None:
            await close_auth()


def build_backend(settings: Settings) -> StorefrontBackend:
    if settings.backend.kind == BACKEND_POSTGRES:
        return PostgresBackend(settings.backend.database_url or "")
    return RestBackend(
        settings.backend.api_url, timeout_seconds=settings.backend.timeout_seconds
    )


def build_container(
    settings: Settings | None = None,
    *,
    storage: LocalStorage | None = None,
    backend: StorefrontBackend | None = None,
    auth: AuthProvider | None = None,
) -> StorefrontContainer:
    """Assemble the shared integrations; explicit arguments replace the configured ones."""
    settings = settings or load_settings()
    storage = storage or LocalStorage(settings.redis_url)
    auth = auth or RestAuthProvider(
        settings.backend.api_url, timeout_seconds=settings.backend.timeout_seconds
    )
    backend = backend or build_backend(settings)

    logger.info(
        f"Storefront wired: backend={settings.backend.kind} "
        f"storage={'redis' if storage.is_persistent else 'memory'}"
    )
    return StorefrontContainer(
        settings=settings,
        storage=storage,
        backend=backend,
        auth=auth,
        catalog=CatalogService(backend),
    )


def bootstrap() -> StorefrontContainer:
    """Load settings, configure logging and Sentry, then build the container."""
    settings = load_settings()
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, environment=settings.environment)
    return build_container(settings)
