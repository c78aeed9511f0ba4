"""Wishlist kept in step with the remote store."""
from __future__ import annotations

import logging

from storefront.domain.results import Outcome
from storefront.domain.user import User
from storefront.domain.wishlist import WishlistEntry
from storefront.integrations.backend import WishlistStore
from storefront.services.session import SessionGate

logger = logging.getLogger(__name__)


class WishlistService:
    """In-memory wishlist of the signed-in user.

    The remote store is the source of truth: local state only changes after
    the remote call confirms. One add/remove runs at a time; a second request
    made while one is in flight is answered with ``busy``.
    """

    def __init__(self, store: WishlistStore, session: SessionGate):
        self._store = store
        self._session = session
        self._entries: list[WishlistEntry] = []
        self._loading = False
        self._pending = False
        session.subscribe(self._on_identity_change)

    @property
    def items(self) -> list[WishlistEntry]:
        return list(self._entries)

    @property
    def total_items(self) -> int:
        return len(self._entries)

    @property
    def is_loading(self) -> bool:
        return self._loading

    def is_saved(self, product_id: str) -> bool:
        product_id = str(product_id)
        return any(entry.product_id == product_id for entry in self._entries)

    async def load(self) -> Outcome:
        user = self._session.current_user
        if user is None:
            self._entries = []
            return Outcome.success([])

        self._loading = True
        try:
            result = await self._store.list_wishlist(user.id)
        finally:
            self._loading = False

        if not result.ok:
            logger.error(f"Failed to load wishlist for user {user.id}: {result.detail}")
            return Outcome.failed("Could not load your wishlist.")

        self._entries = list(result.value or [])
        return Outcome.success(self.items)

    async def add(self, product_id: str) -> Outcome:
        user = self._session.current_user
        if user is None:
            return Outcome.auth_required()
        if self._pending:
            return Outcome.busy()

        product_id = str(product_id)
        self._pending = True
        try:
            result = await self._store.insert_wishlist(user.id, product_id)
        finally:
            self._pending = False

        if result.ok and result.value is not None:
            self._entries.append(result.value)
            logger.info(f"Wishlist add: user={user.id} product={product_id}")
            return Outcome.success(result.value)
        if result.is_duplicate:
            return Outcome.duplicate("This item is already in your wishlist.")

        logger.error(f"Wishlist add failed for user {user.id}: {result.detail}")
        return Outcome.failed("Could not add the item to your wishlist.")

    async def remove(self, product_id: str) -> Outcome:
        user = self._session.current_user
        if user is None:
            return Outcome.auth_required()
        if self._pending:
            return Outcome.busy()

        product_id = str(product_id)
        self._pending = True
        try:
            result = await self._store.delete_wishlist(user.id, product_id)
        finally:
            self._pending = False

        if not result.ok:
            logger.error(f"Wishlist remove failed for user {user.id}: {result.detail}")
            return Outcome.failed("Could not remove the item from your wishlist.")

        self._entries = [entry for entry in self._entries if entry.product_id != product_id]
        logger.info(f"Wishlist remove: user={user.id} product={product_id}")
        return Outcome.success()

    async def _on_identity_change(self, user: User | None) -> None:
        if user is None:
            self._entries = []
            return
        await self.load()
