"""Contracts of the remote data store and the auth provider.

Implementations resolve every remote failure into a
:class:`~storefront.domain.results.StoreResult` so callers never inspect raw
error payloads.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from storefront.domain.order import Order, OrderDetail, OrderItem
from storefront.domain.product import Category, Product, SewingStyle
from storefront.domain.results import StoreResult
from storefront.domain.user import User
from storefront.domain.wishlist import WishlistEntry


class CatalogReader(Protocol):
    async def fetch_products(self, category: str | None = None) -> StoreResult[list[Product]]: ...

    async def fetch_product(self, product_id: str) -> StoreResult[Product]: ...

    async def fetch_categories(self) -> StoreResult[list[Category]]: ...

    async def fetch_sewing_styles(self) -> StoreResult[list[SewingStyle]]: ...


class OrderStore(Protocol):
    async def create_order(self, fields: dict[str, Any]) -> StoreResult[Order]: ...

    async def create_order_items(self, items: list[OrderItem]) -> StoreResult[None]: ...

    async def create_order_detail(self, fields: dict[str, Any]) -> StoreResult[OrderDetail]: ...

    async def fetch_user_orders(self, user_id: str) -> StoreResult[list[Order]]: ...

    async def fetch_order(self, user_id: str, order_id: str) -> StoreResult[Order]: ...


class WishlistStore(Protocol):
    async def list_wishlist(self, user_id: str) -> StoreResult[list[WishlistEntry]]: ...

    async def insert_wishlist(self, user_id: str, product_id: str) -> StoreResult[WishlistEntry]: ...

    async def delete_wishlist(self, user_id: str, product_id: str) -> StoreResult[None]: ...


class StorefrontBackend(CatalogReader, OrderStore, WishlistStore, Protocol):
    """Everything the storefront core needs from the data store."""

    def with_token_provider(self, provider: Callable[[], str | None]) -> StorefrontBackend:
        """Backend acting for the visitor whose bearer token ``provider`` returns."""
        ...

    async def close(self) -> None: ...


@dataclass(frozen=True)
class AuthSession:
    user: User
    token: str


class AuthProvider(Protocol):
    async def sign_in(self, email: str, password: str) -> StoreResult[AuthSession]: ...

    async def sign_up(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> StoreResult[AuthSession]: ...

    async def get_current_user(self, token: str) -> StoreResult[User]: ...
