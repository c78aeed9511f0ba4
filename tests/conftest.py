"""Shared fakes and fixtures for the storefront test suite."""
from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field, replace
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from storefront.domain.order import Order, OrderDetail, OrderItem
from storefront.domain.product import Category, Product, SewingStyle
from storefront.domain.results import StoreResult
from storefront.domain.user import User
from storefront.domain.wishlist import WishlistEntry
from storefront.integrations.backend import AuthSession
from storefront.integrations.local_storage import LocalStorage
from storefront.services.session import SessionGate


def _product(product_id: str = "p1", price: float = 1000, **kwargs: Any) -> Product:
    return Product(
        id=product_id,
        name=kwargs.pop("name", f"Product {product_id}"),
        price=price,
        sizes=kwargs.pop("sizes", ["S", "M", "L"]),
        **kwargs,
    )


def _style(style_id: str = "s1", category_id: str | None = "c1") -> SewingStyle:
    return SewingStyle(id=style_id, name=f"Style {style_id}", category_id=category_id)


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    fail: bool = False
    undecodable: set[str] = field(default_factory=set)

    def ping(self) -> bool:
        return True

    def get(self, key: str):
        if self.fail:
            raise RedisConnectionError("redis down")
        if key in self.undecodable:
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        return self.data.get(key)

    def set(self, key: str, value: str):
        if self.fail:
            raise RedisConnectionError("redis down")
        self.data[key] = value
        return True

    def delete(self, key: str) -> int:
        if self.fail:
            raise RedisConnectionError("redis down")
        return 1 if self.data.pop(key, None) is not None else 0


class FakeBackend:
    """In-memory stand-in for the remote data store that records every call."""

    def __init__(self) -> None:
        self.products: dict[str, Product] = {}
        self.categories: list[Category] = []
        self.styles: list[SewingStyle] = []
        self.orders: list[Order] = []
        self.order_items: list[OrderItem] = []
        self.details: list[dict[str, Any]] = []
        self.wishlist: dict[tuple[str, str], WishlistEntry] = {}
        self.calls: list[str] = []
        self.failures: dict[str, StoreResult] = {}
        self.gate: asyncio.Event | None = None
        self.closed = False
        self.token_providers: list = []
        self._ids = itertools.count(1)

    def add_product(self, product: Product) -> Product:
        self.products[product.id] = product
        return product

    def fail(self, method: str, result: StoreResult | None = None) -> None:
        self.failures[method] = result or StoreResult.transient("backend unavailable")

    def calls_to(self, method: str) -> int:
        return self.calls.count(method)

    async def _enter(self, method: str) -> StoreResult | None:
        self.calls.append(method)
        if self.gate is not None:
            await self.gate.wait()
        return self.failures.get(method)

    # ----- catalog -----

    async def fetch_products(self, category: str | None = None):
        return await self._enter("fetch_products") or StoreResult.success(list(self.products.values()))

    async def fetch_product(self, product_id: str):
        failure = await self._enter("fetch_product")
        if failure:
            return failure
        product = self.products.get(product_id)
        return StoreResult.success(product) if product else StoreResult.not_found(product_id)

    async def fetch_categories(self):
        return await self._enter("fetch_categories") or StoreResult.success(list(self.categories))

    async def fetch_sewing_styles(self):
        return await self._enter("fetch_sewing_styles") or StoreResult.success(list(self.styles))

    # ----- orders -----

    async def create_order(self, fields: dict[str, Any]):
        failure = await self._enter("create_order")
        if failure:
            return failure
        order = Order.from_dict({"id": f"order-{next(self._ids)}", **fields})
        self.orders.append(order)
        return StoreResult.success(order)

    async def create_order_items(self, items: list[OrderItem]):
        failure = await self._enter("create_order_items")
        if failure:
            return failure
        self.order_items.extend(items)
        return StoreResult.success(None)

    async def create_order_detail(self, fields: dict[str, Any]):
        failure = await self._enter("create_order_detail")
        if failure:
            return failure
        self.details.append(dict(fields))
        return StoreResult.success(OrderDetail.from_dict({"id": f"detail-{next(self._ids)}", **fields}))

    def _with_details(self, order: Order) -> Order:
        details = [
            OrderDetail.from_dict({"id": f"detail-{index}", **fields})
            for index, fields in enumerate(self.details, start=1)
            if fields.get("order_id") == order.id
        ]
        return replace(order, details=details)

    async def fetch_user_orders(self, user_id: str):
        failure = await self._enter("fetch_user_orders")
        if failure:
            return failure
        return StoreResult.success(
            [self._with_details(order) for order in self.orders if order.user_id == user_id]
        )

    async def fetch_order(self, user_id: str, order_id: str):
        failure = await self._enter("fetch_order")
        if failure:
            return failure
        for order in self.orders:
            if order.id == order_id and order.user_id == user_id:
                return StoreResult.success(self._with_details(order))
        return StoreResult.not_found(order_id)

    # ----- wishlist -----

    async def list_wishlist(self, user_id: str):
        failure = await self._enter("list_wishlist")
        if failure:
            return failure
        return StoreResult.success(
            [entry for (owner, _), entry in self.wishlist.items() if owner == user_id]
        )

    async def insert_wishlist(self, user_id: str, product_id: str):
        failure = await self._enter("insert_wishlist")
        if failure:
            return failure
        if (user_id, product_id) in self.wishlist:
            return StoreResult.duplicate("duplicate key value violates unique constraint")
        entry = WishlistEntry(id=f"w-{next(self._ids)}", product_id=product_id)
        self.wishlist[(user_id, product_id)] = entry
        return StoreResult.success(entry)

    async def delete_wishlist(self, user_id: str, product_id: str):
        failure = await self._enter("delete_wishlist")
        if failure:
            return failure
        self.wishlist.pop((user_id, product_id), None)
        return StoreResult.success(None)

    def with_token_provider(self, provider):
        self.token_providers.append(provider)
        return self

    async def close(self) -> None:
        self.closed = True


class FakeAuthProvider:
    def __init__(self) -> None:
        self.accounts: dict[str, tuple[str, User]] = {}
        self.tokens: dict[str, User] = {}
        self.calls: list[str] = []
        self._ids = itertools.count(1)

    def register(self, email: str, password: str, role: str = "customer") -> User:
        user = User(id=f"user-{next(self._ids)}", email=email, first_name="Ada", role=role)
        self.accounts[email] = (password, user)
        return user

    def _issue(self, user: User) -> AuthSession:
        token = f"token-{user.id}"
        self.tokens[token] = user
        return AuthSession(user=user, token=token)

    async def sign_in(self, email: str, password: str):
        self.calls.append("sign_in")
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            return StoreResult.unauthorized("Invalid login credentials")
        return StoreResult.success(self._issue(account[1]))

    async def sign_up(self, email: str, password: str, first_name: str, last_name: str):
        self.calls.append("sign_up")
        if email in self.accounts:
            return StoreResult.duplicate("User already registered")
        user = User(
            id=f"user-{next(self._ids)}", email=email, first_name=first_name, last_name=last_name
        )
        self.accounts[email] = (password, user)
        return StoreResult.success(self._issue(user))

    async def get_current_user(self, token: str):
        self.calls.append("get_current_user")
        user = self.tokens.get(token)
        return StoreResult.success(user) if user else StoreResult.unauthorized("invalid token")


@pytest.fixture
def make_product():
    return _product


@pytest.fixture
def make_style():
    return _style


@pytest.fixture
def storage() -> LocalStorage:
    return LocalStorage()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def auth() -> FakeAuthProvider:
    provider = FakeAuthProvider()
    provider.register("ada@example.com", "secret")
    return provider


@pytest.fixture
def session(auth: FakeAuthProvider, storage: LocalStorage) -> SessionGate:
    return SessionGate(auth, storage)


@pytest.fixture
async def signed_in(session: SessionGate) -> SessionGate:
    result = await session.sign_in("ada@example.com", "secret")
    assert result.ok
    return session


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedisClient:
    import storefront.integrations.local_storage as local_storage_module

    client = FakeRedisClient()
    monkeypatch.setattr(local_storage_module.redis, "from_url", lambda *args, **kwargs: client)
    return client
