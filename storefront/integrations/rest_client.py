"""REST API client for the storefront backend.

Every call goes through :meth:`_HttpClient._request`, which applies the
bearer token and timeout and turns HTTP/network failures into
:class:`StoreResult` values. The HTTP status and error payload are only
inspected there.
"""
from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Callable, TypeVar

import aiohttp

from storefront.core.constants import HTTP_TIMEOUT_SECONDS
from storefront.domain.order import Order, OrderDetail, OrderItem
from storefront.domain.product import Category, Product, SewingStyle
from storefront.domain.results import StoreResult
from storefront.domain.user import User
from storefront.domain.wishlist import WishlistEntry
from storefront.integrations.backend import AuthSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNIQUE_VIOLATION_CODE = "23505"


def classify_error(status: int, body: Any) -> StoreResult[Any]:
    """Map a failed HTTP response to a tagged store result."""
    code = ""
    message = ""
    if isinstance(body, dict):
        code = str(body.get("code") or "")
        message = str(body.get("message") or body.get("error") or "")
    elif body:
        message = str(body)

    if code == UNIQUE_VIOLATION_CODE or status == 409 or "duplicate" in message.lower():
        return StoreResult.duplicate(message or "duplicate")
    if status in (401, 403):
        return StoreResult.unauthorized(message or f"HTTP {status}")
    if status == 404:
        return StoreResult.not_found(message or "not found")
    return StoreResult.transient(f"HTTP {status}: {message}" if message else f"HTTP {status}")


def _parse_one(body: Any, parser: Callable[[dict[str, Any]], T]) -> StoreResult[T]:
    if not isinstance(body, dict):
        return StoreResult.transient("Unexpected response payload")
    try:
        return StoreResult.success(parser(body))
    except (KeyError, TypeError, ValueError) as exc:
        return StoreResult.transient(f"Malformed response: {exc}")


def _parse_many(body: Any, parser: Callable[[dict[str, Any]], T]) -> StoreResult[list[T]]:
    if body is None:
        return StoreResult.success([])
    if not isinstance(body, list):
        return StoreResult.transient("Unexpected response payload")
    items: list[T] = []
    for raw in body:
        try:
            items.append(parser(raw))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed record: %s", exc)
    return StoreResult.success(items)


class _HttpClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = HTTP_TIMEOUT_SECONDS,
        token_provider: Callable[[], str | None] | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._token_provider = token_provider
        self._session: aiohttp.ClientSession | None = None
        self._owner: _HttpClient | None = None

    def with_token_provider(self, provider: Callable[[], str | None]):
        """Copy that sends ``provider``'s token and shares this client's connections."""
        view = copy.copy(self)
        view._token_provider = provider
        view._session = None
        view._owner = self._owner or self
        return view

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._owner is not None:
            return await self._owner._get_session()
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._owner is not None:
            return
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        token: str | None = None,
    ) -> StoreResult[Any]:
        url = f"{self.base_url}{path}"
        headers: dict[str, str] = {}
        bearer = token or (self._token_provider() if self._token_provider else None)
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"

        try:
            session = await self._get_session()
            async with session.request(
                method, url, json=json, params=params, headers=headers
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = await response.text()

                if response.status >= 400:
                    result = classify_error(response.status, body)
                    logger.warning(
                        "%s %s failed: %s (%s)", method, path, result.error, result.detail
                    )
                    return result
                return StoreResult.success(body)

        except asyncio.TimeoutError:
            logger.error("%s %s timed out", method, path)
            return StoreResult.transient("Request timed out")
        except aiohttp.ClientError as e:
            logger.error(f"{method} {path} network error: {e}")
            return StoreResult.transient(str(e))


class RestBackend(_HttpClient):
    """Catalog, order and wishlist stores over the generic REST API.

    The API scopes user data by the bearer token, so ``user_id`` arguments
    only serve the shared backend contract.
    """

    # ----- catalog -----

    async def fetch_products(self, category: str | None = None) -> StoreResult[list[Product]]:
        params = {"category": category} if category else None
        result = await self._request("GET", "/products", params=params)
        if not result.ok:
            return result
        return _parse_many(result.value, Product.from_dict)

    async def fetch_product(self, product_id: str) -> StoreResult[Product]:
        result = await self._request("GET", f"/products/{product_id}")
        if not result.ok:
            return result
        return _parse_one(result.value, Product.from_dict)

    async def fetch_categories(self) -> StoreResult[list[Category]]:
        result = await self._request("GET", "/categories")
        if not result.ok:
            return result
        return _parse_many(result.value, Category.from_dict)

    async def fetch_sewing_styles(self) -> StoreResult[list[SewingStyle]]:
        result = await self._request("GET", "/sewing-styles")
        if not result.ok:
            return result
        return _parse_many(result.value, SewingStyle.from_dict)

    # ----- orders -----

    async def create_order(self, fields: dict[str, Any]) -> StoreResult[Order]:
        result = await self._request("POST", "/orders", json=fields)
        if not result.ok:
            return result
        return _parse_one(result.value, Order.from_dict)

    async def create_order_items(self, items: list[OrderItem]) -> StoreResult[None]:
        result = await self._request(
            "POST", "/order-items", json=[item.to_dict() for item in items]
        )
        if not result.ok:
            return result
        return StoreResult.success(None)

    async def create_order_detail(self, fields: dict[str, Any]) -> StoreResult[OrderDetail]:
        result = await self._request("POST", "/sewing-order-details", json=fields)
        if not result.ok:
            return result
        return _parse_one(result.value, OrderDetail.from_dict)

    async def fetch_user_orders(self, user_id: str) -> StoreResult[list[Order]]:
        result = await self._request("GET", "/orders")
        if not result.ok:
            return result
        return _parse_many(result.value, Order.from_dict)

    async def fetch_order(self, user_id: str, order_id: str) -> StoreResult[Order]:
        result = await self._request("GET", f"/orders/{order_id}")
        if not result.ok:
            return result
        return _parse_one(result.value, Order.from_dict)

    # ----- wishlist -----

    async def list_wishlist(self, user_id: str) -> StoreResult[list[WishlistEntry]]:
        result = await self._request("GET", "/wishlist")
        if not result.ok:
            return result
        return _parse_many(result.value, WishlistEntry.from_dict)

    async def insert_wishlist(self, user_id: str, product_id: str) -> StoreResult[WishlistEntry]:
        result = await self._request("POST", "/wishlist", json={"product_id": product_id})
        if not result.ok:
            return result
        return _parse_one(result.value, WishlistEntry.from_dict)

    async def delete_wishlist(self, user_id: str, product_id: str) -> StoreResult[None]:
        result = await self._request("DELETE", f"/wishlist/{product_id}")
        if not result.ok:
            return result
        return StoreResult.success(None)


class RestAuthProvider(_HttpClient):
    """Token-based auth endpoints (``/auth/*``)."""

    @staticmethod
    def _parse_session(body: Any) -> StoreResult[AuthSession]:
        if not isinstance(body, dict) or not body.get("token") or not isinstance(body.get("user"), dict):
            return StoreResult.transient("Unexpected auth response")
        try:
            return StoreResult.success(
                AuthSession(user=User.from_dict(body["user"]), token=str(body["token"]))
            )
        except (KeyError, TypeError, ValueError) as exc:
            return StoreResult.transient(f"Malformed auth response: {exc}")

    async def sign_in(self, email: str, password: str) -> StoreResult[AuthSession]:
        result = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        if not result.ok:
            return result
        return self._parse_session(result.value)

    async def sign_up(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> StoreResult[AuthSession]:
        result = await self._request(
            "POST",
            "/auth/register",
            json={
                "email": email,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
            },
        )
        if not result.ok:
            return result
        return self._parse_session(result.value)

    async def get_current_user(self, token: str) -> StoreResult[User]:
        result = await self._request("GET", "/auth/me", token=token)
        if not result.ok:
            return result
        return _parse_one(result.value, User.from_dict)
