"""Direct Postgres implementation of the storefront backend.

Queries are plain sync psycopg calls on a pooled connection; the async
surface runs them in worker threads and resolves database errors into
:class:`StoreResult` values.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable

import psycopg
from psycopg import errors
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from storefront.core.async_db import run_sync
from storefront.core.constants import DB_POOL_MAX_SIZE, DB_POOL_MIN_SIZE
from storefront.domain.order import Order, OrderDetail, OrderItem
from storefront.domain.product import Category, Product, SewingStyle
from storefront.domain.results import StoreResult
from storefront.domain.wishlist import WishlistEntry

logger = logging.getLogger(__name__)

ORDER_FIELDS = (
    "user_id",
    "order_type",
    "status",
    "total_amount",
    "delivery_method",
    "delivery_address",
    "delivery_contact",
    "notes",
)


class _NotFound(LookupError):
    pass


class _DatabaseCore:
    """Connection pool plus transaction scoping."""

    def __init__(self, database_url: str, *, pool: ConnectionPool | None = None):
        if not database_url and pool is None:
            raise ValueError("DATABASE_URL is required for the Postgres backend")

        if pool is not None:
            self.pool = pool
            return

        safe_url = database_url.split("@")[1] if "@" in database_url else database_url
        logger.info(f"Connecting to Postgres at ...@{safe_url}")
        self.pool = ConnectionPool(
            conninfo=database_url,
            min_size=DB_POOL_MIN_SIZE,
            max_size=DB_POOL_MAX_SIZE,
            kwargs={"row_factory": dict_row},
            open=True,
        )

    @contextmanager
    def get_connection(self):
        """Connection from the pool, committed on success and rolled back on error."""
        with self.pool.connection() as conn:
            try:
                yield conn
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Database error: {e}")
                raise

    def close_pool(self) -> None:
        if self.pool:
            self.pool.close()
            logger.info("Postgres connection pool closed")


class _CatalogQueries:
    def _products(self, category: str | None) -> list[dict]:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            if category:
                cursor.execute(
                    """
                    SELECT p.* FROM products p
                    JOIN categories c ON c.id = p.category_id
                    WHERE p.is_active = TRUE AND c.slug = %s
                    ORDER BY p.created_at DESC
                """,
                    (category,),
                )
            else:
                cursor.execute(
                    "SELECT * FROM products WHERE is_active = TRUE ORDER BY created_at DESC"
                )
            return cursor.fetchall()

    def _product(self, product_id: str) -> dict:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute("SELECT * FROM products WHERE id = %s", (product_id,))
            row = cursor.fetchone()
        if row is None:
            raise _NotFound(f"product {product_id}")
        return row

    def _categories(self) -> list[dict]:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute("SELECT * FROM categories ORDER BY name")
            return cursor.fetchall()

    def _sewing_styles(self) -> list[dict]:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                "SELECT * FROM sewing_styles WHERE is_active = TRUE ORDER BY created_at DESC"
            )
            return cursor.fetchall()


class _OrderQueries:
    def _insert_order(self, fields: dict[str, Any]) -> dict:
        columns = [name for name in ORDER_FIELDS if name in fields]
        placeholders = ", ".join(["%s"] * len(columns))
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                f"INSERT INTO orders ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *",
                tuple(fields[name] for name in columns),
            )
            return cursor.fetchone()

    def _insert_order_items(self, items: list[OrderItem]) -> None:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.executemany(
                """
                INSERT INTO order_items (order_id, product_id, quantity, size, price)
                VALUES (%s, %s, %s, %s, %s)
            """,
                [
                    (item.order_id, item.product_id, item.quantity, item.size, item.price)
                    for item in items
                ],
            )

    def _insert_order_detail(self, fields: dict[str, Any]) -> dict:
        measurements = fields.get("measurements")
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                """
                INSERT INTO sewing_order_details
                    (order_id, sewing_style_id, size_option, measurements, special_instructions)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
            """,
                (
                    fields["order_id"],
                    fields.get("sewing_style_id"),
                    fields.get("size_option"),
                    Jsonb(measurements) if measurements is not None else None,
                    fields.get("special_instructions"),
                ),
            )
            return cursor.fetchone()

    def _orders_with_children(self, cursor, orders: list[dict]) -> list[dict]:
        """Attach ``items`` and sewing ``details`` to each order row."""
        if not orders:
            return orders
        order_ids = [row["id"] for row in orders]
        cursor.execute(
            "SELECT * FROM order_items WHERE order_id = ANY(%s)",
            (order_ids,),
        )
        items_by_order: dict[Any, list[dict]] = {}
        for item in cursor.fetchall():
            items_by_order.setdefault(item["order_id"], []).append(item)

        cursor.execute(
            """
            SELECT d.*, s.name AS sewing_style_name
            FROM sewing_order_details d
            LEFT JOIN sewing_styles s ON s.id = d.sewing_style_id
            WHERE d.order_id = ANY(%s)
        """,
            (order_ids,),
        )
        details_by_order: dict[Any, list[dict]] = {}
        for detail in cursor.fetchall():
            details_by_order.setdefault(detail["order_id"], []).append(detail)

        return [
            {
                **row,
                "items": items_by_order.get(row["id"], []),
                "details": details_by_order.get(row["id"], []),
            }
            for row in orders
        ]

    def _user_orders(self, user_id: str) -> list[dict]:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                "SELECT * FROM orders WHERE user_id = %s ORDER BY created_at DESC",
                (user_id,),
            )
            return self._orders_with_children(cursor, cursor.fetchall())

    def _order(self, user_id: str, order_id: str) -> dict:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                "SELECT * FROM orders WHERE id = %s AND user_id = %s",
                (order_id, user_id),
            )
            row = cursor.fetchone()
            orders = self._orders_with_children(cursor, [row]) if row is not None else []
        if not orders:
            raise _NotFound(f"order {order_id}")
        return orders[0]


class _WishlistQueries:
    def _wishlist(self, user_id: str) -> list[dict]:
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                "SELECT * FROM wishlists WHERE user_id = %s ORDER BY created_at DESC",
                (user_id,),
            )
            return cursor.fetchall()

    def _insert_wishlist(self, user_id: str, product_id: str) -> dict:
        # No ON CONFLICT: a repeat insert must surface as UniqueViolation
        with self.get_connection() as conn:
            cursor = conn.cursor(row_factory=dict_row)
            cursor.execute(
                "INSERT INTO wishlists (user_id, product_id) VALUES (%s, %s) RETURNING *",
                (user_id, product_id),
            )
            return cursor.fetchone()

    def _delete_wishlist(self, user_id: str, product_id: str) -> None:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM wishlists WHERE user_id = %s AND product_id = %s",
                (user_id, product_id),
            )


class PostgresBackend(_DatabaseCore, _CatalogQueries, _OrderQueries, _WishlistQueries):
    """Storefront backend talking to the hosted Postgres database directly."""

    def with_token_provider(self, provider: Callable[[], str | None]) -> PostgresBackend:
        # Queries are scoped by explicit user ids, not by the bearer token
        return self

    async def _call(self, func: Callable[..., Any], *args: Any) -> StoreResult[Any]:
        try:
            return StoreResult.success(await run_sync(func, *args))
        except _NotFound as e:
            return StoreResult.not_found(str(e))
        except errors.UniqueViolation as e:
            return StoreResult.duplicate(str(e).strip())
        except psycopg.Error as e:
            logger.error(f"{func.__name__} failed: {e}")
            return StoreResult.transient(str(e).strip())

    @staticmethod
    def _one(result: StoreResult[Any], parser: Callable[[dict], Any]) -> StoreResult[Any]:
        if not result.ok:
            return result
        if result.value is None:
            return StoreResult.transient("Query returned no row")
        try:
            return StoreResult.success(parser(dict(result.value)))
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(f"Malformed row: {exc}")
            return StoreResult.transient(f"Malformed row: {exc}")

    @staticmethod
    def _many(result: StoreResult[Any], parser: Callable[[dict], Any]) -> StoreResult[Any]:
        if not result.ok:
            return result
        items = []
        for row in result.value or []:
            try:
                items.append(parser(dict(row)))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(f"Skipping malformed row: {exc}")
        return StoreResult.success(items)

    async def fetch_products(self, category: str | None = None) -> StoreResult[list[Product]]:
        return self._many(await self._call(self._products, category), Product.from_dict)

    async def fetch_product(self, product_id: str) -> StoreResult[Product]:
        return self._one(await self._call(self._product, product_id), Product.from_dict)

    async def fetch_categories(self) -> StoreResult[list[Category]]:
        return self._many(await self._call(self._categories), Category.from_dict)

    async def fetch_sewing_styles(self) -> StoreResult[list[SewingStyle]]:
        return self._many(await self._call(self._sewing_styles), SewingStyle.from_dict)

    async def create_order(self, fields: dict[str, Any]) -> StoreResult[Order]:
        return self._one(await self._call(self._insert_order, fields), Order.from_dict)

    async def create_order_items(self, items: list[OrderItem]) -> StoreResult[None]:
        return await self._call(self._insert_order_items, items)

    async def create_order_detail(self, fields: dict[str, Any]) -> StoreResult[OrderDetail]:
        return self._one(await self._call(self._insert_order_detail, fields), OrderDetail.from_dict)

    async def fetch_user_orders(self, user_id: str) -> StoreResult[list[Order]]:
        return self._many(await self._call(self._user_orders, user_id), Order.from_dict)

    async def fetch_order(self, user_id: str, order_id: str) -> StoreResult[Order]:
        return self._one(await self._call(self._order, user_id, order_id), Order.from_dict)

    async def list_wishlist(self, user_id: str) -> StoreResult[list[WishlistEntry]]:
        return self._many(await self._call(self._wishlist, user_id), WishlistEntry.from_dict)

    async def insert_wishlist(self, user_id: str, product_id: str) -> StoreResult[WishlistEntry]:
        return self._one(
            await self._call(self._insert_wishlist, user_id, product_id), WishlistEntry.from_dict
        )

    async def delete_wishlist(self, user_id: str, product_id: str) -> StoreResult[None]:
        return await self._call(self._delete_wishlist, user_id, product_id)

    async def close(self) -> None:
        await run_sync(self.close_pool)
