from __future__ import annotations

from contextlib import contextmanager
from unittest.mock import MagicMock

import psycopg
import pytest
from psycopg import errors

from storefront.domain.order import OrderItem
from storefront.domain.results import StoreError
from storefront.integrations.pg_backend import PostgresBackend


class FakePool:
    def __init__(self, cursor: MagicMock) -> None:
        self.conn = MagicMock()
        self.conn.cursor.return_value = cursor
        self.closed = False

    @contextmanager
    def connection(self):
        yield self.conn

    def close(self) -> None:
        self.closed = True


def _backend(cursor: MagicMock) -> tuple[PostgresBackend, FakePool]:
    pool = FakePool(cursor)
    return PostgresBackend("", pool=pool), pool


@pytest.mark.asyncio
async def test_unique_violation_maps_to_duplicate() -> None:
    cursor = MagicMock()
    cursor.execute.side_effect = errors.UniqueViolation("duplicate key value")
    backend, pool = _backend(cursor)

    result = await backend.insert_wishlist("u1", "p1")

    assert result.is_duplicate
    pool.conn.rollback.assert_called_once()


@pytest.mark.asyncio
async def test_operational_error_maps_to_transient() -> None:
    cursor = MagicMock()
    cursor.execute.side_effect = psycopg.OperationalError("connection lost")
    backend, _ = _backend(cursor)

    result = await backend.fetch_categories()

    assert result.error == StoreError.TRANSIENT


@pytest.mark.asyncio
async def test_missing_product_is_not_found() -> None:
    cursor = MagicMock()
    cursor.fetchone.return_value = None
    backend, _ = _backend(cursor)

    result = await backend.fetch_product("p404")

    assert result.is_not_found


@pytest.mark.asyncio
async def test_insert_wishlist_returns_entry_and_commits() -> None:
    cursor = MagicMock()
    cursor.fetchone.return_value = {"id": 7, "user_id": "u1", "product_id": "p1"}
    backend, pool = _backend(cursor)

    result = await backend.insert_wishlist("u1", "p1")

    assert result.ok
    assert result.value.id == "7"
    assert result.value.product_id == "p1"
    pool.conn.commit.assert_called_once()
    sql, params = cursor.execute.call_args.args
    assert "ON CONFLICT" not in sql
    assert params == ("u1", "p1")


@pytest.mark.asyncio
async def test_create_order_inserts_known_columns_only() -> None:
    cursor = MagicMock()
    cursor.fetchone.return_value = {"id": 1, "user_id": "u1", "order_type": "sewing"}
    backend, _ = _backend(cursor)

    result = await backend.create_order(
        {"user_id": "u1", "order_type": "sewing", "notes": None, "unexpected": "x"}
    )

    assert result.ok
    assert result.value.order_type == "sewing"
    sql, params = cursor.execute.call_args.args
    assert "unexpected" not in sql
    assert params == ("u1", "sewing", None)


@pytest.mark.asyncio
async def test_order_items_use_executemany() -> None:
    cursor = MagicMock()
    backend, _ = _backend(cursor)

    result = await backend.create_order_items(
        [OrderItem(product_id="p1", quantity=2, size="M", price=1000, order_id="o1")]
    )

    assert result.ok
    _, rows = cursor.executemany.call_args.args
    assert rows == [("o1", "p1", 2, "M", 1000)]


@pytest.mark.asyncio
async def test_user_orders_attach_items() -> None:
    cursor = MagicMock()
    cursor.fetchall.side_effect = [
        [{"id": 1, "user_id": "u1", "status": "shipped"}],
        [{"order_id": 1, "product_id": "p1", "quantity": 1, "size": "M", "price": 500}],
        [],
    ]
    backend, _ = _backend(cursor)

    result = await backend.fetch_user_orders("u1")

    assert result.ok
    order = result.value[0]
    assert order.status_label == "Shipped"
    assert [item.product_id for item in order.items] == ["p1"]
    assert order.details == []


@pytest.mark.asyncio
async def test_sewing_order_carries_its_detail() -> None:
    cursor = MagicMock()
    cursor.fetchone.return_value = {"id": 3, "user_id": "u1", "order_type": "sewing"}
    cursor.fetchall.side_effect = [
        [],
        [
            {
                "id": 9,
                "order_id": 3,
                "sewing_style_id": "s1",
                "sewing_style_name": "Senator",
                "size_option": "custom",
                "measurements": {"chest": "42"},
                "special_instructions": "Slim fit",
            }
        ],
    ]
    backend, _ = _backend(cursor)

    result = await backend.fetch_order("u1", "3")

    assert result.ok
    (detail,) = result.value.details
    assert detail.sewing_style_name == "Senator"
    assert detail.measurements == {"chest": "42"}
    assert detail.special_instructions == "Slim fit"
    sql, _ = cursor.execute.call_args.args
    assert "sewing_order_details" in sql


@pytest.mark.asyncio
async def test_malformed_row_is_transient() -> None:
    cursor = MagicMock()
    cursor.fetchone.return_value = {"user_id": "u1", "product_id": "p1"}
    backend, _ = _backend(cursor)

    result = await backend.insert_wishlist("u1", "p1")

    assert result.error == StoreError.TRANSIENT
    assert "Malformed row" in result.detail


@pytest.mark.asyncio
async def test_malformed_rows_are_skipped_in_listings() -> None:
    cursor = MagicMock()
    cursor.fetchall.return_value = [
        {"id": 1, "name": "Men", "slug": "men"},
        {"name": "no id"},
    ]
    backend, _ = _backend(cursor)

    result = await backend.fetch_categories()

    assert result.ok
    assert [category.id for category in result.value] == ["1"]


@pytest.mark.asyncio
async def test_close_closes_pool() -> None:
    backend, pool = _backend(MagicMock())

    await backend.close()

    assert pool.closed
