from __future__ import annotations

import pytest

from storefront.application.checkout import CheckoutDraft, checkout_total, place_product_order
from storefront.domain.results import ErrorKey
from storefront.services.cart_store import CartStore


def _draft(**overrides) -> CheckoutDraft:
    values = {
        "full_name": "Ada Obi",
        "phone": "+234 803 123 4567",
        "delivery_method": "delivery",
        "delivery_address": "12 Marina Road, Lagos",
        "notes": "Call on arrival",
    }
    values.update(overrides)
    return CheckoutDraft(**values)


@pytest.fixture
def cart(storage, make_product) -> CartStore:
    cart = CartStore(storage)
    cart.add_item(make_product("a", price=1000), "M", 2)
    cart.add_item(make_product("b", price=500), "S", 3)
    return cart


@pytest.mark.asyncio
async def test_empty_cart_is_rejected(storage, backend, signed_in) -> None:
    outcome = await place_product_order(
        _draft(), cart=CartStore(storage), session=signed_in, orders=backend
    )

    assert outcome.error_key == ErrorKey.VALIDATION
    assert outcome.field == "cart"
    assert backend.calls == []


@pytest.mark.asyncio
async def test_signed_out_checkout_makes_no_calls(cart, backend, session) -> None:
    outcome = await place_product_order(_draft(), cart=cart, session=session, orders=backend)

    assert outcome.error_key == ErrorKey.AUTH_REQUIRED
    assert backend.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"full_name": "  "}, "full_name"),
        ({"phone": "call me"}, "phone"),
        ({"delivery_address": ""}, "delivery_address"),
    ],
)
async def test_contact_fields_are_validated(cart, backend, signed_in, overrides, field) -> None:
    outcome = await place_product_order(
        _draft(**overrides), cart=cart, session=signed_in, orders=backend
    )

    assert outcome.error_key == ErrorKey.VALIDATION
    assert outcome.field == field
    assert backend.calls == []


@pytest.mark.asyncio
async def test_pickup_does_not_need_address(cart, backend, signed_in) -> None:
    outcome = await place_product_order(
        _draft(delivery_method="pickup", delivery_address="ignored"),
        cart=cart,
        session=signed_in,
        orders=backend,
    )

    assert outcome.ok
    assert backend.orders[0].delivery_method == "pickup"
    assert backend.orders[0].delivery_address is None


@pytest.mark.asyncio
async def test_successful_checkout_writes_order_and_items(cart, backend, signed_in) -> None:
    outcome = await place_product_order(_draft(), cart=cart, session=signed_in, orders=backend)

    assert outcome.ok
    assert backend.calls == ["create_order", "create_order_items"]
    order = backend.orders[0]
    assert order.order_type == "product"
    assert order.total_amount == 3500
    assert order.delivery_contact == "+234 803 123 4567"
    assert order.notes == "Call on arrival"
    assert [(i.product_id, i.quantity, i.size, i.price) for i in backend.order_items] == [
        ("a", 2, "M", 1000),
        ("b", 3, "S", 500),
    ]
    assert all(item.order_id == order.id for item in backend.order_items)
    assert cart.is_empty


@pytest.mark.asyncio
async def test_order_failure_keeps_cart(cart, backend, signed_in) -> None:
    backend.fail("create_order")

    outcome = await place_product_order(_draft(), cart=cart, session=signed_in, orders=backend)

    assert outcome.error_key == ErrorKey.FAILED
    assert not outcome.partial
    assert cart.total_items == 5


@pytest.mark.asyncio
async def test_items_failure_is_partial_and_keeps_cart(cart, backend, signed_in) -> None:
    backend.fail("create_order_items")

    outcome = await place_product_order(_draft(), cart=cart, session=signed_in, orders=backend)

    assert outcome.error_key == ErrorKey.FAILED
    assert outcome.partial
    assert outcome.value.id == backend.orders[0].id
    assert cart.total_items == 5


def test_checkout_total_for_cart(cart) -> None:
    assert checkout_total(cart, "delivery").grand_total == 7000
    assert checkout_total(cart, "pickup").grand_total == 3500
    assert checkout_total(cart, "delivery", flat_fee=0).shipping_fee == 0
