from __future__ import annotations

from storefront.core.order_math import calc_delivery_fee, compute_total
from storefront.domain.cart import CartLine


def _lines(make_product) -> list[CartLine]:
    return [
        CartLine(make_product("a", price=1000), "M", 2),
        CartLine(make_product("b", price=500), "S", 3),
    ]


def test_delivery_adds_flat_fee(make_product) -> None:
    total = compute_total(_lines(make_product), "delivery")

    assert total.subtotal == 3500
    assert total.shipping_fee == 3500
    assert total.grand_total == 7000


def test_pickup_has_no_shipping_fee(make_product) -> None:
    total = compute_total(_lines(make_product), "pickup")

    assert total.shipping_fee == 0
    assert total.grand_total == 3500


def test_custom_flat_fee(make_product) -> None:
    total = compute_total(_lines(make_product), "delivery", flat_delivery_fee=1000)

    assert total.grand_total == 4500


def test_empty_cart_still_charges_delivery() -> None:
    total = compute_total([], "delivery")

    assert total.subtotal == 0
    assert total.grand_total == 3500


def test_delivery_fee_defaults_to_delivery_for_unknown_method() -> None:
    assert calc_delivery_fee(None) == 3500
    assert calc_delivery_fee("pickup") == 0
