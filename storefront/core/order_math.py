"""Shared helpers for cart and checkout totals."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from storefront.core.constants import DEFAULT_DELIVERY_FEE
from storefront.domain.order import DeliveryMethod


class PricedLine(Protocol):
    quantity: int

    @property
    def line_total(self) -> float: ...


@dataclass(frozen=True, slots=True)
class CheckoutTotal:
    subtotal: float
    shipping_fee: float
    grand_total: float


def calc_items_total(lines: Iterable[PricedLine]) -> float:
    return sum((line.line_total for line in lines), 0)


def calc_quantity(lines: Iterable[PricedLine]) -> int:
    return sum((int(line.quantity) for line in lines), 0)


def calc_delivery_fee(delivery_method: str | None, flat_fee: float = DEFAULT_DELIVERY_FEE) -> float:
    if delivery_method == DeliveryMethod.PICKUP:
        return 0
    return flat_fee


def compute_total(
    lines: Iterable[PricedLine],
    delivery_method: str | None,
    flat_delivery_fee: float = DEFAULT_DELIVERY_FEE,
) -> CheckoutTotal:
    """Subtotal, shipping fee and grand total of a checkout.

    Inputs are not validated; negative prices or quantities pass through.
    """
    subtotal = calc_items_total(lines)
    shipping_fee = calc_delivery_fee(delivery_method, flat_delivery_fee)
    return CheckoutTotal(
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        grand_total=subtotal + shipping_fee,
    )
