from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storefront.application.checkout import CheckoutDraft, checkout_total, place_product_order
from storefront.container import StorefrontContainer, Visitor
from storefront.core.formatting import format_price
from storefront.domain.order import DeliveryMethod
from storefront.services.cart_store import CartStore

from .common import (
    CheckoutRequest,
    CheckoutTotalResponse,
    OrderResponse,
    get_cart,
    get_container,
    get_visitor,
    raise_for_outcome,
)

router = APIRouter()


@router.get("/checkout/total", response_model=CheckoutTotalResponse)
async def get_checkout_total(
    delivery_method: str = Query(DeliveryMethod.DELIVERY),
    cart: CartStore = Depends(get_cart),
    container: StorefrontContainer = Depends(get_container),
):
    method = DeliveryMethod.normalize(delivery_method)
    total = checkout_total(cart, method, container.settings.delivery_fee)
    return CheckoutTotalResponse(
        delivery_method=method,
        subtotal=total.subtotal,
        shipping_fee=total.shipping_fee,
        grand_total=total.grand_total,
        grand_total_display=format_price(total.grand_total),
    )


@router.post("/checkout", response_model=OrderResponse, status_code=201)
async def checkout(
    request: CheckoutRequest,
    visitor: Visitor = Depends(get_visitor),
    cart: CartStore = Depends(get_cart),
):
    """Place a product order from the caller's cart."""
    draft = CheckoutDraft(**request.model_dump())
    outcome = await place_product_order(
        draft,
        cart=cart,
        session=visitor.session,
        orders=visitor.orders,
    )
    raise_for_outcome(outcome)
    return OrderResponse.from_order(outcome.value)
