from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.container import StorefrontContainer
from storefront.core.exceptions import BackendException, ValidationException
from storefront.services.cart_store import CartStore

from .common import (
    AddCartItemRequest,
    CartResponse,
    UpdateCartItemRequest,
    cart_response,
    get_cart,
    get_container,
    logger,
)

router = APIRouter()


def _cart(cart: CartStore) -> CartResponse:
    return cart_response(cart.items, cart.total_items, cart.total_amount)


@router.get("/cart", response_model=CartResponse)
async def get_cart_contents(cart: CartStore = Depends(get_cart)):
    return _cart(cart)


@router.post("/cart/items", response_model=CartResponse)
async def add_cart_item(
    request: AddCartItemRequest,
    cart: CartStore = Depends(get_cart),
    container: StorefrontContainer = Depends(get_container),
):
    """Add a product in a size, merging with an existing line."""
    try:
        product = await container.catalog.fetch_product(request.product_id)
    except BackendException as e:
        raise HTTPException(status_code=502, detail=e.message) from e
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if not product.offers_size(request.size):
        raise HTTPException(
            status_code=422,
            detail={"error": "validation", "field": "size", "message": "Size not available"},
        )

    try:
        cart.add_item(product, request.size, request.quantity)
    except ValidationException as e:
        raise HTTPException(
            status_code=422, detail={"error": "validation", "field": e.field, "message": e.message}
        ) from e
    return _cart(cart)


@router.put("/cart/items", response_model=CartResponse)
async def update_cart_item(request: UpdateCartItemRequest, cart: CartStore = Depends(get_cart)):
    """Set a line quantity; zero or less removes the line."""
    cart.update_quantity(request.product_id, request.size, request.quantity)
    return _cart(cart)


@router.delete("/cart/items", response_model=CartResponse)
async def remove_cart_item(
    product_id: str = Query(...),
    size: str = Query(...),
    cart: CartStore = Depends(get_cart),
):
    cart.remove_item(product_id, size)
    return _cart(cart)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(cart: CartStore = Depends(get_cart)):
    cart.clear_cart()
    logger.info("Cart cleared via API")
    return _cart(cart)
