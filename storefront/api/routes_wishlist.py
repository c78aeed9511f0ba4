from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.container import Visitor

from .common import WishlistEntryResponse, WishlistRequest, get_visitor, raise_for_outcome

router = APIRouter()


@router.get("/wishlist", response_model=list[WishlistEntryResponse])
async def get_wishlist(visitor: Visitor = Depends(get_visitor)):
    """Wishlist of the signed-in user (empty when signed out)."""
    raise_for_outcome(await visitor.wishlist.load())
    return [WishlistEntryResponse.from_entry(entry) for entry in visitor.wishlist.items]


@router.post("/wishlist", response_model=WishlistEntryResponse, status_code=201)
async def add_to_wishlist(request: WishlistRequest, visitor: Visitor = Depends(get_visitor)):
    outcome = await visitor.wishlist.add(request.product_id)
    raise_for_outcome(outcome)
    return WishlistEntryResponse.from_entry(outcome.value)


@router.delete("/wishlist/{product_id}")
async def remove_from_wishlist(product_id: str, visitor: Visitor = Depends(get_visitor)):
    raise_for_outcome(await visitor.wishlist.remove(product_id))
    return {"status": "ok", "product_id": product_id}
