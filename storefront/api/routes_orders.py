from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.container import Visitor

from .common import OrderResponse, get_visitor, raise_for_outcome

router = APIRouter()


@router.get("/orders", response_model=list[OrderResponse])
async def list_orders(visitor: Visitor = Depends(get_visitor)):
    """Order history of the signed-in user, newest first."""
    outcome = await visitor.order_history.fetch_user_orders()
    raise_for_outcome(outcome)
    return [OrderResponse.from_order(order) for order in outcome.value]


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, visitor: Visitor = Depends(get_visitor)):
    outcome = await visitor.order_history.fetch_order(order_id)
    raise_for_outcome(outcome)
    return OrderResponse.from_order(outcome.value)
