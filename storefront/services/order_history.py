"""Past orders of the signed-in user."""
from __future__ import annotations

import logging

from storefront.domain.order import OrderStatus
from storefront.domain.results import Outcome
from storefront.integrations.backend import OrderStore
from storefront.services.session import SessionGate

logger = logging.getLogger(__name__)


def order_status_label(status: str | None) -> str:
    return OrderStatus.label(status)


class OrderHistoryService:
    def __init__(self, orders: OrderStore, session: SessionGate):
        self._orders = orders
        self._session = session

    async def fetch_user_orders(self) -> Outcome:
        user = self._session.current_user
        if user is None:
            return Outcome.auth_required()

        result = await self._orders.fetch_user_orders(user.id)
        if not result.ok:
            logger.error(f"Failed to fetch orders for user {user.id}: {result.detail}")
            return Outcome.failed("Could not load your orders.")
        return Outcome.success(result.value or [])

    async def fetch_order(self, order_id: str) -> Outcome:
        user = self._session.current_user
        if user is None:
            return Outcome.auth_required()

        result = await self._orders.fetch_order(user.id, str(order_id))
        if result.is_not_found:
            return Outcome.not_found("Order not found.")
        if not result.ok:
            logger.error(f"Failed to fetch order {order_id}: {result.detail}")
            return Outcome.failed("Could not load the order.")
        return Outcome.success(result.value)
