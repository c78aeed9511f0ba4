"""Use case: place a ready-made product order from the cart."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.core.constants import DEFAULT_DELIVERY_FEE
from storefront.core.exceptions import BackendException
from storefront.core.order_math import CheckoutTotal, compute_total
from storefront.core.sanitize import sanitize_address, sanitize_name, sanitize_notes, sanitize_phone
from storefront.core.sentry_integration import capture_exception
from storefront.domain.order import DeliveryMethod, OrderItem, OrderStatus, OrderType
from storefront.domain.results import Outcome
from storefront.integrations.backend import OrderStore
from storefront.services.cart_store import CartStore
from storefront.services.session import SessionGate

logger = logging.getLogger(__name__)


@dataclass
class CheckoutDraft:
    full_name: str = ""
    phone: str = ""
    delivery_method: str = DeliveryMethod.DELIVERY
    delivery_address: str = ""
    email: str = ""
    notes: str = ""

    def cleaned(self) -> CheckoutDraft:
        return CheckoutDraft(
            full_name=sanitize_name(self.full_name),
            phone=sanitize_phone(self.phone),
            delivery_method=DeliveryMethod.normalize(self.delivery_method),
            delivery_address=sanitize_address(self.delivery_address),
            email=(self.email or "").strip(),
            notes=sanitize_notes(self.notes),
        )


def validate_checkout(draft: CheckoutDraft) -> Outcome | None:
    """First failing contact field as a validation outcome, or None."""
    if not draft.full_name:
        return Outcome.validation("Please enter your full name", field="full_name")
    if not draft.phone:
        return Outcome.validation("Please enter your phone number", field="phone")
    if draft.delivery_method == DeliveryMethod.DELIVERY and not draft.delivery_address:
        return Outcome.validation("Please enter your delivery address", field="delivery_address")
    return None


def checkout_total(
    cart: CartStore, delivery_method: str | None, flat_fee: float = DEFAULT_DELIVERY_FEE
) -> CheckoutTotal:
    return compute_total(cart.items, DeliveryMethod.normalize(delivery_method), flat_fee)


async def place_product_order(
    draft: CheckoutDraft,
    *,
    cart: CartStore,
    session: SessionGate,
    orders: OrderStore,
) -> Outcome:
    if cart.is_empty:
        return Outcome.validation("Your cart is empty", field="cart")

    user = session.current_user
    if user is None:
        return Outcome.auth_required()

    draft = draft.cleaned()
    invalid = validate_checkout(draft)
    if invalid is not None:
        return invalid

    lines = cart.items
    is_delivery = draft.delivery_method == DeliveryMethod.DELIVERY
    order_result = await orders.create_order(
        {
            "user_id": user.id,
            "order_type": OrderType.PRODUCT,
            "status": OrderStatus.PENDING,
            "total_amount": cart.total_amount,
            "delivery_method": draft.delivery_method,
            "delivery_address": draft.delivery_address if is_delivery else None,
            "delivery_contact": draft.phone,
            "notes": draft.notes or None,
        }
    )
    if not order_result.ok or order_result.value is None:
        logger.error(f"Order creation failed for user {user.id}: {order_result.detail}")
        return Outcome.failed("Failed to place order. Please try again.")

    order = order_result.value
    items = [
        OrderItem(
            order_id=order.id,
            product_id=line.product.id,
            quantity=line.quantity,
            size=line.size,
            price=line.product.price,
        )
        for line in lines
    ]
    items_result = await orders.create_order_items(items)
    if not items_result.ok:
        logger.error(f"Order {order.id} created but items failed: {items_result.detail}")
        capture_exception(
            BackendException(f"Order items not stored for order {order.id}"),
            order={"order_id": order.id, "user_id": user.id},
        )
        return Outcome.failed(
            "Failed to place order. Please try again.", value=order, partial=True
        )

    order.items = items
    cart.clear_cart()
    logger.info(f"Order {order.id} placed by user {user.id} ({len(items)} lines)")
    return Outcome.success(order)
