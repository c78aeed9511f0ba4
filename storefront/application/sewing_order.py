"""Use case: submit a custom sewing request from the wizard draft."""
from __future__ import annotations

import logging

from storefront.core.exceptions import BackendException
from storefront.core.sentry_integration import capture_exception
from storefront.domain.order import OrderStatus, OrderType
from storefront.domain.results import Outcome
from storefront.domain.sewing_wizard import SewingWizard
from storefront.integrations.backend import OrderStore
from storefront.services.session import SessionGate

logger = logging.getLogger(__name__)


async def submit_sewing_order(
    wizard: SewingWizard,
    *,
    session: SessionGate,
    orders: OrderStore,
) -> Outcome:
    """Create the sewing order and its detail record.

    The draft is left untouched on any failure so the user can retry. When
    the order row is written but the detail is not, the outcome is flagged
    ``partial`` and carries the orphan order.
    """
    user = session.current_user
    if user is None:
        return Outcome.auth_required()

    check = wizard.check_submission(authenticated=True)
    if not check.allowed:
        field = "sewing_style_id" if wizard.draft.selected_style is None else None
        return Outcome.validation(check.reason or "Request is incomplete", field=field)

    draft = wizard.draft
    order_result = await orders.create_order(
        {
            "user_id": user.id,
            "order_type": OrderType.SEWING,
            "status": OrderStatus.PENDING,
            "notes": draft.special_instructions or None,
        }
    )
    if not order_result.ok or order_result.value is None:
        logger.error(f"Sewing order creation failed for user {user.id}: {order_result.detail}")
        return Outcome.failed("Failed to submit your request. Please try again.")

    order = order_result.value
    detail_result = await orders.create_order_detail(wizard.detail_payload(order.id))
    if not detail_result.ok:
        logger.error(f"Sewing order {order.id} created but detail failed: {detail_result.detail}")
        capture_exception(
            BackendException(f"Sewing detail not stored for order {order.id}"),
            order={"order_id": order.id, "user_id": user.id},
        )
        return Outcome.failed(
            "Failed to submit your request. Please try again.", value=order, partial=True
        )

    if detail_result.value is not None:
        order.details.append(detail_result.value)
    wizard.mark_submitted()
    logger.info(
        f"Sewing order {order.id} submitted by user {user.id} "
        f"(style={draft.selected_style_id}, size={draft.resolved_size})"
    )
    wizard.reset()
    return Outcome.success(order)
