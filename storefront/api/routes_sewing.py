from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.application.sewing_order import submit_sewing_order
from storefront.container import StorefrontContainer, Visitor
from storefront.core.constants import (
    DEFAULT_STANDARD_SIZE,
    MEASUREMENT_FIELDS,
    MEASUREMENT_LABELS,
    STANDARD_SIZES,
)
from storefront.core.exceptions import BackendException, ValidationException
from storefront.domain.order import SizeOption
from storefront.domain.results import Outcome
from storefront.domain.sewing_wizard import SewingWizard

from .common import (
    CustomOrderRequest,
    OrderResponse,
    SewingStyleResponse,
    get_container,
    get_visitor,
    raise_for_outcome,
)

router = APIRouter()


def _validation_error(message: str, field: str | None) -> HTTPException:
    return HTTPException(
        status_code=422, detail={"error": "validation", "field": field, "message": message}
    )


@router.get("/sewing-styles", response_model=list[SewingStyleResponse])
async def list_sewing_styles(
    category_id: str | None = Query(None),
    container: StorefrontContainer = Depends(get_container),
):
    try:
        styles = await container.catalog.fetch_sewing_styles(category_id)
    except BackendException as e:
        raise HTTPException(status_code=502, detail=e.message) from e
    return [SewingStyleResponse.from_style(style) for style in styles]


@router.get("/custom-orders/options")
async def sizing_options():
    """Standard sizes and measurement fields offered by the sewing wizard."""
    return {
        "size_options": list(SizeOption.ALL),
        "standard_sizes": list(STANDARD_SIZES),
        "default_size": DEFAULT_STANDARD_SIZE,
        "measurements": [
            {"name": name, "label": MEASUREMENT_LABELS[name]} for name in MEASUREMENT_FIELDS
        ],
    }


@router.post("/custom-orders", response_model=OrderResponse, status_code=201)
async def create_custom_order(
    request: CustomOrderRequest,
    visitor: Visitor = Depends(get_visitor),
    container: StorefrontContainer = Depends(get_container),
):
    """Walk a sewing wizard through its steps with the submitted draft, then submit it."""
    if not visitor.session.is_authenticated:
        raise_for_outcome(Outcome.auth_required())

    try:
        style = await container.catalog.fetch_sewing_style(request.sewing_style_id)
    except BackendException as e:
        raise HTTPException(status_code=502, detail=e.message) from e
    if style is None:
        raise _validation_error("Unknown sewing style", "sewing_style_id")

    wizard = SewingWizard()
    try:
        wizard.select_style(style)
        wizard.set_size_option(request.size_option)
        if request.size_option == SizeOption.STANDARD:
            wizard.select_size(request.selected_size)
        else:
            wizard.set_measurements(request.measurements)
        wizard.set_special_instructions(request.special_instructions)
    except ValidationException as e:
        raise _validation_error(e.message, e.field) from e

    for _ in range(2):
        moved = wizard.advance()
        if not moved.allowed:
            raise _validation_error(moved.reason or "Request is incomplete", None)

    outcome = await submit_sewing_order(
        wizard, session=visitor.session, orders=visitor.orders
    )
    raise_for_outcome(outcome)
    return OrderResponse.from_order(outcome.value)
