from __future__ import annotations

import pytest

from storefront.application.sewing_order import submit_sewing_order
from storefront.domain.results import ErrorKey
from storefront.domain.sewing_wizard import SewingWizard, WizardStep


def _ready_wizard(make_style, *, custom: bool = False) -> SewingWizard:
    wizard = SewingWizard()
    wizard.select_style(make_style("s1"))
    wizard.advance()
    if custom:
        wizard.set_size_option("custom")
        wizard.set_measurement("waist", "32")
    else:
        wizard.select_size("XL")
    wizard.set_special_instructions("Add pockets")
    wizard.advance()
    return wizard


@pytest.mark.asyncio
async def test_signed_out_submission_makes_no_calls(backend, session, make_style) -> None:
    wizard = _ready_wizard(make_style)

    outcome = await submit_sewing_order(wizard, session=session, orders=backend)

    assert outcome.error_key == ErrorKey.AUTH_REQUIRED
    assert backend.calls == []
    assert wizard.step == WizardStep.REVIEW


@pytest.mark.asyncio
async def test_missing_style_is_validation_error(backend, signed_in) -> None:
    outcome = await submit_sewing_order(SewingWizard(), session=signed_in, orders=backend)

    assert outcome.error_key == ErrorKey.VALIDATION
    assert outcome.field == "sewing_style_id"
    assert backend.calls == []


@pytest.mark.asyncio
async def test_submit_creates_order_then_detail(backend, signed_in, make_style) -> None:
    wizard = _ready_wizard(make_style)

    outcome = await submit_sewing_order(wizard, session=signed_in, orders=backend)

    assert outcome.ok
    assert backend.calls == ["create_order", "create_order_detail"]
    order = backend.orders[0]
    assert order.order_type == "sewing"
    assert order.notes == "Add pockets"
    assert order.user_id == "user-1"
    assert backend.details == [
        {
            "order_id": order.id,
            "sewing_style_id": "s1",
            "size_option": "XL",
            "special_instructions": "Add pockets",
        }
    ]
    assert outcome.value.id == order.id
    assert wizard.step == WizardStep.SELECT_STYLE
    assert wizard.draft.selected_style is None


@pytest.mark.asyncio
async def test_custom_submission_sends_measurements(backend, signed_in, make_style) -> None:
    wizard = _ready_wizard(make_style, custom=True)

    outcome = await submit_sewing_order(wizard, session=signed_in, orders=backend)

    assert outcome.ok
    assert backend.details[0]["size_option"] == "custom"
    assert backend.details[0]["measurements"] == {"waist": "32"}


@pytest.mark.asyncio
async def test_order_failure_keeps_draft(backend, signed_in, make_style) -> None:
    wizard = _ready_wizard(make_style)
    backend.fail("create_order")

    outcome = await submit_sewing_order(wizard, session=signed_in, orders=backend)

    assert outcome.error_key == ErrorKey.FAILED
    assert not outcome.partial
    assert backend.calls_to("create_order_detail") == 0
    assert wizard.step == WizardStep.REVIEW
    assert wizard.draft.selected_size == "XL"


@pytest.mark.asyncio
async def test_detail_failure_is_reported_as_partial(backend, signed_in, make_style) -> None:
    wizard = _ready_wizard(make_style)
    backend.fail("create_order_detail")

    outcome = await submit_sewing_order(wizard, session=signed_in, orders=backend)

    assert outcome.error_key == ErrorKey.FAILED
    assert outcome.partial
    assert outcome.value.id == backend.orders[0].id
    assert wizard.step == WizardStep.REVIEW
    assert wizard.draft.selected_style_id == "s1"


@pytest.mark.asyncio
async def test_submission_requires_review_step(backend, signed_in, make_style) -> None:
    wizard = SewingWizard()
    wizard.select_style(make_style())

    outcome = await submit_sewing_order(wizard, session=signed_in, orders=backend)

    assert outcome.error_key == ErrorKey.VALIDATION
    assert backend.calls == []
