"""Custom sewing request wizard: draft state and step transition rules.

Steps run ``select_style -> choose_size -> review -> submitted``. The
transition table below is the single source of truth; the wizard only moves
one step at a time and every forward move re-checks the gate of the step
being left.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from storefront.core.constants import (
    CUSTOM_SIZE_MARKER,
    DEFAULT_STANDARD_SIZE,
    MEASUREMENT_FIELDS,
    STANDARD_SIZES,
)
from storefront.core.exceptions import ValidationException
from storefront.core.sanitize import sanitize_measurement, sanitize_notes
from storefront.domain.order import SizeOption
from storefront.domain.product import SewingStyle

logger = logging.getLogger(__name__)


class WizardStep:
    SELECT_STYLE = "select_style"
    CHOOSE_SIZE = "choose_size"
    REVIEW = "review"
    SUBMITTED = "submitted"

    ORDER = (SELECT_STYLE, CHOOSE_SIZE, REVIEW)

    @classmethod
    def from_number(cls, number: int) -> str:
        """Map the 1-based step shown in the UI to a step name."""
        if 1 <= number <= len(cls.ORDER):
            return cls.ORDER[number - 1]
        raise ValueError(f"Unknown wizard step: {number}")

    @classmethod
    def number(cls, step: str) -> int:
        if step == cls.SUBMITTED:
            return len(cls.ORDER) + 1
        return cls.ORDER.index(step) + 1


ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    WizardStep.SELECT_STYLE: frozenset({WizardStep.CHOOSE_SIZE}),
    WizardStep.CHOOSE_SIZE: frozenset({WizardStep.SELECT_STYLE, WizardStep.REVIEW}),
    WizardStep.REVIEW: frozenset({WizardStep.CHOOSE_SIZE, WizardStep.SUBMITTED}),
    WizardStep.SUBMITTED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


@dataclass
class SewingDraft:
    selected_style: SewingStyle | None = None
    size_option: str = SizeOption.STANDARD
    selected_size: str = DEFAULT_STANDARD_SIZE
    measurements: dict[str, str] = field(default_factory=dict)
    special_instructions: str = ""

    @property
    def selected_style_id(self) -> str | None:
        return self.selected_style.id if self.selected_style else None

    @property
    def has_measurements(self) -> bool:
        return any(value.strip() for value in self.measurements.values())

    @property
    def resolved_size(self) -> str:
        if self.size_option == SizeOption.CUSTOM:
            return CUSTOM_SIZE_MARKER
        return self.selected_size


def _gate_failure(draft: SewingDraft, leaving: str) -> str | None:
    """Reason the draft cannot leave ``leaving`` forwards, or None."""
    if leaving == WizardStep.SELECT_STYLE and draft.selected_style is None:
        return "Please select a sewing style first."
    if leaving == WizardStep.CHOOSE_SIZE:
        if draft.size_option == SizeOption.CUSTOM and not draft.has_measurements:
            return "Please provide at least one measurement."
    return None


def validate_step_transition(
    draft: SewingDraft,
    *,
    current: str,
    target: str,
    authenticated: bool = False,
) -> TransitionValidationResult:
    """Validate the transition matrix plus the gate of the step being left."""
    if target not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unknown step: {target}")
    if current == target:
        return TransitionValidationResult(True)

    allowed_targets = ALLOWED_TRANSITIONS.get(current, frozenset())
    if target not in allowed_targets:
        return TransitionValidationResult(False, f"Transition '{current} -> {target}' is not allowed.")

    moving_forward = WizardStep.number(target) > WizardStep.number(current)
    if not moving_forward:
        return TransitionValidationResult(True)

    # Submission re-checks every earlier gate
    steps_to_check = WizardStep.ORDER if target == WizardStep.SUBMITTED else (current,)
    for step in steps_to_check:
        reason = _gate_failure(draft, step)
        if reason:
            return TransitionValidationResult(False, reason)

    if target == WizardStep.SUBMITTED and not authenticated:
        return TransitionValidationResult(False, "Please sign in to submit your request.")

    return TransitionValidationResult(True)


class SewingWizard:
    """Draft of a custom sewing request plus the current wizard step.

    One instance per wizard entry; nothing is persisted, so leaving the
    wizard before submission discards the draft.
    """

    def __init__(self) -> None:
        self.draft = SewingDraft()
        self.step = WizardStep.SELECT_STYLE

    # ----- draft edits -----

    def select_style(self, style: SewingStyle | None) -> None:
        self.draft.selected_style = style

    def set_size_option(self, option: str) -> None:
        if option not in SizeOption.ALL:
            raise ValidationException(f"Unknown size option: {option}", field="size_option")
        self.draft.size_option = option

    def select_size(self, size: str) -> None:
        if size not in STANDARD_SIZES:
            raise ValidationException(f"Unknown size: {size}", field="selected_size")
        self.draft.selected_size = size

    def set_measurement(self, name: str, value: str | int | float | None) -> None:
        if name not in MEASUREMENT_FIELDS:
            raise ValidationException(f"Unknown measurement: {name}", field=name)
        self.draft.measurements[name] = sanitize_measurement(value)

    def set_measurements(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self.set_measurement(name, value)

    def set_special_instructions(self, text: str | None) -> None:
        self.draft.special_instructions = sanitize_notes(text)

    # ----- navigation -----

    @property
    def step_number(self) -> int:
        return WizardStep.number(self.step)

    @property
    def is_submitted(self) -> bool:
        return self.step == WizardStep.SUBMITTED

    def can_advance(self, step: int | str | None = None) -> bool:
        """Whether the draft satisfies the gate of ``step`` (default: current)."""
        if step is None:
            step = self.step
        elif isinstance(step, int):
            if not 1 <= step <= len(WizardStep.ORDER):
                return False
            step = WizardStep.from_number(step)
        elif step not in ALLOWED_TRANSITIONS:
            return False
        if step == WizardStep.REVIEW:
            return True
        if step == WizardStep.SUBMITTED:
            return False
        return _gate_failure(self.draft, step) is None

    def advance(self) -> TransitionValidationResult:
        """Move to the next step; review only leaves through :meth:`mark_submitted`."""
        if self.step in (WizardStep.REVIEW, WizardStep.SUBMITTED):
            return TransitionValidationResult(False, "Submit the request from the review step.")
        target = WizardStep.ORDER[WizardStep.ORDER.index(self.step) + 1]
        return self._move(target)

    def back(self) -> TransitionValidationResult:
        if self.step in (WizardStep.SELECT_STYLE, WizardStep.SUBMITTED):
            return TransitionValidationResult(False, "No previous step.")
        target = WizardStep.ORDER[WizardStep.ORDER.index(self.step) - 1]
        return self._move(target)

    def check_submission(self, *, authenticated: bool) -> TransitionValidationResult:
        return validate_step_transition(
            self.draft,
            current=self.step,
            target=WizardStep.SUBMITTED,
            authenticated=authenticated,
        )

    def mark_submitted(self) -> TransitionValidationResult:
        return self._move(WizardStep.SUBMITTED, authenticated=True)

    def reset(self) -> None:
        self.draft = SewingDraft()
        self.step = WizardStep.SELECT_STYLE

    def _move(self, target: str, *, authenticated: bool = False) -> TransitionValidationResult:
        result = validate_step_transition(
            self.draft,
            current=self.step,
            target=target,
            authenticated=authenticated,
        )
        if result.allowed:
            logger.debug("Sewing wizard %s -> %s", self.step, target)
            self.step = target
        return result

    # ----- payloads -----

    def detail_payload(self, order_id: str) -> dict[str, Any]:
        """Fields of the order-detail record for ``order_id``."""
        draft = self.draft
        payload: dict[str, Any] = {
            "order_id": order_id,
            "sewing_style_id": draft.selected_style_id,
            "size_option": draft.resolved_size,
        }
        if draft.size_option == SizeOption.CUSTOM:
            payload["measurements"] = {
                name: value for name, value in draft.measurements.items() if value.strip()
            }
        if draft.special_instructions:
            payload["special_instructions"] = draft.special_instructions
        return payload
