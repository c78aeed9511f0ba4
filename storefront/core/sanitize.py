"""Helpers for safe user input handling."""
from __future__ import annotations

import re

from storefront.core.constants import (
    MAX_ADDRESS_LENGTH,
    MAX_MEASUREMENT_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
)


def _clean(text: str | None, max_length: int) -> str:
    if text is None:
        return ""
    # Drop control characters except newlines and tabs
    cleaned = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", str(text))
    return cleaned.strip()[:max_length]


def sanitize_phone(phone: str | None) -> str:
    """Sanitize phone number - allow only digits, +, spaces, dashes.

    Example:
        >>> sanitize_phone("+234 803 123-4567")
        '+234 803 123-4567'
        >>> sanitize_phone("+234<script>")
        '+234'
    """
    if not phone:
        return ""
    return re.sub(r"[^0-9+\-\s()]", "", str(phone)).strip()[:20]


def sanitize_name(name: str | None) -> str:
    return _clean(name, MAX_NAME_LENGTH)


def sanitize_address(address: str | None) -> str:
    return _clean(address, MAX_ADDRESS_LENGTH)


def sanitize_notes(notes: str | None) -> str:
    return _clean(notes, MAX_NOTES_LENGTH)


def sanitize_measurement(value: str | int | float | None) -> str:
    """Measurements stay free-form text; only trim and bound them."""
    if value is None:
        return ""
    return _clean(str(value), MAX_MEASUREMENT_LENGTH)
