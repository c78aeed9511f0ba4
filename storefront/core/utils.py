"""Shared helper utilities reused across services and integrations."""
from __future__ import annotations

from datetime import datetime
from typing import Any


def parse_price(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def parse_timestamp(value: Any) -> datetime | None:
    """Parse ISO timestamps as emitted by the API and Postgres."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
