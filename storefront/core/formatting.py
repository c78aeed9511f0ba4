"""Display formatting for prices and order labels."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from storefront.core.constants import CURRENCY_SYMBOL


def _to_decimal(amount: Any) -> Decimal:
    try:
        return Decimal(str(amount if amount is not None else 0))
    except (InvalidOperation, ValueError):
        return Decimal(0)


def format_price(amount: Any) -> str:
    """Format an amount in whole naira with thousands grouping.

    Example:
        >>> format_price(12000)
        '₦12,000'
        >>> format_price(-1500.6)
        '-₦1,501'
    """
    value = _to_decimal(amount).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(int(value)):,}"
