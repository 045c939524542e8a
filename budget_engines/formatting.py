"""
Number formatting for quote documents.

Presentation only. Formatted strings are never parsed back into the
computation: totals are rounded exactly once, here, at the display
boundary.

Italian convention: ``.`` groups thousands, ``,`` separates decimals,
always two decimals, half-up rounding.

    >>> format_number(Decimal("1234.5"))
    '1.234,50'
    >>> format_amount(Decimal("610"), "€")
    '€610,00'
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from budget_kernel.domain.budget import ZERO, to_decimal

_TWO_PLACES = Decimal("0.01")


def format_number(value: Decimal | int | float | str) -> str:
    """Render an amount with two decimals and Italian separators."""
    amount = to_decimal(value, "amount").quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    if amount == ZERO:
        # no "-0,00"
        amount = abs(amount)
    text = f"{amount:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_amount(value: Decimal | int | float | str, currency: str = "€") -> str:
    """Render an amount prefixed by the (opaque) currency symbol."""
    text = format_number(value)
    if text.startswith("-"):
        return f"-{currency}{text[1:]}"
    return f"{currency}{text}"
