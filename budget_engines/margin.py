"""
Margin Engine - Budget-wide markup.

Pure functions with no I/O. Uses the same percentage-or-fixed rule as the
discount engine, but the result is added to the total instead of
subtracted. Which total the margin is computed on is an explicit policy
field (``GeneralMargin.apply_on``), never an accident of call order.
"""

from __future__ import annotations

from decimal import Decimal

from budget_kernel.domain.budget import ZERO, GeneralMargin, MarginBase
from budget_engines.discount import calculate_adjustment
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.margin")


def select_margin_base(
    apply_on: MarginBase,
    before_discount_total: Decimal,
    after_discount_total: Decimal,
) -> Decimal:
    """Pick the total before or after the general discount."""
    if apply_on is MarginBase.AFTER_DISCOUNT:
        return after_discount_total
    return before_discount_total


def calculate_margin(
    policy: GeneralMargin | None,
    before_discount_total: Decimal,
    after_discount_total: Decimal,
) -> Decimal:
    """
    Margin amount to add.

    Args:
        policy: The margin policy; None or disabled means no margin.
        before_discount_total: Sum of activity totals before the general discount.
        after_discount_total: The same sum after the general discount.
    """
    if policy is None or not policy.is_active:
        return ZERO

    base = select_margin_base(policy.apply_on, before_discount_total, after_discount_total)
    amount = calculate_adjustment(policy.type, policy.value, base)

    logger.debug("margin_calculated", extra={
        "type": policy.type.value,
        "value": str(policy.value),
        "apply_on": policy.apply_on.value,
        "base": str(base),
        "amount": str(amount),
    })
    return amount
