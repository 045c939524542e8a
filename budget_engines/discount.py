"""
Discount Engine - Percentage-or-fixed adjustments against a chosen base.

Pure functions with no I/O.

One rule serves every adjustment in a quote:
    percentage  base x value / 100
    fixed       value (not scaled by the base)

It is used for activity discounts, the general discount and, additively,
for the general margin (see ``budget_engines.margin``).

Fixed amounts larger than their base are NOT clamped by default: the net
amount goes negative, exactly as the user entered it. Callers that want a
floor at zero pass ``cap_at_base=True``.

Usage:
    from budget_engines.discount import calculate_discount

    amount = calculate_discount(
        policy,
        taxable_amount=Decimal("500"),
        vat_inclusive_amount=Decimal("610"),
    )
"""

from __future__ import annotations

from decimal import Decimal

from budget_kernel.domain.budget import (
    HUNDRED,
    ZERO,
    AdjustmentType,
    DiscountBase,
    DiscountPolicy,
    GeneralMargin,
    pricing_context,
)
from budget_kernel.exceptions import InvalidInputError
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.discount")


def calculate_adjustment(
    adjustment_type: AdjustmentType,
    value: Decimal,
    base: Decimal,
) -> Decimal:
    """Amount of a percentage-or-fixed adjustment computed on ``base``."""
    if adjustment_type is AdjustmentType.PERCENTAGE:
        with pricing_context():
            return base * value / HUNDRED
    return value


def check_percentage_range(
    policy: DiscountPolicy | GeneralMargin | None,
    field_name: str,
) -> None:
    """
    Reject enabled percentage policies above 100%.

    Only called when strict percentage validation is selected; by default
    percentages are the caller's responsibility.

    Raises:
        InvalidInputError: If the percentage exceeds 100.
    """
    if policy is None or not policy.enabled:
        return
    if policy.type is AdjustmentType.PERCENTAGE and policy.value > HUNDRED:
        raise InvalidInputError(field_name, policy.value, "percentage above 100")


def select_discount_base(
    apply_on: DiscountBase,
    taxable_amount: Decimal,
    vat_inclusive_amount: Decimal,
) -> Decimal:
    """Pick the pre-VAT or VAT-inclusive amount per the policy."""
    if apply_on is DiscountBase.WITH_VAT:
        return vat_inclusive_amount
    return taxable_amount


def calculate_discount(
    policy: DiscountPolicy | None,
    taxable_amount: Decimal,
    vat_inclusive_amount: Decimal,
    *,
    cap_at_base: bool = False,
) -> Decimal:
    """
    Discount amount to subtract.

    Args:
        policy: The discount policy; None or disabled means no discount.
        taxable_amount: Pre-VAT candidate base.
        vat_inclusive_amount: VAT-inclusive candidate base.
        cap_at_base: Limit the discount to the selected base (never below 0).

    Returns:
        The (positive) discount amount, unrounded.
    """
    if policy is None or not policy.is_active:
        return ZERO

    base = select_discount_base(policy.apply_on, taxable_amount, vat_inclusive_amount)
    amount = calculate_adjustment(policy.type, policy.value, base)

    if cap_at_base:
        ceiling = max(base, ZERO)
        if amount > ceiling:
            logger.warning("discount_capped_at_base", extra={
                "requested": str(amount),
                "base": str(base),
                "apply_on": policy.apply_on.value,
            })
            amount = ceiling

    logger.debug("discount_calculated", extra={
        "type": policy.type.value,
        "value": str(policy.value),
        "apply_on": policy.apply_on.value,
        "base": str(base),
        "amount": str(amount),
    })
    return amount
