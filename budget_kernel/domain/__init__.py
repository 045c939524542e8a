"""
Pure domain layer.

Immutable budget value objects with NO dependencies on storage, clock or
I/O. Everything here is deterministic.
"""

from budget_kernel.domain.budget import (
    HUNDRED,
    PRICING_CONTEXT,
    ZERO,
    Activity,
    ActivityDiscount,
    AdjustmentType,
    BudgetSnapshot,
    CostType,
    DiscountBase,
    DiscountPolicy,
    GeneralDiscount,
    GeneralMargin,
    MarginBase,
    Resource,
    ResourceAssignment,
    ResourceCatalog,
    pricing_context,
    to_decimal,
)
from budget_kernel.domain.settings import (
    DEFAULT_SETTINGS,
    EngineSettings,
    NegativeAmountPolicy,
    UnresolvedResourcePolicy,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "HUNDRED",
    "PRICING_CONTEXT",
    "ZERO",
    "Activity",
    "ActivityDiscount",
    "AdjustmentType",
    "BudgetSnapshot",
    "CostType",
    "DiscountBase",
    "DiscountPolicy",
    "EngineSettings",
    "GeneralDiscount",
    "GeneralMargin",
    "MarginBase",
    "NegativeAmountPolicy",
    "Resource",
    "ResourceAssignment",
    "ResourceCatalog",
    "UnresolvedResourcePolicy",
    "pricing_context",
    "to_decimal",
]
