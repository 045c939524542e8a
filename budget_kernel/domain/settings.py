"""
Engine settings -- caller-selected pricing policies.

The engine defaults reproduce the behaviour users see in the quote editor:
unknown resources abort the computation, fixed discounts larger than their
base drive totals negative, and percentages are not range-checked. Hosts
that need stricter guarantees select them here rather than patching the
engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UnresolvedResourcePolicy(str, Enum):
    """What to do when an assignment references an unknown resource."""

    ABORT = "abort"  # raise UnresolvedResourceError
    ZERO = "zero"  # price the assignment at zero and log a warning


class NegativeAmountPolicy(str, Enum):
    """Whether discounts may exceed the amount they are computed on."""

    ALLOW = "allow"
    CLAMP = "clamp"  # cap each discount at its base


@dataclass(frozen=True)
class EngineSettings:
    """Pricing policies applied by GrandTotalCalculator."""

    on_unresolved_resource: UnresolvedResourcePolicy = UnresolvedResourcePolicy.ABORT
    negative_amounts: NegativeAmountPolicy = NegativeAmountPolicy.ALLOW
    strict_percentages: bool = False

    @property
    def clamp_discounts(self) -> bool:
        return self.negative_amounts is NegativeAmountPolicy.CLAMP


DEFAULT_SETTINGS = EngineSettings()
