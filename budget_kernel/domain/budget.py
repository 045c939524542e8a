"""
Budget -- Immutable, self-validating pricing inputs.

Responsibility:
    Provides the value objects a quote computation consumes: resources and
    their cost models, resource assignments, activities, the discount and
    margin policies, the resource catalog, and the BudgetSnapshot bundle.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by budget_engines and budget_config. No outward dependencies
    except budget_kernel.exceptions.

Invariants enforced:
    - All monetary amounts and rates are Decimal (never float). Constructors
      accept int/str/float and normalise through ``str()``.
    - Hours, quantities, prices, VAT rates and discount/margin values are
      non-negative; violations raise InvalidInputError at construction.
    - A ResourceCatalog never holds two resources with the same id and is
      read-only once built.

Failure modes:
    - InvalidInputError on negative or non-numeric values and unknown enum
      values.

Non-goals:
    - Percentage values are NOT clamped to [0, 100] here. Stricter checks
      are an engine setting (``strict_percentages``).
    - No currency handling: the currency symbol is an opaque string.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from datetime import date
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)
from enum import Enum
from types import MappingProxyType
from typing import Any

from budget_kernel.exceptions import InvalidInputError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Fixed regardless of the calling thread's decimal context
PRICING_CONTEXT = Context(
    prec=28,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)


def pricing_context() -> AbstractContextManager[Context]:
    """Decimal context every engine computation runs in."""
    return localcontext(PRICING_CONTEXT)


def to_decimal(value: Any, field_name: str) -> Decimal:
    """
    Normalise a numeric input to Decimal.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises:
        InvalidInputError: If the value is not numeric or not finite.
    """
    if isinstance(value, bool):
        raise InvalidInputError(field_name, value, "must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as e:
            raise InvalidInputError(field_name, value, "must be a number") from e
    if not result.is_finite():
        raise InvalidInputError(field_name, value, "must be finite")
    return result


def _non_negative(obj: Any, attr: str, label: str) -> None:
    value = to_decimal(getattr(obj, attr), label)
    if value < ZERO:
        raise InvalidInputError(label, value, "must be non-negative")
    object.__setattr__(obj, attr, value)


def _coerce_enum(obj: Any, attr: str, enum_cls: type[Enum], label: str) -> None:
    value = getattr(obj, attr)
    if isinstance(value, enum_cls):
        return
    try:
        object.__setattr__(obj, attr, enum_cls(value))
    except ValueError as e:
        allowed = [m.value for m in enum_cls]
        raise InvalidInputError(label, value, f"must be one of {allowed}") from e


class CostType(str, Enum):
    """How a resource assignment is priced."""

    HOURLY = "hourly"  # hours x price per hour
    QUANTITY = "quantity"  # units x price per unit
    FIXED = "fixed"  # flat fee entered on the assignment


class AdjustmentType(str, Enum):
    """Shape of a discount or margin value."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountBase(str, Enum):
    """Amount a discount is computed against."""

    TAXABLE = "taxable"  # pre-VAT amount
    WITH_VAT = "withVat"  # VAT-inclusive amount


class MarginBase(str, Enum):
    """Whether the general margin is computed before or after the general discount."""

    BEFORE_DISCOUNT = "beforeDiscount"
    AFTER_DISCOUNT = "afterDiscount"


@dataclass(frozen=True)
class Resource:
    """
    A reusable billable unit (person, equipment, flat fee).

    ``price_per_hour`` is the unit price: per hour for HOURLY, per unit for
    QUANTITY, ignored for FIXED.
    """

    id: str
    name: str
    cost_type: CostType
    price_per_hour: Decimal = ZERO

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidInputError("resource.id", self.id, "must not be empty")
        _coerce_enum(self, "cost_type", CostType, "resource.cost_type")
        _non_negative(self, "price_per_hour", "resource.price_per_hour")


@dataclass(frozen=True)
class ResourceAssignment:
    """Links a resource to an activity with an hours/quantity dimension."""

    resource_id: str
    hours: Decimal = ZERO  # hours or quantity, per the resource cost type
    fixed_price: Decimal = ZERO  # only meaningful for FIXED resources

    def __post_init__(self) -> None:
        _non_negative(self, "hours", "assignment.hours")
        _non_negative(self, "fixed_price", "assignment.fixed_price")


@dataclass(frozen=True)
class DiscountPolicy:
    """
    Percentage-or-fixed discount computed against a selectable base.

    Shared by activity-level and general (budget-wide) discounts.
    """

    enabled: bool = False
    type: AdjustmentType = AdjustmentType.PERCENTAGE
    value: Decimal = ZERO
    apply_on: DiscountBase = DiscountBase.TAXABLE

    def __post_init__(self) -> None:
        _coerce_enum(self, "type", AdjustmentType, "discount.type")
        _coerce_enum(self, "apply_on", DiscountBase, "discount.apply_on")
        _non_negative(self, "value", "discount.value")

    @property
    def is_active(self) -> bool:
        """True when the policy would produce a non-zero adjustment."""
        return self.enabled and self.value != ZERO


# Activity and general discounts share one shape.
ActivityDiscount = DiscountPolicy
GeneralDiscount = DiscountPolicy


@dataclass(frozen=True)
class GeneralMargin:
    """Budget-wide markup, added after the activities are summed."""

    enabled: bool = False
    type: AdjustmentType = AdjustmentType.PERCENTAGE
    value: Decimal = ZERO
    apply_on: MarginBase = MarginBase.BEFORE_DISCOUNT

    def __post_init__(self) -> None:
        _coerce_enum(self, "type", AdjustmentType, "margin.type")
        _coerce_enum(self, "apply_on", MarginBase, "margin.apply_on")
        _non_negative(self, "value", "margin.value")

    @property
    def is_active(self) -> bool:
        """True when the policy would produce a non-zero adjustment."""
        return self.enabled and self.value != ZERO


@dataclass(frozen=True)
class Activity:
    """
    A billable line item: ordered resource assignments, its own VAT rate and
    an optional discount. Dates are carried for timeline rendering only.
    """

    id: str
    name: str
    description: str = ""
    resources: tuple[ResourceAssignment, ...] = ()
    vat: Decimal = ZERO  # percentage, e.g. 22 for 22%
    discount: DiscountPolicy | None = None
    start_date: date | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "resources", tuple(self.resources))
        _non_negative(self, "vat", "activity.vat")


class ResourceCatalog(Mapping[str, Resource]):
    """
    Read-only mapping from resource id to Resource.

    Resources are not owned by any activity; several activities of the same
    budget may reference one resource.
    """

    __slots__ = ("_resources",)

    def __init__(self, resources: Iterable[Resource] = ()):
        table: dict[str, Resource] = {}
        for resource in resources:
            if resource.id in table:
                raise InvalidInputError(
                    "resource.id", resource.id, "duplicate id in catalog"
                )
            table[resource.id] = resource
        self._resources = MappingProxyType(table)

    @classmethod
    def from_mapping(cls, resources: Mapping[str, Resource]) -> ResourceCatalog:
        """
        Build a catalog from an id -> Resource mapping.

        Raises:
            InvalidInputError: If a key differs from its resource's id.
        """
        for key, resource in resources.items():
            if key != resource.id:
                raise InvalidInputError(
                    "resource.id", key, "catalog key does not match resource id"
                )
        return cls(resources.values())

    def __getitem__(self, resource_id: str) -> Resource:
        return self._resources[resource_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def __repr__(self) -> str:
        return f"ResourceCatalog({list(self._resources)!r})"


@dataclass(frozen=True)
class BudgetSnapshot:
    """
    Everything one quote computation needs, captured immutably.

    Built by the caller from persisted budget data immediately before
    pricing, then discarded.
    """

    catalog: ResourceCatalog
    activities: tuple[Activity, ...] = ()
    general_discount: DiscountPolicy = field(default_factory=DiscountPolicy)
    general_margin: GeneralMargin | None = None
    currency: str = "€"
    name: str = ""
    default_vat: Decimal = Decimal("22")

    def __post_init__(self) -> None:
        if not isinstance(self.catalog, ResourceCatalog):
            catalog = (
                ResourceCatalog.from_mapping(self.catalog)
                if isinstance(self.catalog, Mapping)
                else ResourceCatalog(self.catalog)
            )
            object.__setattr__(self, "catalog", catalog)
        object.__setattr__(self, "activities", tuple(self.activities))
        if self.general_discount is None:
            object.__setattr__(self, "general_discount", DiscountPolicy())
        _non_negative(self, "default_vat", "budget.default_vat")
