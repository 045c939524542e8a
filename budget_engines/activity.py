"""
Activity Aggregator - Price one activity of a quote.

Pure functions with no I/O.

Order of operations (fixed):
    1. Resolve and sum every assignment cost -> taxable subtotal.
    2. Apply the activity's own discount against the base its policy selects.
    3. Derive the VAT at the activity's own rate.

Discount on the taxable base:
    net_taxable = subtotal - discount
    vat         = net_taxable x rate / 100
    line_total  = net_taxable + vat

Discount on the VAT-inclusive base:
    vat_inclusive = subtotal + subtotal x rate / 100
    line_total    = vat_inclusive - discount
    net_taxable, vat = split_vat_inclusive(line_total, rate)

VAT is never compounded: in the second case it is computed once to find
the base and then re-derived from the discounted gross, so
``line_total == net_taxable + vat`` holds exactly in both cases.

Usage:
    from budget_engines.activity import aggregate_activity

    breakdown = aggregate_activity(activity, catalog)
    print(breakdown.line_total)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from budget_kernel.domain.budget import (
    HUNDRED,
    ZERO,
    Activity,
    CostType,
    DiscountBase,
    Resource,
    ResourceCatalog,
    pricing_context,
)
from budget_kernel.domain.settings import DEFAULT_SETTINGS, EngineSettings
from budget_engines.discount import calculate_discount, check_percentage_range
from budget_engines.resource_cost import resolve_assignment_cost
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.activity")

_ONE = Decimal("1")


@dataclass(frozen=True)
class AssignmentCost:
    """One priced assignment, as the quote document lists it."""

    resource_id: str
    resource_name: str | None  # None when an unresolved resource was priced at zero
    cost_type: CostType | None
    hours: Decimal
    unit_price: Decimal
    cost: Decimal


@dataclass(frozen=True)
class ActivityBreakdown:
    """
    Priced activity.

    Invariant: line_total == net_taxable + vat_amount.
    """

    activity_id: str
    name: str
    vat_rate: Decimal
    assignment_costs: tuple[AssignmentCost, ...]
    taxable_subtotal: Decimal  # before the activity discount
    discount_amount: Decimal
    net_taxable: Decimal  # after the activity discount
    vat_amount: Decimal
    line_total: Decimal

    @property
    def has_discount(self) -> bool:
        return self.discount_amount != ZERO


def split_vat_inclusive(gross: Decimal, vat_rate: Decimal) -> tuple[Decimal, Decimal]:
    """
    Split a VAT-inclusive amount into its taxable part and its VAT.

    Args:
        gross: VAT-inclusive amount (may be negative).
        vat_rate: VAT percentage, e.g. 22 for 22%.

    Returns:
        (net, vat) where vat is ``gross - net``.
    """
    with pricing_context():
        net = gross / (_ONE + vat_rate / HUNDRED)
        return net, gross - net


def _price_assignments(
    activity: Activity,
    catalog: Mapping[str, Resource],
    settings: EngineSettings,
) -> tuple[AssignmentCost, ...]:
    lines: list[AssignmentCost] = []
    for assignment in activity.resources:
        cost = resolve_assignment_cost(
            assignment,
            catalog,
            activity_id=activity.id,
            on_unresolved=settings.on_unresolved_resource,
        )
        resource = catalog.get(assignment.resource_id)
        if resource is None:
            unit_price = ZERO
        elif resource.cost_type is CostType.FIXED:
            unit_price = assignment.fixed_price
        else:
            unit_price = resource.price_per_hour
        lines.append(AssignmentCost(
            resource_id=assignment.resource_id,
            resource_name=resource.name if resource else None,
            cost_type=resource.cost_type if resource else None,
            hours=assignment.hours,
            unit_price=unit_price,
            cost=cost,
        ))
    return tuple(lines)


def aggregate_activity(
    activity: Activity,
    catalog: Mapping[str, Resource],
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> ActivityBreakdown:
    """
    Price one activity.

    Raises:
        UnresolvedResourceError: If an assignment's resource is missing and
            the settings say to abort.
        InvalidInputError: If strict percentages are on and the discount
            percentage exceeds 100.
    """
    if settings.strict_percentages:
        check_percentage_range(activity.discount, f"activity[{activity.id}].discount.value")
    if not isinstance(catalog, ResourceCatalog):
        catalog = ResourceCatalog.from_mapping(catalog)

    with pricing_context():
        breakdown = _price_activity(activity, catalog, settings)

    if breakdown.line_total < ZERO:
        logger.warning("activity_total_negative", extra={
            "activity_id": activity.id,
            "line_total": str(breakdown.line_total),
            "discount_amount": str(breakdown.discount_amount),
        })

    logger.debug("activity_aggregated", extra={
        "activity_id": activity.id,
        "assignment_count": len(breakdown.assignment_costs),
        "taxable_subtotal": str(breakdown.taxable_subtotal),
        "discount_amount": str(breakdown.discount_amount),
        "vat_rate": str(breakdown.vat_rate),
        "line_total": str(breakdown.line_total),
    })
    return breakdown


def _price_activity(
    activity: Activity,
    catalog: ResourceCatalog,
    settings: EngineSettings,
) -> ActivityBreakdown:
    lines = _price_assignments(activity, catalog, settings)
    subtotal = sum((line.cost for line in lines), ZERO)
    rate = activity.vat
    policy = activity.discount

    if not lines:
        # Nothing to discount: an empty activity is zero regardless of policy
        discount = ZERO
        net_taxable = ZERO
        vat_amount = ZERO
    elif policy is not None and policy.is_active and policy.apply_on is DiscountBase.WITH_VAT:
        vat_inclusive = subtotal + subtotal * rate / HUNDRED
        discount = calculate_discount(
            policy, subtotal, vat_inclusive, cap_at_base=settings.clamp_discounts
        )
        net_taxable, vat_amount = split_vat_inclusive(vat_inclusive - discount, rate)
    else:
        discount = calculate_discount(
            policy, subtotal, subtotal, cap_at_base=settings.clamp_discounts
        )
        net_taxable = subtotal - discount
        vat_amount = net_taxable * rate / HUNDRED

    return ActivityBreakdown(
        activity_id=activity.id,
        name=activity.name,
        vat_rate=rate,
        assignment_costs=lines,
        taxable_subtotal=subtotal,
        discount_amount=discount,
        net_taxable=net_taxable,
        vat_amount=vat_amount,
        line_total=net_taxable + vat_amount,
    )

