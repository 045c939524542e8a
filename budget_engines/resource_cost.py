"""
Resource Cost Resolver - Price one resource assignment.

Pure functions with no I/O. The resource catalog is passed in and treated
as read-only.

Cost models:
    hourly    hours x price_per_hour
    quantity  quantity x price_per_hour (the ``hours`` field holds the quantity)
    fixed     the assignment's own fixed_price; price_per_hour is ignored

No rounding is applied: costs stay exact Decimals until presentation.

Usage:
    from budget_engines.resource_cost import resolve_assignment_cost

    cost = resolve_assignment_cost(assignment, catalog)
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from budget_kernel.domain.budget import (
    ZERO,
    CostType,
    Resource,
    ResourceAssignment,
    pricing_context,
)
from budget_kernel.domain.settings import UnresolvedResourcePolicy
from budget_kernel.exceptions import UnresolvedResourceError
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.resource_cost")


def resolve_resource(
    catalog: Mapping[str, Resource],
    resource_id: str,
    activity_id: str | None = None,
) -> Resource:
    """
    Look up a resource by id.

    Raises:
        UnresolvedResourceError: If the id is not in the catalog.
    """
    resource = catalog.get(resource_id)
    if resource is None:
        logger.error("resource_not_found", extra={
            "resource_id": resource_id,
            "activity_id": activity_id,
            "catalog_size": len(catalog),
        })
        raise UnresolvedResourceError(resource_id, activity_id)
    return resource


def calculate_assignment_cost(
    assignment: ResourceAssignment,
    resource: Resource,
) -> Decimal:
    """Monetary cost of an assignment under its resource's cost model."""
    if resource.cost_type is CostType.FIXED:
        return assignment.fixed_price
    # HOURLY and QUANTITY share the arithmetic
    with pricing_context():
        return assignment.hours * resource.price_per_hour


def resolve_assignment_cost(
    assignment: ResourceAssignment,
    catalog: Mapping[str, Resource],
    *,
    activity_id: str | None = None,
    on_unresolved: UnresolvedResourcePolicy = UnresolvedResourcePolicy.ABORT,
) -> Decimal:
    """
    Resolve the assignment's resource and price it.

    Args:
        assignment: The assignment to price.
        catalog: Resource id -> Resource.
        activity_id: Owning activity, for error reporting only.
        on_unresolved: ABORT raises, ZERO prices a missing resource at 0.

    Raises:
        UnresolvedResourceError: If the resource is missing and the policy
            is ABORT.
    """
    if (
        on_unresolved is UnresolvedResourcePolicy.ZERO
        and assignment.resource_id not in catalog
    ):
        logger.warning("unresolved_resource_priced_at_zero", extra={
            "resource_id": assignment.resource_id,
            "activity_id": activity_id,
        })
        return ZERO
    resource = resolve_resource(catalog, assignment.resource_id, activity_id)
    return calculate_assignment_cost(assignment, resource)
