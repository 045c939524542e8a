"""
Module: budget_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure quote
    pricing engines. This is the canonical import surface for callers (the
    document renderer, the live total widget, ingestion tooling).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import budget_kernel (domain values, exceptions, logging).
    MUST NOT import budget_config.

Invariants enforced:
    - Decimal-only arithmetic; no rounding inside the computation chain.
      Rounding happens once, in ``budget_engines.formatting``.
    - Determinism: identical inputs always produce identical outputs. No
      engine keeps state between calls and there are no global caches.

Failure modes:
    - UnresolvedResourceError when an assignment references a resource
      missing from the catalog.
    - InvalidInputError on negative inputs (raised by the domain objects)
      and on out-of-range percentages under strict settings.

Usage:
    from budget_engines import GrandTotalCalculator, format_amount

    totals = GrandTotalCalculator().calculate(snapshot)
    print(format_amount(totals.grand_total, totals.currency))
"""

from budget_kernel.logging_config import get_logger

logger = get_logger("engines")

from budget_engines.activity import (
    ActivityBreakdown,
    AssignmentCost,
    aggregate_activity,
    split_vat_inclusive,
)
from budget_engines.discount import (
    calculate_adjustment,
    calculate_discount,
    check_percentage_range,
    select_discount_base,
)
from budget_engines.formatting import format_amount, format_number
from budget_engines.grand_total import (
    GrandTotalCalculator,
    QuoteTotals,
    calculate_quote_totals,
)
from budget_engines.margin import calculate_margin, select_margin_base
from budget_engines.resource_cost import (
    calculate_assignment_cost,
    resolve_assignment_cost,
    resolve_resource,
)
from budget_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Activity
    "ActivityBreakdown",
    "AssignmentCost",
    "aggregate_activity",
    "split_vat_inclusive",
    # Discount
    "calculate_adjustment",
    "calculate_discount",
    "check_percentage_range",
    "select_discount_base",
    # Formatting
    "format_amount",
    "format_number",
    # Grand total
    "GrandTotalCalculator",
    "QuoteTotals",
    "calculate_quote_totals",
    # Margin
    "calculate_margin",
    "select_margin_base",
    # Resource cost
    "calculate_assignment_cost",
    "resolve_assignment_cost",
    "resolve_resource",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
