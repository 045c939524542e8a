"""
Grand Total Calculator - Price a whole quote.

Pure functions with deterministic behavior. No I/O.

Orchestration, in this fixed order:
    1. Aggregate every activity (resource costs, activity discount, VAT).
    2. Apply the general discount. Its base is the net taxable total when
       ``apply_on = taxable`` and the activities total (VAT included) when
       ``apply_on = withVat``.
    3. Apply the general margin, computed on the activities total before or
       after the general discount as the margin policy selects.
    4. Return every figure the quote document and the live total widget
       show, as exact Decimals.

Any pricing error anywhere aborts the whole computation: there are no
partial results.

Usage:
    from budget_engines.grand_total import GrandTotalCalculator

    totals = GrandTotalCalculator().calculate(snapshot)
    print(totals.grand_total)

    # or, without building a snapshot
    from budget_engines.grand_total import calculate_quote_totals

    totals = calculate_quote_totals(catalog, activities, general_discount)
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import uuid4

from budget_kernel.domain.budget import (
    ZERO,
    Activity,
    BudgetSnapshot,
    DiscountPolicy,
    GeneralMargin,
    Resource,
    pricing_context,
)
from budget_kernel.domain.settings import DEFAULT_SETTINGS, EngineSettings
from budget_engines.activity import ActivityBreakdown, aggregate_activity
from budget_engines.discount import calculate_discount, check_percentage_range
from budget_engines.margin import calculate_margin
from budget_engines.tracer import traced_engine
from budget_kernel.exceptions import BudgetEngineError
from budget_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.grand_total")


@dataclass(frozen=True)
class QuoteTotals:
    """
    Complete quote pricing result.

    Invariants:
        activities_total == net_taxable_total + vat_total
        after_general_discount == activities_total - general_discount_amount
        grand_total == after_general_discount + margin_amount
    """

    grand_total: Decimal
    taxable_subtotal: Decimal  # pre-VAT, before any discount
    activity_discounts_total: Decimal
    net_taxable_total: Decimal  # pre-VAT, after activity discounts
    vat_total: Decimal
    activities_total: Decimal  # net taxable + VAT, before the general discount
    general_discount_amount: Decimal
    after_general_discount: Decimal
    margin_amount: Decimal
    activities: tuple[ActivityBreakdown, ...]
    currency: str = "€"

    @property
    def activity_count(self) -> int:
        return len(self.activities)

    @property
    def has_discounts(self) -> bool:
        """True if any activity or general discount reduced the total."""
        return (
            self.activity_discounts_total != ZERO
            or self.general_discount_amount != ZERO
        )

    def breakdown_for(self, activity_id: str) -> ActivityBreakdown:
        """Breakdown of one activity by id."""
        for breakdown in self.activities:
            if breakdown.activity_id == activity_id:
                return breakdown
        raise KeyError(activity_id)

    def as_dict(self) -> dict[str, Any]:
        """
        Plain representation for document renderers.

        Decimals are rendered with ``str`` so no precision is lost.
        """
        return {
            "currency": self.currency,
            "grand_total": str(self.grand_total),
            "taxable_subtotal": str(self.taxable_subtotal),
            "activity_discounts_total": str(self.activity_discounts_total),
            "net_taxable_total": str(self.net_taxable_total),
            "vat_total": str(self.vat_total),
            "activities_total": str(self.activities_total),
            "general_discount_amount": str(self.general_discount_amount),
            "after_general_discount": str(self.after_general_discount),
            "margin_amount": str(self.margin_amount),
            "activities": [
                {
                    "id": b.activity_id,
                    "name": b.name,
                    "vat_rate": str(b.vat_rate),
                    "taxable_subtotal": str(b.taxable_subtotal),
                    "discount_amount": str(b.discount_amount),
                    "net_taxable": str(b.net_taxable),
                    "vat_amount": str(b.vat_amount),
                    "line_total": str(b.line_total),
                }
                for b in self.activities
            ],
        }


class GrandTotalCalculator:
    """
    Price quotes.

    Holds only its settings; every call is a pure function of the snapshot,
    so one instance may serve concurrent callers.
    """

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or DEFAULT_SETTINGS

    def calculate(self, snapshot: BudgetSnapshot) -> QuoteTotals:
        """
        Compute every total of the quote.

        Records emitted during the call carry a fresh ``calculation_id`` and
        the snapshot name. Arithmetic runs in the pinned pricing context, so
        the host thread's Decimal settings do not change the result.

        Raises:
            UnresolvedResourceError: An assignment references a resource
                absent from the catalog (and settings say to abort).
            InvalidInputError: Strict percentage validation failed.
        """
        with LogContext.bind(
            calculation_id=str(uuid4()),
            budget_name=snapshot.name or None,
        ), pricing_context():
            try:
                return self._price(snapshot)
            except BudgetEngineError:
                logger.error("quote_calculation_failed", exc_info=True, extra={
                    "activity_count": len(snapshot.activities),
                })
                raise

    @traced_engine("grand_total", "1.0", fingerprint_fields=("snapshot",))
    def _price(self, snapshot: BudgetSnapshot) -> QuoteTotals:
        t0 = time.monotonic()
        settings = self.settings
        logger.info("quote_calculation_started", extra={
            "activity_count": len(snapshot.activities),
            "resource_count": len(snapshot.catalog),
            "general_discount_enabled": snapshot.general_discount.enabled,
            "general_margin_enabled": bool(
                snapshot.general_margin and snapshot.general_margin.enabled
            ),
        })

        if settings.strict_percentages:
            check_percentage_range(snapshot.general_discount, "general_discount.value")
            check_percentage_range(snapshot.general_margin, "general_margin.value")

        # Step 1: activities
        breakdowns = tuple(
            aggregate_activity(activity, snapshot.catalog, settings=settings)
            for activity in snapshot.activities
        )
        taxable_subtotal = sum((b.taxable_subtotal for b in breakdowns), ZERO)
        activity_discounts = sum((b.discount_amount for b in breakdowns), ZERO)
        net_taxable_total = sum((b.net_taxable for b in breakdowns), ZERO)
        vat_total = sum((b.vat_amount for b in breakdowns), ZERO)
        activities_total = net_taxable_total + vat_total

        # Step 2: general discount
        general_discount = ZERO
        if breakdowns:
            general_discount = calculate_discount(
                snapshot.general_discount,
                net_taxable_total,
                activities_total,
                cap_at_base=settings.clamp_discounts,
            )
        after_general_discount = activities_total - general_discount

        # Step 3: general margin
        margin = ZERO
        if breakdowns:
            margin = calculate_margin(
                snapshot.general_margin,
                activities_total,
                after_general_discount,
            )
        grand_total = after_general_discount + margin

        totals = QuoteTotals(
            grand_total=grand_total,
            taxable_subtotal=taxable_subtotal,
            activity_discounts_total=activity_discounts,
            net_taxable_total=net_taxable_total,
            vat_total=vat_total,
            activities_total=activities_total,
            general_discount_amount=general_discount,
            after_general_discount=after_general_discount,
            margin_amount=margin,
            activities=breakdowns,
            currency=snapshot.currency,
        )

        if grand_total < ZERO:
            logger.warning("quote_total_negative", extra={
                "grand_total": str(grand_total),
                "general_discount_amount": str(general_discount),
            })

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("quote_calculation_completed", extra={
            "activity_count": len(breakdowns),
            "taxable_subtotal": str(taxable_subtotal),
            "vat_total": str(vat_total),
            "general_discount_amount": str(general_discount),
            "margin_amount": str(margin),
            "grand_total": str(grand_total),
            "duration_ms": duration_ms,
        })
        return totals


def calculate_quote_totals(
    catalog: Mapping[str, Resource] | Iterable[Resource],
    activities: Iterable[Activity],
    general_discount: DiscountPolicy | None = None,
    general_margin: GeneralMargin | None = None,
    *,
    currency: str = "€",
    settings: EngineSettings | None = None,
) -> QuoteTotals:
    """
    Convenience wrapper: build a snapshot and price it.

    ``catalog`` may be a ResourceCatalog, an id -> Resource mapping or a
    plain sequence of resources.
    """
    snapshot = BudgetSnapshot(
        catalog=catalog,
        activities=tuple(activities),
        general_discount=general_discount or DiscountPolicy(),
        general_margin=general_margin,
        currency=currency,
    )
    return GrandTotalCalculator(settings).calculate(snapshot)
