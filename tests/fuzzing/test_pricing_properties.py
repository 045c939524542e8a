"""
Property-based tests for the pricing engines.

Hypothesis generates catalogs, activities and policies; the properties
below must hold for every generated budget:

- fixed-price lines ignore hours and the resource's unit price
- hourly and per-unit lines are exactly hours x unit price
- disabled policies are indistinguishable from absent ones
- the same snapshot always produces the same totals
- a budget without activities totals zero whatever its policies
- activity and quote totals decompose into their parts exactly
- with discount clamping and no margin, totals never go negative
"""

from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from budget_engines import (
    GrandTotalCalculator,
    aggregate_activity,
    calculate_assignment_cost,
    calculate_quote_totals,
)
from budget_kernel.domain.budget import (
    Activity,
    AdjustmentType,
    BudgetSnapshot,
    CostType,
    DiscountBase,
    DiscountPolicy,
    GeneralMargin,
    MarginBase,
    Resource,
    ResourceAssignment,
    ResourceCatalog,
)
from budget_kernel.domain.settings import EngineSettings, NegativeAmountPolicy

RESOURCE_IDS = ("r1", "r2", "r3", "r4")

# conftest's autouse logging fixture is function-scoped; it only resets state
fuzz_settings = settings(
    max_examples=100,
    suppress_health_check=[HealthCheck.function_scoped_fixture, HealthCheck.too_slow],
)

amounts = st.decimals(min_value=0, max_value=10_000, places=2,
                      allow_nan=False, allow_infinity=False)
hours = st.decimals(min_value=0, max_value=500, places=2,
                    allow_nan=False, allow_infinity=False)
vat_rates = st.sampled_from([Decimal("0"), Decimal("4"), Decimal("10"), Decimal("22")])
percentages = st.decimals(min_value=0, max_value=100, places=1,
                          allow_nan=False, allow_infinity=False)


@st.composite
def discounts(draw, enabled=None):
    adjustment = draw(st.sampled_from(list(AdjustmentType)))
    value = draw(percentages if adjustment is AdjustmentType.PERCENTAGE else amounts)
    return DiscountPolicy(
        enabled=draw(st.booleans()) if enabled is None else enabled,
        type=adjustment,
        value=value,
        apply_on=draw(st.sampled_from(list(DiscountBase))),
    )


@st.composite
def margins(draw, enabled=None):
    adjustment = draw(st.sampled_from(list(AdjustmentType)))
    value = draw(percentages if adjustment is AdjustmentType.PERCENTAGE else amounts)
    return GeneralMargin(
        enabled=draw(st.booleans()) if enabled is None else enabled,
        type=adjustment,
        value=value,
        apply_on=draw(st.sampled_from(list(MarginBase))),
    )


@st.composite
def catalogs(draw):
    return ResourceCatalog(
        Resource(
            id=resource_id,
            name=resource_id.upper(),
            cost_type=draw(st.sampled_from(list(CostType))),
            price_per_hour=draw(amounts),
        )
        for resource_id in RESOURCE_IDS
    )


@st.composite
def activities(draw, index=0):
    lines = draw(st.lists(
        st.builds(
            ResourceAssignment,
            resource_id=st.sampled_from(RESOURCE_IDS),
            hours=hours,
            fixed_price=amounts,
        ),
        max_size=4,
    ))
    return Activity(
        id=f"act_{index}",
        name=f"Activity {index}",
        resources=tuple(lines),
        vat=draw(vat_rates),
        discount=draw(st.none() | discounts()),
    )


@st.composite
def activity_lists(draw):
    count = draw(st.integers(min_value=0, max_value=4))
    return [draw(activities(index=i)) for i in range(count)]


class TestResourceCostProperties:

    @fuzz_settings
    @given(hours=hours, unit_price=amounts, fixed_price=amounts)
    def test_fixed_cost_ignores_hours_and_unit_price(self, hours, unit_price, fixed_price):
        resource = Resource(id="r", name="R", cost_type=CostType.FIXED,
                            price_per_hour=unit_price)
        assignment = ResourceAssignment(resource_id="r", hours=hours, fixed_price=fixed_price)

        assert calculate_assignment_cost(assignment, resource) == fixed_price

    @fuzz_settings
    @given(cost_type=st.sampled_from([CostType.HOURLY, CostType.QUANTITY]),
           hours=hours, unit_price=amounts, fixed_price=amounts)
    def test_time_based_cost_is_hours_times_price(self, cost_type, hours, unit_price,
                                                  fixed_price):
        resource = Resource(id="r", name="R", cost_type=cost_type, price_per_hour=unit_price)
        assignment = ResourceAssignment(resource_id="r", hours=hours, fixed_price=fixed_price)

        assert calculate_assignment_cost(assignment, resource) == hours * unit_price


class TestActivityProperties:

    @fuzz_settings
    @given(catalog=catalogs(), activity=activities())
    def test_line_total_is_net_plus_vat(self, catalog, activity):
        breakdown = aggregate_activity(activity, catalog)

        assert breakdown.line_total == breakdown.net_taxable + breakdown.vat_amount

    @fuzz_settings
    @given(catalog=catalogs(), activity=activities())
    def test_subtotal_is_sum_of_line_costs(self, catalog, activity):
        breakdown = aggregate_activity(activity, catalog)

        assert breakdown.taxable_subtotal == sum(
            (line.cost for line in breakdown.assignment_costs), Decimal("0")
        )


class TestQuoteProperties:

    @fuzz_settings
    @given(catalog=catalogs(), items=activity_lists(),
           discount=discounts(), margin=st.none() | margins())
    def test_totals_decompose(self, catalog, items, discount, margin):
        totals = calculate_quote_totals(catalog, items, discount, margin)

        assert totals.activities_total == totals.net_taxable_total + totals.vat_total
        assert totals.after_general_discount == (
            totals.activities_total - totals.general_discount_amount
        )
        assert totals.grand_total == totals.after_general_discount + totals.margin_amount
        assert totals.activity_count == len(items)

    @fuzz_settings
    @given(catalog=catalogs(), items=activity_lists(),
           discount=discounts(enabled=False), margin=margins(enabled=False))
    def test_disabled_policies_equal_absent(self, catalog, items, discount, margin):
        assert calculate_quote_totals(catalog, items, discount, margin) == \
            calculate_quote_totals(catalog, items)

    @fuzz_settings
    @given(catalog=catalogs(), items=activity_lists(),
           discount=discounts(), margin=st.none() | margins())
    def test_deterministic(self, catalog, items, discount, margin):
        snapshot = BudgetSnapshot(catalog=catalog, activities=items,
                                  general_discount=discount, general_margin=margin)
        calculator = GrandTotalCalculator()

        assert calculator.calculate(snapshot) == calculator.calculate(snapshot)

    @fuzz_settings
    @given(catalog=catalogs(), discount=discounts(enabled=True), margin=margins(enabled=True))
    def test_no_activities_totals_zero(self, catalog, discount, margin):
        totals = calculate_quote_totals(catalog, [], discount, margin)

        assert totals.grand_total == Decimal("0")

    @fuzz_settings
    @given(catalog=catalogs(), items=activity_lists(), discount=discounts())
    def test_clamped_totals_never_negative(self, catalog, items, discount):
        engine_settings = EngineSettings(negative_amounts=NegativeAmountPolicy.CLAMP)

        totals = calculate_quote_totals(catalog, items, discount, settings=engine_settings)

        assert totals.net_taxable_total >= 0
        assert totals.grand_total >= 0
        for breakdown in totals.activities:
            assert breakdown.line_total >= 0
