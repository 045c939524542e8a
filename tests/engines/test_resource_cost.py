"""
Tests for the Resource Cost Resolver.

Covers:
- hourly, quantity and fixed cost models
- unresolved resources (abort and zero policies)
"""

from decimal import Decimal

import pytest

from budget_engines.resource_cost import (
    calculate_assignment_cost,
    resolve_assignment_cost,
    resolve_resource,
)
from budget_kernel.domain.budget import ResourceAssignment
from budget_kernel.domain.settings import UnresolvedResourcePolicy
from budget_kernel.exceptions import UnresolvedResourceError


class TestCostModels:
    """Cost of one assignment under each cost model."""

    def test_hourly(self, developer):
        assignment = ResourceAssignment(resource_id="res_dev", hours=10)
        assert calculate_assignment_cost(assignment, developer) == Decimal("500")

    def test_hourly_fractional_hours_not_rounded(self, developer):
        assignment = ResourceAssignment(resource_id="res_dev", hours="0.333")
        assert calculate_assignment_cost(assignment, developer) == Decimal("16.650")

    def test_quantity_uses_hours_field(self, licence):
        assignment = ResourceAssignment(resource_id="res_lic", hours=3)
        assert calculate_assignment_cost(assignment, licence) == Decimal("37.50")

    def test_fixed_uses_assignment_price(self, hosting):
        assignment = ResourceAssignment(resource_id="res_host", hours=0, fixed_price="120")
        assert calculate_assignment_cost(assignment, hosting) == Decimal("120")

    def test_fixed_ignores_hours(self, hosting):
        """Fixed cost does not depend on hours/quantity."""
        a = ResourceAssignment(resource_id="res_host", hours=0, fixed_price="120")
        b = ResourceAssignment(resource_id="res_host", hours=40, fixed_price="120")
        assert calculate_assignment_cost(a, hosting) == calculate_assignment_cost(b, hosting)

    def test_zero_hours(self, developer):
        assignment = ResourceAssignment(resource_id="res_dev", hours=0)
        assert calculate_assignment_cost(assignment, developer) == Decimal("0")


class TestResolution:
    """Catalog lookup."""

    def test_resolve_known_resource(self, catalog, developer):
        assert resolve_resource(catalog, "res_dev") is developer

    def test_resolve_unknown_resource_raises(self, catalog):
        with pytest.raises(UnresolvedResourceError) as exc_info:
            resolve_resource(catalog, "res_gone", "act_7")

        assert exc_info.value.resource_id == "res_gone"
        assert exc_info.value.activity_id == "act_7"
        assert exc_info.value.code == "UNRESOLVED_RESOURCE"

    def test_resolve_and_price(self, catalog):
        assignment = ResourceAssignment(resource_id="res_lic", hours=2)
        assert resolve_assignment_cost(assignment, catalog) == Decimal("25.00")

    def test_default_policy_aborts(self, catalog):
        assignment = ResourceAssignment(resource_id="res_gone", hours=2)
        with pytest.raises(UnresolvedResourceError):
            resolve_assignment_cost(assignment, catalog)

    def test_zero_policy_prices_missing_resource_at_zero(self, catalog):
        assignment = ResourceAssignment(resource_id="res_gone", hours=2)
        cost = resolve_assignment_cost(
            assignment, catalog, on_unresolved=UnresolvedResourcePolicy.ZERO
        )
        assert cost == Decimal("0")

    def test_plain_dict_catalog(self, developer):
        """Any id -> Resource mapping works as a catalog."""
        assignment = ResourceAssignment(resource_id="res_dev", hours=1)
        assert resolve_assignment_cost(assignment, {"res_dev": developer}) == Decimal("50")
