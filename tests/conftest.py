"""
Pytest fixtures for the budget pricing engine test suite.

Provides:
- A small resource catalog covering every cost model
- Activity / policy builders
- Logging isolation between tests

No database or network: every engine under test is a pure function.
"""

from decimal import Decimal

import pytest

from budget_kernel.domain.budget import (
    Activity,
    CostType,
    Resource,
    ResourceAssignment,
    ResourceCatalog,
)
from budget_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Leave no handlers or context behind."""
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def developer():
    """Hourly resource at 50/h."""
    return Resource(id="res_dev", name="Developer", cost_type=CostType.HOURLY,
                    price_per_hour=Decimal("50"))


@pytest.fixture
def licence():
    """Per-unit resource at 12.50/unit."""
    return Resource(id="res_lic", name="Licence", cost_type=CostType.QUANTITY,
                    price_per_hour=Decimal("12.50"))


@pytest.fixture
def hosting():
    """Flat-fee resource; its unit price is ignored."""
    return Resource(id="res_host", name="Hosting", cost_type=CostType.FIXED,
                    price_per_hour=Decimal("999"))


@pytest.fixture
def catalog(developer, licence, hosting):
    return ResourceCatalog([developer, licence, hosting])


def make_activity(
    activity_id="act_1",
    assignments=(),
    vat="22",
    discount=None,
    name=None,
):
    """Build an Activity from (resource_id, hours[, fixed_price]) tuples."""
    return Activity(
        id=activity_id,
        name=name or activity_id,
        resources=tuple(
            ResourceAssignment(resource_id=a[0], hours=a[1],
                               fixed_price=a[2] if len(a) > 2 else 0)
            for a in assignments
        ),
        vat=vat,
        discount=discount,
    )


@pytest.fixture
def build_activity():
    return make_activity
