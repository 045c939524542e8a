"""Tests for the Margin Engine."""

from decimal import Decimal

from budget_engines.margin import calculate_margin, select_margin_base
from budget_kernel.domain.budget import GeneralMargin, MarginBase

BEFORE = Decimal("610")
AFTER = Decimal("560")


class TestMargin:

    def test_percentage_before_discount(self):
        margin = GeneralMargin(enabled=True, value=10, apply_on="beforeDiscount")
        assert calculate_margin(margin, BEFORE, AFTER) == Decimal("61")

    def test_percentage_after_discount(self):
        margin = GeneralMargin(enabled=True, value=10, apply_on="afterDiscount")
        assert calculate_margin(margin, BEFORE, AFTER) == Decimal("56")

    def test_fixed(self):
        margin = GeneralMargin(enabled=True, type="fixed", value=40)
        assert calculate_margin(margin, BEFORE, AFTER) == Decimal("40")

    def test_disabled(self):
        margin = GeneralMargin(enabled=False, value=25)
        assert calculate_margin(margin, BEFORE, AFTER) == Decimal("0")

    def test_absent(self):
        assert calculate_margin(None, BEFORE, AFTER) == Decimal("0")

    def test_default_base_is_before_discount(self):
        assert GeneralMargin().apply_on is MarginBase.BEFORE_DISCOUNT

    def test_base_selection(self):
        assert select_margin_base(MarginBase.BEFORE_DISCOUNT, BEFORE, AFTER) == BEFORE
        assert select_margin_base(MarginBase.AFTER_DISCOUNT, BEFORE, AFTER) == AFTER
