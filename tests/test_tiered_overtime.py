"""Tests for cumulative tier-1 / tier-2 overtime allocation."""

import pytest
from decimal import Decimal

from overtime_tool.engine.tiered_overtime import TierAllocator

M1 = Decimal("1.5")
M2 = Decimal("2.0")


class TestTierAllocator:
    def test_disabled_everything_tier1(self):
        allocator = TierAllocator(enabled=False)
        split = allocator.allocate(Decimal("6"), Decimal("2"), M1, M2)
        assert split.tier1_hours == Decimal("6")
        assert split.tier2_hours == Decimal("0")
        assert allocator.accumulated == Decimal("6")

    def test_split_at_threshold(self):
        split = TierAllocator(enabled=True).allocate(Decimal("6"), Decimal("2"), M1, M2)
        assert split.tier1_hours == Decimal("2")
        assert split.tier2_hours == Decimal("4")

    def test_accumulates_across_calls(self):
        allocator = TierAllocator(enabled=True)
        first = allocator.allocate(Decimal("3"), Decimal("5"), M1, M2)
        second = allocator.allocate(Decimal("3"), Decimal("5"), M1, M2)
        third = allocator.allocate(Decimal("1"), Decimal("5"), M1, M2)
        assert (first.tier1_hours, first.tier2_hours) == (Decimal("3"), Decimal("0"))
        assert (second.tier1_hours, second.tier2_hours) == (Decimal("2"), Decimal("1"))
        assert (third.tier1_hours, third.tier2_hours) == (Decimal("0"), Decimal("1"))

    def test_exactly_reaching_threshold_stays_tier1(self):
        split = TierAllocator(enabled=True).allocate(Decimal("4"), Decimal("4"), M1, M2)
        assert split.tier2_hours == Decimal("0")

    def test_zero_threshold_all_tier2(self):
        split = TierAllocator(enabled=True).allocate(Decimal("2"), Decimal("0"), M1, M2)
        assert split.tier1_hours == Decimal("0")
        assert split.tier2_hours == Decimal("2")

    def test_tier2_multiplier_not_above_tier1_disables_tiering(self):
        allocator = TierAllocator(enabled=True)
        split = allocator.allocate(Decimal("6"), Decimal("2"), M1, Decimal("1.5"))
        assert split.tier2_hours == Decimal("0")
        assert allocator.accumulated == Decimal("6")

    def test_zero_overtime_still_consistent(self):
        allocator = TierAllocator(enabled=True)
        split = allocator.allocate(Decimal("0"), Decimal("2"), M1, M2)
        assert split.tier1_hours + split.tier2_hours == Decimal("0")
        assert allocator.accumulated == Decimal("0")

    @pytest.mark.parametrize("overtimes", [("1", "2", "3"), ("0.3333", "0.6667", "5"), ("10",)])
    def test_tiers_sum_to_overtime(self, overtimes):
        allocator = TierAllocator(enabled=True)
        for ot in overtimes:
            split = allocator.allocate(Decimal(ot), Decimal("1.5"), M1, M2)
            assert split.tier1_hours + split.tier2_hours == Decimal(ot)
