"""
Tests for supply.py - Supply Ledger and Capacity Views

Tests:
- calculate_record_mint against the total cap
- Derived ceilings (sale, presale, unfilled reserve)
- SupplySnapshot views and load_supply adapter
- Sequential identifier allocation
"""

import pytest

from mintpolicy import (
    CapacityExceeded,
    SupplySnapshot,
    load_supply,
    calculate_record_mint,
    calculate_sale_ceiling,
    calculate_presale_ceiling,
    calculate_unfilled_reserve,
    allocate_item_ids,
)
from tests.fake_view import FakeView


class TestRecordMint:

    def test_increments_count(self):
        assert calculate_record_mint(3, 4, 10) == 7

    def test_exact_cap_allowed(self):
        assert calculate_record_mint(7, 3, 10) == 10

    def test_over_cap_rejected(self):
        with pytest.raises(CapacityExceeded, match="above max supply 10"):
            calculate_record_mint(8, 3, 10)

    def test_full_supply_rejects_any_mint(self):
        with pytest.raises(CapacityExceeded):
            calculate_record_mint(10, 1, 10)


class TestCeilings:

    def test_sale_ceiling_subtracts_unfilled_reserve(self):
        # 10 - 3 + 0
        assert calculate_sale_ceiling(10, 3, 0) == 7
        # 10 - 3 + 2
        assert calculate_sale_ceiling(10, 3, 2) == 9

    def test_sale_ceiling_with_filled_reserve_is_max_supply(self):
        assert calculate_sale_ceiling(10, 3, 3) == 10

    def test_unfilled_reserve(self):
        assert calculate_unfilled_reserve(3, 1) == 2
        assert calculate_unfilled_reserve(0, 0) == 0

    def test_presale_ceiling_uses_sub_cap(self):
        # presale cap 4 + 1 reserved = 5, sale ceiling 100 - 10 + 1 = 91
        assert calculate_presale_ceiling(100, 10, 1, 4) == 5

    def test_presale_ceiling_bounded_by_sale_ceiling(self):
        # presale cap 100 + 0 = 100, sale ceiling 100 - 10 = 90
        assert calculate_presale_ceiling(100, 10, 0, 100) == 90


class TestSupplySnapshot:

    def test_load_supply_reads_view(self):
        view = FakeView(max_supply=10, reserve_limit=3, reserved_count=2, minted_count=7)
        snap = load_supply(view)

        assert snap == SupplySnapshot(
            max_supply=10, minted_count=7, reserve_limit=3, reserved_count=2, max_presale_supply=10,
        )
        assert snap.remaining == 3
        assert snap.unfilled_reserve == 1
        assert snap.sale_ceiling == 9
        assert snap.sale_capacity == 2

    def test_capacity_never_negative(self):
        # Reserve limit left unfilled while sales already consumed the rest
        snap = SupplySnapshot(
            max_supply=10, minted_count=9, reserve_limit=3, reserved_count=0, max_presale_supply=2,
        )
        assert snap.sale_capacity == 0
        assert snap.presale_capacity == 0

    def test_snapshot_is_frozen(self):
        snap = load_supply(FakeView())
        with pytest.raises(AttributeError):
            snap.minted_count = 5


class TestAllocateItemIds:

    def test_starts_at_minted_count(self):
        assert allocate_item_ids(7, 3) == [7, 8, 9]

    def test_from_zero(self):
        assert allocate_item_ids(0, 2) == [0, 1]
