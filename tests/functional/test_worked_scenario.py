"""
test_worked_scenario.py - End-to-end walk through a small collection

max_supply=10, reserve_limit=3, public_max_per_tx=5:

    reserve 2                -> reserved 2, minted 2
    public 6                 -> PerTxLimitExceeded
    public 5                 -> 2 + 5 <= 10 - 3 + 2 = 9, minted 7
    reserve 1                -> reserved 3, minted 8
    public 2                 -> 8 + 2 <= 10 - 3 + 3 = 10, minted 10
    public 3 (from minted 8) -> CapacityExceeded
"""

import pytest

from mintpolicy import (
    MintRequest,
    PerTxLimitExceeded,
    CapacityExceeded,
    ReserveExhausted,
    InvalidReserveLimit,
    create_collection,
)
from tests.helpers import ADMIN, all_item_ids


@pytest.fixture
def scenario():
    collection = create_collection(
        "scenario", max_supply=10, admin=ADMIN, reserve_limit=3,
        public_max_per_tx=5, verbose=False,
    )
    collection.reserve(ADMIN, 2)
    collection.toggle_public_sale(ADMIN)
    return collection


class TestWorkedScenario:

    def test_reserve_two(self, scenario):
        assert scenario.reserved_count == 2
        assert scenario.minted_count == 2
        assert scenario.items_of(ADMIN) == [0, 1]

    def test_public_six_exceeds_per_tx(self, scenario):
        with pytest.raises(PerTxLimitExceeded):
            scenario.mint_public(MintRequest("alice", 6))
        assert scenario.minted_count == 2

    def test_public_five_fits_under_sale_ceiling(self, scenario):
        record = scenario.mint_public(MintRequest("alice", 5))
        assert record.item_ids == [2, 3, 4, 5, 6]
        assert scenario.minted_count == 7

    def test_full_walk(self, scenario):
        scenario.mint_public(MintRequest("alice", 5))

        scenario.reserve(ADMIN, 1)
        assert scenario.reserved_count == 3
        assert scenario.minted_count == 8

        before = scenario.get_state()
        with pytest.raises(CapacityExceeded):
            scenario.mint_public(MintRequest("bob", 3))
        assert scenario.get_state() == before

        record = scenario.mint_public(MintRequest("bob", 2))
        assert record.item_ids == [8, 9]
        assert scenario.minted_count == 10
        assert scenario.remaining_supply == 0

        assert all_item_ids(scenario) == list(range(10))
        assert scenario.items_of(ADMIN) == [0, 1, 7]
        assert scenario.verify_invariants()['valid']

    def test_pool_exhausted_after_walk(self, scenario):
        scenario.reserve(ADMIN, 1)
        with pytest.raises(ReserveExhausted):
            scenario.reserve(ADMIN, 1)

    def test_unfilled_reserve_held_back_from_sale(self, scenario):
        # 1 reserved slot is still unfilled: sale ceiling is 9
        scenario.mint_public(MintRequest("alice", 5))
        scenario.mint_public(MintRequest("bob", 2))
        with pytest.raises(CapacityExceeded):
            scenario.mint_public(MintRequest("carol", 1))

        scenario.reserve(ADMIN, 1)
        assert scenario.minted_count == 10
        assert scenario.items_of(ADMIN) == [0, 1, 9]

    def test_lowering_limit_releases_capacity(self, scenario):
        scenario.mint_public(MintRequest("alice", 5))
        scenario.mint_public(MintRequest("bob", 2))

        scenario.set_reserve_limit(ADMIN, 2)
        scenario.mint_public(MintRequest("carol", 1))
        assert scenario.minted_count == 10

        with pytest.raises(InvalidReserveLimit):
            scenario.set_reserve_limit(ADMIN, 2)
