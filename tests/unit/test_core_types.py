"""
test_core_types.py - Unit tests for core data structures

Tests:
- CollectionConfig validation and genesis state
- build_issuance / PendingIssuance semantics
- StateChange diffing
- Canonical state hashing
- IssuanceRecord rendering
"""

import pytest
from decimal import Decimal

from mintpolicy import (
    CollectionConfig,
    InvalidConfiguration,
    ItemGrant,
    IssuanceOrigin,
    OriginType,
    StateChange,
    build_issuance,
    empty_pending_issuance,
    compute_state_hash,
    DEFAULT_PUBLIC_MAX_PER_TX,
    DEFAULT_PRESALE_MAX_PER_ACCOUNT,
    DEFAULT_UNIT_PRICE,
)
from mintpolicy.core import STATE_KEYS, freeze_accounts
from tests.fake_view import FakeView, make_state


ORIGIN = IssuanceOrigin(OriginType.ADMIN, "owner", "TEST")


class TestCollectionConfig:

    def test_defaults(self):
        config = CollectionConfig(max_supply=100)
        assert config.reserve_limit == 0
        assert config.max_presale_supply == 100
        assert config.public_max_per_tx == DEFAULT_PUBLIC_MAX_PER_TX
        assert config.presale_max_per_tx == DEFAULT_PRESALE_MAX_PER_ACCOUNT
        assert config.unit_price == DEFAULT_UNIT_PRICE

    def test_initial_state_has_every_key(self):
        state = CollectionConfig(max_supply=10, reserve_limit=3).initial_state()
        assert tuple(state) == STATE_KEYS
        assert state['minted_count'] == 0
        assert state['reserved_count'] == 0
        assert state['whitelist'] == frozenset()
        assert state['presale_bought'] == {}

    def test_price_normalized(self):
        assert CollectionConfig(max_supply=10, unit_price=0.5).unit_price == Decimal("0.5")

    @pytest.mark.parametrize("max_supply", [0, -5, 10.0, True])
    def test_invalid_max_supply(self, max_supply):
        with pytest.raises(InvalidConfiguration):
            CollectionConfig(max_supply=max_supply)

    def test_reserve_above_max_supply(self):
        with pytest.raises(InvalidConfiguration, match="reserve_limit"):
            CollectionConfig(max_supply=10, reserve_limit=11)

    def test_ceiling_above_max_supply(self):
        with pytest.raises(InvalidConfiguration, match="public_max_per_tx"):
            CollectionConfig(max_supply=5)

    def test_negative_price(self):
        with pytest.raises(InvalidConfiguration):
            CollectionConfig(max_supply=10, unit_price=Decimal("-0.01"))


class TestBuildIssuance:

    def test_unchanged_state_drops_change(self):
        view = FakeView()
        pending = build_issuance(view, view.get_state(), ORIGIN)
        assert pending.state_change is None
        assert pending.is_empty()

    def test_snapshots_are_copies(self):
        view = FakeView()
        old = view.get_state()
        new = {**old, 'presale_bought': {"alice": 1}}
        pending = build_issuance(view, new, ORIGIN, old_state=old)

        new['presale_bought']['alice'] = 99
        assert pending.state_change.new_state['presale_bought'] == {"alice": 1}

    def test_empty_pending(self):
        assert empty_pending_issuance(ORIGIN).is_empty()

    def test_payment_alone_is_not_empty(self):
        pending = build_issuance(FakeView(), None, ORIGIN, payment=Decimal("1"))
        assert not pending.is_empty()


class TestStateChange:

    def test_changed_fields(self):
        old = make_state()
        new = {**old, 'minted_count': 3, 'public_active': True}
        assert StateChange(old, new).changed_fields() == {
            'minted_count': (0, 3),
            'public_active': (False, True),
        }


class TestItemGrant:

    def test_negative_id_rejected(self):
        with pytest.raises(ValueError):
            ItemGrant("alice", -1)

    def test_empty_owner_rejected(self):
        with pytest.raises(ValueError):
            ItemGrant("", 0)


class TestStateHash:

    def test_whitelist_order_irrelevant(self):
        a = make_state(whitelist=["alice", "bob", "carol"])
        b = make_state(whitelist=["carol", "alice", "bob"])
        assert compute_state_hash(a) == compute_state_hash(b)

    def test_decimal_representation_irrelevant(self):
        a = make_state(unit_price=Decimal("0.1"))
        b = make_state(unit_price=Decimal("0.100"))
        assert compute_state_hash(a) == compute_state_hash(b)

    def test_counters_matter(self):
        assert compute_state_hash(make_state()) != compute_state_hash(make_state(minted_count=1))

    def test_extra_folded_in(self):
        state = make_state()
        assert compute_state_hash(state, {'base_uri': "a"}) != compute_state_hash(state, {'base_uri': "b"})

    def test_hex_digest(self):
        digest = compute_state_hash(make_state())
        assert len(digest) == 64
        int(digest, 16)


class TestFreezeAccounts:

    def test_string_is_single_account(self):
        assert freeze_accounts("alice") == frozenset({"alice"})

    def test_iterable(self):
        assert freeze_accounts(("alice", "bob", "alice")) == frozenset({"alice", "bob"})
