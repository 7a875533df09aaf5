"""
conftest.py - Shared pytest fixtures for mintpolicy tests

Provides common fixtures used across unit, functional and conformance tests:
- Collections at various stages (fresh, sale-open, priced)
- The privileged identity used throughout
"""

import pytest
from decimal import Decimal

from mintpolicy import create_collection
from tests.helpers import ADMIN


@pytest.fixture
def admin():
    return ADMIN


@pytest.fixture
def collection():
    """Fresh collection: max supply 100, reserve 10, public 5/tx, presale 3/account."""
    return create_collection(
        "test", max_supply=100, admin=ADMIN, reserve_limit=10,
        public_max_per_tx=5, presale_max_per_tx=3, verbose=False,
    )


@pytest.fixture
def small_collection():
    """Small collection: max supply 10, reserve 3, public 5/tx."""
    return create_collection(
        "small", max_supply=10, admin=ADMIN, reserve_limit=3,
        public_max_per_tx=5, verbose=False,
    )


@pytest.fixture
def public_collection(collection):
    """Collection with the public sale open."""
    collection.toggle_public_sale(ADMIN)
    return collection


@pytest.fixture
def presale_collection(collection):
    """Collection with the presale open and alice and bob whitelisted."""
    collection.add_to_whitelist(ADMIN, ["alice", "bob"])
    collection.toggle_presale(ADMIN)
    return collection


@pytest.fixture
def priced_collection():
    """Public sale open at 0.08 per item."""
    c = create_collection(
        "priced", max_supply=50, admin=ADMIN, reserve_limit=5,
        unit_price=Decimal("0.08"), verbose=False,
    )
    c.toggle_public_sale(ADMIN)
    return c
