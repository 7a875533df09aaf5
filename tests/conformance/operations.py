"""
Random operation sequences shared by the conformance suites.

Each operation is a (name, args) tuple applied to a Collection with
apply_operation(). Policy rejections are returned, not raised, so a
sequence always runs to completion.
"""

from decimal import Decimal

from hypothesis import strategies as st

from mintpolicy import IssuanceError, MintRequest, create_collection
from tests.helpers import ADMIN


ACCOUNTS = ["alice", "bob", "carol", "dave"]

accounts = st.sampled_from(ACCOUNTS)
quantities = st.integers(min_value=1, max_value=6)

operations = st.one_of(
    st.tuples(st.just("reserve"), quantities),
    st.tuples(st.just("set_reserve_limit"), st.integers(min_value=0, max_value=25)),
    st.tuples(st.just("add_to_whitelist"), st.lists(accounts, min_size=1, max_size=3)),
    st.tuples(st.just("remove_from_whitelist"), st.lists(accounts, min_size=1, max_size=2)),
    st.tuples(st.just("toggle_presale")),
    st.tuples(st.just("toggle_public_sale")),
    st.tuples(st.just("set_public_max_per_tx"), st.integers(min_value=0, max_value=8)),
    st.tuples(st.just("set_presale_max_per_tx"), st.integers(min_value=0, max_value=8)),
    st.tuples(st.just("set_presale_cap"), st.integers(min_value=0, max_value=20)),
    st.tuples(st.just("mint_public"), accounts, quantities),
    st.tuples(st.just("mint_presale"), accounts, quantities),
    st.tuples(st.just("mint_public_relayed"), accounts, quantities),
    st.tuples(st.just("unauthorized_reserve"), accounts, quantities),
)

operation_sequences = st.lists(operations, min_size=1, max_size=40)


def new_collection(name="conformance"):
    return create_collection(
        name, max_supply=20, admin=ADMIN, reserve_limit=5,
        public_max_per_tx=4, presale_max_per_tx=3, max_presale_supply=12,
        verbose=False,
    )


def apply_operation(collection, operation):
    """Apply one operation; return the IssuanceError if it was rejected."""
    name, *args = operation
    try:
        if name == "mint_public":
            collection.mint_public(MintRequest(args[0], args[1], payment=Decimal("0")))
        elif name == "mint_presale":
            collection.mint_presale(MintRequest(args[0], args[1]))
        elif name == "mint_public_relayed":
            collection.mint_public(MintRequest(args[0], args[1], origin="relayer"))
        elif name == "unauthorized_reserve":
            collection.reserve(args[0], args[1])
        else:
            getattr(collection, name)(ADMIN, *args)
    except IssuanceError as e:
        return e
    return None
