"""
invariants.py - Policy State Invariants

INVARIANTS checked after every applied operation:

    0 <= minted_count <= max_supply
    0 <= reserved_count <= reserve_limit <= max_supply
    reserved_count <= minted_count
    max_presale_supply <= max_supply
    public_max_per_tx <= max_supply, presale_max_per_tx <= max_supply
    unit_price >= 0

History invariants (monotonic counters, non-increasing reserve limit,
fixed max_supply) compare two consecutive states.
"""

from __future__ import annotations
from typing import List

from .core import CollectionState


def check_invariants(state: CollectionState) -> List[str]:
    """
    Return a description of every invariant the state violates.

    An empty list means the state is valid.
    """
    violations: List[str] = []
    max_supply = state['max_supply']
    minted = state['minted_count']
    reserved = state['reserved_count']
    limit = state['reserve_limit']

    if not 0 <= minted <= max_supply:
        violations.append(f"minted_count {minted} outside [0, {max_supply}]")
    if not 0 <= reserved <= limit:
        violations.append(f"reserved_count {reserved} outside [0, reserve_limit {limit}]")
    if limit > max_supply:
        violations.append(f"reserve_limit {limit} above max_supply {max_supply}")
    if reserved > minted:
        violations.append(f"reserved_count {reserved} above minted_count {minted}")
    for key in ('max_presale_supply', 'public_max_per_tx', 'presale_max_per_tx'):
        if not 0 <= state[key] <= max_supply:
            violations.append(f"{key} {state[key]} outside [0, {max_supply}]")
    if state['unit_price'] < 0:
        violations.append(f"unit_price {state['unit_price']} is negative")
    for account, bought in state['presale_bought'].items():
        if bought < 0:
            violations.append(f"presale_bought[{account}] {bought} is negative")
    return violations


def check_transition(old: CollectionState, new: CollectionState) -> List[str]:
    """Return a description of every history invariant broken by old -> new."""
    violations: List[str] = []
    if new['max_supply'] != old['max_supply']:
        violations.append(f"max_supply changed from {old['max_supply']} to {new['max_supply']}")
    for key in ('minted_count', 'reserved_count'):
        if new[key] < old[key]:
            violations.append(f"{key} decreased from {old[key]} to {new[key]}")
    if new['reserve_limit'] > old['reserve_limit']:
        violations.append(f"reserve_limit increased from {old['reserve_limit']} to {new['reserve_limit']}")
    for account, bought in old['presale_bought'].items():
        if new['presale_bought'].get(account, 0) < bought:
            violations.append(f"presale_bought[{account}] decreased")
    return violations
