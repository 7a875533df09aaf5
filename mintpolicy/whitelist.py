"""
whitelist.py - Presale Eligibility Registry

Set membership toggles are processed as batches: order is irrelevant and
duplicates are harmless. A batch that changes nothing yields an empty
PendingIssuance.

Per-account presale counters only grow. All presale validation lives in
issuance.compute_presale_mint(); calculate_presale_purchase() is called only
after those checks pass.
"""

from __future__ import annotations
from typing import Dict, Iterable

from .core import (
    CollectionView, PendingIssuance, IssuanceOrigin, OriginType,
    EVENT_WHITELIST_ADD, EVENT_WHITELIST_REMOVE,
    build_issuance, freeze_accounts,
)


def compute_add_to_whitelist(view: CollectionView, admin: str, accounts: Iterable[str]) -> PendingIssuance:
    """Grant presale eligibility to every account in the batch."""
    state = view.get_state()
    batch = freeze_accounts(accounts)
    new_state = {**state, 'whitelist': frozenset(state['whitelist']) | batch}
    origin = IssuanceOrigin(OriginType.ADMIN, admin, EVENT_WHITELIST_ADD)
    return build_issuance(view, new_state, origin, old_state=state)


def compute_remove_from_whitelist(view: CollectionView, admin: str, accounts: Iterable[str]) -> PendingIssuance:
    """
    Revoke presale eligibility for every account in the batch.

    Purchase counters are kept: an account that is later re-added resumes
    from what it has already bought.
    """
    state = view.get_state()
    batch = freeze_accounts(accounts)
    new_state = {**state, 'whitelist': frozenset(state['whitelist']) - batch}
    origin = IssuanceOrigin(OriginType.ADMIN, admin, EVENT_WHITELIST_REMOVE)
    return build_issuance(view, new_state, origin, old_state=state)


def calculate_presale_purchase(bought: Dict[str, int], account: str, quantity: int) -> Dict[str, int]:
    """Return a copy of the presale counters with quantity added for account."""
    updated = dict(bought)
    updated[account] = updated.get(account, 0) + quantity
    return updated
