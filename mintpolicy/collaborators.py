"""
collaborators.py - In-Memory Collaborators

Default implementations of the external contracts the policy engine
depends on:

    SingleAdminAccessControl  - AccessControl with one privileged identity
    DirectCallerGuard         - CallerOriginGuard rejecting relayed requests
    ItemRegistry              - OwnershipLedger keeping item_id -> owner
    Treasury                  - FundsCustody accumulating sale payments
    BaseURIStore              - MetadataStore holding one base URI

None of these enforce policy invariants; that is the Collection's job.
"""

from __future__ import annotations
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from .core import MintRequest, DEFAULT_BASE_URI


class SingleAdminAccessControl:
    """Exactly one identity is privileged."""

    def __init__(self, admin: str):
        if not admin or not admin.strip():
            raise ValueError("admin cannot be empty")
        self.admin = admin

    def is_privileged(self, identity: str) -> bool:
        return identity == self.admin


class DirectCallerGuard:
    """Accepts a request only when the requester sent it themselves."""

    def is_direct_caller(self, request: MintRequest) -> bool:
        return request.origin is None or request.origin == request.caller


class ItemRegistry:
    """
    Ownership ledger for minted items.

    Identifiers are unique; creating an existing id raises ValueError.
    Transfers are not modeled.
    """

    def __init__(self):
        self.owners: Dict[int, str] = {}
        self._items_by_owner: Dict[str, List[int]] = defaultdict(list)

    def create_item(self, owner: str, item_id: int) -> None:
        if item_id in self.owners:
            raise ValueError(f"item {item_id} already exists")
        self.owners[item_id] = owner
        self._items_by_owner[owner].append(item_id)

    def remove_item(self, item_id: int) -> None:
        owner = self.owners.pop(item_id)
        self._items_by_owner[owner].remove(item_id)

    def owner_of(self, item_id: int) -> Optional[str]:
        return self.owners.get(item_id)

    def items_of(self, owner: str) -> List[int]:
        return list(self._items_by_owner.get(owner, ()))

    def balance_of(self, owner: str) -> int:
        return len(self._items_by_owner.get(owner, ()))

    def __len__(self) -> int:
        return len(self.owners)

    def clone(self) -> ItemRegistry:
        cloned = ItemRegistry()
        for item_id in sorted(self.owners):
            cloned.create_item(self.owners[item_id], item_id)
        return cloned


class Treasury:
    """
    Accumulates sale payments until the administrator withdraws them.

    payouts records every withdrawal per recipient.
    """

    def __init__(self):
        self._balance = Decimal("0")
        self.payouts: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))

    @property
    def balance(self) -> Decimal:
        return self._balance

    def deposit(self, amount: Decimal) -> None:
        if amount < 0:
            raise ValueError(f"deposit must be non-negative, got {amount}")
        self._balance += amount

    def withdraw_all(self, to: str) -> Decimal:
        amount = self._balance
        self._balance = Decimal("0")
        self.payouts[to] += amount
        return amount

    def clone(self) -> Treasury:
        cloned = Treasury()
        cloned._balance = self._balance
        cloned.payouts.update(self.payouts)
        return cloned


class BaseURIStore:
    """Holds the base URI; item metadata resolves at base_uri + item_id."""

    def __init__(self, base_uri: str = DEFAULT_BASE_URI):
        self._base_uri = base_uri

    def get_base_uri(self) -> str:
        return self._base_uri

    def set_base_uri(self, uri: str) -> None:
        self._base_uri = uri

    def clone(self) -> BaseURIStore:
        return BaseURIStore(self._base_uri)
