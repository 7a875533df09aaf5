"""
collection.py - Stateful Issuance Collection

The Collection class is the central state manager of the issuance policy.
It is the only module that mutates policy state, ensuring controlled and
auditable changes.

Key responsibilities:
    - Implements CollectionView for read-only access by compute functions
    - Gates administrative operations through the injected AccessControl
    - Rejects relayed mint requests through the injected CallerOriginGuard
    - Executes pending issuances atomically under one lock: policy state,
      item creation and payment deposit succeed together or not at all
    - Always validates and always logs
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple
import copy
import threading

from .core import (
    # Types
    CollectionConfig, CollectionState, MintRequest,
    PendingIssuance, IssuanceRecord, ExecuteResult, StateChange,
    AccessControl, CallerOriginGuard, OwnershipLedger, FundsCustody, MetadataStore,
    # Exceptions
    IssuanceError, Unauthorized, IndirectCallRejected,
    # Helpers
    compute_state_hash,
)
from .collaborators import (
    SingleAdminAccessControl, DirectCallerGuard, ItemRegistry, Treasury, BaseURIStore,
)
from .invariants import check_invariants, check_transition
from .issuance import compute_public_mint, compute_presale_mint
from .reservation import compute_reserve, compute_set_reserve_limit
from .sale import (
    compute_toggle_presale, compute_toggle_public_sale,
    compute_set_public_max_per_tx, compute_set_presale_max_per_tx,
    compute_set_presale_cap, compute_set_unit_price,
)
from .supply import snapshot_from_state, SupplySnapshot
from .whitelist import compute_add_to_whitelist, compute_remove_from_whitelist


class Collection:
    """
    Bounded-supply collectible catalog with full validation and audit trail.

    Implements the CollectionView protocol, so compute functions can be
    handed the collection itself.

    Design Principles:
        - Always validates: every pending issuance is checked against the
          live state (optimistic concurrency) and against the policy
          invariants before it is applied.
        - Always logs: every applied operation is recorded in issuance_log,
          enabling replay().

    Thread Safety:
        Every check-then-act sequence runs under a single re-entrant lock.
        Concurrent requests are serialized; none observes another's
        intermediate state.

    Example:
        collection = create_collection("genesis", max_supply=10, admin="owner",
                                       reserve_limit=3)
        collection.reserve("owner", 2)
        collection.toggle_public_sale("owner")
        record = collection.mint_public(MintRequest("alice", 5))
        record.item_ids   # [2, 3, 4, 5, 6]
    """

    def __init__(
        self,
        name: str,
        config: CollectionConfig,
        access: AccessControl,
        origin_guard: Optional[CallerOriginGuard] = None,
        ownership: Optional[OwnershipLedger] = None,
        custody: Optional[FundsCustody] = None,
        metadata: Optional[MetadataStore] = None,
        verbose: bool = True,
    ):
        """
        Deploy a collection.

        Args:
            name: Collection identifier
            config: Deployment parameters (max_supply is fixed from here on)
            access: Decides who may run administrative operations
            origin_guard: Rejects relayed mint requests (default: DirectCallerGuard)
            ownership: Receives one create_item() per minted item (default: ItemRegistry)
            custody: Receives sale payments (default: Treasury)
            metadata: Holds the base URI (default: BaseURIStore seeded from config)
            verbose: Print applied and rejected operations (default: True)
        """
        self.name = name
        self.config = config
        self.access = access
        self.origin_guard = origin_guard or DirectCallerGuard()
        self.ownership = ownership if ownership is not None else ItemRegistry()
        self.custody = custody if custody is not None else Treasury()
        self.metadata = metadata if metadata is not None else BaseURIStore(config.base_uri)
        self.verbose = verbose

        self._state: CollectionState = config.initial_state()
        self._genesis_state: CollectionState = copy.deepcopy(self._state)
        self.issuance_log: List[IssuanceRecord] = []
        self._next_sequence: int = 0
        self._lock = threading.RLock()

        if self.verbose:
            print(f"📝 Deployed: {name} [max_supply={config.max_supply}, "
                  f"reserve_limit={config.reserve_limit}, unit_price={config.unit_price}]")

    # ========================================================================
    # CollectionView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    def get_state(self) -> CollectionState:
        """Deep copy of the policy state; safe to mutate."""
        with self._lock:
            return copy.deepcopy(self._state)

    def is_whitelisted(self, account: str) -> bool:
        return account in self._state['whitelist']

    def presale_bought(self, account: str) -> int:
        return self._state['presale_bought'].get(account, 0)

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def max_supply(self) -> int:
        return self._state['max_supply']

    @property
    def minted_count(self) -> int:
        return self._state['minted_count']

    total_supply = minted_count

    @property
    def reserved_count(self) -> int:
        return self._state['reserved_count']

    @property
    def reserve_limit(self) -> int:
        return self._state['reserve_limit']

    @property
    def presale_active(self) -> bool:
        return self._state['presale_active']

    @property
    def public_active(self) -> bool:
        return self._state['public_active']

    @property
    def unit_price(self) -> Decimal:
        return self._state['unit_price']

    @property
    def base_uri(self) -> str:
        return self.metadata.get_base_uri()

    def supply(self) -> SupplySnapshot:
        """Frozen view of counters and derived ceilings."""
        with self._lock:
            return snapshot_from_state(self._state)

    @property
    def remaining_supply(self) -> int:
        return self.supply().remaining

    @property
    def sale_capacity(self) -> int:
        return self.supply().sale_capacity

    @property
    def presale_capacity(self) -> int:
        return self.supply().presale_capacity

    @property
    def unfilled_reserve(self) -> int:
        return self.supply().unfilled_reserve

    # The item queries below need an ownership ledger that can answer them,
    # such as the default ItemRegistry.

    def owner_of(self, item_id: int) -> Optional[str]:
        return self.ownership.owner_of(item_id)

    def items_of(self, owner: str) -> List[int]:
        """Identifiers of every item created for owner, in creation order."""
        return self.ownership.items_of(owner)

    def token_uri(self, item_id: int) -> str:
        """
        Metadata location of an existing item: base URI followed by the id.

        Raises:
            ValueError: If the item has not been minted
        """
        if self.owner_of(item_id) is None:
            raise ValueError(f"item {item_id} does not exist")
        return f"{self.base_uri}{item_id}"

    # ========================================================================
    # SALE OPERATIONS
    # ========================================================================

    def mint_public(self, request: MintRequest) -> IssuanceRecord:
        """
        Mint during the public sale.

        Raises:
            IndirectCallRejected, SaleNotActive, PerTxLimitExceeded,
            CapacityExceeded, PaymentInsufficient
        """
        return self._sale(request, compute_public_mint)

    def mint_presale(self, request: MintRequest) -> IssuanceRecord:
        """
        Mint during the presale.

        Raises:
            IndirectCallRejected, SaleNotActive, NotWhitelisted,
            PerAccountLimitExceeded, CapacityExceeded, PaymentInsufficient
        """
        return self._sale(request, compute_presale_mint)

    def _sale(self, request: MintRequest, compute: Callable[..., PendingIssuance]) -> IssuanceRecord:
        with self._lock:
            if not self.origin_guard.is_direct_caller(request):
                self._reject(IndirectCallRejected(
                    f"request for {request.caller} was relayed by {request.origin}"
                ))
            try:
                pending = compute(self, request.caller, request.quantity, request.payment)
            except IssuanceError as e:
                self._log_rejection(e)
                raise
            return self._commit(pending)

    # ========================================================================
    # ADMINISTRATIVE OPERATIONS
    # ========================================================================

    def reserve(self, admin: str, quantity: int, recipient: Optional[str] = None) -> IssuanceRecord:
        """Mint quantity items from the reservation pool (to admin unless recipient given)."""
        return self._admin(admin, compute_reserve, quantity, recipient)

    def set_reserve_limit(self, admin: str, new_limit: int) -> IssuanceRecord:
        """Lower the reservation pool limit; it can never be raised."""
        return self._admin(admin, compute_set_reserve_limit, new_limit)

    def add_to_whitelist(self, admin: str, accounts) -> Optional[IssuanceRecord]:
        """Grant presale eligibility. Returns None if every account was already eligible."""
        return self._admin(admin, compute_add_to_whitelist, accounts)

    def remove_from_whitelist(self, admin: str, accounts) -> Optional[IssuanceRecord]:
        """Revoke presale eligibility. Returns None if no account was eligible."""
        return self._admin(admin, compute_remove_from_whitelist, accounts)

    def toggle_presale(self, admin: str) -> IssuanceRecord:
        return self._admin(admin, compute_toggle_presale)

    def toggle_public_sale(self, admin: str) -> IssuanceRecord:
        return self._admin(admin, compute_toggle_public_sale)

    def set_public_max_per_tx(self, admin: str, n: int) -> Optional[IssuanceRecord]:
        return self._admin(admin, compute_set_public_max_per_tx, n)

    def set_presale_max_per_tx(self, admin: str, n: int) -> Optional[IssuanceRecord]:
        return self._admin(admin, compute_set_presale_max_per_tx, n)

    def set_presale_cap(self, admin: str, n: int) -> Optional[IssuanceRecord]:
        return self._admin(admin, compute_set_presale_cap, n)

    def set_unit_price(self, admin: str, price: Decimal) -> Optional[IssuanceRecord]:
        return self._admin(admin, compute_set_unit_price, price)

    def set_base_uri(self, admin: str, uri: str) -> None:
        with self._lock:
            self._require_privileged(admin, "set base URI")
            self.metadata.set_base_uri(uri)
            if self.verbose:
                print(f"✓ BASE URI: {uri!r}")

    def withdraw_all(self, admin: str, to: Optional[str] = None) -> Decimal:
        """
        Move the entire custody balance to `to` (defaults to admin).

        Returns:
            The amount withdrawn
        """
        with self._lock:
            self._require_privileged(admin, "withdraw funds")
            amount = self.custody.withdraw_all(to or admin)
            if self.verbose:
                print(f"✓ WITHDRAW: {amount} → {to or admin}")
            return amount

    def _admin(self, admin: str, compute: Callable[..., PendingIssuance], *args) -> Optional[IssuanceRecord]:
        with self._lock:
            self._require_privileged(admin, compute.__name__.replace("compute_", ""))
            try:
                pending = compute(self, admin, *args)
            except IssuanceError as e:
                self._log_rejection(e)
                raise
            return self._commit(pending)

    def _require_privileged(self, identity: str, action: str) -> None:
        if not self.access.is_privileged(identity):
            self._reject(Unauthorized(f"{identity} is not allowed to {action}"))

    def _log_rejection(self, error: IssuanceError) -> None:
        if self.verbose:
            print(f"✗ REJECTED [{type(error).__name__}]: {error}")

    def _reject(self, error: IssuanceError) -> None:
        self._log_rejection(error)
        raise error

    def _commit(self, pending: PendingIssuance) -> Optional[IssuanceRecord]:
        if pending.is_empty():
            return None
        result, reason = self._apply(pending)
        if result == ExecuteResult.REJECTED:
            raise IssuanceError(f"operation rejected: {reason}")
        return self.issuance_log[-1]

    # ========================================================================
    # EXECUTION (Mutating)
    # ========================================================================

    def execute(self, pending: PendingIssuance) -> ExecuteResult:
        """
        Execute a PendingIssuance atomically.

        Policy state, item creation and payment deposit are applied together
        or not at all. The pending issuance is rejected if:
        - its old_state no longer matches the live state (built against a
          stale view)
        - its grants are not the next sequential identifiers
        - its proposed state breaks a policy invariant
        - it grants items or attaches a payment without a state change

        Args:
            pending: PendingIssuance to execute

        Returns:
            ExecuteResult.APPLIED if successful (including empty issuances)
            ExecuteResult.REJECTED if validation failed

        Raises:
            Whatever the ownership ledger or funds custody raises. Items
            already created for this issuance are removed first; policy
            state and issuance_log are untouched.
        """
        if pending.is_empty():
            return ExecuteResult.APPLIED
        result, _ = self._apply(pending)
        return result

    def _apply(self, pending: PendingIssuance) -> Tuple[ExecuteResult, str]:
        with self._lock:
            valid, reason = self._validate_pending(pending)
            if not valid:
                if self.verbose:
                    print(f"✗ REJECTED: {reason}")
                return ExecuteResult.REJECTED, reason

            # Collaborators first; policy state and log only change once
            # every item exists and the payment is held.
            created: List[int] = []
            try:
                for grant in pending.grants:
                    self.ownership.create_item(grant.owner, grant.item_id)
                    created.append(grant.item_id)
                if pending.payment:
                    self.custody.deposit(pending.payment)
            except Exception as e:
                for item_id in reversed(created):
                    self.ownership.remove_item(item_id)
                if self.verbose:
                    print(f"✗ ROLLED BACK [{type(e).__name__}]: {e}")
                raise

            change = pending.state_change
            if change is not None:
                change = StateChange(
                    old_state=copy.deepcopy(change.old_state),
                    new_state=copy.deepcopy(change.new_state),
                )
                self._state = copy.deepcopy(change.new_state)

            sequence = self._next_sequence
            self._next_sequence += 1
            record = IssuanceRecord(
                state_change=change,
                grants=pending.grants,
                payment=pending.payment,
                origin=pending.origin,
                exec_id=f"exec:{self.name}:{sequence:012d}",
                collection_name=self.name,
                sequence_number=sequence,
            )
            self.issuance_log.append(record)
            if self.verbose:
                print(repr(record))
                print("✓ APPLIED")
            return ExecuteResult.APPLIED, ""

    def _validate_pending(self, pending: PendingIssuance) -> Tuple[bool, str]:
        """
        Validate a pending issuance against the live state.

        Returns:
            Tuple of (success: bool, reason: str)
        """
        change = pending.state_change
        if change is None:
            if pending.grants:
                return False, "items granted without a supply change"
            if pending.payment:
                return False, "payment attached without a supply change"
            return True, ""

        if change.old_state != self._state:
            stale = sorted(k for k in set(change.old_state) | set(self._state)
                           if change.old_state.get(k) != self._state.get(k))
            return False, f"stale state: {', '.join(stale)} changed since the issuance was built"

        violations = check_invariants(change.new_state) + check_transition(change.old_state, change.new_state)
        if violations:
            return False, "; ".join(violations)

        minted_before = change.old_state['minted_count']
        minted_after = change.new_state['minted_count']
        expected_ids = list(range(minted_before, minted_after))
        if [g.item_id for g in pending.grants] != expected_ids:
            return False, f"grants must be items {minted_before}..{minted_after - 1} in order"

        return True, ""

    # ========================================================================
    # VERIFICATION, SNAPSHOTS AND REPLAY
    # ========================================================================

    def verify_invariants(self) -> Dict[str, Any]:
        """
        Verify policy invariants and the gap-free identifier sequence.

        Returns:
            Dict with keys:
            - 'valid': bool - True if nothing is violated
            - 'violations': List[str] - description of each violation
        """
        with self._lock:
            violations = check_invariants(self._state)
            genesis_minted = self._genesis_state['minted_count']
            logged_ids = [i for record in self.issuance_log for i in record.item_ids]
            expected = list(range(genesis_minted, self._state['minted_count']))
            if logged_ids != expected:
                violations.append(
                    f"item identifiers are not gap-free: logged {len(logged_ids)} ids, "
                    f"expected {genesis_minted}..{self._state['minted_count'] - 1}"
                )
            return {'valid': not violations, 'violations': violations}

    def snapshot(self) -> Dict[str, Any]:
        """
        Persisted state surface as plain values: policy state plus base URI.

        The whitelist is rendered as a sorted list.
        """
        with self._lock:
            state = copy.deepcopy(self._state)
        state['whitelist'] = sorted(state['whitelist'])
        state['base_uri'] = self.base_uri
        return state

    def state_hash(self) -> str:
        """Canonical SHA-256 fingerprint of the policy state and base URI."""
        with self._lock:
            return compute_state_hash(self._state, {'base_uri': self.base_uri})

    def clone(self) -> Collection:
        """
        Create a deep copy of this collection.

        State, audit log and the in-memory collaborators are independent of
        the original. Access control and the origin guard are shared.
        """
        with self._lock:
            cloned = Collection.__new__(Collection)
            cloned.name = self.name
            cloned.config = self.config
            cloned.access = self.access
            cloned.origin_guard = self.origin_guard
            cloned.ownership = _clone_collaborator(self.ownership)
            cloned.custody = _clone_collaborator(self.custody)
            cloned.metadata = _clone_collaborator(self.metadata)
            cloned.verbose = self.verbose
            cloned._state = copy.deepcopy(self._state)
            cloned._genesis_state = copy.deepcopy(self._genesis_state)
            cloned.issuance_log = list(self.issuance_log)
            cloned._next_sequence = self._next_sequence
            cloned._lock = threading.RLock()
            return cloned

    def replay(self, from_record: int = 0) -> Collection:
        """
        Rebuild a collection by re-executing the audit log.

        Starts from the genesis configuration with fresh default
        collaborators and re-executes records from from_record onward.
        The replayed collection's policy state, item ownership and total
        deposits match the original. Base URI changes and withdrawals are
        not part of the log.

        Raises:
            IssuanceError: If a logged record no longer applies
        """
        replayed = Collection(
            name=f"{self.name}_replayed",
            config=self.config,
            access=self.access,
            origin_guard=self.origin_guard,
            verbose=self.verbose,
        )
        records = self.issuance_log[from_record:]
        if records and records[0].state_change is not None:
            replayed._state = copy.deepcopy(records[0].state_change.old_state)
            replayed._genesis_state = copy.deepcopy(replayed._state)

        for record in records:
            pending = PendingIssuance(
                state_change=record.state_change,
                grants=record.grants,
                origin=record.origin,
                payment=record.payment,
            )
            if replayed.execute(pending) == ExecuteResult.REJECTED:
                raise IssuanceError(f"Replay failed at {record.exec_id}")
        return replayed


def _clone_collaborator(collaborator: Any) -> Any:
    if hasattr(collaborator, 'clone'):
        return collaborator.clone()
    return copy.deepcopy(collaborator)


def create_collection(
    name: str,
    max_supply: int,
    admin: str,
    reserve_limit: int = 0,
    verbose: bool = True,
    **config_overrides,
) -> Collection:
    """
    Deploy a collection with the default in-memory collaborators.

    Args:
        name: Collection identifier
        max_supply: Fixed total cap
        admin: The single privileged identity
        reserve_limit: Initial size of the reservation pool
        verbose: Print applied and rejected operations
        **config_overrides: Any other CollectionConfig field
                            (max_presale_supply, public_max_per_tx,
                            presale_max_per_tx, unit_price, base_uri)

    Returns:
        A Collection with SingleAdminAccessControl, DirectCallerGuard,
        ItemRegistry, Treasury and BaseURIStore.

    Example:
        collection = create_collection("genesis", 10_000, "owner",
                                       reserve_limit=100, unit_price=Decimal("0.08"))
    """
    config = CollectionConfig(max_supply=max_supply, reserve_limit=reserve_limit, **config_overrides)
    return Collection(
        name=name,
        config=config,
        access=SingleAdminAccessControl(admin),
        verbose=verbose,
    )
