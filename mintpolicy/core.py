"""
Core types and pure helpers for the issuance policy engine.

This module provides the foundational data structures and protocols:
1. Protocols: CollectionView for read-only access, plus the collaborator
   contracts (AccessControl, CallerOriginGuard, OwnershipLedger,
   FundsCustody, MetadataStore)
2. Immutable data structures: MintRequest, ItemGrant, StateChange,
   PendingIssuance, IssuanceRecord, CollectionConfig
3. Exceptions: IssuanceError and the policy rejection taxonomy
4. Type aliases: CollectionState
5. Canonical serialization used for state fingerprints

All functions in this module are pure. Nothing here mutates collection state.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
import copy
import hashlib
from typing import (
    Dict, List, Optional, Any, Protocol, Tuple, FrozenSet, runtime_checkable,
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Default per-transaction ceiling for the public sale.
DEFAULT_PUBLIC_MAX_PER_TX = 10

# Default cumulative ceiling per whitelisted account during presale.
DEFAULT_PRESALE_MAX_PER_ACCOUNT = 3

# Unit price in the reference configuration. A zero price satisfies the
# payment check for any attached payment.
DEFAULT_UNIT_PRICE = Decimal("0")

DEFAULT_BASE_URI = ""

# Event types recorded on IssuanceOrigin.
EVENT_PUBLIC_MINT = "PUBLIC_MINT"
EVENT_PRESALE_MINT = "PRESALE_MINT"
EVENT_RESERVE = "RESERVE"
EVENT_SET_RESERVE_LIMIT = "SET_RESERVE_LIMIT"
EVENT_WHITELIST_ADD = "WHITELIST_ADD"
EVENT_WHITELIST_REMOVE = "WHITELIST_REMOVE"
EVENT_TOGGLE_PRESALE = "TOGGLE_PRESALE"
EVENT_TOGGLE_PUBLIC_SALE = "TOGGLE_PUBLIC_SALE"
EVENT_SET_PUBLIC_MAX_PER_TX = "SET_PUBLIC_MAX_PER_TX"
EVENT_SET_PRESALE_MAX_PER_TX = "SET_PRESALE_MAX_PER_TX"
EVENT_SET_PRESALE_CAP = "SET_PRESALE_CAP"
EVENT_SET_UNIT_PRICE = "SET_UNIT_PRICE"

# Keys of the persisted state surface, in canonical order.
STATE_KEYS = (
    'max_supply',
    'reserve_limit',
    'reserved_count',
    'minted_count',
    'presale_active',
    'public_active',
    'public_max_per_tx',
    'presale_max_per_tx',
    'max_presale_supply',
    'whitelist',
    'presale_bought',
    'unit_price',
)


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Policy state: counters, phase flags, ceilings, whitelist and per-account
# presale counters. Keys are listed in STATE_KEYS.
CollectionState = Dict[str, Any]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class IssuanceError(Exception):
    """Base exception for every issuance policy rejection."""
    pass


class Unauthorized(IssuanceError):
    """Raised when a non-privileged identity attempts an administrative operation."""
    pass


class IndirectCallRejected(IssuanceError):
    """Raised when a mint request was relayed instead of sent by the requester."""
    pass


class SaleNotActive(IssuanceError):
    """Raised when the requested sale phase is closed."""
    pass


class NotWhitelisted(IssuanceError):
    """Raised when a presale request comes from an account without eligibility."""
    pass


class PerTxLimitExceeded(IssuanceError):
    """Raised when a public request asks for more than the per-transaction ceiling."""
    pass


class PerAccountLimitExceeded(IssuanceError):
    """Raised when a presale request would push an account past its cumulative ceiling."""
    pass


class CapacityExceeded(IssuanceError):
    """Raised when a request would exceed the total cap or an effective sale ceiling."""
    pass


class ReserveExhausted(IssuanceError):
    """Raised when a reserved mint would exceed the reservation pool."""
    pass


class InvalidReserveLimit(IssuanceError):
    """Raised when a new reserve limit is not a strict decrease within bounds."""
    pass


class PaymentInsufficient(IssuanceError):
    """Raised when the attached payment does not cover unit price times quantity."""
    pass


class InvalidConfiguration(IssuanceError):
    """Raised when a ceiling, cap or price is set outside its bounds."""
    pass


# ============================================================================
# ENUMS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of executing a pending issuance.

    APPLIED: The pending issuance was validated and applied.
    REJECTED: The pending issuance was built against a state that no longer
              matches, or its proposed state breaks a collection invariant.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


class OriginType(Enum):
    """Classification of where an operation originated."""
    SALE = "sale"                # Public or presale mint by a buyer
    ADMIN = "admin"              # Privileged administrative operation


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class CollectionView(Protocol):
    """
    Read-only interface to collection policy state.

    Compute functions accept a CollectionView and declare their read-only
    intent. The Collection class implements this protocol but also provides
    mutation methods. For testing, tests/fake_view.py provides a plain
    dictionary-backed implementation.
    """

    def get_state(self) -> CollectionState:
        """Return a deep copy of the policy state."""
        ...

    def is_whitelisted(self, account: str) -> bool:
        """Return True if the account is eligible for the presale."""
        ...

    def presale_bought(self, account: str) -> int:
        """Return how many items the account has bought during presale."""
        ...


@runtime_checkable
class AccessControl(Protocol):
    """Decides whether an identity may run administrative operations."""

    def is_privileged(self, identity: str) -> bool:
        ...


@runtime_checkable
class CallerOriginGuard(Protocol):
    """Decides whether a mint request was sent directly by its requester."""

    def is_direct_caller(self, request: 'MintRequest') -> bool:
        ...


@runtime_checkable
class OwnershipLedger(Protocol):
    """
    Registers the owner of each newly created item.

    remove_item() is only called to undo a create_item() from the same
    issuance when a later step of that issuance fails.
    """

    def create_item(self, owner: str, item_id: int) -> None:
        ...

    def remove_item(self, item_id: int) -> None:
        ...


@runtime_checkable
class FundsCustody(Protocol):
    """Holds accumulated sale payments."""

    @property
    def balance(self) -> Decimal:
        ...

    def deposit(self, amount: Decimal) -> None:
        ...

    def withdraw_all(self, to: str) -> Decimal:
        ...


@runtime_checkable
class MetadataStore(Protocol):
    """Stores the base URI under which item metadata resolves."""

    def get_base_uri(self) -> str:
        ...

    def set_base_uri(self, uri: str) -> None:
        ...


# ============================================================================
# REQUESTS AND ORIGINS
# ============================================================================

@dataclass(frozen=True, slots=True)
class MintRequest:
    """
    A buyer's request to mint items during a sale phase.

    Attributes:
        caller: Identity that will own the minted items.
        quantity: Number of items requested (positive int).
        payment: Amount attached to the request.
        origin: Identity that actually initiated the request. None means the
                caller sent it directly; any other value marks a relayed call.
    """
    caller: str
    quantity: int
    payment: Decimal = Decimal("0")
    origin: Optional[str] = None

    def __post_init__(self):
        if not self.caller or not self.caller.strip():
            raise ValueError("MintRequest caller cannot be empty")
        _validate_quantity(self.quantity)
        if not isinstance(self.payment, Decimal):
            object.__setattr__(self, 'payment', Decimal(str(self.payment)))
        if self.payment.is_nan() or self.payment.is_infinite() or self.payment < 0:
            raise ValueError(f"payment must be a finite non-negative amount, got {self.payment}")


@dataclass(frozen=True, slots=True)
class IssuanceOrigin:
    """
    Immutable record of who triggered an operation and why.

    Attributes:
        origin_type: SALE or ADMIN
        source_id: Identity behind the operation (buyer or administrator)
        event_type: Specific operation (e.g., "PUBLIC_MINT", "RESERVE")
    """
    origin_type: OriginType
    source_id: str
    event_type: Optional[str] = None

    def __repr__(self) -> str:
        parts = [f"{self.origin_type.value}:{self.source_id}"]
        if self.event_type:
            parts.append(f"event={self.event_type}")
        return f"Origin({', '.join(parts)})"


def _validate_quantity(quantity: Any) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValueError(f"quantity must be an int, got {type(quantity).__name__}")
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")


# ============================================================================
# STATE CHANGE
# ============================================================================

@dataclass(frozen=True, slots=True)
class StateChange:
    """
    Record of a policy state change for logging and replay.

    Stores complete before/after snapshots. Forward replay applies
    new_state; the old_state is checked against the live state before
    applying (optimistic concurrency).
    """
    old_state: CollectionState
    new_state: CollectionState

    def changed_fields(self) -> Dict[str, Tuple[Any, Any]]:
        """Map each field that differs to its (old, new) pair."""
        changes = {}
        for key in set(self.old_state) | set(self.new_state):
            old_val = self.old_state.get(key)
            new_val = self.new_state.get(key)
            if old_val != new_val:
                changes[key] = (old_val, new_val)
        return changes


# ============================================================================
# ITEM GRANTS AND PENDING ISSUANCE
# ============================================================================

@dataclass(frozen=True, slots=True)
class ItemGrant:
    """Creation of one item with a fixed identifier for its first owner."""
    owner: str
    item_id: int

    def __post_init__(self):
        if not self.owner or not self.owner.strip():
            raise ValueError("ItemGrant owner cannot be empty")
        if self.item_id < 0:
            raise ValueError(f"item_id must be non-negative, got {self.item_id}")

    def __repr__(self) -> str:
        return f"ItemGrant(#{self.item_id} → {self.owner})"


@dataclass(frozen=True, slots=True)
class PendingIssuance:
    """
    An operation before execution - represents INTENT.

    Created by compute functions and submitted to Collection.execute().

    Attributes:
        state_change: Old/new policy state, or None if nothing changes
        grants: Items to create, in identifier order
        payment: Amount to deposit with funds custody on success
        origin: Who/what created this and why
    """
    state_change: Optional[StateChange]
    grants: Tuple[ItemGrant, ...]
    origin: IssuanceOrigin
    payment: Decimal = Decimal("0")

    def is_empty(self) -> bool:
        """Return True if this changes no state, creates no items and moves no funds."""
        return self.state_change is None and not self.grants and not self.payment

    @property
    def item_ids(self) -> List[int]:
        return [g.item_id for g in self.grants]

    def __repr__(self) -> str:
        return f"PendingIssuance({len(self.grants)} items, payment={self.payment}, {self.origin})"


def build_issuance(
    view: CollectionView,
    new_state: Optional[CollectionState],
    origin: IssuanceOrigin,
    grants: Optional[List[ItemGrant]] = None,
    payment: Decimal = Decimal("0"),
    old_state: Optional[CollectionState] = None,
) -> PendingIssuance:
    """
    Build a PendingIssuance from a proposed state and item grants.

    This is the standard way for compute functions to describe an operation.

    Args:
        view: Read-only collection view (source of old_state if not given)
        new_state: Proposed policy state, or None for no state change
        origin: Operation origin
        grants: Items to create
        payment: Amount to deposit with funds custody
        old_state: State the proposal was computed from (defaults to view state)

    Returns:
        A PendingIssuance ready for execution. If new_state equals the
        current state, the state change is dropped.
    """
    if old_state is None:
        old_state = view.get_state()

    change = None
    if new_state is not None and new_state != old_state:
        change = StateChange(
            old_state=copy.deepcopy(old_state),
            new_state=copy.deepcopy(new_state),
        )

    return PendingIssuance(
        state_change=change,
        grants=tuple(grants or ()),
        origin=origin,
        payment=payment,
    )


def empty_pending_issuance(origin: IssuanceOrigin) -> PendingIssuance:
    """Create a PendingIssuance that does nothing."""
    return PendingIssuance(state_change=None, grants=(), origin=origin)


# ============================================================================
# EXECUTED RECORD
# ============================================================================

@dataclass(frozen=True, slots=True)
class IssuanceRecord:
    """
    An executed, immutable record of an operation - represents FACT.

    Attributes:
        state_change: Old/new policy state (None if only items/funds moved)
        grants: Items created, in identifier order
        payment: Amount deposited with funds custody
        origin: Who/what triggered the operation
        exec_id: Unique execution identifier (collection + sequence)
        collection_name: Name of the collection that executed this
        sequence_number: Monotonic sequence within the collection
    """
    state_change: Optional[StateChange]
    grants: Tuple[ItemGrant, ...]
    payment: Decimal
    origin: IssuanceOrigin
    exec_id: str
    collection_name: str
    sequence_number: int

    @property
    def item_ids(self) -> List[int]:
        return [g.item_id for g in self.grants]

    def __repr__(self) -> str:
        w = 80
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        lines = [
            "",
            f"┌{bar}┐",
            f"│{pad(' Issuance: ' + self.exec_id)}│",
            f"├{bar}┤",
            f"│{pad('   collection : ' + self.collection_name)}│",
            f"│{pad('   sequence   : ' + str(self.sequence_number))}│",
            f"│{pad('   origin     : ' + str(self.origin))}│",
            f"│{pad('   payment    : ' + str(self.payment))}│",
        ]
        if self.grants:
            first, last = self.grants[0].item_id, self.grants[-1].item_id
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(f' Items ({len(self.grants)}): #{first}..#{last} → {self.grants[0].owner}')}│")
        if self.state_change:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' State Changes:')}│")
            for name, (old_val, new_val) in sorted(self.state_change.changed_fields().items()):
                lines.append(f"│{pad(f'   {name}: {old_val!r} → {new_val!r}')}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True, slots=True)
class CollectionConfig:
    """
    Immutable deployment parameters - the genesis of a collection.

    max_supply never changes after construction. The other values seed
    the admin-mutable state and are later changed only through privileged
    operations.
    """
    max_supply: int
    reserve_limit: int = 0
    max_presale_supply: Optional[int] = None   # None = max_supply
    public_max_per_tx: int = DEFAULT_PUBLIC_MAX_PER_TX
    presale_max_per_tx: int = DEFAULT_PRESALE_MAX_PER_ACCOUNT
    unit_price: Decimal = DEFAULT_UNIT_PRICE
    base_uri: str = DEFAULT_BASE_URI

    def __post_init__(self):
        if isinstance(self.max_supply, bool) or not isinstance(self.max_supply, int):
            raise InvalidConfiguration(f"max_supply must be an int, got {self.max_supply!r}")
        if self.max_supply <= 0:
            raise InvalidConfiguration(f"max_supply must be positive, got {self.max_supply}")
        if self.max_presale_supply is None:
            object.__setattr__(self, 'max_presale_supply', self.max_supply)
        if not isinstance(self.unit_price, Decimal):
            object.__setattr__(self, 'unit_price', Decimal(str(self.unit_price)))

        bounded = {
            'reserve_limit': self.reserve_limit,
            'max_presale_supply': self.max_presale_supply,
            'public_max_per_tx': self.public_max_per_tx,
            'presale_max_per_tx': self.presale_max_per_tx,
        }
        for name, value in bounded.items():
            if value < 0 or value > self.max_supply:
                raise InvalidConfiguration(
                    f"{name} must be within [0, {self.max_supply}], got {value}"
                )
        if self.unit_price < 0:
            raise InvalidConfiguration(f"unit_price must be non-negative, got {self.unit_price}")

    def initial_state(self) -> CollectionState:
        """Policy state of a freshly deployed collection."""
        return {
            'max_supply': self.max_supply,
            'reserve_limit': self.reserve_limit,
            'reserved_count': 0,
            'minted_count': 0,
            'presale_active': False,
            'public_active': False,
            'public_max_per_tx': self.public_max_per_tx,
            'presale_max_per_tx': self.presale_max_per_tx,
            'max_presale_supply': self.max_presale_supply,
            'whitelist': frozenset(),
            'presale_bought': {},
            'unit_price': self.unit_price,
        }


# ============================================================================
# CANONICAL SERIALIZATION
# ============================================================================

def _normalize_decimal(d: Decimal) -> str:
    """Render semantically equal Decimals identically ("1.0" and "1.00" → "1")."""
    normalized = d.normalize()
    if normalized == normalized.to_integral_value():
        return str(int(normalized))
    return format(normalized, 'f')


def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string for hashing, independent of dict insertion
    order, set iteration order and Decimal representation.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return f"D:{_normalize_decimal(value)}"
    if isinstance(value, (int, float)):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S:{value}"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        serialized = ",".join(f"{_canonicalize(k)}:{_canonicalize(v)}" for k, v in items)
        return f"{{{serialized}}}"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    if isinstance(value, (set, frozenset)):
        serialized = ",".join(_canonicalize(item) for item in sorted(value, key=str))
        return f"<{serialized}>"
    return f"R:{repr(value)}"


def compute_state_hash(state: CollectionState, extra: Optional[Dict[str, Any]] = None) -> str:
    """
    Deterministic SHA-256 fingerprint of a policy state.

    Args:
        state: Policy state
        extra: Additional values folded into the digest (e.g., base URI)

    Returns:
        Hex digest (64 characters)
    """
    content = _canonicalize(state)
    if extra:
        content += "|" + _canonicalize(extra)
    return hashlib.sha256(content.encode()).hexdigest()


def freeze_accounts(accounts: Any) -> FrozenSet[str]:
    """Normalize an account batch to a frozenset, rejecting empty identities."""
    if isinstance(accounts, str):
        accounts = [accounts]
    frozen = frozenset(accounts)
    for account in frozen:
        if not account or not str(account).strip():
            raise ValueError("account cannot be empty")
    return frozen
