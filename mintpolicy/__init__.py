"""
mintpolicy - Bounded-Supply Issuance Policy

Decides, for each request, whether new collectible items may be created
under a fixed total cap, a shrinking reservation pool, two independent sale
phases and per-transaction / per-account ceilings.

Usage:
    from mintpolicy import create_collection, MintRequest

    collection = create_collection("genesis", max_supply=10, admin="owner",
                                   reserve_limit=3)
    collection.reserve("owner", 2)                  # items 0, 1
    collection.toggle_public_sale("owner")
    record = collection.mint_public(MintRequest("alice", 5))
    record.item_ids                                 # [2, 3, 4, 5, 6]

    collection.add_to_whitelist("owner", ["bob"])
    collection.toggle_presale("owner")
    collection.mint_presale(MintRequest("bob", 2))
"""

# Core types
from .core import (
    CollectionView,
    AccessControl,
    CallerOriginGuard,
    OwnershipLedger,
    FundsCustody,
    MetadataStore,
    CollectionConfig,
    CollectionState,
    MintRequest,
    ItemGrant,
    StateChange,
    PendingIssuance,
    IssuanceRecord,
    IssuanceOrigin,
    OriginType,
    ExecuteResult,
    build_issuance,
    empty_pending_issuance,
    compute_state_hash,
    IssuanceError,
    Unauthorized,
    IndirectCallRejected,
    SaleNotActive,
    NotWhitelisted,
    PerTxLimitExceeded,
    PerAccountLimitExceeded,
    CapacityExceeded,
    ReserveExhausted,
    InvalidReserveLimit,
    PaymentInsufficient,
    InvalidConfiguration,
    DEFAULT_PUBLIC_MAX_PER_TX,
    DEFAULT_PRESALE_MAX_PER_ACCOUNT,
    DEFAULT_UNIT_PRICE,
)

# Collection
from .collection import Collection, create_collection

# Collaborators
from .collaborators import (
    SingleAdminAccessControl,
    DirectCallerGuard,
    ItemRegistry,
    Treasury,
    BaseURIStore,
)

# Supply ledger
from .supply import (
    SupplySnapshot,
    load_supply,
    calculate_record_mint,
    calculate_sale_ceiling,
    calculate_presale_ceiling,
    calculate_unfilled_reserve,
    allocate_item_ids,
)

# Reservation policy
from .reservation import (
    compute_reserve,
    compute_set_reserve_limit,
    validate_reserve_limit,
)

# Whitelist registry
from .whitelist import (
    compute_add_to_whitelist,
    compute_remove_from_whitelist,
    calculate_presale_purchase,
)

# Sale controller
from .sale import (
    compute_toggle_presale,
    compute_toggle_public_sale,
    compute_set_public_max_per_tx,
    compute_set_presale_max_per_tx,
    compute_set_presale_cap,
    compute_set_unit_price,
)

# Issuance policy
from .issuance import (
    compute_public_mint,
    compute_presale_mint,
    calculate_payment_due,
    check_payment,
)

# Invariants
from .invariants import check_invariants, check_transition

__all__ = [
    # Core
    'CollectionView', 'AccessControl', 'CallerOriginGuard', 'OwnershipLedger',
    'FundsCustody', 'MetadataStore',
    'CollectionConfig', 'CollectionState', 'MintRequest', 'ItemGrant', 'StateChange',
    'PendingIssuance', 'IssuanceRecord', 'IssuanceOrigin', 'OriginType', 'ExecuteResult',
    'build_issuance', 'empty_pending_issuance', 'compute_state_hash',
    'IssuanceError', 'Unauthorized', 'IndirectCallRejected', 'SaleNotActive',
    'NotWhitelisted', 'PerTxLimitExceeded', 'PerAccountLimitExceeded',
    'CapacityExceeded', 'ReserveExhausted', 'InvalidReserveLimit',
    'PaymentInsufficient', 'InvalidConfiguration',
    'DEFAULT_PUBLIC_MAX_PER_TX', 'DEFAULT_PRESALE_MAX_PER_ACCOUNT', 'DEFAULT_UNIT_PRICE',
    # Collection
    'Collection', 'create_collection',
    # Collaborators
    'SingleAdminAccessControl', 'DirectCallerGuard', 'ItemRegistry', 'Treasury', 'BaseURIStore',
    # Supply
    'SupplySnapshot', 'load_supply', 'calculate_record_mint', 'calculate_sale_ceiling',
    'calculate_presale_ceiling', 'calculate_unfilled_reserve', 'allocate_item_ids',
    # Reservation
    'compute_reserve', 'compute_set_reserve_limit', 'validate_reserve_limit',
    # Whitelist
    'compute_add_to_whitelist', 'compute_remove_from_whitelist', 'calculate_presale_purchase',
    # Sale
    'compute_toggle_presale', 'compute_toggle_public_sale',
    'compute_set_public_max_per_tx', 'compute_set_presale_max_per_tx',
    'compute_set_presale_cap', 'compute_set_unit_price',
    # Issuance
    'compute_public_mint', 'compute_presale_mint', 'calculate_payment_due', 'check_payment',
    # Invariants
    'check_invariants', 'check_transition',
]

__version__ = '1.0.0'
