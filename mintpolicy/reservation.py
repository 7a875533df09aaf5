"""
reservation.py - Administrative Reservation Pool

The reservation pool is a slice of max_supply earmarked for privileged mints.
reserved_count only grows and reserve_limit only shrinks:

    reserved_count <= reserve_limit <= max_supply

Lowering the limit releases capacity to the sales; it can never be raised
again, so public buyers are not diluted after deployment.

Access control is enforced by the Collection before these functions run.
"""

from __future__ import annotations
from typing import Optional

from .core import (
    CollectionView, ItemGrant, PendingIssuance, IssuanceOrigin, OriginType,
    ReserveExhausted, InvalidReserveLimit,
    EVENT_RESERVE, EVENT_SET_RESERVE_LIMIT,
    build_issuance, _validate_quantity,
)
from .supply import calculate_record_mint, allocate_item_ids


def validate_reserve_limit(
    new_limit: int,
    reserve_limit: int,
    reserved_count: int,
    max_supply: int,
) -> None:
    """
    Check that new_limit is a strict decrease that stays within bounds.

    Raises:
        InvalidReserveLimit: If new_limit is not an int, new_limit > max_supply,
                             new_limit < reserved_count, or new_limit >= reserve_limit.
    """
    if isinstance(new_limit, bool) or not isinstance(new_limit, int):
        raise InvalidReserveLimit(f"reserve limit must be an int, got {new_limit!r}")
    if new_limit > max_supply:
        raise InvalidReserveLimit(f"reserve limit {new_limit} exceeds max supply {max_supply}")
    if new_limit < reserved_count:
        raise InvalidReserveLimit(
            f"reserve limit {new_limit} is below the {reserved_count} items already reserved"
        )
    if new_limit >= reserve_limit:
        raise InvalidReserveLimit(
            f"reserve limit can only decrease: {new_limit} is not below {reserve_limit}"
        )


def compute_reserve(
    view: CollectionView,
    admin: str,
    quantity: int,
    recipient: Optional[str] = None,
) -> PendingIssuance:
    """
    Mint quantity items out of the reservation pool.

    Args:
        view: Read-only collection access
        admin: Privileged identity performing the reservation
        quantity: Number of items to mint
        recipient: Owner of the new items (defaults to admin)

    Returns:
        PendingIssuance incrementing reserved_count and minted_count and
        granting the items.

    Raises:
        ReserveExhausted: If reserved_count + quantity > reserve_limit.
        CapacityExceeded: If minted_count + quantity > max_supply.
    """
    _validate_quantity(quantity)
    state = view.get_state()
    owner = recipient or admin

    if state['reserved_count'] + quantity > state['reserve_limit']:
        raise ReserveExhausted(
            f"reserving {quantity} exceeds the reservation pool: "
            f"{state['reserved_count']} of {state['reserve_limit']} already reserved"
        )
    minted = calculate_record_mint(state['minted_count'], quantity, state['max_supply'])

    grants = [ItemGrant(owner, item_id) for item_id in allocate_item_ids(state['minted_count'], quantity)]
    new_state = {
        **state,
        'reserved_count': state['reserved_count'] + quantity,
        'minted_count': minted,
    }
    origin = IssuanceOrigin(OriginType.ADMIN, admin, EVENT_RESERVE)
    return build_issuance(view, new_state, origin, grants, old_state=state)


def compute_set_reserve_limit(view: CollectionView, admin: str, new_limit: int) -> PendingIssuance:
    """
    Lower the reservation pool limit.

    Raises:
        InvalidReserveLimit: See validate_reserve_limit().
    """
    state = view.get_state()
    validate_reserve_limit(new_limit, state['reserve_limit'], state['reserved_count'], state['max_supply'])
    new_state = {**state, 'reserve_limit': new_limit}
    origin = IssuanceOrigin(OriginType.ADMIN, admin, EVENT_SET_RESERVE_LIMIT)
    return build_issuance(view, new_state, origin, old_state=state)
