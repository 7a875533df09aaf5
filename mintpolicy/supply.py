"""
supply.py - Supply Ledger and Capacity Views

One monotonic counter, minted_count, bounded by the immutable max_supply.
Reserved, presale and public mints all draw from it. The reservation pool is
an earmarked subset of the remaining capacity, so sale capacity is a derived
view rather than a separate counter:

    sale_ceiling     = max_supply - reserve_limit + reserved_count
    unfilled_reserve = reserve_limit - reserved_count
    presale_ceiling  = min(max_presale_supply + reserved_count, sale_ceiling)

Layout follows the pure-function pattern:
    - SupplySnapshot: frozen view of the counters
    - load_supply(): the one adapter reading a CollectionView
    - calculate_*(): formulas with explicit inputs
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List

from .core import (
    CollectionState, CollectionView, CapacityExceeded,
)


@dataclass(frozen=True, slots=True)
class SupplySnapshot:
    """Counters and ceilings that bound issuance at one instant."""
    max_supply: int
    minted_count: int
    reserve_limit: int
    reserved_count: int
    max_presale_supply: int

    @property
    def remaining(self) -> int:
        return self.max_supply - self.minted_count

    @property
    def unfilled_reserve(self) -> int:
        return calculate_unfilled_reserve(self.reserve_limit, self.reserved_count)

    @property
    def sale_ceiling(self) -> int:
        return calculate_sale_ceiling(self.max_supply, self.reserve_limit, self.reserved_count)

    @property
    def presale_ceiling(self) -> int:
        return calculate_presale_ceiling(
            self.max_supply, self.reserve_limit, self.reserved_count, self.max_presale_supply
        )

    @property
    def sale_capacity(self) -> int:
        """Items still available to public buyers."""
        return max(0, self.sale_ceiling - self.minted_count)

    @property
    def presale_capacity(self) -> int:
        """Items still available to whitelisted buyers."""
        return max(0, self.presale_ceiling - self.minted_count)


def load_supply(view: CollectionView) -> SupplySnapshot:
    """Read the supply counters from a view as a frozen snapshot."""
    return snapshot_from_state(view.get_state())


def snapshot_from_state(state: CollectionState) -> SupplySnapshot:
    return SupplySnapshot(
        max_supply=state['max_supply'],
        minted_count=state['minted_count'],
        reserve_limit=state['reserve_limit'],
        reserved_count=state['reserved_count'],
        max_presale_supply=state['max_presale_supply'],
    )


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def calculate_unfilled_reserve(reserve_limit: int, reserved_count: int) -> int:
    """Capacity still earmarked for future reserved mints."""
    return reserve_limit - reserved_count


def calculate_sale_ceiling(max_supply: int, reserve_limit: int, reserved_count: int) -> int:
    """
    Highest minted_count any sale mint may reach.

    Total supply minus the unfilled part of the reservation pool, so open-sale
    buyers never consume capacity set aside for reserved mints.
    """
    return max_supply - calculate_unfilled_reserve(reserve_limit, reserved_count)


def calculate_presale_ceiling(
    max_supply: int,
    reserve_limit: int,
    reserved_count: int,
    max_presale_supply: int,
) -> int:
    """Highest minted_count a presale mint may reach."""
    return min(
        max_presale_supply + reserved_count,
        calculate_sale_ceiling(max_supply, reserve_limit, reserved_count),
    )


def calculate_record_mint(minted_count: int, quantity: int, max_supply: int) -> int:
    """
    Record a mint of quantity items against the total cap.

    Every issuance path (reserved, presale, public) goes through this.

    Returns:
        The new minted_count.

    Raises:
        CapacityExceeded: If minted_count + quantity would exceed max_supply.
    """
    new_count = minted_count + quantity
    if new_count > max_supply:
        raise CapacityExceeded(
            f"minting {quantity} would bring supply to {new_count}, above max supply {max_supply}"
        )
    return new_count


def allocate_item_ids(minted_count: int, quantity: int) -> List[int]:
    """Sequential identifiers for the next quantity items, starting at minted_count."""
    return list(range(minted_count, minted_count + quantity))
