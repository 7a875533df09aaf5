"""
sale.py - Sale Phase Controller

Two independent phase flags (presale, public). Both, either or neither may
be open; toggles carry no guard and may run any number of times.

Ceilings are bounded only by max_supply. A ceiling larger than the remaining
supply is harmless: the supply ledger still enforces the real cap at mint
time.
"""

from __future__ import annotations
from decimal import Decimal

from .core import (
    CollectionView, PendingIssuance, IssuanceOrigin, OriginType,
    InvalidConfiguration,
    EVENT_TOGGLE_PRESALE, EVENT_TOGGLE_PUBLIC_SALE,
    EVENT_SET_PUBLIC_MAX_PER_TX, EVENT_SET_PRESALE_MAX_PER_TX,
    EVENT_SET_PRESALE_CAP, EVENT_SET_UNIT_PRICE,
    build_issuance,
)


def _toggle(view: CollectionView, admin: str, flag: str, event_type: str) -> PendingIssuance:
    state = view.get_state()
    new_state = {**state, flag: not state[flag]}
    return build_issuance(view, new_state, IssuanceOrigin(OriginType.ADMIN, admin, event_type), old_state=state)


def compute_toggle_presale(view: CollectionView, admin: str) -> PendingIssuance:
    """Open the presale if closed, close it if open."""
    return _toggle(view, admin, 'presale_active', EVENT_TOGGLE_PRESALE)


def compute_toggle_public_sale(view: CollectionView, admin: str) -> PendingIssuance:
    """Open the public sale if closed, close it if open."""
    return _toggle(view, admin, 'public_active', EVENT_TOGGLE_PUBLIC_SALE)


def _set_bounded(view: CollectionView, admin: str, key: str, value: int, event_type: str) -> PendingIssuance:
    state = view.get_state()
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{key} must be an int, got {value!r}")
    if value < 0:
        raise InvalidConfiguration(f"{key} must be non-negative, got {value}")
    if value > state['max_supply']:
        raise InvalidConfiguration(f"{key} {value} exceeds max supply {state['max_supply']}")
    new_state = {**state, key: value}
    return build_issuance(view, new_state, IssuanceOrigin(OriginType.ADMIN, admin, event_type), old_state=state)


def compute_set_public_max_per_tx(view: CollectionView, admin: str, n: int) -> PendingIssuance:
    """Set the per-transaction ceiling of the public sale."""
    return _set_bounded(view, admin, 'public_max_per_tx', n, EVENT_SET_PUBLIC_MAX_PER_TX)


def compute_set_presale_max_per_tx(view: CollectionView, admin: str, n: int) -> PendingIssuance:
    """Set the cumulative per-account ceiling of the presale."""
    return _set_bounded(view, admin, 'presale_max_per_tx', n, EVENT_SET_PRESALE_MAX_PER_TX)


def compute_set_presale_cap(view: CollectionView, admin: str, n: int) -> PendingIssuance:
    """Set max_presale_supply, the presale-specific sub-cap."""
    return _set_bounded(view, admin, 'max_presale_supply', n, EVENT_SET_PRESALE_CAP)


def compute_set_unit_price(view: CollectionView, admin: str, price: Decimal) -> PendingIssuance:
    """Set the price charged per item in both sale phases."""
    if not isinstance(price, Decimal):
        price = Decimal(str(price))
    if price.is_nan() or price.is_infinite() or price < 0:
        raise InvalidConfiguration(f"unit_price must be a finite non-negative amount, got {price}")
    state = view.get_state()
    new_state = {**state, 'unit_price': price}
    origin = IssuanceOrigin(OriginType.ADMIN, admin, EVENT_SET_UNIT_PRICE)
    return build_issuance(view, new_state, origin, old_state=state)
