"""
issuance.py - Sale Mint Policy

Decides whether a public or presale mint request may proceed and, if so,
describes the full effect as one PendingIssuance: counters, presale
bookkeeping, item grants and the payment to deposit.

Public sale checks, in order:
    1. public sale open                         -> SaleNotActive
    2. quantity <= public_max_per_tx            -> PerTxLimitExceeded
    3. minted + quantity <= sale_ceiling        -> CapacityExceeded
    4. payment >= unit_price * quantity         -> PaymentInsufficient

Presale checks, in order:
    1. presale open                             -> SaleNotActive
    2. caller whitelisted                       -> NotWhitelisted
    3. bought + quantity <= presale_max_per_tx  -> PerAccountLimitExceeded
    4. minted + quantity <= max_presale_supply + reserved_count
       and minted + quantity <= sale_ceiling    -> CapacityExceeded
    5. payment >= unit_price * quantity         -> PaymentInsufficient

where sale_ceiling = max_supply - reserve_limit + reserved_count.

The caller-origin check happens at the Collection boundary before any of
these functions run.
"""

from __future__ import annotations
from decimal import Decimal

from .core import (
    CollectionView, ItemGrant, PendingIssuance, IssuanceOrigin, OriginType,
    SaleNotActive, NotWhitelisted, PerTxLimitExceeded, PerAccountLimitExceeded,
    CapacityExceeded, PaymentInsufficient,
    EVENT_PUBLIC_MINT, EVENT_PRESALE_MINT,
    build_issuance, _validate_quantity,
)
from .supply import (
    snapshot_from_state, calculate_record_mint, allocate_item_ids,
)
from .whitelist import calculate_presale_purchase


def calculate_payment_due(unit_price: Decimal, quantity: int) -> Decimal:
    return unit_price * quantity


def check_payment(payment: Decimal, unit_price: Decimal, quantity: int) -> None:
    """
    Raises:
        PaymentInsufficient: If payment < unit_price * quantity.
    """
    due = calculate_payment_due(unit_price, quantity)
    if payment < due:
        raise PaymentInsufficient(f"payment {payment} does not cover {quantity} x {unit_price} = {due}")


def compute_public_mint(
    view: CollectionView,
    caller: str,
    quantity: int,
    payment: Decimal = Decimal("0"),
) -> PendingIssuance:
    """
    Mint quantity items for caller in the public sale.

    Args:
        view: Read-only collection access
        caller: Buyer, owner of the new items
        quantity: Number of items requested
        payment: Amount attached to the request

    Returns:
        PendingIssuance advancing minted_count and granting sequential ids
        starting at the current minted_count.
    """
    _validate_quantity(quantity)
    state = view.get_state()
    supply = snapshot_from_state(state)

    if not state['public_active']:
        raise SaleNotActive("public sale is not active")
    if quantity > state['public_max_per_tx']:
        raise PerTxLimitExceeded(
            f"requested {quantity} exceeds public per-transaction limit {state['public_max_per_tx']}"
        )
    if supply.minted_count + quantity > supply.sale_ceiling:
        raise CapacityExceeded(
            f"requested {quantity} exceeds sale capacity: {supply.minted_count} minted, "
            f"sale ceiling {supply.sale_ceiling}"
        )
    check_payment(payment, state['unit_price'], quantity)

    minted = calculate_record_mint(supply.minted_count, quantity, supply.max_supply)
    grants = [ItemGrant(caller, item_id) for item_id in allocate_item_ids(supply.minted_count, quantity)]
    new_state = {**state, 'minted_count': minted}
    origin = IssuanceOrigin(OriginType.SALE, caller, EVENT_PUBLIC_MINT)
    return build_issuance(view, new_state, origin, grants, payment=payment, old_state=state)


def compute_presale_mint(
    view: CollectionView,
    caller: str,
    quantity: int,
    payment: Decimal = Decimal("0"),
) -> PendingIssuance:
    """
    Mint quantity items for a whitelisted caller in the presale.

    Returns:
        PendingIssuance advancing minted_count and the caller's presale
        counter, and granting sequential ids.
    """
    _validate_quantity(quantity)
    state = view.get_state()
    supply = snapshot_from_state(state)

    if not state['presale_active']:
        raise SaleNotActive("presale is not active")
    if caller not in state['whitelist']:
        raise NotWhitelisted(f"{caller} is not whitelisted for the presale")

    bought = state['presale_bought'].get(caller, 0)
    if bought + quantity > state['presale_max_per_tx']:
        raise PerAccountLimitExceeded(
            f"{caller} has bought {bought}; {quantity} more exceeds presale limit "
            f"{state['presale_max_per_tx']}"
        )

    target = supply.minted_count + quantity
    if target > state['max_presale_supply'] + supply.reserved_count:
        raise CapacityExceeded(
            f"requested {quantity} exceeds presale supply: {supply.minted_count} minted, "
            f"presale cap {state['max_presale_supply']} + {supply.reserved_count} reserved"
        )
    if target > supply.sale_ceiling:
        raise CapacityExceeded(
            f"requested {quantity} exceeds sale capacity: {supply.minted_count} minted, "
            f"sale ceiling {supply.sale_ceiling}"
        )
    check_payment(payment, state['unit_price'], quantity)

    minted = calculate_record_mint(supply.minted_count, quantity, supply.max_supply)
    grants = [ItemGrant(caller, item_id) for item_id in allocate_item_ids(supply.minted_count, quantity)]
    new_state = {
        **state,
        'minted_count': minted,
        'presale_bought': calculate_presale_purchase(state['presale_bought'], caller, quantity),
    }
    origin = IssuanceOrigin(OriginType.SALE, caller, EVENT_PRESALE_MINT)
    return build_issuance(view, new_state, origin, grants, payment=payment, old_state=state)
