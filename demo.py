#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Issuance Policy Step by Step

This is a pedagogical demonstration of how a bounded-supply collection
decides whether new items may be minted. Each step builds on the previous
one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:   Foundation      - Deployment, the reservation pool, sale ceilings
  4-6:   Sales           - Public sale limits, capacity boundaries, presale
  7-9:   Guarantees      - Rejections, gap-free ids, replay and audit log

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from decimal import Decimal
import sys

from mintpolicy import (
    Collection, MintRequest, create_collection,
    IssuanceError, CapacityExceeded,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    admin: str = "owner"
    max_supply: int = 10
    reserve_limit: int = 3
    public_max_per_tx: int = 5
    presale_max_per_tx: int = 2
    unit_price: Decimal = Decimal("0")


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_supply(collection: Collection):
    supply = collection.supply()
    print(f"minted_count:     {supply.minted_count} / {supply.max_supply}")
    print(f"reserved_count:   {supply.reserved_count} / {supply.reserve_limit}")
    print(f"unfilled_reserve: {supply.unfilled_reserve}")
    print(f"sale_ceiling:     {supply.sale_ceiling}")
    print(f"sale_capacity:    {supply.sale_capacity}")


def try_mint(collection: Collection, request: MintRequest, presale: bool = False):
    """Attempt a mint and report the outcome instead of raising."""
    mint = collection.mint_presale if presale else collection.mint_public
    try:
        record = mint(request)
        print(f"→ minted items {record.item_ids}")
        return record
    except IssuanceError as e:
        print(f"→ {type(e).__name__}: {e}")
        return None


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_deploy():
    step_header(1, "Deploying a Collection",
        "A collection starts with a fixed cap and a reservation pool.")

    print("""
    Every item comes out of ONE counter, minted_count, bounded by max_supply.
    Part of that supply is earmarked for the administrator: the reservation
    pool (reserve_limit). Sales may never consume the unfilled part of it.
    """)

    wait_for_enter()

    print(f">>> collection = create_collection('genesis', max_supply={CONFIG.max_supply}, "
          f"admin='{CONFIG.admin}', reserve_limit={CONFIG.reserve_limit}, "
          f"public_max_per_tx={CONFIG.public_max_per_tx})")
    collection = create_collection(
        "genesis",
        max_supply=CONFIG.max_supply,
        admin=CONFIG.admin,
        reserve_limit=CONFIG.reserve_limit,
        public_max_per_tx=CONFIG.public_max_per_tx,
        presale_max_per_tx=CONFIG.presale_max_per_tx,
        unit_price=CONFIG.unit_price,
        verbose=True,
    )

    section_header("Initial Supply")
    show_supply(collection)
    return collection


def step_02_reserve(collection: Collection):
    step_header(2, "Reserved Mints",
        "The administrator mints from the pool; ids start at 0.")

    print(f">>> collection.reserve('{CONFIG.admin}', 2)")
    collection.reserve(CONFIG.admin, 2)

    section_header("After Reserving 2")
    show_supply(collection)
    print(f"\nOwner's items: {collection.items_of(CONFIG.admin)}")

    section_header("Key Insight")
    print("""
    sale_ceiling = max_supply - reserve_limit + reserved_count

    Each reserved mint raises the sale ceiling by the same amount, so the
    earmarked capacity moves from "unfilled" to "filled" without ever being
    available to buyers.
    """)
    return collection


def step_03_ratchet(collection: Collection):
    step_header(3, "The Reservation Ratchet",
        "reserve_limit can only go down, never up.")

    print(f">>> collection.set_reserve_limit('{CONFIG.admin}', {CONFIG.reserve_limit})")
    try:
        collection.set_reserve_limit(CONFIG.admin, CONFIG.reserve_limit)
    except IssuanceError as e:
        print(f"→ {type(e).__name__}: {e}")

    section_header("Key Insight")
    print("""
    Setting the limit to its current value, or higher, is rejected. Once
    deployed, buyers can never be diluted by a larger reservation pool.
    """)
    return collection


# ============================================================================
# PHASE 2: SALES (Steps 4-6)
# ============================================================================

def step_04_public_sale(collection: Collection):
    step_header(4, "Public Sale",
        "Requests are bounded per transaction and by the sale ceiling.")

    print(f">>> collection.toggle_public_sale('{CONFIG.admin}')")
    collection.toggle_public_sale(CONFIG.admin)

    section_header("Request 6 (per-transaction limit is 5)")
    try_mint(collection, MintRequest("alice", 6))

    section_header("Request 5 (2 + 5 <= 10 - 3 + 2 = 9)")
    try_mint(collection, MintRequest("alice", 5))

    show_supply(collection)
    return collection


def step_05_boundary(collection: Collection):
    step_header(5, "Capacity Boundary",
        "Filling the pool widens the sale ceiling up to max_supply.")

    print(f">>> collection.reserve('{CONFIG.admin}', 1)")
    collection.reserve(CONFIG.admin, 1)
    show_supply(collection)

    section_header("Request 3 (8 + 3 > 10)")
    try_mint(collection, MintRequest("bob", 3))

    section_header("Request 2 (8 + 2 <= 10 - 3 + 3 = 10, exactly at the boundary)")
    try_mint(collection, MintRequest("bob", 2))

    show_supply(collection)
    return collection


def step_06_presale():
    step_header(6, "Presale",
        "Whitelisted accounts buy up to a cumulative per-account limit.")

    collection = create_collection(
        "presale", max_supply=20, admin=CONFIG.admin, reserve_limit=4,
        presale_max_per_tx=CONFIG.presale_max_per_tx, max_presale_supply=6,
        verbose=False,
    )
    collection.add_to_whitelist(CONFIG.admin, ["carol", "dave"])
    collection.toggle_presale(CONFIG.admin)
    print("Whitelist: carol, dave   presale limit per account: "
          f"{CONFIG.presale_max_per_tx}   presale cap: 6")

    section_header("carol buys 1, then 1 more, then 1 more")
    for _ in range(3):
        try_mint(collection, MintRequest("carol", 1), presale=True)

    section_header("mallory is not whitelisted")
    try_mint(collection, MintRequest("mallory", 1), presale=True)

    section_header("Relayed request on dave's behalf")
    try_mint(collection, MintRequest("dave", 1, origin="relayer"), presale=True)

    print(f"\ncarol presale_bought: {collection.presale_bought('carol')}")
    return collection


# ============================================================================
# PHASE 3: GUARANTEES (Steps 7-9)
# ============================================================================

def step_07_atomicity(collection: Collection):
    step_header(7, "All-or-Nothing",
        "A rejected request changes nothing.")

    before = collection.state_hash()
    print(">>> collection.mint_public(MintRequest('eve', 1))   # supply is full")
    try:
        collection.mint_public(MintRequest("eve", 1))
    except CapacityExceeded as e:
        print(f"→ CapacityExceeded: {e}")
    print(f"\nState hash unchanged: {collection.state_hash() == before}")
    return collection


def step_08_gap_free(collection: Collection):
    step_header(8, "Gap-Free Identifiers",
        "Reserved and public mints share one sequence.")

    for record in collection.issuance_log:
        if record.grants:
            print(f"  {record.origin.event_type:<14} {record.origin.source_id:<8} {record.item_ids}")

    result = collection.verify_invariants()
    print(f"\nverify_invariants(): {result}")
    return collection


def step_09_replay(collection: Collection):
    step_header(9, "Replay",
        "The audit log rebuilds an identical collection.")

    collection.verbose = False
    replayed = collection.replay()
    print(f"Original hash: {collection.state_hash()[:16]}...")
    print(f"Replayed hash: {replayed.state_hash()[:16]}...")
    print(f"Identical:     {collection.state_hash() == replayed.state_hash()}")
    print(f"Owners equal:  {collection.ownership.owners == replayed.ownership.owners}")


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       MINTPOLICY - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    collection = step_01_deploy()
    wait_for_enter()
    collection = step_02_reserve(collection)
    wait_for_enter()
    collection = step_03_ratchet(collection)
    wait_for_enter()
    collection = step_04_public_sale(collection)
    wait_for_enter()
    collection = step_05_boundary(collection)
    wait_for_enter()
    step_06_presale()
    wait_for_enter()
    collection = step_07_atomicity(collection)
    wait_for_enter()
    collection = step_08_gap_free(collection)
    wait_for_enter()
    step_09_replay(collection)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See mintpolicy/issuance.py for the mint decision order
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
