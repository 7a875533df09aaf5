"""
helpers.py - Shared comparison helpers for mintpolicy tests
"""

from typing import Dict, List

from mintpolicy import Collection


ADMIN = "owner"


def all_item_ids(collection: Collection) -> List[int]:
    """Every item id in assignment order, read from the audit log."""
    return [i for record in collection.issuance_log for i in record.item_ids]


def ownership_map(collection: Collection) -> Dict[int, str]:
    return dict(collection.ownership.owners)


def collections_equal(c1: Collection, c2: Collection) -> bool:
    """Same policy state, same owners, same custody balance."""
    return (
        c1.get_state() == c2.get_state()
        and ownership_map(c1) == ownership_map(c2)
        and c1.custody.balance == c2.custody.balance
    )
