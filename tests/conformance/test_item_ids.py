"""
Item Identifier Conformance Tests

INVARIANT: Identifiers are assigned from one shared counter.

    ∀ operation sequences S:
        ids assigned over S, in assignment order == [0, 1, ..., minted_count - 1]

regardless of how reserved, presale and public mints interleave.
"""

from hypothesis import given, settings

from tests.helpers import all_item_ids
from tests.conformance.operations import (
    operation_sequences, new_collection, apply_operation,
)


class TestItemIdProperties:

    @given(operation_sequences)
    @settings(max_examples=150, deadline=None)
    def test_ids_gap_free_in_assignment_order(self, sequence):
        collection = new_collection()
        for operation in sequence:
            apply_operation(collection, operation)

        expected = list(range(collection.minted_count))
        assert all_item_ids(collection) == expected
        assert sorted(collection.ownership.owners) == expected

    @given(operation_sequences)
    @settings(max_examples=100, deadline=None)
    def test_each_record_is_one_contiguous_block(self, sequence):
        collection = new_collection()
        for operation in sequence:
            apply_operation(collection, operation)

        for record in collection.issuance_log:
            if record.grants:
                old = record.state_change.old_state['minted_count']
                new = record.state_change.new_state['minted_count']
                assert record.item_ids == list(range(old, new))
                assert len({g.owner for g in record.grants}) == 1
