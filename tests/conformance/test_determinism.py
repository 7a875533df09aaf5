"""
Determinism Conformance Tests

INVARIANT: The same operations produce the same collection.

    ∀ operation sequences S:
        apply(S) on two fresh collections => equal state_hash
        replay(apply(S)) => equal state_hash and ownership
        clone(apply(S))  => equal state_hash and ownership
"""

from hypothesis import given, settings

from tests.helpers import collections_equal
from tests.conformance.operations import (
    operation_sequences, new_collection, apply_operation,
)


class TestDeterminismProperties:

    @given(operation_sequences)
    @settings(max_examples=100, deadline=None)
    def test_same_sequence_same_result(self, sequence):
        first = new_collection()
        second = new_collection()
        for operation in sequence:
            first_error = apply_operation(first, operation)
            second_error = apply_operation(second, operation)
            assert type(first_error) is type(second_error)

        assert first.state_hash() == second.state_hash()
        assert collections_equal(first, second)

    @given(operation_sequences)
    @settings(max_examples=100, deadline=None)
    def test_replay_reproduces_state(self, sequence):
        collection = new_collection()
        for operation in sequence:
            apply_operation(collection, operation)

        replayed = collection.replay()
        assert replayed.state_hash() == collection.state_hash()
        assert collections_equal(collection, replayed)

    @given(operation_sequences)
    @settings(max_examples=100, deadline=None)
    def test_clone_reproduces_state(self, sequence):
        collection = new_collection()
        for operation in sequence:
            apply_operation(collection, operation)

        cloned = collection.clone()
        assert cloned.state_hash() == collection.state_hash()
        assert collections_equal(collection, cloned)
