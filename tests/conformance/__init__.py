"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the issuance policy.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. supply_bounds.py - minted_count never exceeds max_supply
2. reserve_ratchet.py - reserved_count <= reserve_limit, limit never grows
3. item_ids.py - Identifiers are gap-free across every issuance path
4. atomicity.py - Rejected requests leave no trace
5. determinism.py - Replay and clone reproduce the same state

These tests use hypothesis for property-based testing.
"""
