"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the transition engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_rejection.py - Rejected transactions leave the state unchanged
2. test_serials.py - Serial numbers are assigned monotonically, never reused
3. test_conservation.py - Transfers never create value
4. test_double_spend.py - A spent bill can never be spent again
5. test_determinism.py - Same inputs, same state and digests

These tests use hypothesis for property-based testing.
"""
