"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Supply equals the sum of balances; only mint/burn change it
2. atomicity.py - Rejected operations leave no trace
3. authorization.py - Owner-only operations, the pause gate, allowance bounds
4. determinism.py - Replay, clone and event-log reconstruction

These tests use hypothesis for property-based testing over random
operation sequences that mix valid and invalid calls.
"""
