"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of lockups on the ledger.

The tests are organized by invariant:
1. atomicity.py - A rejected claim changes nothing
2. idempotency.py - Duplicate execution handling and deterministic intents
3. release_properties.py - Schedule validation and release arithmetic

These tests use hypothesis for property-based testing.
"""
