"""
Idempotency Conformance Tests

INVARIANT: Duplicate execution is detected and prevented.

    ∀ claim C:
        execute(C) = APPLIED ⟹ execute(C) again = ALREADY_APPLIED
        state after second execute = state after first execute

Building the same operation twice from the same state yields the same
intent, while a fresh claim built after an applied one is a new intent.
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from lockup import (
    ExecuteResult, time_lockup_claim, sequence_lockup_claim, compute_claimable,
)

from tests.helpers import (
    TIME_LOCKUP, SEQUENCE_LOCKUP, TIME_VAULT, OWNER,
    at, execute_ok, funded_time_ledger,
)


class TestIdempotencyProperties:
    """Property-based idempotency tests."""

    @given(st.integers(min_value=1, max_value=5), st.integers(min_value=0, max_value=30000))
    @settings(max_examples=30, deadline=None)
    def test_repeated_execution_always_idempotent(self, num_repeats, offset):
        """
        PROPERTY: Executing the same claim N times releases funds once.
        """
        ledger = funded_time_ledger()
        ledger.advance_time(at(offset))
        pending = time_lockup_claim(ledger, TIME_LOCKUP, OWNER, ["XLM"])
        expected = compute_claimable(ledger, TIME_LOCKUP, ["XLM"])["XLM"]

        results = [ledger.execute(pending) for _ in range(num_repeats + 1)]

        assert results[0] == ExecuteResult.APPLIED
        assert all(r == ExecuteResult.ALREADY_APPLIED for r in results[1:])
        assert ledger.get_balance(OWNER, "XLM") == expected
        assert ledger.get_balance(TIME_VAULT, "XLM") == Decimal("1000000000") - expected

    @given(st.integers(min_value=0, max_value=30000))
    @settings(max_examples=30, deadline=None)
    def test_same_state_same_intent(self, offset):
        """
        PROPERTY: Building a claim twice from unchanged state is deterministic.
        """
        ledger = funded_time_ledger()
        ledger.advance_time(at(offset))
        first = time_lockup_claim(ledger, TIME_LOCKUP, OWNER, ["XLM"])
        second = time_lockup_claim(ledger, TIME_LOCKUP, OWNER, ["XLM"])
        assert first.intent_id == second.intent_id
        assert first.moves == second.moves


class TestIdempotencyEdgeCases:

    def test_repeat_claim_is_a_new_intent(self, time_ledger):
        time_ledger.advance_time(at(10000))
        first = time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"])
        execute_ok(time_ledger, first)

        second = time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"])
        assert second.intent_id != first.intent_id
        assert time_ledger.execute(second) == ExecuteResult.APPLIED
        assert time_ledger.get_balance(OWNER, "XLM") == Decimal("500000000")

    def test_stale_claim_rejected(self, time_ledger):
        time_ledger.advance_time(at(20000))
        stale = time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"])
        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["USDC"]))

        assert time_ledger.execute(stale) == ExecuteResult.REJECTED
        assert time_ledger.get_balance(OWNER, "XLM") == Decimal("0")

    def test_consumed_checkpoint_replay_detected(self, sequence_ledger):
        sequence_ledger.advance_sequence(100)
        pending = sequence_lockup_claim(sequence_ledger, SEQUENCE_LOCKUP, OWNER, 100, ["XLM"])
        execute_ok(sequence_ledger, pending)
        assert sequence_ledger.execute(pending) == ExecuteResult.ALREADY_APPLIED
        assert sequence_ledger.get_balance(OWNER, "XLM") == Decimal("500000")
