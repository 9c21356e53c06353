"""
conftest.py - Shared pytest fixtures for lockup tests

Provides common fixtures used across unit, functional and conformance tests:
- A test-mode ledger with tokens and wallets registered
- An initialized, funded time-watermarked lockup
- An initialized, funded sequence-consuming lockup
"""

import pytest
from decimal import Decimal

from lockup import (
    create_time_lockup, time_lockup_initialize,
    create_sequence_lockup, sequence_lockup_initialize,
)

from tests.helpers import (
    TIME_LOCKUP, SEQUENCE_LOCKUP, TIME_VAULT, SEQUENCE_VAULT, ADMIN, OWNER,
    two_step_schedule, execute_ok, make_ledger,
)


@pytest.fixture
def ledger():
    """Empty test-mode ledger with tokens and wallets registered."""
    return make_ledger()


@pytest.fixture
def time_ledger(ledger):
    """Ledger with TEAM: two-step time lockup holding 1,000,000,000 XLM."""
    ledger.register_unit(create_time_lockup(TIME_LOCKUP, "Team vesting", TIME_VAULT))
    ledger.set_balance(TIME_VAULT, "XLM", Decimal("1000000000"))
    execute_ok(ledger, time_lockup_initialize(
        ledger, TIME_LOCKUP, ADMIN, OWNER, two_step_schedule()
    ))
    return ledger


@pytest.fixture
def sequence_ledger(ledger):
    """Ledger with SEQ: checkpoints {100: 5000, 200: 5000} holding 1,000,000 XLM."""
    ledger.register_unit(create_sequence_lockup(SEQUENCE_LOCKUP, "Grant", SEQUENCE_VAULT))
    ledger.set_balance(SEQUENCE_VAULT, "XLM", Decimal("1000000"))
    execute_ok(ledger, sequence_lockup_initialize(
        ledger, SEQUENCE_LOCKUP, ADMIN, OWNER, {100: 5000, 200: 5000}
    ))
    return ledger
