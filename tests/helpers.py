"""
helpers.py - Shared constants and builders for lockup tests.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from lockup import (
    Ledger, ExecuteResult, PendingTransaction, token, checkpoint,
    create_time_lockup, time_lockup_initialize,
)


T0 = datetime(2025, 1, 1)

TIME_LOCKUP = "TEAM"
SEQUENCE_LOCKUP = "SEQ"
TIME_VAULT = "vault"
SEQUENCE_VAULT = "seq_vault"
ADMIN = "admin"
OWNER = "alice"


def at(seconds: int) -> datetime:
    """T0 plus a number of seconds."""
    return T0 + timedelta(seconds=seconds)


def two_step_schedule():
    """50% of the remainder at T0+10000s, everything at T0+20000s."""
    return [checkpoint(at(10000), 5000), checkpoint(at(20000), 10000)]


def execute_ok(ledger: Ledger, pending: PendingTransaction) -> None:
    """Execute and require the transaction to be applied."""
    result = ledger.execute(pending)
    assert result == ExecuteResult.APPLIED, f"expected APPLIED, got {result}"


def make_ledger(initial_time: datetime = T0, initial_sequence: int = 0) -> Ledger:
    """Test-mode ledger with XLM (whole units), USDC (cents) and the usual wallets."""
    ledger = Ledger("test", initial_time=initial_time, initial_sequence=initial_sequence,
                    verbose=False, test_mode=True)
    ledger.register_unit(token("XLM", "Lumens"))
    ledger.register_unit(token("USDC", "USD Coin", decimal_places=2))
    for wallet in (TIME_VAULT, SEQUENCE_VAULT, ADMIN, OWNER, "bob", "mallory"):
        ledger.register_wallet(wallet)
    return ledger


def funded_time_ledger(balance: Decimal = Decimal("1000000000")) -> Ledger:
    """Fresh ledger with TEAM initialized on two_step_schedule() and funded in XLM."""
    ledger = make_ledger()
    ledger.register_unit(create_time_lockup(TIME_LOCKUP, "Team vesting", TIME_VAULT))
    ledger.set_balance(TIME_VAULT, "XLM", balance)
    execute_ok(ledger, time_lockup_initialize(ledger, TIME_LOCKUP, ADMIN, OWNER, two_step_schedule()))
    return ledger
