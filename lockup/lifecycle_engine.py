"""
lifecycle_engine.py - Lifecycle Engine

Steps the ledger clock and polls registered smart contracts so that lockups
release funds without an explicit claim call.

Execution order each step():
1. Advance ledger time (and sequence, when given)
2. Poll every unit whose type has a registered contract, in symbol order
3. Repeat until no contract fires (cascading effects)

The transaction log is the audit trail - no separate event status tracking needed.
"""

from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Optional

from .core import (
    PendingTransaction, Transaction,
    ExecuteResult, LedgerError,
    SmartContract,
)
from .ledger import Ledger


class LifecycleEngine:
    """
    Polls smart contracts registered per unit type.

    Example:
        engine = LifecycleEngine(ledger)
        engine.register(UNIT_TYPE_TIME_LOCKUP, time_lockup_contract(["XLM"]))
        engine.run([datetime(2025, 1, 1), datetime(2025, 7, 1)])
    """

    def __init__(
        self,
        ledger: Ledger,
        contracts: Optional[Dict[str, SmartContract]] = None,
    ):
        self.ledger = ledger
        self.contracts: Dict[str, SmartContract] = contracts or {}

        # Safety limit for cascading passes
        self.max_passes = 10
        self.verbose = ledger.verbose

    def register(self, unit_type: str, contract: SmartContract) -> None:
        """
        Register a smart contract for a unit type.

        Args:
            unit_type: Type of unit (e.g., "TIME_LOCKUP")
            contract: SmartContract implementation (callable or object with check_lifecycle)
        """
        self.contracts[unit_type] = contract

    def step(
        self,
        timestamp: datetime,
        sequence: Optional[int] = None,
    ) -> List[Transaction]:
        """
        Advance the clock and execute everything the contracts report as due.

        Args:
            timestamp: New ledger time
            sequence: New ledger sequence number, if it moves as well

        Returns:
            List of executed transactions
        """
        self.ledger.advance_time(timestamp)
        if sequence is not None:
            self.ledger.advance_sequence(sequence)

        executed: List[Transaction] = []
        for _ in range(self.max_passes):
            pass_executed = self._process_smart_contracts(timestamp)
            executed.extend(pass_executed)
            if not pass_executed:
                break

        return executed

    def _process_smart_contracts(self, timestamp: datetime) -> List[Transaction]:
        executed: List[Transaction] = []

        # Sorted for deterministic iteration order
        for symbol in sorted(self.ledger.units.keys()):
            unit = self.ledger.units[symbol]
            contract = self.contracts.get(unit.unit_type)

            if not contract:
                continue

            if hasattr(contract, 'check_lifecycle'):
                pending = contract.check_lifecycle(self.ledger, symbol, timestamp)
            else:
                pending = contract(self.ledger, symbol, timestamp)

            if not isinstance(pending, PendingTransaction):
                raise LedgerError(
                    f"Contract for {symbol} must return PendingTransaction, got {type(pending)}"
                )

            if pending.is_empty():
                continue

            if self.verbose:
                print(f"[LIFECYCLE] {symbol}: executing contract transaction")

            exec_result = self.ledger.execute(pending)

            if exec_result == ExecuteResult.REJECTED:
                raise LedgerError(f"Lifecycle event failed for {symbol}: contract execution rejected")

            if exec_result == ExecuteResult.APPLIED and self.ledger.transaction_log:
                executed.append(self.ledger.transaction_log[-1])

        return executed

    def run(self, timestamps: List[datetime]) -> List[Transaction]:
        """Step through each timestamp in order; returns all executed transactions."""
        all_transactions: List[Transaction] = []
        for timestamp in timestamps:
            all_transactions.extend(self.step(timestamp))
        return all_transactions
