"""
fake_view.py - Test Helper for LedgerView

Provides a minimal LedgerView implementation for testing lockup functions
without requiring a full Ledger instance.
"""

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Dict, Set, Optional, Any

from lockup import LedgerView


# Type aliases (matching core.py)
Positions = Dict[str, Decimal]
UnitState = Dict[str, Any]


class FakeUnit:
    """Minimal Unit for testing - provides balance limits and decimal places."""
    def __init__(self, symbol: str, decimal_places: int = 0,
                 min_balance: Decimal = Decimal("0"), max_balance: Decimal = Decimal("Infinity")):
        self.symbol = symbol
        self.decimal_places = decimal_places
        self.min_balance = min_balance
        self.max_balance = max_balance


class FakeView:
    """
    Minimal LedgerView implementation for testing lockup functions.

    Example:
        view = FakeView(
            balances={'vault': {'XLM': Decimal("1000")}},
            states={'LOCK': {'unit_type': 'TIME_LOCKUP', 'custody_wallet': 'vault'}},
            time=datetime(2025, 1, 1),
            sequence=120,
        )
    """

    def __init__(
        self,
        balances: Dict[str, Dict[str, Decimal]],
        states: Optional[Dict[str, UnitState]] = None,
        time: Optional[datetime] = None,
        units: Optional[Dict[str, Any]] = None,
        sequence: int = 0,
    ):
        self._balances = balances
        self._states = states or {}
        self._time = time or datetime(2025, 1, 1)
        self._units = units or {}
        self._sequence = sequence

    @property
    def current_time(self) -> datetime:
        return self._time

    @property
    def current_sequence(self) -> int:
        return self._sequence

    def get_balance(self, wallet: str, unit: str) -> Decimal:
        return self._balances.get(wallet, {}).get(unit, Decimal("0"))

    def get_unit_state(self, unit: str) -> UnitState:
        return dict(self._states.get(unit, {}))

    def get_positions(self, unit: str) -> Positions:
        return {
            w: b[unit]
            for w, b in self._balances.items()
            if unit in b and b[unit] != 0
        }

    def list_wallets(self) -> Set[str]:
        return set(self._balances.keys())

    def get_unit(self, symbol: str) -> Any:
        """Return unit or a FakeUnit with whole-number precision."""
        if symbol in self._units:
            return self._units[symbol]
        return FakeUnit(symbol)
