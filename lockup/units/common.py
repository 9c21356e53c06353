"""
common.py - Shared Plumbing for Lockup Units

Both lockup variants are Units whose state is the lockup's durable store:

    unit_type       TIME_LOCKUP | SEQUENCE_LOCKUP
    custody_wallet  wallet holding the locked assets
    initialized     set once by initialize
    admin, owner    principals
    unlocks         schedule (time) or live checkpoint map (sequence)
    last_claims     per-asset watermarks (time variant only)
    op_count        number of operations executed

LockupStorage reads that state once from a LedgerView, applies an
operation's writes to a private copy, and hands back the UnitStateChange and
the TTL extensions for every entry it read or wrote. Compute functions turn
those into one PendingTransaction, so state, transfers and liveness commit
together.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
import copy

from ..core import (
    LedgerView, Move, PendingTransaction, Unit, UnitStateChange, TtlExtension,
    TransactionOrigin, OriginType, Role,
    UNIT_TYPE_TIME_LOCKUP, UNIT_TYPE_SEQUENCE_LOCKUP,
    NotInitialized,
    build_transaction, non_transferable_rule, require_auth,
    _freeze_state,
)
from ..progress import ProgressState, load_progress, progress_to_state


# ============================================================================
# LIVENESS CONFIGURATION
# ============================================================================

# Assumes 5 seconds per ledger
ONE_DAY_LEDGERS = 17280

# Time-watermarked lockups are long-lived
TIME_LOCKUP_BUMP = 120 * ONE_DAY_LEDGERS
TIME_LOCKUP_THRESHOLD = TIME_LOCKUP_BUMP - 20 * ONE_DAY_LEDGERS

# Sequence-consuming lockups share a shorter window
SEQUENCE_LOCKUP_BUMP = 15 * ONE_DAY_LEDGERS
SEQUENCE_LOCKUP_THRESHOLD = 14 * ONE_DAY_LEDGERS

# unit_type -> (threshold, extend_to)
LIVENESS = {
    UNIT_TYPE_TIME_LOCKUP: (TIME_LOCKUP_THRESHOLD, TIME_LOCKUP_BUMP),
    UNIT_TYPE_SEQUENCE_LOCKUP: (SEQUENCE_LOCKUP_THRESHOLD, SEQUENCE_LOCKUP_BUMP),
}

# Lockup modes (the unit_type of a lockup unit)
LOCKUP_MODE_TIME = UNIT_TYPE_TIME_LOCKUP
LOCKUP_MODE_SEQUENCE = UNIT_TYPE_SEQUENCE_LOCKUP

# Store keys; IsInit, Admin and Owner share the instance entry
INSTANCE_KEY = "Instance"
UNLOCKS_KEY = "Unlocks"
LAST_CLAIM_KEY = "LastClaim"


# ============================================================================
# STORE FACADE
# ============================================================================

class LockupStorage:
    """
    Read-modify-write access to one lockup unit's state.

    Example:
        store = LockupStorage(view, "LOCK")
        require_auth(caller, store.get_admin(), Role.ADMIN)
        store.set_admin(new_admin)
        return build_transaction(view, [], store.state_changes(),
                                 ttl_extensions=store.ttl_extensions())
    """

    def __init__(self, view: LedgerView, symbol: str):
        self.symbol = symbol
        self._old_state = view.get_unit_state(symbol)
        self._state = copy.deepcopy(self._old_state)
        unit_type = self._state.get('unit_type')
        if unit_type not in LIVENESS:
            raise ValueError(f"{symbol} is not a lockup unit (unit_type={unit_type!r})")
        self._threshold, self._extend_to = LIVENESS[unit_type]
        self._extensions: Dict[str, TtlExtension] = {}

    @property
    def unit_type(self) -> str:
        return self._state['unit_type']

    @property
    def custody_wallet(self) -> str:
        return self._state['custody_wallet']

    def store_key(self, *parts: str) -> str:
        return ":".join((self.symbol,) + parts)

    def _extend(self, key: str) -> None:
        self._extensions[key] = TtlExtension(key, self._threshold, self._extend_to)

    def extend_instance(self) -> None:
        """Keep the instance entries (init flag, principals) alive."""
        self._extend(self.store_key(INSTANCE_KEY))

    # ------------------------------------------------------------------ instance

    def is_initialized(self) -> bool:
        return bool(self._state.get('initialized', False))

    def set_initialized(self) -> None:
        self._state['initialized'] = True
        self.extend_instance()

    def _require_initialized(self) -> None:
        if not self.is_initialized():
            raise NotInitialized(f"lockup {self.symbol} has not been initialized")

    def get_admin(self) -> str:
        self._require_initialized()
        self.extend_instance()
        return self._state['admin']

    def set_admin(self, admin: str) -> None:
        self._state['admin'] = admin
        self.extend_instance()

    def get_owner(self) -> str:
        self._require_initialized()
        self.extend_instance()
        return self._state['owner']

    def set_owner(self, owner: str) -> None:
        self._state['owner'] = owner
        self.extend_instance()

    # ---------------------------------------------------------------- persistent

    def get_progress(self) -> ProgressState:
        self._require_initialized()
        progress = load_progress(self._state)
        if 'unlocks' in self._state:
            self._extend(self.store_key(UNLOCKS_KEY))
        return progress

    def set_progress(self, progress: ProgressState, assets: Iterable[str] = ()) -> None:
        """
        Store progress; `assets` names the watermarks that were written.
        """
        self._state.update(progress_to_state(progress))
        self._extend(self.store_key(UNLOCKS_KEY))
        for asset in assets:
            self._extend(self.store_key(LAST_CLAIM_KEY, asset))

    def record_operation(self) -> None:
        """Count the operation so equal state transitions stay distinct intents."""
        self._state['op_count'] = self._state.get('op_count', 0) + 1

    # -------------------------------------------------------------------- output

    def state_changes(self) -> List[UnitStateChange]:
        if self._state == self._old_state:
            return []
        return [UnitStateChange(unit=self.symbol, old_state=self._old_state, new_state=self._state)]

    def ttl_extensions(self) -> List[TtlExtension]:
        return list(self._extensions.values())


# ============================================================================
# HELPERS
# ============================================================================

def _require_principal(value: str, name: str) -> None:
    if not value or not value.strip():
        raise ValueError(f"{name} cannot be empty")


def _unique(assets: Iterable[str]) -> List[str]:
    """Assets in first-seen order without repeats."""
    return list(dict.fromkeys(assets))


def lockup_origin(
    caller: str,
    symbol: str,
    event_type: str,
    origin_type: OriginType = OriginType.CONTRACT,
) -> TransactionOrigin:
    return TransactionOrigin(
        origin_type=origin_type,
        source_id=caller,
        unit_symbol=symbol,
        event_type=event_type,
    )


def finish(
    view: LedgerView,
    store: LockupStorage,
    caller: str,
    event_type: str,
    moves: Optional[List[Move]] = None,
    origin_type: OriginType = OriginType.CONTRACT,
) -> PendingTransaction:
    """
    Package a store's writes (and any transfers) as one transaction.

    Every operation bumps the unit's op_count, so repeating an earlier
    transition (remove then re-add a checkpoint, hand a role back and forth)
    is a new intent rather than a duplicate.
    """
    store.record_operation()
    return build_transaction(
        view,
        moves or [],
        store.state_changes(),
        origin=lockup_origin(caller, store.symbol, event_type, origin_type),
        ttl_extensions=store.ttl_extensions(),
    )


def create_lockup_unit(symbol: str, name: str, custody_wallet: str, mode: str) -> Unit:
    """
    Create an uninitialized lockup unit.

    The unit carries state only; it is never held, so every move of it is
    rejected by its transfer rule.
    """
    if not symbol or not symbol.strip():
        raise ValueError("symbol cannot be empty")
    _require_principal(custody_wallet, "custody_wallet")
    if mode not in LIVENESS:
        raise ValueError(f"unknown lockup type {mode!r}")

    return Unit(
        symbol=symbol,
        name=name,
        unit_type=mode,
        min_balance=Decimal("0"),
        max_balance=Decimal("0"),
        decimal_places=0,
        transfer_rule=non_transferable_rule,
        _frozen_state=_freeze_state({
            'unit_type': mode,
            'custody_wallet': custody_wallet,
            'initialized': False,
            'op_count': 0,
        }),
    )


def initialize_principals(store: LockupStorage, admin: str, owner: str) -> None:
    """Shared part of initialize: principals and the init flag."""
    _require_principal(admin, "admin")
    _require_principal(owner, "owner")
    if owner == store.custody_wallet:
        raise ValueError("owner cannot be the custody wallet")
    store.set_admin(admin)
    store.set_owner(owner)
    store.set_initialized()


def settle(
    view: LedgerView,
    store: LockupStorage,
    progress: ProgressState,
    owner: str,
    assets: Iterable[str],
    at,
) -> Tuple[List[Move], ProgressState]:
    """
    Compute the release for each asset against its live custody balance.

    Works for either progress shape: `at` is the current time (time
    variant) or the claimed checkpoint key (sequence variant).

    Returns:
        (moves custody -> owner for every non-zero amount, progress after the claim)
    """
    assets = _unique(assets)
    custody = store.custody_wallet
    moves = []
    for asset in assets:
        balance = view.get_balance(custody, asset)
        decimal_places = view.get_unit(asset).decimal_places or 0
        amount = progress.claimable_amount(asset, balance, at, decimal_places)
        if amount > 0:
            moves.append(Move(
                quantity=amount,
                unit_symbol=asset,
                source=custody,
                dest=owner,
                contract_id=f"claim_{store.symbol}_{asset}",
            ))
    return moves, progress.record_progress(assets, at)


# ============================================================================
# PRINCIPAL OPERATIONS (both variants)
# ============================================================================

def get_admin(view: LedgerView, symbol: str) -> str:
    """Return the lockup's admin."""
    return LockupStorage(view, symbol).get_admin()


def get_owner(view: LedgerView, symbol: str) -> str:
    """Return the lockup's owner."""
    return LockupStorage(view, symbol).get_owner()


def compute_update_admin(
    view: LedgerView,
    symbol: str,
    caller: str,
    new_admin: str,
) -> PendingTransaction:
    """
    (Only admin) Hand the admin role to a new principal.

    Raises:
        Unauthorized: If caller is not the admin
        ValueError: If new_admin is empty
    """
    store = LockupStorage(view, symbol)
    require_auth(caller, store.get_admin(), Role.ADMIN)
    _require_principal(new_admin, "new_admin")
    store.set_admin(new_admin)
    return finish(view, store, caller, "UPDATE_ADMIN")


def compute_update_owner(
    view: LedgerView,
    symbol: str,
    caller: str,
    new_owner: str,
) -> PendingTransaction:
    """
    (Only admin) Point future claims at a new owner.

    Raises:
        Unauthorized: If caller is not the admin
        ValueError: If new_owner is empty or is the custody wallet
    """
    store = LockupStorage(view, symbol)
    require_auth(caller, store.get_admin(), Role.ADMIN)
    _require_principal(new_owner, "new_owner")
    if new_owner == store.custody_wallet:
        raise ValueError("owner cannot be the custody wallet")
    store.set_owner(new_owner)
    return finish(view, store, caller, "UPDATE_OWNER")
