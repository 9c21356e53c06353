"""
time_lockup.py - Time-Watermarked Lockup

A time lockup holds assets in its custody wallet and releases them to its
owner along an immutable schedule of (time, percent) checkpoints. Each asset
keeps its own watermark: a claim applies every checkpoint reached since that
asset's last claim, in order, each to the balance left by the one before.
Once the final checkpoint is reached the whole custody balance is released.

This module provides:
1. create_time_lockup() - Factory for an uninitialized lockup unit
2. compute_initialize() - One-shot setup of principals and schedule
3. compute_set_schedule() - Admin replacement of the unreached future
4. compute_claim() - Owner release of due funds
5. get_schedule(), get_last_claim(), compute_claimable() - Read-only queries
6. time_lockup_contract() - SmartContract for automatic release

All compute functions take a LedgerView and return a PendingTransaction.
"""

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from ..core import (
    LedgerView, PendingTransaction, Unit, Role, OriginType,
    AlreadyInitialized,
    empty_pending_transaction, require_auth,
)
from ..progress import TimeWatermarkedProgress
from ..schedule import Schedule, UnlockCheckpoint, validate_schedule
from .common import (
    LockupStorage, LOCKUP_MODE_TIME,
    create_lockup_unit, finish, initialize_principals, settle,
)


def create_time_lockup(symbol: str, name: str, custody_wallet: str) -> Unit:
    """
    Create an uninitialized time-watermarked lockup.

    Args:
        symbol: Unit symbol for the lockup
        name: Human-readable name
        custody_wallet: Wallet that will hold the locked assets

    Example:
        ledger.register_wallet("vault")
        ledger.register_unit(create_time_lockup("TEAM", "Team vesting", "vault"))
    """
    return create_lockup_unit(symbol, name, custody_wallet, LOCKUP_MODE_TIME)


def compute_initialize(
    view: LedgerView,
    symbol: str,
    admin: str,
    owner: str,
    schedule: Sequence[UnlockCheckpoint],
) -> PendingTransaction:
    """
    Set the lockup's admin, owner and unlock schedule. Callable once.

    Raises:
        AlreadyInitialized: If the lockup was initialized before
        InvalidSchedule: If the schedule is malformed
        ValueError: If a principal is empty or the owner is the custody wallet
    """
    store = LockupStorage(view, symbol)
    if store.is_initialized():
        raise AlreadyInitialized(f"lockup {symbol} is already initialized")

    schedule = tuple(schedule)
    validate_schedule(schedule, threshold_type=datetime)

    initialize_principals(store, admin, owner)
    store.set_progress(TimeWatermarkedProgress(schedule=schedule))
    return finish(view, store, admin, "INITIALIZE")


def compute_set_schedule(
    view: LedgerView,
    symbol: str,
    caller: str,
    new_schedule: Sequence[UnlockCheckpoint],
) -> PendingTransaction:
    """
    (Only admin) Replace the unlock schedule.

    Checkpoints already reached must be carried over unchanged and in place;
    only the unreached future can be rewritten. Watermarks are kept.

    Raises:
        Unauthorized: If caller is not the admin
        InvalidSchedule: If the new schedule is malformed
        AlreadyUnlocked: If it rewrites a reached checkpoint, or the current
                         schedule is already fully unlocked
    """
    store = LockupStorage(view, symbol)
    require_auth(caller, store.get_admin(), Role.ADMIN)

    progress = store.get_progress()
    new_schedule = tuple(new_schedule)
    validate_schedule(
        new_schedule, previous=progress.schedule, now=view.current_time, threshold_type=datetime
    )

    store.set_progress(progress.with_schedule(new_schedule))
    return finish(view, store, caller, "SET_SCHEDULE")


def compute_claim(
    view: LedgerView,
    symbol: str,
    caller: str,
    assets: Iterable[str],
) -> PendingTransaction:
    """
    (Only owner) Release every due amount of `assets` to the owner.

    For each asset the checkpoints in (watermark, now] are applied to the
    live custody balance, and the watermark moves to now even when nothing
    was due. Transfers and watermarks commit in one transaction.

    Args:
        view: Read-only ledger access
        symbol: Lockup unit symbol
        caller: Principal invoking the claim
        assets: Asset symbols to claim; repeats are ignored

    Raises:
        NotInitialized: If the lockup has not been initialized
        Unauthorized: If caller is not the owner

    Example:
        pending = compute_claim(ledger, "TEAM", "alice", ["XLM"])
        ledger.execute(pending)
    """
    return _claim(view, symbol, caller, assets, OriginType.CONTRACT)


def _claim(
    view: LedgerView,
    symbol: str,
    caller: str,
    assets: Iterable[str],
    origin_type: OriginType,
) -> PendingTransaction:
    store = LockupStorage(view, symbol)
    owner = store.get_owner()
    require_auth(caller, owner, Role.OWNER)

    assets = list(assets)
    now = view.current_time
    progress = store.get_progress()
    moves, progress = settle(view, store, progress, owner, assets, now)

    store.set_progress(progress, assets=assets)
    return finish(view, store, caller, "CLAIM", moves, origin_type)


def get_schedule(view: LedgerView, symbol: str) -> Schedule:
    """Return the stored unlock schedule."""
    return LockupStorage(view, symbol).get_progress().schedule


def get_last_claim(view: LedgerView, symbol: str, asset: str) -> datetime:
    """Return an asset's watermark (EPOCH if it has never been claimed)."""
    return LockupStorage(view, symbol).get_progress().last_claim(asset)


def compute_claimable(
    view: LedgerView,
    symbol: str,
    assets: Iterable[str],
) -> Dict[str, Decimal]:
    """
    Preview what compute_claim would release right now, per asset.

    Reads only; nothing is recorded.
    """
    store = LockupStorage(view, symbol)
    progress = store.get_progress()
    now = view.current_time
    custody = store.custody_wallet

    claimable: Dict[str, Decimal] = {}
    for asset in assets:
        balance = view.get_balance(custody, asset)
        decimal_places = view.get_unit(asset).decimal_places or 0
        claimable[asset] = progress.claimable_amount(asset, balance, now, decimal_places)
    return claimable


def time_lockup_contract(assets: List[str]):
    """
    Build a SmartContract that claims `assets` for the owner when funds are due.

    The contract fires only when at least one asset has a non-zero claimable
    amount, so a lifecycle pass settles and then goes quiet.

    Example:
        engine = LifecycleEngine(ledger)
        engine.register(UNIT_TYPE_TIME_LOCKUP, time_lockup_contract(["XLM", "USDC"]))
        engine.step(datetime(2025, 6, 1))
    """
    assets = list(assets)

    def contract(view: LedgerView, symbol: str, timestamp: datetime) -> PendingTransaction:
        store = LockupStorage(view, symbol)
        if not store.is_initialized():
            return empty_pending_transaction(view)

        claimable = compute_claimable(view, symbol, assets)
        if not any(amount > 0 for amount in claimable.values()):
            return empty_pending_transaction(view)

        return _claim(view, symbol, store.get_owner(), assets, OriginType.LIFECYCLE)

    return contract
