"""
sequence_lockup.py - Sequence-Consuming Lockup

A sequence lockup keys its checkpoints by ledger sequence number. The admin
edits the live checkpoint map freely; the owner claims by naming a reached
checkpoint key. The claim applies every checkpoint up to and including that
key, in order, to the live custody balance of each listed asset, and then
removes those checkpoints for all assets.

Checkpoint percents are not required to sum to 100%, and no final
checkpoint releases the remainder: a remainder can stay locked for good.
"""

from __future__ import annotations
from typing import Dict, Iterable, Mapping, Optional

from ..core import (
    LedgerView, PendingTransaction, Unit, Role,
    AlreadyInitialized, InvalidCheckpointKey,
    require_auth,
)
from ..progress import SequenceConsumingProgress
from ..schedule import validate_percent
from .common import (
    LockupStorage, LOCKUP_MODE_SEQUENCE,
    create_lockup_unit, finish, initialize_principals, settle,
)


def create_sequence_lockup(symbol: str, name: str, custody_wallet: str) -> Unit:
    """Create an uninitialized sequence-consuming lockup."""
    return create_lockup_unit(symbol, name, custody_wallet, LOCKUP_MODE_SEQUENCE)


def _validate_key(key: int) -> None:
    if isinstance(key, bool) or not isinstance(key, int) or key < 0:
        raise InvalidCheckpointKey(f"checkpoint key must be a non-negative int, got {key!r}")


def compute_initialize(
    view: LedgerView,
    symbol: str,
    admin: str,
    owner: str,
    checkpoints: Optional[Mapping[int, int]] = None,
) -> PendingTransaction:
    """
    Set the lockup's admin and owner, with optional starting checkpoints.

    Each starting checkpoint is checked the same way add_checkpoint checks it.

    Raises:
        AlreadyInitialized: If the lockup was initialized before
        InvalidPercent: If a percent is outside [0, 10000]
        InvalidCheckpointKey: If a key is not a non-negative int
    """
    store = LockupStorage(view, symbol)
    if store.is_initialized():
        raise AlreadyInitialized(f"lockup {symbol} is already initialized")

    checkpoints = dict(checkpoints or {})
    for key, percent in checkpoints.items():
        _validate_key(key)
        validate_percent(percent)

    initialize_principals(store, admin, owner)
    store.set_progress(SequenceConsumingProgress(tuple(checkpoints.items())))
    return finish(view, store, admin, "INITIALIZE")


def compute_add_checkpoint(
    view: LedgerView,
    symbol: str,
    caller: str,
    key: int,
    percent: int,
) -> PendingTransaction:
    """
    (Only admin) Insert a checkpoint, or overwrite the one at `key`.

    Raises:
        Unauthorized: If caller is not the admin
        InvalidPercent: If percent is outside [0, 10000]
    """
    store = LockupStorage(view, symbol)
    require_auth(caller, store.get_admin(), Role.ADMIN)
    _validate_key(key)
    validate_percent(percent)

    progress = store.get_progress()
    store.set_progress(progress.with_checkpoint(key, percent))
    return finish(view, store, caller, "ADD_CHECKPOINT")


def compute_remove_checkpoint(
    view: LedgerView,
    symbol: str,
    caller: str,
    key: int,
) -> PendingTransaction:
    """
    (Only admin) Remove the checkpoint at `key`.

    Raises:
        Unauthorized: If caller is not the admin
        InvalidCheckpointKey: If there is no checkpoint at `key`
    """
    store = LockupStorage(view, symbol)
    require_auth(caller, store.get_admin(), Role.ADMIN)

    progress = store.get_progress()
    store.set_progress(progress.without_checkpoint(key))
    return finish(view, store, caller, "REMOVE_CHECKPOINT")


def get_checkpoint(view: LedgerView, symbol: str, key: int) -> Optional[int]:
    """Percent at `key`, or None if there is no such checkpoint."""
    return LockupStorage(view, symbol).get_progress().get(key)


def get_checkpoints(view: LedgerView, symbol: str) -> Dict[int, int]:
    return dict(LockupStorage(view, symbol).get_progress().unlocks)


def compute_claim(
    view: LedgerView,
    symbol: str,
    caller: str,
    checkpoint_key: int,
    assets: Iterable[str],
) -> PendingTransaction:
    """
    (Only owner) Claim through the reached checkpoint at `checkpoint_key`.

    Every checkpoint with key <= checkpoint_key is applied in order to each
    asset's live custody balance, then all of them are consumed. The
    consumption is shared: an asset left out of `assets` loses those
    checkpoints too.

    Raises:
        NotInitialized: If the lockup has not been initialized
        Unauthorized: If caller is not the owner
        InvalidCheckpointKey: If checkpoint_key is past the current sequence
                              or names no stored checkpoint
    """
    store = LockupStorage(view, symbol)
    owner = store.get_owner()
    require_auth(caller, owner, Role.OWNER)

    progress = store.get_progress()
    progress.claim_index(checkpoint_key, view.current_sequence)
    moves, progress = settle(view, store, progress, owner, assets, checkpoint_key)

    store.set_progress(progress)
    return finish(view, store, caller, "CLAIM", moves)
