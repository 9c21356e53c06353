"""
lockup - Time-Gated Asset Release

Lockups hold assets in a custody wallet on an in-process ledger and release
them to an owner along a vesting schedule.

Usage:
    from datetime import datetime
    from decimal import Decimal
    from lockup import (
        Ledger, token, checkpoint, create_time_lockup,
        time_lockup_initialize, time_lockup_claim,
    )

    ledger = Ledger("main", initial_time=datetime(2025, 1, 1), verbose=False, test_mode=True)
    ledger.register_unit(token("XLM", "Lumens", decimal_places=7))
    for wallet in ("vault", "admin", "alice"):
        ledger.register_wallet(wallet)
    ledger.register_unit(create_time_lockup("TEAM", "Team vesting", "vault"))
    ledger.set_balance("vault", "XLM", Decimal("1000"))

    ledger.execute(time_lockup_initialize(ledger, "TEAM", "admin", "alice", [
        checkpoint(datetime(2025, 6, 1), 5000),
        checkpoint(datetime(2026, 1, 1), 10000),
    ]))

    ledger.advance_time(datetime(2025, 7, 1))
    ledger.execute(time_lockup_claim(ledger, "TEAM", "alice", ["XLM"]))   # 500 XLM
"""

# Core types
from .core import (
    LedgerView,
    SmartContract,
    Move,
    Transaction,
    PendingTransaction,
    TransactionOrigin,
    OriginType,
    Role,
    TtlExtension,
    build_transaction,
    empty_pending_transaction,
    require_auth,
    Unit,
    UnitStateChange,
    ExecuteResult,
    LedgerError,
    TransferRuleViolation,
    UnitNotRegistered,
    WalletNotRegistered,
    LockupError,
    AlreadyInitialized,
    NotInitialized,
    Unauthorized,
    InvalidSchedule,
    AlreadyUnlocked,
    InvalidPercent,
    InvalidCheckpointKey,
    NoUnlockAtKey,
    non_transferable_rule,
    token,
    SYSTEM_WALLET,
    UNIT_TYPE_TOKEN,
    UNIT_TYPE_TIME_LOCKUP,
    UNIT_TYPE_SEQUENCE_LOCKUP,
)

# Ledger
from .ledger import Ledger

# Schedules and release arithmetic
from .schedule import (
    UnlockCheckpoint,
    Schedule,
    checkpoint,
    validate_schedule,
    validate_percent,
    find_leq,
    find_exact,
    release_for,
    apply_unlocks,
    schedule_from_pairs,
    schedule_to_pairs,
    MAX_CHECKPOINTS,
    BPS_SCALE,
    EPOCH,
)

# Progress
from .progress import (
    TimeWatermarkedProgress,
    SequenceConsumingProgress,
    ProgressState,
    load_progress,
    progress_to_state,
)

# Lockup units
from .units import (
    LockupStorage,
    create_lockup_unit,
    compute_update_admin,
    compute_update_owner,
    get_admin,
    get_owner,
    LOCKUP_MODE_TIME,
    LOCKUP_MODE_SEQUENCE,
    ONE_DAY_LEDGERS,
    create_time_lockup,
    time_lockup_initialize,
    compute_set_schedule,
    time_lockup_claim,
    compute_claimable,
    get_schedule,
    get_last_claim,
    time_lockup_contract,
    create_sequence_lockup,
    sequence_lockup_initialize,
    compute_add_checkpoint,
    compute_remove_checkpoint,
    sequence_lockup_claim,
    get_checkpoint,
    get_checkpoints,
)

# Lifecycle
from .lifecycle_engine import LifecycleEngine

__all__ = [
    # Core
    'LedgerView', 'SmartContract', 'Move', 'Transaction', 'PendingTransaction',
    'TransactionOrigin', 'OriginType', 'Role', 'TtlExtension',
    'build_transaction', 'empty_pending_transaction', 'require_auth',
    'Unit', 'UnitStateChange', 'ExecuteResult',
    'LedgerError',
    'TransferRuleViolation', 'UnitNotRegistered', 'WalletNotRegistered',
    'LockupError', 'AlreadyInitialized', 'NotInitialized', 'Unauthorized',
    'InvalidSchedule', 'AlreadyUnlocked', 'InvalidPercent', 'InvalidCheckpointKey',
    'NoUnlockAtKey',
    'non_transferable_rule', 'token',
    'SYSTEM_WALLET', 'UNIT_TYPE_TOKEN', 'UNIT_TYPE_TIME_LOCKUP', 'UNIT_TYPE_SEQUENCE_LOCKUP',
    # Ledger
    'Ledger',
    # Schedules
    'UnlockCheckpoint', 'Schedule', 'checkpoint', 'validate_schedule', 'validate_percent',
    'find_leq', 'find_exact', 'release_for', 'apply_unlocks',
    'schedule_from_pairs', 'schedule_to_pairs', 'MAX_CHECKPOINTS', 'BPS_SCALE', 'EPOCH',
    # Progress
    'TimeWatermarkedProgress', 'SequenceConsumingProgress', 'ProgressState',
    'load_progress', 'progress_to_state',
    # Lockups
    'LockupStorage', 'create_lockup_unit', 'compute_update_admin', 'compute_update_owner',
    'get_admin', 'get_owner', 'LOCKUP_MODE_TIME', 'LOCKUP_MODE_SEQUENCE', 'ONE_DAY_LEDGERS',
    'create_time_lockup', 'time_lockup_initialize', 'compute_set_schedule',
    'time_lockup_claim', 'compute_claimable', 'get_schedule', 'get_last_claim',
    'time_lockup_contract',
    'create_sequence_lockup', 'sequence_lockup_initialize', 'compute_add_checkpoint',
    'compute_remove_checkpoint', 'sequence_lockup_claim', 'get_checkpoint', 'get_checkpoints',
    # Lifecycle
    'LifecycleEngine',
]

__version__ = '1.0.0'
