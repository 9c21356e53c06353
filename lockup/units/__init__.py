"""
Units module - Lockup units and their operations.

- Time-watermarked lockups (per-asset watermarks, immutable past)
- Sequence-consuming lockups (shared checkpoint prefix consumption)
- Principal management shared by both

The two variants expose operations with the same names, so they are
re-exported here with a variant prefix.
"""

# Shared plumbing and principal operations
from .common import (
    LockupStorage,
    create_lockup_unit,
    compute_update_admin,
    compute_update_owner,
    get_admin,
    get_owner,
    LOCKUP_MODE_TIME,
    LOCKUP_MODE_SEQUENCE,
    ONE_DAY_LEDGERS,
    TIME_LOCKUP_BUMP,
    TIME_LOCKUP_THRESHOLD,
    SEQUENCE_LOCKUP_BUMP,
    SEQUENCE_LOCKUP_THRESHOLD,
)

# Time-watermarked lockups
from .time_lockup import (
    create_time_lockup,
    compute_initialize as time_lockup_initialize,
    compute_set_schedule,
    compute_claim as time_lockup_claim,
    compute_claimable,
    get_schedule,
    get_last_claim,
    time_lockup_contract,
)

# Sequence-consuming lockups
from .sequence_lockup import (
    create_sequence_lockup,
    compute_initialize as sequence_lockup_initialize,
    compute_add_checkpoint,
    compute_remove_checkpoint,
    compute_claim as sequence_lockup_claim,
    get_checkpoint,
    get_checkpoints,
)
