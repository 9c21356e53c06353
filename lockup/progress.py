"""
progress.py - Progress State for Both Lockup Variants

How far a lockup has moved through its schedule takes one of two shapes:

1. TimeWatermarkedProgress
   - The schedule is never mutated by claiming.
   - Each asset has its own watermark (last claim time, default EPOCH).
   - A claim applies every checkpoint with watermark < threshold <= now.

2. SequenceConsumingProgress
   - The live schedule is a map of sequence key -> percent.
   - A claim applies the whole prefix up to and including a key, then
     removes that prefix. The consumption is shared by all assets.

Both expose the same two operations so call sites do not branch on variant:

    progress.claimable_amount(asset, balance, at, decimal_places) -> Decimal
    progress.record_progress(assets, at) -> new progress

`at` is the current time for the time-watermarked variant and the claimed
checkpoint key for the sequence-consuming variant.

load_progress() and progress_to_state() are the only bridge to unit state.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .core import (
    UnitState, InvalidCheckpointKey, NotInitialized,
    UNIT_TYPE_TIME_LOCKUP, UNIT_TYPE_SEQUENCE_LOCKUP,
)
from .schedule import (
    Schedule, EPOCH,
    apply_unlocks, find_exact, schedule_from_pairs, schedule_to_pairs,
)


# ============================================================================
# TIME-WATERMARKED
# ============================================================================

@dataclass(frozen=True, slots=True)
class TimeWatermarkedProgress:
    """
    Immutable schedule plus per-asset watermarks.

    Attributes:
        schedule: Validated checkpoints with datetime thresholds
        last_claims: asset symbol -> time of its last recorded claim
    """
    schedule: Schedule
    last_claims: Mapping[str, datetime] = field(default_factory=dict)

    def is_fully_unlocked(self, now: datetime) -> bool:
        """True once the final checkpoint has been reached."""
        return bool(self.schedule) and self.schedule[-1].is_reached(now)

    def last_claim(self, asset: str) -> datetime:
        """Watermark for an asset (EPOCH if it was never claimed)."""
        return self.last_claims.get(asset, EPOCH)

    def due_percents(self, asset: str, now: datetime) -> List[int]:
        """Percents of checkpoints reached since the asset's watermark, in order."""
        watermark = self.last_claim(asset)
        return [
            unlock.percent for unlock in self.schedule
            if watermark < unlock.threshold <= now
        ]

    def claimable_amount(
        self,
        asset: str,
        balance: Decimal,
        at: datetime,
        decimal_places: int = 0,
    ) -> Decimal:
        """
        Amount of `balance` releasable for `asset` at time `at`.

        Once fully unlocked the whole live balance is releasable; otherwise the
        due checkpoints are applied to the live balance in order.
        """
        if self.is_fully_unlocked(at):
            return balance
        claim, _ = apply_unlocks(balance, self.due_percents(asset, at), decimal_places)
        return claim

    def record_progress(self, assets: Iterable[str], at: datetime) -> TimeWatermarkedProgress:
        """Move each asset's watermark to `at`, whether or not anything was released."""
        last_claims = dict(self.last_claims)
        for asset in assets:
            last_claims[asset] = at
        return replace(self, last_claims=last_claims)

    def with_schedule(self, schedule: Schedule) -> TimeWatermarkedProgress:
        """Replace the schedule, keeping watermarks."""
        return replace(self, schedule=tuple(schedule))


# ============================================================================
# SEQUENCE-CONSUMING
# ============================================================================

@dataclass(frozen=True, slots=True)
class SequenceConsumingProgress:
    """
    Live schedule keyed by ledger sequence, shrinking as claims consume it.

    Attributes:
        unlocks: (sequence key, percent) pairs, kept sorted by key and unique
    """
    unlocks: Tuple[Tuple[int, int], ...] = ()

    def __post_init__(self):
        # Normalize: one entry per key, ascending
        object.__setattr__(self, 'unlocks', tuple(sorted(dict(self.unlocks).items())))

    def keys(self) -> List[int]:
        return [key for key, _ in self.unlocks]

    def get(self, key: int) -> Optional[int]:
        """Percent stored at `key`, or None."""
        return dict(self.unlocks).get(key)

    def with_checkpoint(self, key: int, percent: int) -> SequenceConsumingProgress:
        """Insert or overwrite the checkpoint at `key`."""
        unlocks = dict(self.unlocks)
        unlocks[key] = percent
        return SequenceConsumingProgress(tuple(unlocks.items()))

    def without_checkpoint(self, key: int) -> SequenceConsumingProgress:
        """
        Remove the checkpoint at `key`.

        Raises:
            InvalidCheckpointKey: If no checkpoint exists at `key`
        """
        unlocks = dict(self.unlocks)
        if key not in unlocks:
            raise InvalidCheckpointKey(f"no checkpoint at sequence {key}")
        del unlocks[key]
        return SequenceConsumingProgress(tuple(unlocks.items()))

    def index_of(self, key: int) -> int:
        """
        Position of `key` among the sorted keys.

        Raises:
            InvalidCheckpointKey: If no checkpoint exists at `key`
        """
        index = find_exact(key, self.keys())
        if index is None:
            raise InvalidCheckpointKey(f"no checkpoint at sequence {key}")
        return index

    def claim_index(self, key: int, current_sequence: int) -> int:
        """
        Position of a claimable checkpoint.

        Raises:
            InvalidCheckpointKey: If `key` is in the future or does not exist
        """
        if key > current_sequence:
            raise InvalidCheckpointKey(
                f"checkpoint {key} has not been reached (current sequence {current_sequence})"
            )
        return self.index_of(key)

    def prefix_percents(self, index: int) -> List[int]:
        """Percents of every checkpoint at position <= index, in order."""
        return [percent for _, percent in self.unlocks[:index + 1]]

    def consume_through(self, index: int) -> SequenceConsumingProgress:
        """Drop every checkpoint at position <= index."""
        return SequenceConsumingProgress(self.unlocks[index + 1:])

    def claimable_amount(
        self,
        asset: str,
        balance: Decimal,
        at: int,
        decimal_places: int = 0,
    ) -> Decimal:
        """Amount of `balance` releasable by claiming the checkpoint at key `at`."""
        claim, _ = apply_unlocks(balance, self.prefix_percents(self.index_of(at)), decimal_places)
        return claim

    def record_progress(self, assets: Iterable[str], at: int) -> SequenceConsumingProgress:
        """
        Consume the prefix through key `at`.

        Consumption is global: `assets` does not matter, and assets left out
        of the claim can no longer benefit from the consumed checkpoints.
        """
        return self.consume_through(self.index_of(at))


ProgressState = Union[TimeWatermarkedProgress, SequenceConsumingProgress]


# ============================================================================
# ADAPTERS
# ============================================================================

def load_progress(state: UnitState) -> ProgressState:
    """
    Load typed progress from a lockup unit's state.

    Raises:
        NotInitialized: If the lockup has no schedule yet
        ValueError: If the state does not belong to a lockup unit
    """
    unit_type = state.get('unit_type')
    if unit_type == UNIT_TYPE_TIME_LOCKUP:
        pairs = state.get('unlocks')
        if pairs is None:
            raise NotInitialized("lockup has no unlock schedule")
        return TimeWatermarkedProgress(
            schedule=schedule_from_pairs(pairs),
            last_claims=dict(state.get('last_claims', {})),
        )
    if unit_type == UNIT_TYPE_SEQUENCE_LOCKUP:
        return SequenceConsumingProgress(tuple(state.get('unlocks', {}).items()))
    raise ValueError(f"not a lockup unit state: unit_type={unit_type!r}")


def progress_to_state(progress: ProgressState) -> Dict[str, Any]:
    """
    Convert progress back to the unit state fields it owns.

    The inverse of load_progress(); merge the result into the unit state.
    """
    if isinstance(progress, TimeWatermarkedProgress):
        return {
            'unlocks': schedule_to_pairs(progress.schedule),
            'last_claims': dict(progress.last_claims),
        }
    return {'unlocks': dict(progress.unlocks)}
