"""
schedule.py - Unlock Checkpoints, Schedule Validation and Release Arithmetic

This module holds the pure pieces shared by both lockup variants:
1. UnlockCheckpoint - immutable (threshold, percent) pair
2. validate_schedule() - accepts or rejects a whole-schedule replacement
3. find_leq() - binary search for the closest checkpoint at or before a key
4. apply_unlocks() - sequential percent-of-remaining release arithmetic

A checkpoint's percent is expressed in basis points of the balance that is
still locked once every earlier checkpoint has been applied, not of an
initial snapshot. Releasing 5000bp and then 5000bp of a 1,000,000 balance
releases 500,000 and then 250,000.

No function here touches a LedgerView.
"""

from __future__ import annotations
from bisect import bisect_left
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_DOWN
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .core import InvalidSchedule, AlreadyUnlocked, InvalidPercent


# Maximum number of checkpoints in a time-watermarked schedule.
MAX_CHECKPOINTS = 48

# 10000 basis points = 100%.
BPS_SCALE = 10000

# Watermark of an asset that has never been claimed.
EPOCH = datetime(1970, 1, 1)


# ============================================================================
# CHECKPOINT
# ============================================================================

@dataclass(frozen=True, slots=True)
class UnlockCheckpoint:
    """
    A point in a vesting schedule.

    Attributes:
        threshold: When the checkpoint is reached. A datetime for the
                   time-watermarked variant, a ledger sequence number for the
                   sequence-consuming variant.
        percent: Basis points (0-10000) of the still-locked balance that
                 become claimable once the threshold is reached.
    """
    threshold: Any
    percent: int

    def __post_init__(self):
        if isinstance(self.percent, bool) or not isinstance(self.percent, int):
            raise ValueError(f"percent must be an int of basis points, got {self.percent!r}")

    def is_reached(self, now: Any) -> bool:
        """True once `now` is at or past the threshold."""
        return self.threshold <= now


Schedule = Tuple[UnlockCheckpoint, ...]


def checkpoint(threshold: Any, percent: int) -> UnlockCheckpoint:
    """Shorthand for UnlockCheckpoint(threshold, percent)."""
    return UnlockCheckpoint(threshold=threshold, percent=percent)


def schedule_from_pairs(pairs: Iterable[Tuple[Any, int]]) -> Schedule:
    """Build a schedule from stored (threshold, percent) pairs."""
    return tuple(UnlockCheckpoint(threshold=t, percent=p) for t, p in pairs)


def schedule_to_pairs(schedule: Iterable[UnlockCheckpoint]) -> List[Tuple[Any, int]]:
    """Flatten a schedule into (threshold, percent) pairs for unit state."""
    return [(c.threshold, c.percent) for c in schedule]


# ============================================================================
# VALIDATION
# ============================================================================

def validate_schedule(
    candidate: Sequence[UnlockCheckpoint],
    previous: Optional[Sequence[UnlockCheckpoint]] = None,
    now: Optional[datetime] = None,
    require_full_release: bool = True,
    threshold_type: Optional[type] = None,
) -> None:
    """
    Validate a candidate unlock schedule, optionally as a replacement.

    Shape rules (InvalidSchedule):
    - non-empty, at most MAX_CHECKPOINTS entries
    - with require_full_release, the last percent is exactly BPS_SCALE
    - every percent in (0, BPS_SCALE]
    - every threshold of one type (`threshold_type`, else the first threshold's)
    - thresholds strictly ascending, the first strictly after EPOCH (or 0)

    Replacement rules, when `previous` is given (AlreadyUnlocked):
    - the previous schedule must not be fully unlocked at `now`
    - every previous checkpoint already reached at `now` must be unchanged at
      the same position in the candidate

    Args:
        candidate: Proposed schedule, in order
        previous: Schedule being replaced, or None on initialization
        now: Current time; required when `previous` is given
        require_full_release: Require the last checkpoint to release 100%
        threshold_type: Type every threshold must have (datetime for time lockups)

    Raises:
        InvalidSchedule: The candidate is malformed
        AlreadyUnlocked: The replacement rewrites the past
    """
    candidate = tuple(candidate)
    if not candidate or len(candidate) > MAX_CHECKPOINTS:
        raise InvalidSchedule(
            f"schedule must have 1 to {MAX_CHECKPOINTS} checkpoints, got {len(candidate)}"
        )
    if require_full_release and candidate[-1].percent != BPS_SCALE:
        raise InvalidSchedule(
            f"last checkpoint must release {BPS_SCALE}bp, got {candidate[-1].percent}"
        )

    if previous is not None:
        previous = tuple(previous)
        if now is None:
            raise ValueError("now is required when replacing a schedule")
        if previous and previous[-1].is_reached(now):
            raise AlreadyUnlocked("schedule is fully unlocked and can no longer change")
        for i in range(len(candidate), len(previous)):
            if previous[i].is_reached(now):
                raise AlreadyUnlocked(
                    f"checkpoint {i} at {previous[i].threshold} has already been reached"
                )

    expected_type = threshold_type or type(candidate[0].threshold)
    # Thresholds are datetimes or sequence numbers; either way the first is after zero
    last_threshold = EPOCH if issubclass(expected_type, datetime) else 0
    for i, unlock in enumerate(candidate):
        if isinstance(unlock.threshold, bool) or not isinstance(unlock.threshold, expected_type):
            raise InvalidSchedule(
                f"checkpoint {i}: threshold {unlock.threshold!r} is not a {expected_type.__name__}"
            )
        if unlock.percent <= 0 or unlock.percent > BPS_SCALE:
            raise InvalidSchedule(
                f"checkpoint {i}: percent must be in (0, {BPS_SCALE}], got {unlock.percent}"
            )

        if previous is not None and i < len(previous):
            prev_unlock = previous[i]
            if prev_unlock.is_reached(now) and prev_unlock != unlock:
                raise AlreadyUnlocked(
                    f"checkpoint {i} at {prev_unlock.threshold} has already been reached"
                )

        if unlock.threshold <= last_threshold:
            raise InvalidSchedule(
                f"checkpoint {i}: threshold {unlock.threshold} is not after {last_threshold}"
            )
        last_threshold = unlock.threshold


def validate_percent(percent: int) -> None:
    """
    Check a single checkpoint percent for the sequence-consuming variant.

    Any value in [0, BPS_SCALE] is accepted.

    Raises:
        InvalidPercent: If percent is negative or above BPS_SCALE
    """
    if isinstance(percent, bool) or not isinstance(percent, int):
        raise InvalidPercent(f"percent must be an int of basis points, got {percent!r}")
    if percent < 0 or percent > BPS_SCALE:
        raise InvalidPercent(f"percent must be in [0, {BPS_SCALE}], got {percent}")


# ============================================================================
# LOOKUP
# ============================================================================

def find_leq(target: int, sorted_keys: Sequence[int]) -> Optional[int]:
    """
    Binary search for the closest key at or before `target`.

    Returns:
        Index of `target` if present, else the index of the greatest key
        strictly less than `target`, or None if every key is greater.

    Example:
        find_leq(8, [1, 3, 5, 7, 9])  # -> 3
        find_leq(0, [1, 3, 5, 7, 9])  # -> None
    """
    i = bisect_left(sorted_keys, target)
    if i < len(sorted_keys) and sorted_keys[i] == target:
        return i
    if i == 0:
        return None
    return i - 1


def find_exact(target: int, sorted_keys: Sequence[int]) -> Optional[int]:
    """Binary search for `target`; its index, or None if absent."""
    i = find_leq(target, sorted_keys)
    if i is None or sorted_keys[i] != target:
        return None
    return i


# ============================================================================
# RELEASE ARITHMETIC
# ============================================================================

def release_for(remaining: Decimal, percent: int, decimal_places: int = 0) -> Decimal:
    """
    floor(remaining * percent / BPS_SCALE) in the asset's smallest unit.
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    return (remaining * percent / BPS_SCALE).quantize(quantum, rounding=ROUND_DOWN)


def apply_unlocks(
    balance: Decimal,
    percents: Iterable[int],
    decimal_places: int = 0,
) -> Tuple[Decimal, Decimal]:
    """
    Apply percents to a balance in order, each to what is left after the last.

    Args:
        balance: Live balance held in custody
        percents: Basis points to apply, in checkpoint order
        decimal_places: Precision of the asset's smallest unit

    Returns:
        (claim_amount, remaining_balance)

    Example:
        apply_unlocks(Decimal("1000000"), [5000, 5000])
        # -> (Decimal("750000"), Decimal("250000"))
    """
    remaining = balance
    claim = Decimal("0")
    for percent in percents:
        release = release_for(remaining, percent, decimal_places)
        remaining -= release
        claim += release
    return claim, remaining
