"""Invariant enforcer for the dice pools.

Computes the balanced distribution for a target total. Pure and
deterministic: no I/O, no clock, no randomness.

Rule:
    The difference between the target and the current total is applied to
    the player pool first, clamped at zero. Whatever the player pool cannot
    absorb goes to the arbiter pool, so the two counts always sum exactly
    to the target and neither is ever negative.
"""

from __future__ import annotations

from crucible.domain.errors.validation import ValidationError
from crucible.domain.models.pool_state import PoolState


def rebalance(current: PoolState, target_total: int) -> PoolState:
    """Return `current` with pool counts summing to `target_total`.

    Args:
        current: State to balance.
        target_total: Required total (the active participant count).

    Returns:
        `current` itself when it already sums to the target, otherwise a
        copy with adjusted counts. Other fields are preserved.

    Raises:
        ValidationError: If target_total is negative.

    Example:
        >>> rebalance(PoolState(player_pool_count=1, arbiter_pool_count=4), 3)
        PoolState(player_pool_count=0, arbiter_pool_count=3, ...)
    """
    if target_total < 0:
        raise ValidationError(
            f"Target total must be non-negative, got {target_total}",
            "target_total",
            target_total,
        )

    if current.total == target_total:
        return current

    difference = target_total - current.total
    player = max(0, current.player_pool_count + difference)
    arbiter = target_total - player
    return current.with_counts(player=player, arbiter=arbiter)


def is_balanced(state: PoolState, target_total: int) -> bool:
    """True when override is on or the pools already sum to the target."""
    return state.override_enabled or state.total == target_total
