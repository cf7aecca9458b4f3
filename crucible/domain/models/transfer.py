"""Direct pool transfers made by the arbiter."""

from __future__ import annotations

from enum import Enum

from crucible.domain.errors.augmentation import InsufficientDiceError
from crucible.domain.errors.validation import ValidationError
from crucible.domain.models.pool_state import PoolDelta, PoolState


class TransferDirection(Enum):
    """Direction of a dice transfer."""

    TO_ARBITER = "to_arbiter"
    TO_PLAYER = "to_player"


def transfer_delta(
    state: PoolState,
    direction: TransferDirection,
    amount: int,
) -> PoolDelta:
    """Build the delta moving `amount` dice in `direction`.

    Args:
        state: Live pool state the transfer is validated against.
        direction: Which pool receives the dice.
        amount: Positive number of dice.

    Returns:
        PoolDelta with both counts set.

    Raises:
        ValidationError: If amount is not a positive integer or exceeds
            the source pool.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise ValidationError(
            f"Transfer amount must be a positive integer, got {amount!r}",
            "amount",
            amount,
        )

    if direction is TransferDirection.TO_ARBITER:
        source, source_name = state.player_pool_count, "player"
    else:
        source, source_name = state.arbiter_pool_count, "arbiter"

    if amount > source:
        raise ValidationError(
            f"Cannot move {amount} dice: the {source_name} pool holds {source}",
            "amount",
            amount,
        )

    if direction is TransferDirection.TO_ARBITER:
        return PoolDelta(
            player_pool_count=state.player_pool_count - amount,
            arbiter_pool_count=state.arbiter_pool_count + amount,
        )
    return PoolDelta(
        player_pool_count=state.player_pool_count + amount,
        arbiter_pool_count=state.arbiter_pool_count - amount,
    )


def single_die_delta(state: PoolState, direction: TransferDirection) -> PoolDelta:
    """Build the delta moving one die, reporting a short pool as insufficient dice.

    Used by dice spends (augmentation, arbiter die) rather than by
    explicit transfers.

    Raises:
        InsufficientDiceError: If the source pool is empty.
    """
    if direction is TransferDirection.TO_ARBITER and state.player_pool_count < 1:
        raise InsufficientDiceError("player", 1, state.player_pool_count)
    if direction is TransferDirection.TO_PLAYER and state.arbiter_pool_count < 1:
        raise InsufficientDiceError("arbiter", 1, state.arbiter_pool_count)
    return transfer_delta(state, direction, 1)
