"""Read model for rendering the pools."""

from __future__ import annotations

from dataclasses import dataclass

from crucible.domain.models.pool_state import PoolState

DEFAULT_MAX_VISIBLE_DICE: int = 12


@dataclass(frozen=True)
class PoolDisplay:
    """What a panel needs to draw both pools.

    Dice beyond `max_visible` are summarised as overflow.
    """

    player_pool_count: int
    arbiter_pool_count: int
    total_dice: int
    override_enabled: bool
    player_visible: int
    arbiter_visible: int
    player_overflow: int
    arbiter_overflow: int

    @classmethod
    def from_state(
        cls, state: PoolState, max_visible: int = DEFAULT_MAX_VISIBLE_DICE
    ) -> PoolDisplay:
        return cls(
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
            total_dice=state.total,
            override_enabled=state.override_enabled,
            player_visible=min(state.player_pool_count, max_visible),
            arbiter_visible=min(state.arbiter_pool_count, max_visible),
            player_overflow=max(0, state.player_pool_count - max_visible),
            arbiter_overflow=max(0, state.arbiter_pool_count - max_visible),
        )
