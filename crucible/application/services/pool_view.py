"""Local read-only view of the pool state, kept in every process."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from crucible.application.dtos.envelope import SeedCompleteEnvelope, StateUpdateEnvelope
from crucible.application.services.base import LoggingMixin
from crucible.domain.models.display import DEFAULT_MAX_VISIBLE_DICE, PoolDisplay
from crucible.domain.models.pool_state import PoolState

PoolViewListener = Callable[[PoolState], Awaitable[None]]


class PoolViewCache(LoggingMixin):
    """Last snapshot received from the authority.

    Listeners (panels, dialogs) are called with the new state every time a
    snapshot is applied.
    """

    def __init__(
        self,
        initial: PoolState | None = None,
        *,
        max_visible_dice: int = DEFAULT_MAX_VISIBLE_DICE,
    ) -> None:
        self._state = initial or PoolState()
        self._max_visible_dice = max_visible_dice
        self._listeners: list[PoolViewListener] = []
        self._init_logger()

    @property
    def state(self) -> PoolState:
        return self._state

    async def snapshot(self) -> PoolState:
        return self._state

    def display(self) -> PoolDisplay:
        return PoolDisplay.from_state(self._state, self._max_visible_dice)

    def add_listener(self, listener: PoolViewListener) -> None:
        self._listeners.append(listener)

    async def apply_state(self, state: PoolState) -> None:
        self._state = state
        for listener in self._listeners:
            await listener(state)

    async def apply_envelope(
        self, envelope: StateUpdateEnvelope | SeedCompleteEnvelope
    ) -> None:
        """Apply a stateUpdate or seedComplete snapshot."""
        if isinstance(envelope, SeedCompleteEnvelope):
            state = envelope.payload.state.to_state()
        else:
            state = envelope.payload.to_state()
        self._log_operation("apply_envelope", message_type=envelope.type).debug(
            "pool_view_refreshed",
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
        )
        await self.apply_state(state)
