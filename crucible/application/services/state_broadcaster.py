"""Publishes committed pool state to every process."""

from __future__ import annotations

from crucible.application.dtos.envelope import StatePayload, StateUpdateEnvelope
from crucible.application.ports.transport_channel import TransportChannelProtocol
from crucible.application.services.base import LoggingMixin
from crucible.application.services.pool_view import PoolViewCache
from crucible.domain.models.pool_state import PoolState
from crucible.infrastructure.observability.correlation import get_correlation_id


class StateBroadcaster(LoggingMixin):
    """Sends stateUpdate after every committed mutation.

    The channel does not echo to the sender, so the authoritative process
    refreshes its own view directly.
    """

    def __init__(
        self,
        channel: TransportChannelProtocol,
        local_view: PoolViewCache | None = None,
    ) -> None:
        self._channel = channel
        self._local_view = local_view
        self._init_logger()

    async def broadcast_state(self, state: PoolState) -> StateUpdateEnvelope:
        envelope = StateUpdateEnvelope(
            payload=StatePayload.from_state(state),
            correlation_id=get_correlation_id() or None,
        )
        await self._channel.publish(envelope)
        if self._local_view is not None:
            await self._local_view.apply_state(state)

        self._log_operation("broadcast_state").debug(
            "state_broadcast",
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
        )
        return envelope
