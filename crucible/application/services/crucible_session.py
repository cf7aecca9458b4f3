"""Per-process wiring of the crucible services to the transport channel.

One CrucibleSession exists per connected process. The authoritative
session answers participant proposals; every session keeps its local
view, ritual phase and augmented-action set in step with broadcasts.

A domain error raised while the authority handles a participant request
is returned to that participant as requestRejected. Any other exception
propagates to the channel.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from crucible.application.dtos.envelope import (
    AugmentResultEnvelope,
    Envelope,
    RequestAugmentEnvelope,
    RequestRejectedEnvelope,
    RequestRejectedPayload,
    SeedCompleteEnvelope,
    SeedResultEnvelope,
    SeedStartedEnvelope,
    StateUpdateEnvelope,
)
from crucible.application.ports.transport_channel import TransportChannelProtocol
from crucible.application.services.augmentation_gate import AugmentationGate
from crucible.application.services.authority_gateway import AuthorityGateway
from crucible.application.services.base import LoggingMixin
from crucible.application.services.pool_control_service import PoolControlService
from crucible.application.services.pool_view import PoolViewCache
from crucible.application.services.seeding_coordinator import SeedingCoordinator
from crucible.application.services.state_broadcaster import StateBroadcaster
from crucible.domain.events.message_types import MessageType
from crucible.domain.exceptions import CrucibleError
from crucible.domain.models.action import ActionReference
from crucible.domain.models.pool_state import PoolState
from crucible.domain.models.roles import Actor, require_authoritative
from crucible.infrastructure.observability.correlation import get_correlation_id

RejectionListener = Callable[[RequestRejectedPayload], Awaitable[None]]


class CrucibleSession(LoggingMixin):
    """Everything one process needs, subscribed to the channel.

    Authority-only collaborators (gateway, broadcaster, pool_control) are
    None on participant processes.
    """

    def __init__(
        self,
        actor: Actor,
        channel: TransportChannelProtocol,
        view: PoolViewCache,
        seeding: SeedingCoordinator,
        augmentation: AugmentationGate,
        *,
        gateway: AuthorityGateway | None = None,
        broadcaster: StateBroadcaster | None = None,
        pool_control: PoolControlService | None = None,
    ) -> None:
        if actor.is_authoritative and (
            gateway is None or broadcaster is None or pool_control is None
        ):
            raise ValueError("An authoritative session needs gateway, broadcaster and pool_control")
        self.actor = actor
        self.channel = channel
        self.view = view
        self.seeding = seeding
        self.augmentation = augmentation
        self.gateway = gateway
        self.broadcaster = broadcaster
        self.pool_control = pool_control
        self._rejection_listeners: list[RejectionListener] = []
        self._started = False
        self._init_logger()

    @property
    def is_authoritative(self) -> bool:
        return self.actor.is_authoritative

    def add_rejection_listener(self, listener: RejectionListener) -> None:
        """Called with every requestRejected addressed to this participant."""
        self._rejection_listeners.append(listener)

    async def start(self) -> PoolState:
        """Subscribe handlers; the authority also enforces the invariant once and broadcasts.

        Returns:
            The state this process starts from.
        """
        if self._started:
            return self.view.state
        self._started = True

        self.channel.subscribe(MessageType.STATE_UPDATE, self._on_state_update)
        self.channel.subscribe(MessageType.SEED_STARTED, self._on_seed_started)
        self.channel.subscribe(MessageType.SEED_COMPLETE, self._on_seed_complete)
        self.channel.subscribe(MessageType.AUGMENT_RESULT, self._on_augment_result)
        self.channel.subscribe(MessageType.REQUEST_REJECTED, self._on_request_rejected)

        if not self.is_authoritative:
            self._log_operation("start_session").info(
                "session_started", participant_id=self.actor.participant_id
            )
            return self.view.state

        assert self.gateway is not None and self.broadcaster is not None
        self.channel.subscribe(MessageType.SEED_RESULT, self._on_seed_result)
        self.channel.subscribe(MessageType.REQUEST_AUGMENT, self._on_request_augment)

        await self.gateway.load_settings()
        state = await self.gateway.enforce_invariant_now(self.actor)
        await self.broadcaster.broadcast_state(state)
        self._log_operation("start_session").info(
            "authority_session_started",
            participant_id=self.actor.participant_id,
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
        )
        return state

    def observe_action(self, action: ActionReference) -> None:
        """Feed a new host action (a roll) into the roll history."""
        self.augmentation.observe_action(action)

    async def handle_roster_change(self) -> PoolState | None:
        """Restore the invariant after a participant joins or leaves.

        While a seeding ritual is running the change may complete it (the
        last unseeded participant left); otherwise enforcement waits for
        the ritual, which builds the total up one seed at a time.

        Returns:
            The new state, or None when deferred.
        """
        require_authoritative(self.actor, "handle_roster_change")
        assert self.gateway is not None and self.broadcaster is not None
        log = self._log_operation("handle_roster_change")

        if self.seeding.is_seeding:
            if not await self.seeding.check_completion(self.actor):
                log.info("roster_change_deferred_during_seeding")
                return None
            log.info("roster_change_completed_seeding")

        state = await self.gateway.enforce_invariant_now(self.actor)
        await self.broadcaster.broadcast_state(state)
        log.info("roster_change_enforced", total=state.total)
        return state

    # -------------------------------------------------------------------------
    # Broadcast handlers (every process)
    # -------------------------------------------------------------------------

    async def _on_state_update(self, envelope: Envelope) -> None:
        assert isinstance(envelope, StateUpdateEnvelope)
        await self.view.apply_envelope(envelope)

    async def _on_seed_started(self, envelope: Envelope) -> None:
        assert isinstance(envelope, SeedStartedEnvelope)
        await self.seeding.on_seed_started(envelope)

    async def _on_seed_complete(self, envelope: Envelope) -> None:
        assert isinstance(envelope, SeedCompleteEnvelope)
        await self.view.apply_envelope(envelope)
        await self.seeding.on_seed_complete(envelope)

    async def _on_augment_result(self, envelope: Envelope) -> None:
        assert isinstance(envelope, AugmentResultEnvelope)
        await self.augmentation.on_augment_result(envelope)

    async def _on_request_rejected(self, envelope: Envelope) -> None:
        assert isinstance(envelope, RequestRejectedEnvelope)
        payload = envelope.payload
        if payload.participant_id != self.actor.participant_id:
            return
        self._log_operation(
            "on_request_rejected", request_type=payload.request_type.value
        ).warning("request_rejected", kind=payload.kind, message=payload.message)
        for listener in self._rejection_listeners:
            await listener(payload)

    # -------------------------------------------------------------------------
    # Authority handlers
    # -------------------------------------------------------------------------

    async def _on_seed_result(self, envelope: Envelope) -> None:
        assert isinstance(envelope, SeedResultEnvelope)
        payload = envelope.payload
        try:
            await self.seeding.accept_submission(
                self.actor, payload.participant_id, payload.value
            )
        except CrucibleError as exc:
            await self._reject(payload.participant_id, MessageType.SEED_RESULT, exc)

    async def _on_request_augment(self, envelope: Envelope) -> None:
        assert isinstance(envelope, RequestAugmentEnvelope)
        payload = envelope.payload
        try:
            await self.augmentation.handle_augment_request(
                self.actor, payload.participant_id, payload.action_id
            )
        except CrucibleError as exc:
            await self._reject(payload.participant_id, MessageType.REQUEST_AUGMENT, exc)

    async def _reject(
        self, participant_id: str, request_type: MessageType, error: CrucibleError
    ) -> None:
        self._log_operation(
            "reject_request",
            participant_id=participant_id,
            request_type=request_type.value,
        ).warning("proposal_rejected", kind=error.kind, message=error.message)
        await self.channel.send_to(
            participant_id,
            RequestRejectedEnvelope(
                payload=RequestRejectedPayload(
                    participant_id=participant_id,
                    request_type=request_type,
                    kind=error.kind,
                    message=error.message,
                ),
                correlation_id=get_correlation_id() or None,
            ),
        )
