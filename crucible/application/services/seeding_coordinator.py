"""Seeding ritual coordinator.

The ritual builds the pools from scratch, one die per participant:

    start()            authority   zero pools, clear progress -> SEEDING,
                                   broadcast seedStarted
    submit()           participant validate locally, send seedResult
    accept_submission  authority   validate, add one die, record progress,
                                   broadcast; COMPLETE once everyone seeded

While SEEDING the gateway's rebalance step is suspended, so the total
grows one participant at a time instead of snapping to the final
target, whichever service writes in the meantime. A roster change can
also finish the ritual (check_completion).

Each process keeps its own copy of the phase: the authority sets it
directly, participants follow the seedStarted/seedComplete broadcasts.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from crucible.application.dtos.envelope import (
    SeedCompleteEnvelope,
    SeedCompletePayload,
    SeedResultEnvelope,
    SeedResultPayload,
    SeedStartedEnvelope,
    SeedStartedPayload,
    StatePayload,
)
from crucible.application.ports.transport_channel import TransportChannelProtocol
from crucible.application.services.authority_gateway import AuthorityGateway
from crucible.application.services.base import LoggingMixin
from crucible.application.services.state_broadcaster import StateBroadcaster
from crucible.domain.errors.augmentation import NotEligibleError
from crucible.domain.errors.validation import ValidationError
from crucible.domain.models.pool_state import PoolDelta, PoolState
from crucible.domain.models.roles import (
    Actor,
    require_authoritative,
    require_participant,
)
from crucible.domain.models.seeding import (
    PoolSide,
    SeedingPhase,
    is_valid_phase_transition,
    pool_for_seed,
    validate_seed_value,
)
from crucible.infrastructure.observability.correlation import get_correlation_id

PhaseListener = Callable[[SeedingPhase], Awaitable[None]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SeedingCoordinator(LoggingMixin):
    """Runs the seeding ritual.

    On participant processes `gateway` and `broadcaster` are None; only
    submit() and the broadcast handlers are used there.
    """

    def __init__(
        self,
        channel: TransportChannelProtocol,
        gateway: AuthorityGateway | None = None,
        broadcaster: StateBroadcaster | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._channel = channel
        self._gateway = gateway
        self._broadcaster = broadcaster
        self._clock = clock
        self._phase = SeedingPhase.IDLE
        self._phase_listeners: list[PhaseListener] = []
        self._init_logger()

    @property
    def phase(self) -> SeedingPhase:
        return self._phase

    @property
    def is_seeding(self) -> bool:
        return self._phase is SeedingPhase.SEEDING

    def add_phase_listener(self, listener: PhaseListener) -> None:
        """Register a coroutine called on every phase change (dialogs open/close on it)."""
        self._phase_listeners.append(listener)

    async def _set_phase(self, phase: SeedingPhase) -> None:
        if not is_valid_phase_transition(self._phase, phase):
            raise ValidationError(
                f"Invalid seeding transition {self._phase.value} -> {phase.value}",
                "phase",
                phase.value,
            )
        self._phase = phase
        if self._gateway is not None:
            self._gateway.set_rebalance_suspended(phase is SeedingPhase.SEEDING)
        for listener in self._phase_listeners:
            await listener(phase)

    def _authority_wiring(self) -> tuple[AuthorityGateway, StateBroadcaster]:
        if self._gateway is None or self._broadcaster is None:
            raise RuntimeError("SeedingCoordinator has no authority wiring")
        return self._gateway, self._broadcaster

    # -------------------------------------------------------------------------
    # Authority side
    # -------------------------------------------------------------------------

    async def start(self, actor: Actor) -> PoolState:
        """Begin (or restart) the ritual.

        Raises:
            AuthorityError: If actor is not authoritative.
        """
        require_authoritative(actor, "start_seeding")
        gateway, broadcaster = self._authority_wiring()
        log = self._log_operation("start_seeding", previous_phase=self._phase.value)

        state = await gateway.propose_update(
            actor,
            PoolDelta(
                player_pool_count=0,
                arbiter_pool_count=0,
                seeded_participants=frozenset(),
                last_seeded_at=None,
            ),
            rebalance=False,
        )
        await self._set_phase(SeedingPhase.SEEDING)
        active_count = await gateway.active_participant_count()

        await broadcaster.broadcast_state(state)
        await self._channel.publish(
            SeedStartedEnvelope(
                payload=SeedStartedPayload(active_participant_count=active_count),
                correlation_id=get_correlation_id() or None,
            )
        )
        log.info("seeding_started", active_participant_count=active_count)

        if active_count == 0:
            await self._complete(state)
        return state

    async def accept_submission(
        self, actor: Actor, participant_id: str, value: int
    ) -> PoolState:
        """Apply one participant's seed.

        A participant that already seeded is a logged no-op.

        Raises:
            AuthorityError: If actor is not authoritative.
            ValidationError: If value is not an integer in [1, 6].
            NotEligibleError: If no ritual is running or the participant
                is not on the active roster.
        """
        require_authoritative(actor, "accept_seed")
        gateway, broadcaster = self._authority_wiring()
        log = self._log_operation(
            "accept_seed", participant_id=participant_id, value=value
        )

        validate_seed_value(value)
        if not self.is_seeding:
            raise NotEligibleError(
                "not_seeding",
                participant_id,
                "No seeding ritual is in progress",
            )
        if participant_id not in await gateway.list_active_participants():
            raise NotEligibleError(
                "not_active_participant",
                participant_id,
                f"{participant_id} is not an active participant",
            )

        duplicate = False

        def build_delta(current: PoolState) -> PoolDelta:
            nonlocal duplicate
            if participant_id in current.seeded_participants:
                duplicate = True
                return PoolDelta()
            player, arbiter = current.player_pool_count, current.arbiter_pool_count
            if pool_for_seed(value) is PoolSide.ARBITER:
                arbiter += 1
            else:
                player += 1
            return PoolDelta(
                player_pool_count=player,
                arbiter_pool_count=arbiter,
                seeded_participants=current.seeded_participants | {participant_id},
                last_seeded_at=self._clock(),
            )

        state = await gateway.transact(
            actor, build_delta, rebalance=False, operation="accept_seed"
        )
        if duplicate:
            log.warning("seed_submission_duplicate")
            return state

        log.info(
            "seed_submission_accepted",
            pool=pool_for_seed(value).value,
            seeded=len(state.seeded_participants),
        )
        await broadcaster.broadcast_state(state)
        await self._complete_if_seeded(gateway, state)
        return state

    async def check_completion(self, actor: Actor) -> bool:
        """Complete the ritual if the current roster has finished seeding.

        Needed when the roster shrinks: the last unseeded participant
        leaving submits nothing, so no submission would complete it.

        Returns:
            True if the ritual moved to COMPLETE.

        Raises:
            AuthorityError: If actor is not authoritative.
        """
        require_authoritative(actor, "check_seeding_completion")
        gateway, _broadcaster = self._authority_wiring()
        if not self.is_seeding:
            return False
        return await self._complete_if_seeded(gateway, await gateway.snapshot())

    async def _complete_if_seeded(
        self, gateway: AuthorityGateway, state: PoolState
    ) -> bool:
        if len(state.seeded_participants) < await gateway.active_participant_count():
            return False
        await self._complete(state)
        return True

    async def _complete(self, state: PoolState) -> None:
        await self._set_phase(SeedingPhase.COMPLETE)
        await self._channel.publish(
            SeedCompleteEnvelope(
                payload=SeedCompletePayload(state=StatePayload.from_state(state)),
                correlation_id=get_correlation_id() or None,
            )
        )
        self._log_operation("complete_seeding").info(
            "seeding_completed",
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
        )

    async def close(self) -> None:
        """Return a completed ritual to IDLE. No-op when already idle.

        Raises:
            ValidationError: If a ritual is still in progress.
        """
        if self._phase is SeedingPhase.IDLE:
            return
        await self._set_phase(SeedingPhase.IDLE)

    # -------------------------------------------------------------------------
    # Participant side
    # -------------------------------------------------------------------------

    async def submit(self, actor: Actor, value: int) -> None:
        """Send this participant's seed to the authority.

        Returns once the message is sent; the result arrives later as a
        stateUpdate (or a requestRejected).

        Raises:
            AuthorityError: If actor is authoritative.
            ValidationError: If value is not an integer in [1, 6].
            NotEligibleError: If no ritual is running on this process.
        """
        require_participant(actor, "submit_seed")
        validate_seed_value(value)
        if not self.is_seeding:
            raise NotEligibleError(
                "not_seeding",
                actor.participant_id,
                "No seeding ritual is in progress",
            )

        await self._channel.send_to_authority(
            SeedResultEnvelope(
                payload=SeedResultPayload(
                    participant_id=actor.participant_id, value=value
                ),
                correlation_id=get_correlation_id() or None,
            )
        )
        self._log_operation("submit_seed", participant_id=actor.participant_id).info(
            "seed_submitted", value=value
        )

    async def on_seed_started(self, envelope: SeedStartedEnvelope) -> None:
        """A (re)started ritual resets any local dialog."""
        await self._set_phase(SeedingPhase.SEEDING)
        self._log_operation("on_seed_started").debug(
            "seeding_phase_followed",
            active_participant_count=envelope.payload.active_participant_count,
        )

    async def on_seed_complete(self, envelope: SeedCompleteEnvelope) -> None:
        if self._phase is SeedingPhase.COMPLETE:
            return
        if self._phase is SeedingPhase.IDLE:
            # Joined after the ritual began; pass through SEEDING
            await self._set_phase(SeedingPhase.SEEDING)
        await self._set_phase(SeedingPhase.COMPLETE)
