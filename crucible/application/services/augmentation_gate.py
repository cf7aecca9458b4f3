"""Augmentation gate: spending one player die on an eligible action.

Participant side:
    can_augment()     side-effect-free predicate for enabling the control
    request_augment() re-validates, then sends requestAugment

Authority side:
    handle_augment_request()  resolve the action id, then execute
    execute_augment()         re-validate, draw a d6, commit player -> arbiter,
                              broadcast, then announce

Eligibility, checked in this order (the first failure is reported):
    1. requester is a participant           AuthorityError
    2. requester owns the action            NotEligibleError(not_owner)
    3. player pool holds a die              InsufficientDiceError
    4. classifier says augmentable          NotEligibleError(not_augmentable)
    5. action not already augmented         AlreadyProcessedError
    6. action is requester's latest roll    NotEligibleError(not_most_recent)

The augmented-action set and the roll history are process-local and are
not persisted.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from crucible.application.dtos.envelope import (
    AugmentResultEnvelope,
    AugmentResultPayload,
    RequestAugmentEnvelope,
    RequestAugmentPayload,
)
from crucible.application.ports.action_classifier import ActionClassifierProtocol
from crucible.application.ports.action_lookup import ActionLookupProtocol
from crucible.application.ports.die_source import DieSourceProtocol
from crucible.application.ports.narrative_sink import NarrativeSinkProtocol
from crucible.application.ports.transport_channel import TransportChannelProtocol
from crucible.application.services.authority_gateway import AuthorityGateway
from crucible.application.services.base import LoggingMixin
from crucible.application.services.state_broadcaster import StateBroadcaster
from crucible.domain.errors.augmentation import (
    AlreadyProcessedError,
    InsufficientDiceError,
    NotEligibleError,
)
from crucible.domain.errors.authority import AuthorityError
from crucible.domain.exceptions import CrucibleError
from crucible.domain.models.action import (
    ActionClassification,
    ActionReference,
    AugmentResult,
)
from crucible.domain.models.pool_state import PoolState
from crucible.domain.models.roles import Actor, require_authoritative, require_participant
from crucible.domain.models.transfer import TransferDirection, single_die_delta
from crucible.infrastructure.observability.correlation import get_correlation_id


class PoolSnapshotSource(Protocol):
    """Anything that can report the current pool state."""

    async def snapshot(self) -> PoolState: ...


class AugmentationGate(LoggingMixin):
    """Validates and executes augmentation requests.

    `state_source` is the AuthorityGateway on the authoritative process and
    the PoolViewCache elsewhere. The authority-only collaborators may be
    None on participant processes.
    """

    def __init__(
        self,
        classifier: ActionClassifierProtocol,
        state_source: PoolSnapshotSource,
        channel: TransportChannelProtocol,
        *,
        gateway: AuthorityGateway | None = None,
        broadcaster: StateBroadcaster | None = None,
        die_source: DieSourceProtocol | None = None,
        narrative: NarrativeSinkProtocol | None = None,
        action_lookup: ActionLookupProtocol | None = None,
    ) -> None:
        self._classifier = classifier
        self._state_source = state_source
        self._channel = channel
        self._gateway = gateway
        self._broadcaster = broadcaster
        self._die_source = die_source
        self._narrative = narrative
        self._action_lookup = action_lookup
        self._augmented: set[str] = set()
        self._roll_history: dict[str, tuple[str, int]] = {}
        self._execute_lock = asyncio.Lock()
        self._init_logger()

    # -------------------------------------------------------------------------
    # Process-local tracking
    # -------------------------------------------------------------------------

    def observe_action(self, action: ActionReference) -> None:
        """Record `action` as its owner's latest roll.

        Observations older than the one already recorded are ignored.
        """
        known = self._roll_history.get(action.owner_id)
        if known is not None and action.recency < known[1]:
            return
        self._roll_history[action.owner_id] = (action.action_id, action.recency)

    def most_recent_action_id(self, participant_id: str) -> str | None:
        known = self._roll_history.get(participant_id)
        return known[0] if known else None

    def is_augmented(self, action_id: str) -> bool:
        return action_id in self._augmented

    def mark_augmented(self, action_id: str) -> None:
        self._augmented.add(action_id)

    async def on_augment_result(self, envelope: AugmentResultEnvelope) -> None:
        """Every process learns which actions are consumed."""
        self.mark_augmented(envelope.payload.action_id)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _violation(
        self, action: ActionReference, requester: Actor, state: PoolState
    ) -> CrucibleError | None:
        if requester.is_authoritative:
            return AuthorityError.participant_only("augment", requester.participant_id)
        if action.owner_id != requester.participant_id:
            return NotEligibleError(
                "not_owner",
                action.action_id,
                f"{requester.participant_id} does not own action {action.action_id}",
            )
        if state.player_pool_count < 1:
            return InsufficientDiceError("player", 1, state.player_pool_count)
        if self._classifier.classify(action) is not ActionClassification.AUGMENTABLE:
            return NotEligibleError(
                "not_augmentable",
                action.action_id,
                f"Action {action.action_id} cannot be augmented",
            )
        if action.action_id in self._augmented:
            return AlreadyProcessedError(
                action.action_id, f"Action {action.action_id} was already augmented"
            )
        if self.most_recent_action_id(requester.participant_id) != action.action_id:
            return NotEligibleError(
                "not_most_recent",
                action.action_id,
                f"Action {action.action_id} is not the latest roll "
                f"of {requester.participant_id}",
            )
        return None

    async def can_augment(self, action: ActionReference, requester: Actor) -> bool:
        state = await self._state_source.snapshot()
        return self._violation(action, requester, state) is None

    # -------------------------------------------------------------------------
    # Participant side
    # -------------------------------------------------------------------------

    async def request_augment(self, action: ActionReference, requester: Actor) -> None:
        """Validate locally, then ask the authority to spend the die.

        Raises:
            AuthorityError, NotEligibleError, InsufficientDiceError,
            AlreadyProcessedError: The first violated condition.
        """
        require_participant(requester, "request_augment")
        log = self._log_operation(
            "request_augment",
            participant_id=requester.participant_id,
            action_id=action.action_id,
        )
        violation = self._violation(action, requester, await self._state_source.snapshot())
        if violation is not None:
            log.warning("augment_rejected", kind=violation.kind)
            raise violation

        await self._channel.send_to_authority(
            RequestAugmentEnvelope(
                payload=RequestAugmentPayload(
                    participant_id=requester.participant_id,
                    action_id=action.action_id,
                ),
                correlation_id=get_correlation_id() or None,
            )
        )
        log.info("augment_requested")

    # -------------------------------------------------------------------------
    # Authority side
    # -------------------------------------------------------------------------

    async def handle_augment_request(
        self, actor: Actor, participant_id: str, action_id: str
    ) -> AugmentResult:
        """Resolve a requested action id and execute the augmentation.

        Raises:
            NotEligibleError: If the action is unknown to the host.
        """
        require_authoritative(actor, "handle_augment_request")
        if self._action_lookup is None:
            raise RuntimeError("AugmentationGate has no action lookup")

        action = await self._action_lookup.get_action(action_id)
        if action is None:
            raise NotEligibleError(
                "action_not_found", action_id, f"Action {action_id} was not found"
            )
        return await self.execute_augment(actor, action, participant_id)

    async def execute_augment(
        self, actor: Actor, action: ActionReference, requester_id: str
    ) -> AugmentResult:
        """Spend one player die on `action` for `requester_id`.

        Validation is repeated here: another request for the same action
        may have been committed since the participant checked.

        Raises:
            AuthorityError: If actor is not authoritative.
            AlreadyProcessedError: If the action was already augmented.
            NotEligibleError, InsufficientDiceError: Other violations.
        """
        require_authoritative(actor, "execute_augment")
        if (
            self._gateway is None
            or self._broadcaster is None
            or self._die_source is None
            or self._narrative is None
        ):
            raise RuntimeError("AugmentationGate has no authority wiring")

        requester = Actor.participant(requester_id)
        log = self._log_operation(
            "execute_augment", participant_id=requester_id, action_id=action.action_id
        )

        async with self._execute_lock:
            violation = self._violation(action, requester, await self._gateway.snapshot())
            if violation is not None:
                log.warning("augment_rejected", kind=violation.kind)
                raise violation

            die_value = await self._die_source.roll_d6()
            self.mark_augmented(action.action_id)
            try:
                state = await self._gateway.transact(
                    actor,
                    lambda current: single_die_delta(current, TransferDirection.TO_ARBITER),
                    operation="execute_augment",
                )
            except Exception:
                self._augmented.discard(action.action_id)
                raise

        original_total = action.resolve_original_total()
        new_total = original_total + die_value if original_total is not None else None

        await self._broadcaster.broadcast_state(state)
        await self._channel.publish(
            AugmentResultEnvelope(
                payload=AugmentResultPayload(
                    participant_id=requester_id,
                    action_id=action.action_id,
                    die_value=die_value,
                    new_total=new_total,
                ),
                correlation_id=get_correlation_id() or None,
            )
        )

        text = f"Crucible die result: {die_value}"
        if new_total is not None:
            text += f"\nNew total: {new_total}"
        await self._narrative.post_message(text, speaker_id=requester_id)
        log.info("augment_executed", die_value=die_value, new_total=new_total)

        return AugmentResult(
            action_id=action.action_id,
            participant_id=requester_id,
            die_value=die_value,
            new_total=new_total,
            state=state,
        )
