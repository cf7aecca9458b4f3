"""Unit tests for CrucibleSession."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from crucible.application.dtos.envelope import (
    RequestRejectedEnvelope,
    RequestRejectedPayload,
)
from crucible.application.services import (
    AugmentationGate,
    CrucibleSession,
    PoolViewCache,
    SeedingCoordinator,
)
from crucible.bootstrap.session import build_session
from crucible.config import TEST_CRUCIBLE_CONFIG
from crucible.domain.errors import AuthorityError
from crucible.domain.events.message_types import MessageType
from crucible.domain.models.action import ActionReference
from crucible.domain.models.roles import Actor
from crucible.domain.models.seeding import SeedingPhase
from crucible.domain.models.transfer import TransferDirection
from crucible.domain.services.action_classifier import ClassifierChain
from crucible.infrastructure.adapters.transport import InProcessTransportHub
from crucible.infrastructure.stubs import ActionLookupStub, InMemoryPoolStore, RosterStub


def _channel() -> AsyncMock:
    channel = AsyncMock()
    channel.subscribe = MagicMock()
    return channel


def _participant_session(actor: Actor) -> CrucibleSession:
    channel = _channel()
    view = PoolViewCache()
    return CrucibleSession(
        actor,
        channel,
        view,
        SeedingCoordinator(channel),
        AugmentationGate(ClassifierChain.default(), view, channel),
    )


class TestConstruction:
    """Tests for session wiring checks."""

    def test_authority_without_collaborators_refused(self, gm: Actor) -> None:
        channel = _channel()
        view = PoolViewCache()

        with pytest.raises(ValueError):
            CrucibleSession(
                gm,
                channel,
                view,
                SeedingCoordinator(channel),
                AugmentationGate(ClassifierChain.default(), view, channel),
            )

    @pytest.mark.asyncio
    async def test_participant_start_subscribes_broadcasts_only(self, alice: Actor) -> None:
        session = _participant_session(alice)

        await session.start()

        subscribed = {call.args[0].value for call in session.channel.subscribe.call_args_list}
        assert subscribed == {
            "stateUpdate",
            "seedStarted",
            "seedComplete",
            "augmentResult",
            "requestRejected",
        }

    @pytest.mark.asyncio
    async def test_participant_cannot_handle_roster_change(self, alice: Actor) -> None:
        session = _participant_session(alice)

        with pytest.raises(AuthorityError):
            await session.handle_roster_change()


@pytest.fixture
async def gm_session(
    hub, gm, store, roster, action_lookup, narrative, die_source
) -> CrucibleSession:
    """Started authority session over the stub collaborators."""
    session = await build_session(
        gm,
        hub.connect("gm", authoritative=True),
        config=TEST_CRUCIBLE_CONFIG,
        store=store,
        roster=roster,
        action_lookup=action_lookup,
        narrative=narrative,
        die_source=die_source,
    )
    await session.start()
    return session


class TestRejections:
    """Domain errors raised for a remote request go back as requestRejected."""

    @pytest.mark.asyncio
    async def test_seed_outside_ritual_rejected(
        self, hub: InProcessTransportHub, gm_session: CrucibleSession
    ) -> None:
        alice = hub.connect("alice")
        raw = json.dumps(
            {"type": "seedResult", "payload": {"participantId": "alice", "value": 4}}
        )

        await hub.deliver("alice", "gm", raw)

        sender, target, reply = hub.sent[-1]
        assert (sender, target) == ("gm", alice.endpoint_id)
        body = json.loads(reply)
        assert body["type"] == "requestRejected"
        assert body["payload"]["kind"] == "not_eligible"
        assert body["payload"]["requestType"] == "seedResult"

    @pytest.mark.asyncio
    async def test_rejection_for_someone_else_ignored(self, alice: Actor) -> None:
        session = _participant_session(alice)
        listener = AsyncMock()
        session.add_rejection_listener(listener)
        await session.start()
        handler = next(
            call.args[1]
            for call in session.channel.subscribe.call_args_list
            if call.args[0].value == "requestRejected"
        )
        await handler(
            RequestRejectedEnvelope(
                payload=RequestRejectedPayload(
                    participant_id="bob",
                    request_type=MessageType.SEED_RESULT,
                    kind="validation",
                    message="nope",
                )
            )
        )

        listener.assert_not_awaited()


class TestRosterChangeDuringSeeding:
    """Roster changes while the ritual is running."""

    @pytest.mark.asyncio
    async def test_last_unseeded_participant_leaving_completes_ritual(
        self,
        hub: InProcessTransportHub,
        gm_session: CrucibleSession,
        gm: Actor,
        roster: RosterStub,
    ) -> None:
        await gm_session.seeding.start(gm)
        await gm_session.seeding.accept_submission(gm, "alice", 5)
        await gm_session.seeding.accept_submission(gm, "bob", 2)
        roster.disconnect("carol")

        state = await gm_session.handle_roster_change()

        assert gm_session.seeding.phase is SeedingPhase.COMPLETE
        assert state is not None
        assert (state.player_pool_count, state.arbiter_pool_count) == (1, 1)
        sent_types = [json.loads(raw)["type"] for _sender, _target, raw in hub.sent]
        assert "seedComplete" in sent_types

    @pytest.mark.asyncio
    async def test_unseeded_participants_remaining_defers(
        self, gm_session: CrucibleSession, gm: Actor, roster: RosterStub
    ) -> None:
        await gm_session.seeding.start(gm)
        await gm_session.seeding.accept_submission(gm, "alice", 5)
        roster.disconnect("carol")

        assert await gm_session.handle_roster_change() is None
        assert gm_session.seeding.phase is SeedingPhase.SEEDING


class TestSpendsDuringSeeding:
    """Pool spends during the ritual keep the total the seeds built."""

    @pytest.mark.asyncio
    async def test_spends_do_not_rebalance_mid_ritual(
        self,
        gm_session: CrucibleSession,
        gm: Actor,
        action_lookup: ActionLookupStub,
        store: InMemoryPoolStore,
    ) -> None:
        await gm_session.seeding.start(gm)
        await gm_session.seeding.accept_submission(gm, "alice", 5)
        action = ActionReference(
            "roll-1", "alice", recency=1, original_total=10, metadata={"roll_type": "skill"}
        )
        action_lookup.add(action)
        gm_session.observe_action(action)
        assert gm_session.pool_control is not None

        result = await gm_session.augmentation.handle_augment_request(gm, "alice", "roll-1")
        assert (result.state.player_pool_count, result.state.arbiter_pool_count) == (0, 1)

        await gm_session.pool_control.roll_arbiter_die(gm)
        state = await gm_session.pool_control.move_dice(gm, TransferDirection.TO_ARBITER, 1)

        assert (state.player_pool_count, state.arbiter_pool_count) == (0, 1)
        assert (await store.load()).seeded_participants == frozenset({"alice"})
