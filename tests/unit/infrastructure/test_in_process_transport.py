"""Unit tests for the in-process transport hub."""

from __future__ import annotations

import pytest

from crucible.application.dtos.envelope import (
    Envelope,
    SeedResultEnvelope,
    SeedResultPayload,
    SeedStartedEnvelope,
    SeedStartedPayload,
)
from crucible.domain.events.message_types import MessageType
from crucible.infrastructure.adapters.transport import InProcessTransportHub
from crucible.infrastructure.observability.correlation import (
    correlation_scope,
    get_correlation_id,
)


def _seed_started(count: int = 2) -> SeedStartedEnvelope:
    return SeedStartedEnvelope(payload=SeedStartedPayload(active_participant_count=count))


class _Recorder:
    """Handler recording envelopes and the correlation id seen during dispatch."""

    def __init__(self) -> None:
        self.envelopes: list[Envelope] = []
        self.correlation_ids: list[str] = []

    async def __call__(self, envelope: Envelope) -> None:
        self.envelopes.append(envelope)
        self.correlation_ids.append(get_correlation_id())


class TestDelivery:
    """Tests for routing."""

    @pytest.mark.asyncio
    async def test_publish_reaches_everyone_but_sender(
        self, hub: InProcessTransportHub
    ) -> None:
        gm = hub.connect("gm", authoritative=True)
        alice = hub.connect("alice")
        bob = hub.connect("bob")
        recorders = {name: _Recorder() for name in ("gm", "alice", "bob")}
        for endpoint in (gm, alice, bob):
            endpoint.subscribe(MessageType.SEED_STARTED, recorders[endpoint.endpoint_id])

        await gm.publish(_seed_started())

        assert recorders["gm"].envelopes == []
        assert len(recorders["alice"].envelopes) == 1
        assert len(recorders["bob"].envelopes) == 1

    @pytest.mark.asyncio
    async def test_send_to_authority(self, hub: InProcessTransportHub) -> None:
        gm = hub.connect("gm", authoritative=True)
        alice = hub.connect("alice")
        bob = hub.connect("bob")
        gm_recorder, bob_recorder = _Recorder(), _Recorder()
        gm.subscribe(MessageType.SEED_RESULT, gm_recorder)
        bob.subscribe(MessageType.SEED_RESULT, bob_recorder)

        await alice.send_to_authority(
            SeedResultEnvelope(payload=SeedResultPayload(participant_id="alice", value=4))
        )

        assert len(gm_recorder.envelopes) == 1
        assert isinstance(gm_recorder.envelopes[0], SeedResultEnvelope)
        assert bob_recorder.envelopes == []

    @pytest.mark.asyncio
    async def test_missing_authority_drops_message(
        self, hub: InProcessTransportHub
    ) -> None:
        alice = hub.connect("alice")

        await alice.send_to_authority(
            SeedResultEnvelope(payload=SeedResultPayload(participant_id="alice", value=4))
        )

        assert hub.sent[-1][1] is None

    @pytest.mark.asyncio
    async def test_messages_without_subscribers_are_ignored(
        self, hub: InProcessTransportHub
    ) -> None:
        gm = hub.connect("gm", authoritative=True)
        hub.connect("alice")

        await gm.publish(_seed_started())

        assert len(hub.sent) == 1

    def test_second_authority_refused(self, hub: InProcessTransportHub) -> None:
        hub.connect("gm", authoritative=True)

        with pytest.raises(ValueError):
            hub.connect("gm2", authoritative=True)

    def test_disconnecting_authority_frees_the_role(
        self, hub: InProcessTransportHub
    ) -> None:
        hub.connect("gm", authoritative=True)
        hub.disconnect("gm")

        hub.connect("gm2", authoritative=True)

        assert hub.authority_id == "gm2"


class TestDecoding:
    """Tests for inbound validation."""

    @pytest.mark.asyncio
    async def test_undecodable_message_dropped(self, hub: InProcessTransportHub) -> None:
        alice = hub.connect("alice")
        recorder = _Recorder()
        alice.subscribe(MessageType.SEED_STARTED, recorder)

        await alice.receive('{"type": "seedStarted", "payload": {}}')
        await alice.receive(b"\x00garbage")

        assert recorder.envelopes == []


class TestCorrelation:
    """Tests for correlation id propagation."""

    @pytest.mark.asyncio
    async def test_sender_correlation_id_reaches_handler(
        self, hub: InProcessTransportHub
    ) -> None:
        gm = hub.connect("gm", authoritative=True)
        alice = hub.connect("alice")
        recorder = _Recorder()
        alice.subscribe(MessageType.SEED_STARTED, recorder)

        with correlation_scope("ritual-42"):
            await gm.publish(_seed_started())

        assert recorder.envelopes[0].correlation_id == "ritual-42"
        assert recorder.correlation_ids == ["ritual-42"]

    @pytest.mark.asyncio
    async def test_correlation_id_generated_when_absent(
        self, hub: InProcessTransportHub
    ) -> None:
        gm = hub.connect("gm", authoritative=True)
        alice = hub.connect("alice")
        recorder = _Recorder()
        alice.subscribe(MessageType.SEED_STARTED, recorder)

        await gm.publish(_seed_started())

        assert recorder.envelopes[0].correlation_id
        assert recorder.correlation_ids == [recorder.envelopes[0].correlation_id]

    @pytest.mark.asyncio
    async def test_dispatch_restores_receiver_context(
        self, hub: InProcessTransportHub
    ) -> None:
        gm = hub.connect("gm", authoritative=True)
        hub.connect("alice").subscribe(MessageType.SEED_STARTED, _Recorder())

        with correlation_scope("outer"):
            await gm.publish(_seed_started().model_copy(update={"correlation_id": "inner"}))
            assert get_correlation_id() == "outer"


class TestHubState:
    """The hub keeps routing tables only."""

    @pytest.mark.asyncio
    async def test_routed_messages_are_not_retained(self) -> None:
        hub = InProcessTransportHub()
        gm = hub.connect("gm", authoritative=True)
        hub.connect("alice")

        for count in range(1, 4):
            await gm.publish(_seed_started(count))

        assert set(vars(hub)) == {"_endpoints", "_authority_id"}
